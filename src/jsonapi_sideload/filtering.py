import datetime
import decimal
import logging
import typing

from .interfaces import QueryScope

logger = logging.getLogger(__name__)


def _to_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "t", "yes", "y"):
        return True
    if lowered in ("0", "false", "f", "no", "n"):
        return False
    raise ValueError(f"not a boolean: {value}")


_CONVERTERS: typing.Mapping[typing.Type, typing.Callable[[str], typing.Any]] = {
    bool: _to_bool,
    int: int,
    float: float,
    decimal.Decimal: decimal.Decimal,
    datetime.datetime: datetime.datetime.fromisoformat,
    datetime.date: datetime.date.fromisoformat,
    datetime.time: datetime.time.fromisoformat,
    str: str,
}


def coerce(value: str, type_: typing.Optional[typing.Type]) -> typing.Any:
    """
    Converts the string ``value`` to ``type_``.  Values whose type is unknown
    or unsupported are returned as is.

    :raises ValueError: when ``value`` cannot be converted.
    """
    if type_ is None:
        return value
    # bool is a subclass of int, and datetime of date, hence the exact lookup first
    converter = _CONVERTERS.get(type_)
    if converter is None:
        for class_, conv in _CONVERTERS.items():
            if issubclass(type_, class_):
                converter = conv
                break
    if converter is None:
        return value
    try:
        return converter(value)
    except decimal.InvalidOperation as e:
        raise ValueError(str(e))


class FilterApplier:
    """
    Narrows a :py:class:`QueryScope` with equality filters.  Filters are
    conjunctive and applied in the order of their names, so the resulting
    scope does not depend on the order the filters were supplied in.
    """

    def apply(self, scope: QueryScope, filters: typing.Mapping[str, str]) -> QueryScope:
        for name in sorted(filters):
            raw_value = filters[name]
            try:
                value = coerce(raw_value, scope.attribute_type(name))
            except ValueError:
                # compared as given, which matches no record of a typed attribute
                logger.debug("filter %s=%r does not fit the attribute type", name, raw_value)
                value = raw_value
            scope = scope.filter_eq(name, value)
        return scope
