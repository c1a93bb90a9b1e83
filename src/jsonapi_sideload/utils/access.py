import collections.abc
import typing


def fetch_value(record: typing.Any, name: str) -> typing.Any:
    """
    Fetches the value of ``name`` from either a mapping or a plain object.
    Returns None when the record has no such member.
    """
    if isinstance(record, collections.abc.Mapping):
        return record.get(name)
    return getattr(record, name, None)


def has_member(record: typing.Any, name: str) -> bool:
    if isinstance(record, collections.abc.Mapping):
        return name in record
    return hasattr(record, name)
