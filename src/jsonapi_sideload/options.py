import dataclasses
import logging
import typing

from .config import DEFAULT_PAGE, Config, default_config
from .exceptions import InvalidParameterError
from .interfaces import Driver, QueryScope
from .models import ResourceDescriptor
from .registry import ResourceRegistry, default_registry
from .types import RawParams
from .utils import dedupe, split_comma_delimited

logger = logging.getLogger(__name__)

PAGE_PARAM = "page"
PAGE_SIZE_PARAM = "page_size"
INCLUDES_PARAM = "includes"
RESERVED_PARAMS = frozenset([PAGE_PARAM, PAGE_SIZE_PARAM, INCLUDES_PARAM])


@dataclasses.dataclass(frozen=True)
class Options:
    """
    The validated plan for serializing one page of a resource type.
    """

    resource: ResourceDescriptor
    scope: QueryScope
    page: int = DEFAULT_PAGE
    page_size: int = default_config.page_size
    includes: typing.Tuple[str, ...] = ()
    filters: typing.Mapping[str, str] = dataclasses.field(default_factory=dict)
    nested: typing.Mapping[str, "Options"] = dataclasses.field(default_factory=dict)
    """
    Options for the sideloaded resource types, keyed by include name.
    """

    @property
    def resource_type(self) -> str:
        return self.resource.name

    def nested_for(self, include: str) -> typing.Optional["Options"]:
        return self.nested.get(include)


def parse_positive_int(name: str, value: typing.Any, default: int) -> int:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise InvalidParameterError(name, value, "not an integer")
    if isinstance(value, int):
        result = value
    else:
        try:
            result = int(str(value).strip())
        except ValueError:
            raise InvalidParameterError(name, value, "not an integer")
    if result < 1:
        raise InvalidParameterError(name, value, "must be positive")
    return result


def _scalar(value: typing.Any) -> typing.Any:
    if isinstance(value, (list, tuple)):
        return value[-1] if value else None
    return value


class OptionsResolver:
    """
    Turns raw request parameters into :py:class:`Options`.

    Parameters are classified into recognized ones (``page``, ``page_size``,
    ``includes``, declared filters, foreign key filters and nested
    ``<include>.<param>`` keys) and ignored ones; the latter never cause an error.
    """

    registry: ResourceRegistry
    driver: Driver
    config: Config

    def resolve(
        self,
        resource: typing.Union[str, ResourceDescriptor],
        raw_params: typing.Optional[RawParams] = None,
        base_scope: typing.Optional[QueryScope] = None,
    ) -> Options:
        descr = self.registry.resolve(resource)
        return self._resolve(descr, raw_params or {}, base_scope, {descr.name})

    def _page_size(self, value: typing.Any) -> int:
        page_size = parse_positive_int(PAGE_SIZE_PARAM, _scalar(value), self.config.page_size)
        if self.config.max_page_size is not None and page_size > self.config.max_page_size:
            logger.debug("page_size %d clamped to %d", page_size, self.config.max_page_size)
            page_size = self.config.max_page_size
        return page_size

    def _resolve(
        self,
        descr: ResourceDescriptor,
        raw_params: RawParams,
        base_scope: typing.Optional[QueryScope],
        visited: typing.Set[str],
    ) -> Options:
        page = parse_positive_int(PAGE_PARAM, _scalar(raw_params.get(PAGE_PARAM)), DEFAULT_PAGE)
        page_size = self._page_size(raw_params.get(PAGE_SIZE_PARAM))

        raw_includes = raw_params.get(INCLUDES_PARAM)
        includes = dedupe(split_comma_delimited(raw_includes)) if raw_includes else ()
        for include in includes:
            if descr.relationship_for_include(include) is None:
                logger.debug("ignoring unknown include %s for %s", include, descr.name)

        filters: typing.Dict[str, str] = {}
        nested_params: typing.Dict[str, typing.Dict[str, typing.Any]] = {}
        for key, value in raw_params.items():
            if key in RESERVED_PARAMS:
                continue
            prefix, dot, param = key.partition(".")
            if dot and prefix in includes:
                nested_params.setdefault(prefix, {})[param] = value
            elif descr.accepts_filter(key):
                scalar = _scalar(value)
                if scalar is None:
                    logger.debug("ignoring empty filter %s for %s", key, descr.name)
                    continue
                filters[key] = str(scalar)
            else:
                logger.debug("ignoring unknown parameter %s for %s", key, descr.name)

        nested: typing.Dict[str, Options] = {}
        for include, params in nested_params.items():
            rel = descr.relationship_for_include(include)
            if rel is None or rel.destination in visited:
                logger.debug("ignoring nested parameters of %s for %s", include, descr.name)
                continue
            dest_descr = self.registry.query_descriptor_by_name(rel.destination)
            nested[include] = self._resolve(
                dest_descr, params, None, visited | {dest_descr.name}
            )

        return Options(
            resource=descr,
            scope=base_scope if base_scope is not None else self.driver.scope_for(descr),
            page=page,
            page_size=page_size,
            includes=includes,
            filters=filters,
            nested=nested,
        )

    def __init__(
        self,
        driver: Driver,
        registry: ResourceRegistry = default_registry,
        config: Config = default_config,
    ):
        self.driver = driver
        self.registry = registry
        self.config = config
