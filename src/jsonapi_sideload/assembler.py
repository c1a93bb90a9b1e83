import collections
import dataclasses
import logging
import types
import typing

from .config import Config, default_config
from .filtering import FilterApplier
from .interfaces import Driver, QueryScope
from .links import Link, LinkBuilder, include_graph
from .models import ResourceDescriptor
from .options import Options, OptionsResolver
from .paging import PageMeta, Paginator, build_page_meta
from .registry import ResourceRegistry, default_registry
from .serializer import Serializer
from .sideloading import Sideloader
from .types import MutableJSONObject, RawParams, SerializedRecord

logger = logging.getLogger(__name__)

META_KEY = "meta"
LINKS_KEY = "links"


@dataclasses.dataclass(frozen=True)
class Page:
    """
    The outcome of serializing one page of a resource type along with its sideloads.
    """

    resource_type: str
    primary_records: typing.Sequence[SerializedRecord]
    sideloaded: typing.Mapping[str, typing.Sequence[SerializedRecord]]
    meta: typing.Mapping[str, PageMeta]
    links: typing.Mapping[str, Link]

    def as_dict(self) -> MutableJSONObject:
        """
        Returns the response document: the primary records under the primary type key,
        each sideloaded type under its own key, then ``meta`` and ``links``.
        """
        result: MutableJSONObject = collections.OrderedDict()
        result[self.resource_type] = list(self.primary_records)
        for name, records in self.sideloaded.items():
            result[name] = list(records)
        result[META_KEY] = collections.OrderedDict(
            (name, meta.as_dict()) for name, meta in self.meta.items()
        )
        result[LINKS_KEY] = collections.OrderedDict(
            (key, link.as_dict()) for key, link in self.links.items()
        )
        return result


class PageAssembler:
    """
    Composes the filtering, paging, serialization, sideloading and link building
    steps into a :py:class:`Page`.  It holds no per-request state, so a single
    instance can serve any number of requests.

    :param Driver driver: Gives access to the full collection of every resource type.
    :param ResourceRegistry registry: The registry the resource types are looked up from.
    :param Config config: Page size defaults and href prefix.
    """

    driver: Driver
    registry: ResourceRegistry
    config: Config
    resolver: OptionsResolver
    filter_applier: FilterApplier
    paginator: Paginator
    serializer: Serializer
    sideloader: Sideloader
    link_builder: LinkBuilder

    def page(
        self,
        resource: typing.Union[str, ResourceDescriptor],
        raw_params: typing.Optional[RawParams] = None,
        scope: typing.Optional[QueryScope] = None,
    ) -> Page:
        """
        Resolves ``raw_params`` and assembles the page in one go.

        :raises InvalidParameterError: when ``page`` or ``page_size`` is malformed.
        :raises UnknownResourceTypeError: when ``resource`` is not registered.
        """
        return self.assemble(self.resolver.resolve(resource, raw_params, scope))

    def assemble(self, options: Options) -> Page:
        descr = options.resource
        scope = self.filter_applier.apply(options.scope, options.filters)
        page_slice = self.paginator.paginate(scope, options.page, options.page_size)
        primary_records = self.serializer.serialize_many(page_slice.records, descr)
        sideloads = self.sideloader.resolve_sideloads(page_slice.records, options)
        links = self.link_builder.build_links(descr, include_graph(options))

        meta: "collections.OrderedDict[str, PageMeta]" = collections.OrderedDict()
        meta[descr.name] = build_page_meta(page_slice, options, self.config)
        meta.update(sideloads.meta)
        logger.debug(
            "assembled page %d of %s (%d of %d records, sideloaded: %s)",
            page_slice.page,
            descr.name,
            len(primary_records),
            page_slice.count,
            ", ".join(sideloads.resource_types) or "none",
        )
        return Page(
            resource_type=descr.name,
            primary_records=tuple(primary_records),
            sideloaded=types.MappingProxyType(
                collections.OrderedDict((k, tuple(v)) for k, v in sideloads.sideloaded.items())
            ),
            meta=types.MappingProxyType(meta),
            links=types.MappingProxyType(links),
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
        self.resolver = OptionsResolver(driver, registry, config)
        self.filter_applier = FilterApplier()
        self.paginator = Paginator()
        self.serializer = Serializer()
        self.sideloader = Sideloader(
            registry, config, self.paginator, self.serializer, self.filter_applier
        )
        self.link_builder = LinkBuilder(registry, config)
