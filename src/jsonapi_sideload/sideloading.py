import collections
import dataclasses
import logging
import typing

from .config import Config, default_config
from .exceptions import SideloadError, SideloadResolutionError
from .filtering import FilterApplier
from .implementations.memory import SequenceQueryScope
from .interfaces import QueryScope
from .models import IDENTITY_ATTRIBUTE, ResourceDescriptor, ResourceRelationshipDescriptor
from .options import Options
from .paging import NestedPath, PageMeta, Paginator, build_page_meta
from .registry import ResourceRegistry, default_registry
from .serializer import Serializer
from .types import SerializedRecord
from .utils import fetch_value

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class SideloadResult:
    sideloaded: "collections.OrderedDict[str, typing.List[SerializedRecord]]" = dataclasses.field(
        default_factory=collections.OrderedDict
    )
    meta: "collections.OrderedDict[str, PageMeta]" = dataclasses.field(
        default_factory=collections.OrderedDict
    )

    @property
    def resource_types(self) -> typing.Tuple[str, ...]:
        return tuple(self.sideloaded.keys())


class Sideloader:
    """
    Resolves the sideloaded resources of a page.

    The resolution is a breadth-first walk over ``(parent records, options)`` work
    items.  Every resource type is sideloaded at most once per request, the primary
    type included, which makes cyclic includes terminate.  The related records of a
    type are gathered from every parent record, deduplicated by identity, and paged
    with the options the request gave for that include (page 1 and the default
    page size otherwise). The hrefs of a sideloaded type are those of the primary
    request with the options of that include turned to another page.
    """

    registry: ResourceRegistry
    config: Config
    paginator: Paginator
    serializer: Serializer
    filter_applier: FilterApplier

    def gather(
        self,
        scope: QueryScope,
        parents: typing.Iterable[typing.Any],
        rel: ResourceRelationshipDescriptor,
    ) -> typing.List[typing.Any]:
        """
        Collects the records related to ``parents`` through ``rel``, without duplicates,
        in the order they are first reached.
        """
        seen: typing.Set[typing.Any] = set()
        result: typing.List[typing.Any] = []

        def _add(record: typing.Any) -> None:
            id_ = fetch_value(record, IDENTITY_ATTRIBUTE)
            if id_ not in seen:
                seen.add(id_)
                result.append(record)

        for parent in parents:
            related = scope.related_to(parent, rel)
            if related is None:
                continue
            if isinstance(related, QueryScope):
                for record in related.all():
                    _add(record)
            else:
                _add(related)
        return result

    def _options_for(self, parent: Options, include: str, descr: ResourceDescriptor) -> Options:
        nested = parent.nested_for(include)
        if nested is not None:
            return nested
        return Options(
            resource=descr,
            scope=SequenceQueryScope([], descr=descr),
            page_size=self.config.page_size,
        )

    def _resolve_one(
        self,
        parents: typing.Sequence[typing.Any],
        parent_options: Options,
        include: str,
        rel: ResourceRelationshipDescriptor,
        result: SideloadResult,
        root: Options,
        path: NestedPath,
    ) -> typing.Tuple[typing.Sequence[typing.Any], Options, NestedPath]:
        descr = self.registry.query_descriptor_by_name(rel.destination)
        options = self._options_for(parent_options, include, descr)
        gathered = self.gather(parent_options.scope, parents, rel)
        scope: QueryScope = SequenceQueryScope(gathered, descr=descr)
        scope = self.filter_applier.apply(scope, options.filters)
        page_slice = self.paginator.paginate(scope, options.page, options.page_size)

        records = result.sideloaded.setdefault(descr.name, [])
        known_ids = {r["id"] for r in records}
        for serialized in self.serializer.serialize_many(page_slice.records, descr):
            if serialized["id"] not in known_ids:
                known_ids.add(serialized["id"])
                records.append(serialized)
        path = (*path, (include, options))
        result.meta[descr.name] = build_page_meta(page_slice, options, self.config, root, path)
        return page_slice.records, options, path

    def resolve_sideloads(
        self, primary_records: typing.Sequence[typing.Any], options: Options
    ) -> SideloadResult:
        result = SideloadResult()
        visited: typing.Set[str] = {options.resource_type}
        worklist: typing.Deque[typing.Tuple[typing.Sequence[typing.Any], Options, NestedPath]]
        worklist = collections.deque([(primary_records, options, ())])
        while worklist:
            parents, current, path = worklist.popleft()
            for include in current.includes:
                rel = current.resource.relationship_for_include(include)
                if rel is None:
                    logger.debug("no relationship serves %s in %s", include, current.resource_type)
                    continue
                if rel.destination in visited:
                    logger.debug("%s is already sideloaded", rel.destination)
                    continue
                visited.add(rel.destination)
                try:
                    records, nested, nested_path = self._resolve_one(
                        parents, current, include, rel, result, options, path
                    )
                except SideloadError:
                    raise
                except Exception as e:
                    raise SideloadResolutionError(current.resource, include) from e
                if nested.includes:
                    worklist.append((records, nested, nested_path))
        return result

    def __init__(
        self,
        registry: ResourceRegistry = default_registry,
        config: Config = default_config,
        paginator: typing.Optional[Paginator] = None,
        serializer: typing.Optional[Serializer] = None,
        filter_applier: typing.Optional[FilterApplier] = None,
    ):
        self.registry = registry
        self.config = config
        self.paginator = paginator if paginator is not None else Paginator()
        self.serializer = serializer if serializer is not None else Serializer()
        self.filter_applier = filter_applier if filter_applier is not None else FilterApplier()
