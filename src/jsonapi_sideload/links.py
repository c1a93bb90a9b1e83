import dataclasses
import typing

from .config import Config, default_config
from .models import ResourceDescriptor
from .options import Options
from .registry import ResourceRegistry, default_registry
from .utils import dedupe


@dataclasses.dataclass(frozen=True)
class Link:
    href: str
    type: str

    def as_dict(self) -> typing.Dict[str, str]:
        return {"href": self.href, "type": self.type}


def include_graph(options: Options) -> typing.Tuple[str, ...]:
    """
    Returns the resource types reachable from ``options``: the primary type first,
    then the destination of every resolvable include, nested includes following
    their parent.  Each type appears once.
    """
    result: typing.List[str] = [options.resource_type]
    stack: typing.List[Options] = [options]
    while stack:
        current = stack.pop(0)
        for include in current.includes:
            rel = current.resource.relationship_for_include(include)
            if rel is None or rel.destination in result:
                continue
            result.append(rel.destination)
            nested = current.nested_for(include)
            if nested is not None:
                stack.append(nested)
    return tuple(result)


class LinkBuilder:
    """
    Builds the relation href table.  Entries are scoped to resource types, so
    a relationship is listed once no matter how many records carry it.
    """

    registry: ResourceRegistry
    config: Config

    def link_for(self, descr: ResourceDescriptor, rel_name: str) -> typing.Tuple[str, Link]:
        rel = descr.relationships[rel_name]
        key = f"{descr.name}.{rel.name}"
        return key, Link(
            href=f"{self.config.href_prefix}/{rel.destination}/{{{key}}}.json",
            type=rel.destination,
        )

    def build_links(
        self, resource: ResourceDescriptor, graph: typing.Iterable[str] = ()
    ) -> typing.Dict[str, Link]:
        links: typing.Dict[str, Link] = {}
        for name in dedupe([resource.name, *graph]):
            descr = resource if name == resource.name else self.registry.query_descriptor_by_name(name)
            for rel_name in descr.relationships:
                key, link = self.link_for(descr, rel_name)
                links[key] = link
        return links

    def __init__(
        self, registry: ResourceRegistry = default_registry, config: Config = default_config
    ):
        self.registry = registry
        self.config = config
