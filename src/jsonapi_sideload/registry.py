import logging
import typing

from .exceptions import InvalidDeclarationError, UnknownResourceTypeError
from .models import ResourceDescriptor

logger = logging.getLogger(__name__)


class ResourceRegistry:
    """
    A :py:class:`ResourceRegistry` maps resource type names to their
    :py:class:`ResourceDescriptor`. Every name can be registered only once.
    """

    _descriptors: typing.Dict[str, ResourceDescriptor]

    def register(self, descr: ResourceDescriptor) -> ResourceDescriptor:
        if descr.name in self._descriptors:
            raise InvalidDeclarationError(f'resource "{descr.name}" is already registered')
        self._descriptors[descr.name] = descr
        logger.debug("registered resource %s", descr.name)
        return descr

    def query_descriptor_by_name(self, name: str) -> ResourceDescriptor:
        try:
            return self._descriptors[name]
        except KeyError:
            raise UnknownResourceTypeError(name)

    def resolve(self, resource: typing.Union[str, ResourceDescriptor]) -> ResourceDescriptor:
        if isinstance(resource, ResourceDescriptor):
            return resource
        return self.query_descriptor_by_name(resource)

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __iter__(self) -> typing.Iterator[ResourceDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)

    def __init__(self, descriptors: typing.Iterable[ResourceDescriptor] = ()):
        self._descriptors = {}
        for descr in descriptors:
            self.register(descr)


default_registry = ResourceRegistry()
