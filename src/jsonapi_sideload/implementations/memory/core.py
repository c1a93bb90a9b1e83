import collections.abc
import typing

from ...interfaces import Driver, QueryScope
from ...models import (
    IDENTITY_ATTRIBUTE,
    RelationshipType,
    ResourceDescriptor,
    ResourceRelationshipDescriptor,
)
from ...registry import ResourceRegistry
from ...utils import fetch_value, foreign_key_for_relation_name, singularize

_MISSING = object()


class SequenceQueryScope(QueryScope):
    """
    A :py:class:`QueryScope` over an in-memory sequence of records, which may be
    mappings or plain objects.  The natural order is the order of the sequence.

    :param Sequence records: The records in the scope.
    :param MemoryDriver driver: The driver used to traverse relationships, if any.
    :param ResourceDescriptor descr: The resource type of the records, if known.
    :param Mapping types: The native types of the attributes. Types not given are
                          inferred from the first record holding a non-null value.
    """

    records: typing.Sequence[typing.Any]
    driver: typing.Optional["MemoryDriver"]
    descr: typing.Optional[ResourceDescriptor]
    types: typing.Mapping[str, typing.Type]

    def _derive(self, records: typing.Sequence[typing.Any]) -> "SequenceQueryScope":
        return SequenceQueryScope(records, self.driver, self.descr, self.types)

    def count(self) -> int:
        return len(self.records)

    def ordered_slice(self, offset: int, limit: int) -> typing.Sequence[typing.Any]:
        return list(self.records[offset : offset + limit])

    def filter_eq(self, attribute: str, value: typing.Any) -> "SequenceQueryScope":
        return self._derive([r for r in self.records if fetch_value(r, attribute) == value])

    def related_to(
        self, record: typing.Any, relation: ResourceRelationshipDescriptor
    ) -> typing.Union[QueryScope, typing.Any, None]:
        if relation.type is RelationshipType.TO_ONE:
            assert relation.foreign_key is not None
            id_ = fetch_value(record, relation.foreign_key)
            if id_ is None:
                return None
            if self.driver is None:
                return None
            return self.driver.scope_for_name(relation.destination).find_by_id(id_)

        # an attribute holding the related records takes precedence over the reverse foreign key
        if isinstance(record, collections.abc.Mapping):
            related = record.get(relation.name, _MISSING)
        else:
            related = getattr(record, relation.name, _MISSING)
        if related is not _MISSING and related is not None:
            dest_descr = None if self.driver is None else self.driver.descriptor(relation.destination)
            return SequenceQueryScope(list(related), self.driver, dest_descr)
        if self.driver is None or self.descr is None:
            return SequenceQueryScope([], self.driver)
        reverse_key = foreign_key_for_relation_name(singularize(self.descr.name))
        return self.driver.scope_for_name(relation.destination).filter_eq(
            reverse_key, self.get_identity(record)
        )

    def find_by_id(self, id: typing.Any) -> typing.Optional[typing.Any]:
        for record in self.records:
            if self.get_identity(record) == id:
                return record
        return None

    def get_identity(self, record: typing.Any) -> typing.Any:
        return fetch_value(record, IDENTITY_ATTRIBUTE)

    def fetch_value(self, record: typing.Any, name: str) -> typing.Any:
        return fetch_value(record, name)

    def attribute_type(self, name: str) -> typing.Optional[typing.Type]:
        type_ = self.types.get(name)
        if type_ is not None:
            return type_
        for record in self.records:
            value = fetch_value(record, name)
            if value is not None:
                return type(value)
        return None

    def __init__(
        self,
        records: typing.Iterable[typing.Any],
        driver: typing.Optional["MemoryDriver"] = None,
        descr: typing.Optional[ResourceDescriptor] = None,
        types: typing.Optional[typing.Mapping[str, typing.Type]] = None,
    ):
        self.records = list(records)
        self.driver = driver
        self.descr = descr
        self.types = types if types is not None else {}


class MemoryDriver(Driver):
    """
    A :py:class:`Driver` that serves every resource type from a list of records.
    """

    registry: ResourceRegistry
    collections: typing.Dict[str, typing.List[typing.Any]]
    types: typing.Dict[str, typing.Mapping[str, typing.Type]]

    def descriptor(self, name: str) -> ResourceDescriptor:
        return self.registry.query_descriptor_by_name(name)

    def add(
        self,
        name: str,
        records: typing.Iterable[typing.Any],
        types: typing.Optional[typing.Mapping[str, typing.Type]] = None,
    ) -> None:
        self.collections.setdefault(name, []).extend(records)
        if types is not None:
            self.types[name] = types

    def scope_for(self, descr: ResourceDescriptor) -> SequenceQueryScope:
        return SequenceQueryScope(
            self.collections.get(descr.name, []), self, descr, self.types.get(descr.name)
        )

    def scope_for_name(self, name: str) -> SequenceQueryScope:
        return self.scope_for(self.descriptor(name))

    def __init__(
        self,
        registry: ResourceRegistry,
        collections: typing.Optional[typing.Mapping[str, typing.Iterable[typing.Any]]] = None,
    ):
        self.registry = registry
        self.collections = {}
        self.types = {}
        if collections is not None:
            for name, records in collections.items():
                self.add(name, records)
