import enum
import types
import typing
from collections import OrderedDict

from .exceptions import InvalidDeclarationError
from .utils import (
    dedupe,
    foreign_key_for_relation_name,
    is_foreign_key,
    pluralize,
    relation_name_for_foreign_key,
)

IDENTITY_ATTRIBUTE = "id"


class RelationshipType(enum.Enum):
    TO_ONE = "to_one"
    TO_MANY = "to_many"


class ResourceRelationshipDescriptor:
    name: str
    destination: str
    """
    The name of the resource type on the other side of the relationship.
    """
    type: RelationshipType
    foreign_key: typing.Optional[str]
    """
    The attribute of the record holding the identity of the related record.
    Only set for to-one relationships.
    """

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.destination!r})"

    def __eq__(self, other: typing.Any) -> bool:
        if not isinstance(other, ResourceRelationshipDescriptor):
            return NotImplemented
        return (self.name, self.destination, self.type, self.foreign_key) == (
            other.name,
            other.destination,
            other.type,
            other.foreign_key,
        )

    def __hash__(self) -> int:
        return hash((self.name, self.destination, self.type, self.foreign_key))

    def __init__(
        self,
        name: str,
        destination: str,
        type: RelationshipType,
        foreign_key: typing.Optional[str] = None,
    ):
        self.name = name
        self.destination = destination
        self.type = type
        self.foreign_key = foreign_key


class ResourceToOneRelationshipDescriptor(ResourceRelationshipDescriptor):
    def __init__(
        self, name: str, destination: typing.Optional[str] = None, foreign_key: typing.Optional[str] = None
    ):
        super().__init__(
            name,
            destination if destination is not None else pluralize(name),
            RelationshipType.TO_ONE,
            foreign_key if foreign_key is not None else foreign_key_for_relation_name(name),
        )


class ResourceToManyRelationshipDescriptor(ResourceRelationshipDescriptor):
    def __init__(self, name: str, destination: typing.Optional[str] = None):
        super().__init__(
            name,
            destination if destination is not None else name,
            RelationshipType.TO_MANY,
        )


class ResourceDescriptor:
    """
    A :py:class:`ResourceDescriptor` holds the static information about a resource type:
    which attributes are exposed, which relations exist and may be sideloaded, and which
    attributes can be used as equality filters.

    Instances are immutable once constructed.

    :param str name: The plural key of the resource type, e.g. ``"songs"``.
    :param Iterable[str] attributes: The exposed attribute names. ``id`` is prepended when missing.
    :param Iterable[ResourceRelationshipDescriptor] relationships: The relations of the resource type.
    :param Iterable[str] includable: The names that may be passed as ``includes``.
    :param Iterable[str] filterable: The attribute names usable as equality filters.
    """

    _name: str
    _attributes: typing.Tuple[str, ...]
    _relationships: typing.Mapping[str, ResourceRelationshipDescriptor]
    _includable: typing.Tuple[str, ...]
    _filterable: typing.Tuple[str, ...]

    @property
    def name(self) -> str:
        """
        The plural key of the resource type.
        """
        return self._name

    @property
    def attributes(self) -> typing.Tuple[str, ...]:
        return self._attributes

    @property
    def relationships(self) -> typing.Mapping[str, ResourceRelationshipDescriptor]:
        """
        The mapping of relationship names to :py:class:`ResourceRelationshipDescriptor`s.
        """
        return self._relationships

    @property
    def includable(self) -> typing.Tuple[str, ...]:
        return self._includable

    @property
    def filterable(self) -> typing.Tuple[str, ...]:
        return self._filterable

    @property
    def to_one_relationships(self) -> typing.List[ResourceRelationshipDescriptor]:
        return [
            rel for rel in self._relationships.values() if rel.type is RelationshipType.TO_ONE
        ]

    @property
    def foreign_keys(self) -> typing.Tuple[str, ...]:
        return tuple(
            rel.foreign_key for rel in self.to_one_relationships if rel.foreign_key is not None
        )

    def relationship_for_include(self, name: str) -> typing.Optional[ResourceRelationshipDescriptor]:
        """
        Returns the relationship that serves the include ``name``, or None if the
        include is not declared includable or no relationship leads to it.

        A to-one relationship whose destination is ``name`` takes precedence over a
        to-many relationship called ``name``.
        """
        if name not in self._includable:
            return None
        for rel in self.to_one_relationships:
            if rel.destination == name:
                return rel
        rel = self._relationships.get(name)
        if rel is not None and rel.type is RelationshipType.TO_MANY:
            return rel
        return None

    def accepts_filter(self, name: str) -> bool:
        return name in self._filterable or name in self.foreign_keys

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r})"

    def __init__(
        self,
        name: str,
        attributes: typing.Iterable[str] = (),
        relationships: typing.Iterable[ResourceRelationshipDescriptor] = (),
        includable: typing.Iterable[str] = (),
        filterable: typing.Iterable[str] = (),
    ) -> None:
        if not name:
            raise InvalidDeclarationError("resource name must not be empty")
        attributes = dedupe(attributes)
        if IDENTITY_ATTRIBUTE not in attributes:
            attributes = (IDENTITY_ATTRIBUTE,) + attributes
        rels: "OrderedDict[str, ResourceRelationshipDescriptor]" = OrderedDict()
        for rel in relationships:
            if rel.name in rels:
                raise InvalidDeclarationError(
                    f'relationship "{rel.name}" is declared twice in "{name}"'
                )
            rels[rel.name] = rel
        self._name = name
        self._attributes = attributes
        self._relationships = types.MappingProxyType(rels)
        self._includable = dedupe(includable)
        self._filterable = dedupe(filterable)


def infer_relationships(
    attributes: typing.Iterable[str],
    includable: typing.Iterable[str] = (),
    belongs_to: typing.Iterable[str] = (),
    has_many: typing.Iterable[str] = (),
) -> typing.List[ResourceRelationshipDescriptor]:
    """
    Builds the relationship table of a resource type from the naming convention.

    * every ``<x>_id`` attribute and every ``belongs_to`` name ``<x>`` gives a
      to-one relationship ``<x>`` pointing at ``<x>s``;
    * every includable name not reached by one of those, and every ``has_many``
      name, gives a to-many relationship of the same name.
    """
    to_one_names: typing.List[str] = []
    for attr in attributes:
        if is_foreign_key(attr):
            to_one_names.append(relation_name_for_foreign_key(attr))
    to_one_names.extend(belongs_to)

    result: typing.List[ResourceRelationshipDescriptor] = [
        ResourceToOneRelationshipDescriptor(name) for name in dedupe(to_one_names)
    ]
    to_one_destinations = {rel.destination for rel in result}
    to_one_rel_names = {rel.name for rel in result}
    for name in dedupe(list(includable) + list(has_many)):
        if name in to_one_destinations or name in to_one_rel_names:
            continue
        result.append(ResourceToManyRelationshipDescriptor(name))
    return result
