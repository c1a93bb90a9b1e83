import typing

import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ...exceptions import InvalidDeclarationError
from ...interfaces import Driver, QueryScope
from ...models import RelationshipType, ResourceDescriptor, ResourceRelationshipDescriptor
from ...registry import ResourceRegistry, default_registry
from ...utils import foreign_key_for_relation_name, singularize


def is_alien_clause(sa_mapper: orm.Mapper, expression: sa.sql.ClauseElement) -> bool:
    if not isinstance(expression, sa.Column):
        return True
    if expression.table is None:
        return True
    return expression.table not in sa_mapper.tables


def column_python_type(
    sa_mapper: orm.Mapper, prop: orm.interfaces.MapperProperty
) -> typing.Optional[typing.Type]:
    if not isinstance(prop, orm.ColumnProperty):
        return None
    expression = prop.expression
    if is_alien_clause(sa_mapper, expression):
        return None
    try:
        return expression.type.python_type
    except NotImplementedError:
        return None


def _get_property(
    props: typing.Any, name: str
) -> typing.Optional[orm.interfaces.MapperProperty]:
    return props[name] if name in props else None


class SQLAQueryScope(QueryScope):
    """
    A :py:class:`QueryScope` backed by an :py:class:`orm.Query`.  The natural order
    is the primary key order, which is applied by :py:meth:`SQLADriver.scope_for`
    and by every relationship traversal.
    """

    driver: "SQLADriver"
    mapper: orm.Mapper
    query: orm.Query

    def _derive(self, query: orm.Query) -> "SQLAQueryScope":
        return SQLAQueryScope(self.driver, self.mapper, query)

    def _class_attribute(self, name: str) -> typing.Any:
        prop = _get_property(self.mapper.attrs, name)
        if prop is None:
            raise InvalidDeclarationError(f"{self.mapper.class_.__name__} has no attribute {name}")
        return prop.class_attribute

    def count(self) -> int:
        return self.query.order_by(None).count()

    def ordered_slice(self, offset: int, limit: int) -> typing.Sequence[typing.Any]:
        return self.query.offset(offset).limit(limit).all()

    def filter_eq(self, attribute: str, value: typing.Any) -> "SQLAQueryScope":
        return self._derive(self.query.filter(self._class_attribute(attribute) == value))

    def related_to(
        self, record: typing.Any, relation: ResourceRelationshipDescriptor
    ) -> typing.Union[QueryScope, typing.Any, None]:
        prop = _get_property(self.mapper.relationships, relation.name)
        if relation.type is RelationshipType.TO_ONE:
            if prop is not None:
                return getattr(record, prop.key)
            assert relation.foreign_key is not None
            id_ = getattr(record, relation.foreign_key, None)
            if id_ is None:
                return None
            return self.driver.scope_for_name(relation.destination).find_by_id(id_)

        dest_scope = self.driver.scope_for_name(relation.destination)
        if prop is not None:
            return dest_scope._derive(dest_scope.query.with_parent(record, prop.class_attribute))
        reverse_key = foreign_key_for_relation_name(singularize(self.driver.name_of(self.mapper)))
        return dest_scope.filter_eq(reverse_key, self.get_identity(record))

    def find_by_id(self, id: typing.Any) -> typing.Optional[typing.Any]:
        pkey_cols = self.mapper.primary_key
        if len(pkey_cols) != 1:
            raise InvalidDeclarationError(
                f"{self.mapper.class_.__name__} has a composite primary key"
            )
        return self.query.filter(pkey_cols[0] == id).one_or_none()

    def get_identity(self, record: typing.Any) -> typing.Any:
        identity = self.mapper.primary_key_from_instance(record)
        return identity[0] if len(identity) == 1 else tuple(identity)

    def fetch_value(self, record: typing.Any, name: str) -> typing.Any:
        return getattr(record, name, None)

    def attribute_type(self, name: str) -> typing.Optional[typing.Type]:
        prop = _get_property(self.mapper.attrs, name)
        if prop is None:
            return None
        return column_python_type(self.mapper, prop)

    def __init__(self, driver: "SQLADriver", mapper: orm.Mapper, query: orm.Query):
        self.driver = driver
        self.mapper = mapper
        self.query = query


class SQLADriver(Driver):
    """
    A :py:class:`Driver` serving resource types from mapped classes through a session.

    :param orm.Session session: The session the queries are issued against.
    :param Mapping[str, type] classes: The mapped class of every resource type.
    :param ResourceRegistry registry: The registry the resource types are registered to.
    """

    session: orm.Session
    registry: ResourceRegistry
    classes: typing.Mapping[str, typing.Type]
    _names_by_mapper: typing.Dict[orm.Mapper, str]

    def name_of(self, sa_mapper: orm.Mapper) -> str:
        return self._names_by_mapper[sa_mapper]

    def class_for(self, name: str) -> typing.Type:
        # raises UnknownResourceTypeError for names never registered
        self.registry.query_descriptor_by_name(name)
        try:
            return self.classes[name]
        except KeyError:
            raise InvalidDeclarationError(f'no mapped class is given for "{name}"')

    def base_query(self, class_: typing.Type) -> orm.Query:
        sa_mapper = sa.inspect(class_)
        return self.session.query(class_).order_by(*sa_mapper.primary_key)

    def scope_for(self, descr: ResourceDescriptor) -> SQLAQueryScope:
        return self.scope_for_name(descr.name)

    def scope_for_name(self, name: str) -> SQLAQueryScope:
        class_ = self.class_for(name)
        return SQLAQueryScope(self, sa.inspect(class_), self.base_query(class_))

    def scope_from_query(self, name: str, query: orm.Query) -> SQLAQueryScope:
        """
        Wraps a custom query, e.g. one narrowed by a named condition, as the base
        scope of ``name``.
        """
        sa_mapper = sa.inspect(self.class_for(name))
        return SQLAQueryScope(self, sa_mapper, query.order_by(*sa_mapper.primary_key))

    def __init__(
        self,
        session: orm.Session,
        classes: typing.Mapping[str, typing.Type],
        registry: ResourceRegistry = default_registry,
    ):
        self.session = session
        self.classes = dict(classes)
        self.registry = registry
        self._names_by_mapper = {sa.inspect(c): name for name, c in self.classes.items()}
