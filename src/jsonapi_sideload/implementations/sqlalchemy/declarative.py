"""
jsonapi_sideload.implementations.sqlalchemy.declarative module derives
resource declarations from SQLAlchemy mapped classes.

Synopsis
--------

.. code-block:: python

   import sqlalchemy as sa
   from sqlalchemy import orm
   from jsonapi_sideload.implementations.sqlalchemy import SQLADriver, declare_from_mapper

   Base = orm.declarative_base()

   class Song(Base):
       __tablename__ = "songs"
       id = sa.Column(sa.Integer(), primary_key=True)
       title = sa.Column(sa.String(255), nullable=False)
       album_id = sa.Column(sa.Integer(), sa.ForeignKey("albums.id"))
       album = orm.relationship("Album", back_populates="songs")

   declare_from_mapper(Song, can_include=["albums"], can_filter_by=["title"])
   driver = SQLADriver(session, {"songs": Song, ...})

"""
import typing

import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore

from ...declarative import declare
from ...models import ResourceDescriptor
from ...registry import ResourceRegistry, default_registry
from ...utils import foreign_key_for_relation_name
from .core import is_alien_clause


def extract_column_names(sa_mapper: orm.Mapper) -> typing.List[str]:
    return [
        prop.key
        for prop in sa_mapper.column_attrs
        if not is_alien_clause(sa_mapper, prop.expression)
    ]


def declare_from_mapper(
    class_: typing.Type,
    name: typing.Optional[str] = None,
    attributes: typing.Optional[typing.Sequence[str]] = None,
    can_include: typing.Sequence[str] = (),
    can_filter_by: typing.Sequence[str] = (),
    registry: ResourceRegistry = default_registry,
) -> ResourceDescriptor:
    """
    Declares a resource type for a mapped class.

    :param type class_: The mapped class.
    :param str name: The resource type name. Defaults to the table name.
    :param attributes: The exposed attributes. Defaults to every column of the class.
    :param can_include: The names that may be sideloaded.
    :param can_filter_by: The attribute names usable as equality filters.
    :param ResourceRegistry registry: The registry to register to.
    :return: The registered descriptor.

    Many-to-one relationships of the class whose foreign key follows the
    ``<relationship>_id`` naming become to-one relationships even if the
    foreign key is not exposed; one-to-many ones become to-many relationships.
    """
    sa_mapper: orm.Mapper = sa.inspect(class_)
    columns = extract_column_names(sa_mapper)
    if attributes is None:
        attributes = columns
    if name is None:
        name = sa_mapper.local_table.name

    belongs_to: typing.List[str] = []
    has_many: typing.List[str] = []
    for rel in sa_mapper.relationships:
        if rel.uselist:
            has_many.append(rel.key)
        elif foreign_key_for_relation_name(rel.key) in columns:
            belongs_to.append(rel.key)

    return declare(
        name,
        attributes,
        can_include=can_include,
        can_filter_by=can_filter_by,
        belongs_to=belongs_to,
        has_many=has_many,
        registry=registry,
    )
