import dataclasses
import typing

from .exceptions import InvalidDeclarationError
from .models import ResourceDescriptor, infer_relationships
from .registry import ResourceRegistry, default_registry


@dataclasses.dataclass
class Meta:
    name: typing.Optional[str] = None
    attributes: typing.Sequence[str] = ()
    can_include: typing.Sequence[str] = ()
    can_filter_by: typing.Sequence[str] = ()
    belongs_to: typing.Sequence[str] = ()
    has_many: typing.Sequence[str] = ()


def _as_names(value: typing.Any, key: str) -> typing.Sequence[str]:
    if isinstance(value, str):
        return (value,)
    if not all(isinstance(v, str) for v in value):
        raise InvalidDeclarationError(f"every item of {key} must be a str")
    return tuple(value)


def handle_meta(meta: typing.Type) -> Meta:
    attrs = {k: v for k, v in vars(meta).items() if not k.startswith("__")}
    unknown = set(attrs) - {f.name for f in dataclasses.fields(Meta)}
    if unknown:
        raise InvalidDeclarationError(f"unknown Meta options: {', '.join(sorted(unknown))}")
    return Meta(
        name=attrs.get("name"),
        attributes=_as_names(attrs.get("attributes", ()), "attributes"),
        can_include=_as_names(attrs.get("can_include", ()), "can_include"),
        can_filter_by=_as_names(attrs.get("can_filter_by", ()), "can_filter_by"),
        belongs_to=_as_names(attrs.get("belongs_to", ()), "belongs_to"),
        has_many=_as_names(attrs.get("has_many", ()), "has_many"),
    )


def declare(
    name: str,
    attributes: typing.Sequence[str],
    can_include: typing.Sequence[str] = (),
    can_filter_by: typing.Sequence[str] = (),
    belongs_to: typing.Sequence[str] = (),
    has_many: typing.Sequence[str] = (),
    registry: ResourceRegistry = default_registry,
) -> ResourceDescriptor:
    """
    Builds a :py:class:`ResourceDescriptor`, infers its relationships from the
    attribute names and registers it.

    :param str name: The plural key of the resource type.
    :param attributes: The exposed attribute names.
    :param can_include: The names that may be sideloaded.
    :param can_filter_by: The attribute names usable as equality filters.
    :param belongs_to: Additional to-one relationships whose foreign keys are not exposed.
    :param has_many: Additional to-many relationships that are not includable.
    :param ResourceRegistry registry: The registry to register to.
    :return: The registered descriptor.
    """
    unknown_filters = [f for f in can_filter_by if f not in attributes]
    if unknown_filters:
        raise InvalidDeclarationError(
            f"filterable attributes of \"{name}\" are not exposed: {', '.join(unknown_filters)}"
        )
    descr = ResourceDescriptor(
        name=name,
        attributes=attributes,
        relationships=infer_relationships(attributes, can_include, belongs_to, has_many),
        includable=can_include,
        filterable=can_filter_by,
    )
    return registry.register(descr)


T = typing.TypeVar("T", bound=type)


def serializer(
    registry: ResourceRegistry = default_registry,
) -> typing.Callable[[T], T]:
    """
    A class decorator that declares a resource type from the nested ``Meta`` class::

        @serializer()
        class SongSerializer:
            class Meta:
                name = "songs"
                attributes = ("id", "title", "album_id")
                can_include = ("albums", "artists")
                can_filter_by = ("title",)
                belongs_to = ("artist",)

    The resulting descriptor is set to the ``descriptor`` attribute of the class.
    """

    def _(class_: T) -> T:
        meta_class = getattr(class_, "Meta", None)
        if meta_class is None:
            raise InvalidDeclarationError(f"{class_.__name__} has no Meta")
        meta = handle_meta(meta_class)
        if meta.name is None:
            raise InvalidDeclarationError(f"{class_.__name__}.Meta has no name")
        descr = declare(
            meta.name,
            meta.attributes,
            can_include=meta.can_include,
            can_filter_by=meta.can_filter_by,
            belongs_to=meta.belongs_to,
            has_many=meta.has_many,
            registry=registry,
        )
        setattr(class_, "descriptor", descr)
        return class_

    return _
