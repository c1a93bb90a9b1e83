import typing

from .models import IDENTITY_ATTRIBUTE, ResourceDescriptor
from .types import SerializedRecord
from .utils import fetch_value, has_member

LINKS_KEY = "links"


def _stringify(value: typing.Any) -> typing.Optional[str]:
    return None if value is None else str(value)


class Serializer:
    """
    Maps a record to the dictionary rendered for it: the exposed attributes in
    declaration order followed by ``links``, which maps each to-one relationship
    whose foreign key the record carries to the related identity as a string.
    """

    def serialize(self, record: typing.Any, descr: ResourceDescriptor) -> SerializedRecord:
        result: SerializedRecord = {}
        for name in descr.attributes:
            value = fetch_value(record, name)
            result[name] = _stringify(value) if name == IDENTITY_ATTRIBUTE else value
        links: typing.Dict[str, typing.Optional[str]] = {}
        for rel in descr.to_one_relationships:
            if rel.foreign_key is not None and has_member(record, rel.foreign_key):
                links[rel.name] = _stringify(fetch_value(record, rel.foreign_key))
        result[LINKS_KEY] = links
        return result

    def serialize_many(
        self, records: typing.Iterable[typing.Any], descr: ResourceDescriptor
    ) -> typing.List[SerializedRecord]:
        return [self.serialize(record, descr) for record in records]
