"""
This package contains the interface definitions that need to be
implemented by the storage-dependent backend provider.

"""
import abc
import typing

from .models import ResourceDescriptor, ResourceRelationshipDescriptor


class QueryScope(metaclass=abc.ABCMeta):
    """
    A :py:class:`QueryScope` denotes a chainable, countable collection of records
    of a single resource type.  Its natural order must be stable across repeated
    calls within a request.
    """

    @abc.abstractmethod
    def count(self) -> int:
        """
        Returns the number of records in the scope.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def ordered_slice(self, offset: int, limit: int) -> typing.Sequence[typing.Any]:
        """
        Returns at most ``limit`` records starting from ``offset`` in the natural order.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def filter_eq(self, attribute: str, value: typing.Any) -> "QueryScope":
        """
        Returns a new scope narrowed to the records whose ``attribute`` equals ``value``.
        The receiver is left untouched.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def related_to(
        self, record: typing.Any, relation: ResourceRelationshipDescriptor
    ) -> typing.Union["QueryScope", typing.Any, None]:
        """
        Traverses ``relation`` from ``record``.

        :return: a :py:class:`QueryScope` for a to-many relationship, the related record
                 or None for a to-one relationship.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def find_by_id(self, id: typing.Any) -> typing.Optional[typing.Any]:
        ...  # pragma: nocover

    @abc.abstractmethod
    def get_identity(self, record: typing.Any) -> typing.Any:
        """
        Retrieves the identity of the record.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def fetch_value(self, record: typing.Any, name: str) -> typing.Any:
        """
        Fetches the value of the attribute ``name`` from the record.
        Returns None when the record has no such attribute.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def attribute_type(self, name: str) -> typing.Optional[typing.Type]:
        """
        Returns the native type of the attribute ``name``, or None if indeterminable.
        """
        ...  # pragma: nocover

    def all(self) -> typing.Sequence[typing.Any]:
        return self.ordered_slice(0, self.count())


class Driver(metaclass=abc.ABCMeta):
    """
    A :py:class:`Driver` gives access to the full collection of every resource type.
    """

    @abc.abstractmethod
    def scope_for(self, descr: ResourceDescriptor) -> QueryScope:
        ...  # pragma: nocover
