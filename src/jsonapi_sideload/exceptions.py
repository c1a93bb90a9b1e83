import abc
import typing


class SideloadError(Exception, metaclass=abc.ABCMeta):
    @property
    @abc.abstractmethod
    def message(self) -> str:
        ...  # pragma: nocover

    def __str__(self):
        return self.message


class InvalidDeclarationError(SideloadError):
    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str):
        super().__init__(message)
        self._message = message


class UnknownResourceTypeError(SideloadError):
    name: str

    @property
    def message(self) -> str:
        return f'no resource known as "{self.name}"'

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


class InvalidParameterError(SideloadError):
    """
    Raised when a paging parameter is structurally malformed, for example
    ``page=abc`` or ``page_size=0``.
    """

    name: str
    value: typing.Any
    detail: typing.Optional[str]

    @property
    def message(self) -> str:
        detail = "" if self.detail is None else f" ({self.detail})"
        return f"parameter ({self.name}) has an invalid value{detail}: {self.value!r}"

    def __init__(self, name: str, value: typing.Any, detail: typing.Optional[str] = None):
        super().__init__(name, value)
        self.name = name
        self.value = value
        self.detail = detail


class SideloadResolutionError(SideloadError):
    """
    Raised when resolving one sideload fails. The original exception is
    available as ``__cause__``; no partial page is ever returned.
    """

    resource: "models.ResourceDescriptor"
    include: str

    @property
    def message(self) -> str:
        return (
            f'failed to sideload "{self.include}" for "{self.resource.name}"'
            f" ({self.__cause__!s})"
        )

    def __init__(self, resource: "models.ResourceDescriptor", include: str):
        super().__init__(resource.name, include)
        self.resource = resource
        self.include = include


if typing.TYPE_CHECKING:
    from . import models  # noqa: E402
