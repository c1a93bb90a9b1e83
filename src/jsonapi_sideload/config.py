import dataclasses
import os
import typing

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10


def _int_or_none(value: typing.Optional[str]) -> typing.Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


@dataclasses.dataclass(frozen=True)
class Config:
    page_size: int = DEFAULT_PAGE_SIZE
    """
    The page size used when a request does not specify one.
    Hrefs omit ``page_size`` when it equals this value.
    """

    max_page_size: typing.Optional[int] = None
    """
    Requested page sizes above this value are clamped to it. No limit when None.
    """

    href_prefix: str = ""
    """
    Prepended to every href produced, e.g. ``"/api/v1"``.
    """

    @classmethod
    def from_environ(cls, environ: typing.Mapping[str, str] = os.environ) -> "Config":
        page_size = _int_or_none(environ.get("SIDELOAD_PAGE_SIZE"))
        return cls(
            page_size=page_size if page_size is not None else DEFAULT_PAGE_SIZE,
            max_page_size=_int_or_none(environ.get("SIDELOAD_MAX_PAGE_SIZE")),
            href_prefix=environ.get("SIDELOAD_HREF_PREFIX", "").rstrip("/"),
        )

    def __post_init__(self):
        if self.page_size < 1:
            raise ValueError(f"page_size must be positive: {self.page_size}")
        if self.max_page_size is not None and self.max_page_size < self.page_size:
            raise ValueError(
                f"max_page_size ({self.max_page_size}) must not be smaller"
                f" than page_size ({self.page_size})"
            )


default_config = Config()
