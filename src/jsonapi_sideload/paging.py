import dataclasses
import math
import typing
import urllib.parse

from .config import DEFAULT_PAGE, Config, default_config
from .exceptions import InvalidParameterError
from .interfaces import QueryScope
from .options import INCLUDES_PARAM, PAGE_PARAM, PAGE_SIZE_PARAM, Options


@dataclasses.dataclass(frozen=True)
class PageSlice:
    records: typing.Sequence[typing.Any]
    count: int
    page: int
    page_size: int
    page_count: int
    previous_page: typing.Optional[int] = None
    next_page: typing.Optional[int] = None


@dataclasses.dataclass(frozen=True)
class PageMeta:
    """
    The paging metadata rendered under ``meta`` for a resource type.
    """

    count: int
    page: int
    page_size: int
    page_count: int
    previous_page: typing.Optional[int]
    next_page: typing.Optional[int]
    previous_href: typing.Optional[str]
    next_href: typing.Optional[str]
    includes: typing.Tuple[str, ...] = ()

    def as_dict(self) -> typing.Dict[str, typing.Any]:
        result = dataclasses.asdict(self)
        result["includes"] = list(self.includes)
        return result


class Paginator:
    def paginate(self, scope: QueryScope, page: int, page_size: int) -> PageSlice:
        if page < 1:
            raise InvalidParameterError(PAGE_PARAM, page, "must be positive")
        if page_size < 1:
            raise InvalidParameterError(PAGE_SIZE_PARAM, page_size, "must be positive")
        count = scope.count()
        offset = (page - 1) * page_size
        records = scope.ordered_slice(offset, page_size) if offset < count else []
        return PageSlice(
            records=records,
            count=count,
            page=page,
            page_size=page_size,
            page_count=math.ceil(count / page_size),
            previous_page=page - 1 if page > 1 else None,
            next_page=page + 1 if page * page_size < count else None,
        )


def _quote(value: typing.Any) -> str:
    return urllib.parse.quote(str(value), safe=",")


def _query_params(
    options: Options, config: Config, prefix: str = ""
) -> typing.List[typing.Tuple[str, str]]:
    params: typing.List[typing.Tuple[str, str]] = []
    if options.page != DEFAULT_PAGE:
        params.append((prefix + PAGE_PARAM, str(options.page)))
    if options.page_size != config.page_size:
        params.append((prefix + PAGE_SIZE_PARAM, str(options.page_size)))
    for name, value in options.filters.items():
        params.append((prefix + name, _quote(value)))
    if options.includes:
        params.append(
            (prefix + INCLUDES_PARAM, ",".join(_quote(i) for i in options.includes))
        )
    for include in options.includes:
        nested = options.nested_for(include)
        if nested is not None:
            params.extend(_query_params(nested, config, f"{prefix}{include}."))
    return params


def page_href(
    options: Options, page: typing.Optional[int], config: Config = default_config
) -> typing.Optional[str]:
    """
    Builds the href of ``page`` of the resource type of ``options``, or returns
    None when ``page`` is None.

    Query parameters come in a fixed order: ``page``, ``page_size``, the filters in
    the order they were supplied, ``includes``, then the options of every include
    prefixed with ``<include>.``; each is left out when it equals its default.
    """
    if page is None:
        return None
    params = _query_params(dataclasses.replace(options, page=page), config)
    href = f"{config.href_prefix}/{options.resource_type}.json"
    if params:
        href += "?" + "&".join(f"{_quote(k)}={v}" for k, v in params)
    return href


NestedPath = typing.Sequence[typing.Tuple[str, Options]]


def _replace_nested(options: Options, path: NestedPath, page: int) -> Options:
    if not path:
        return dataclasses.replace(options, page=page)
    (include, nested), rest = path[0], path[1:]
    replaced = dict(options.nested)
    replaced[include] = _replace_nested(nested, rest, page)
    return dataclasses.replace(options, nested=replaced)


def nested_page_href(
    root: Options,
    path: NestedPath,
    page: typing.Optional[int],
    config: Config = default_config,
) -> typing.Optional[str]:
    """
    Builds the href of ``page`` of a sideloaded resource type.  The sideloaded
    records depend on the request they were loaded for, so the href is the one
    of ``root`` with the options found by following ``path`` (pairs of include
    name and options, from ``root`` downwards) turned to ``page``.
    """
    if page is None:
        return None
    if not path:
        return page_href(root, page, config)
    return page_href(_replace_nested(root, path, page), root.page, config)


def build_page_meta(
    page_slice: PageSlice,
    options: Options,
    config: Config = default_config,
    root: typing.Optional[Options] = None,
    path: NestedPath = (),
) -> PageMeta:
    """
    Builds the metadata of ``page_slice``.  For a sideloaded resource type,
    ``root`` and ``path`` locate ``options`` within the request so that its
    hrefs lead back to the same related records.
    """
    if root is None:
        root, path = options, ()
    return PageMeta(
        count=page_slice.count,
        page=page_slice.page,
        page_size=page_slice.page_size,
        page_count=page_slice.page_count,
        previous_page=page_slice.previous_page,
        next_page=page_slice.next_page,
        previous_href=nested_page_href(root, path, page_slice.previous_page, config),
        next_href=nested_page_href(root, path, page_slice.next_page, config),
        includes=options.includes,
    )
