"""
Naming conventions shared by the declaration and link-building steps.

A foreign key attribute is named ``<relation>_id``, and the resource type a
to-one relation points at is the relation name followed by ``s``.
"""
import typing

FOREIGN_KEY_SUFFIX = "_id"


def is_foreign_key(name: str) -> bool:
    return name.endswith(FOREIGN_KEY_SUFFIX) and len(name) > len(FOREIGN_KEY_SUFFIX)


def relation_name_for_foreign_key(name: str) -> str:
    assert is_foreign_key(name)
    return name[: -len(FOREIGN_KEY_SUFFIX)]


def foreign_key_for_relation_name(name: str) -> str:
    return name + FOREIGN_KEY_SUFFIX


def pluralize(name: str) -> str:
    return name + "s"


def split_comma_delimited(value: typing.Union[str, typing.Iterable[str]]) -> typing.List[str]:
    """
    Splits ``value`` on commas, trims each item and drops the empty ones.
    Sequences are flattened item by item, so ``["a,b", "c"]`` yields
    ``["a", "b", "c"]``.
    """
    if isinstance(value, str):
        items: typing.Iterable[str] = [value]
    else:
        items = value
    result: typing.List[str] = []
    for item in items:
        for part in str(item).split(","):
            part = part.strip()
            if part:
                result.append(part)
    return result


def dedupe(items: typing.Iterable[str]) -> typing.Tuple[str, ...]:
    seen: typing.Set[str] = set()
    result: typing.List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return tuple(result)


def singularize(name: str) -> str:
    return name[:-1] if name.endswith("s") else name
