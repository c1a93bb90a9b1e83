import datetime
import decimal
import json
import typing
import uuid

from .assembler import Page
from .types import MutableJSONObject


class PageJSONEncoder(json.JSONEncoder):
    """
    Encodes the attribute values a record may carry besides the JSON natives.
    """

    def default(self, value: typing.Any) -> typing.Any:
        if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
            return value.isoformat()
        if isinstance(value, decimal.Decimal):
            return str(value)
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, (set, frozenset, tuple)):
            return list(value)
        return super().default(value)


def render_page(page: Page) -> MutableJSONObject:
    return page.as_dict()


def dumps(page: Page, **kwargs: typing.Any) -> str:
    kwargs.setdefault("cls", PageJSONEncoder)
    return json.dumps(render_page(page), **kwargs)
