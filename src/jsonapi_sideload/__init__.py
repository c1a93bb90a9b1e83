"""
jsonapi_sideload serializes pages of records into JSON-API style documents
carrying paging metadata, sideloaded related resources and relation links.
"""
import logging

from .assembler import Page, PageAssembler  # noqa
from .config import Config  # noqa
from .declarative import declare, serializer  # noqa
from .exceptions import (  # noqa
    InvalidDeclarationError,
    InvalidParameterError,
    SideloadError,
    SideloadResolutionError,
    UnknownResourceTypeError,
)
from .interfaces import Driver, QueryScope  # noqa
from .models import RelationshipType, ResourceDescriptor  # noqa
from .options import Options, OptionsResolver  # noqa
from .registry import ResourceRegistry, default_registry  # noqa

logging.getLogger(__name__).addHandler(logging.NullHandler())
