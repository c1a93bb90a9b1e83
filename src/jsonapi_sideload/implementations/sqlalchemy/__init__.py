from .core import SQLADriver, SQLAQueryScope  # noqa
from .declarative import declare_from_mapper  # noqa
