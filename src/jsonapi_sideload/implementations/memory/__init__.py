from .core import MemoryDriver, SequenceQueryScope, fetch_value  # noqa
