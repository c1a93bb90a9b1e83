import pytest

from ..registry import ResourceRegistry
from .testing import build_memory_driver, build_music_data, declare_music


@pytest.fixture
def registry():
    return declare_music(ResourceRegistry())


@pytest.fixture
def data():
    return build_music_data()


@pytest.fixture
def driver(registry, data):
    return build_memory_driver(registry, data)


@pytest.fixture
def songs(registry):
    return registry.query_descriptor_by_name("songs")


@pytest.fixture
def albums(registry):
    return registry.query_descriptor_by_name("albums")


@pytest.fixture
def artists(registry):
    return registry.query_descriptor_by_name("artists")
