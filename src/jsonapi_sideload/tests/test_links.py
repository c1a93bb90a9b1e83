import pytest

from ..config import Config
from ..exceptions import UnknownResourceTypeError
from ..links import Link, LinkBuilder, include_graph
from ..options import OptionsResolver


@pytest.fixture
def builder(registry):
    return LinkBuilder(registry)


@pytest.fixture
def resolver(driver, registry):
    return OptionsResolver(driver, registry)


class TestLinkBuilder:
    def test_primary_only(self, builder, songs):
        links = builder.build_links(songs)
        assert {k: v.as_dict() for k, v in links.items()} == {
            "songs.album": {"href": "/albums/{songs.album}.json", "type": "albums"},
            "songs.artist": {"href": "/artists/{songs.artist}.json", "type": "artists"},
        }

    def test_graph(self, builder, songs):
        links = builder.build_links(songs, ["songs", "albums", "artists", "albums"])
        assert links == {
            "songs.album": Link("/albums/{songs.album}.json", "albums"),
            "songs.artist": Link("/artists/{songs.artist}.json", "artists"),
            "albums.artist": Link("/artists/{albums.artist}.json", "artists"),
            "albums.songs": Link("/songs/{albums.songs}.json", "songs"),
            "artists.albums": Link("/albums/{artists.albums}.json", "albums"),
            "artists.songs": Link("/songs/{artists.songs}.json", "songs"),
        }

    def test_deterministic(self, builder, songs):
        assert builder.build_links(songs, ["albums", "artists"]) == builder.build_links(
            songs, ["artists", "albums"]
        )

    def test_unknown_type(self, builder, songs):
        with pytest.raises(UnknownResourceTypeError):
            builder.build_links(songs, ["bogus"])

    def test_href_prefix(self, registry, albums):
        builder = LinkBuilder(registry, Config(href_prefix="/api"))
        assert builder.build_links(albums)["albums.songs"].href == "/api/songs/{albums.songs}.json"


class TestIncludeGraph:
    def test_no_includes(self, resolver):
        assert include_graph(resolver.resolve("songs")) == ("songs",)

    def test_includes(self, resolver):
        options = resolver.resolve("songs", {"includes": "albums,bogus,artists"})
        assert include_graph(options) == ("songs", "albums", "artists")

    def test_nested(self, resolver):
        options = resolver.resolve("artists", {"includes": "albums", "albums.includes": "songs"})
        assert include_graph(options) == ("artists", "albums", "songs")

    def test_cycle(self, resolver):
        options = resolver.resolve("songs", {"includes": "albums", "albums.includes": "songs"})
        assert include_graph(options) == ("songs", "albums")
