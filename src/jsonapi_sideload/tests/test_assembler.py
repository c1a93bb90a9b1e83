import urllib.parse

import pytest

from ..assembler import PageAssembler
from ..exceptions import InvalidParameterError, UnknownResourceTypeError
from ..implementations.memory import SequenceQueryScope
from .testing import Album


@pytest.fixture
def assembler(driver, registry):
    return PageAssembler(driver, registry)


def resolve_href(assembler, href):
    parsed = urllib.parse.urlsplit(href)
    resource_type = parsed.path.strip("/").rsplit(".", 1)[0]
    return assembler.page(resource_type, dict(urllib.parse.parse_qsl(parsed.query)))


class TestPage:
    class TestDefaults:
        def test_page_defaults_to_1(self, assembler):
            assert assembler.page("songs").meta["songs"].page == 1

        def test_page_size_defaults_to_10(self, assembler):
            assert assembler.page("songs").meta["songs"].page_size == 10

        def test_paging_meta_data(self, assembler):
            meta = assembler.page("songs").meta["songs"]
            assert meta.count == 18
            assert meta.page_count == 2
            assert meta.previous_page is None
            assert meta.previous_href is None
            assert meta.next_page == 2
            assert meta.next_href == "/songs.json?page=2"

        def test_links(self, assembler):
            assert assembler.page("songs").as_dict()["links"] == {
                "songs.album": {"href": "/albums/{songs.album}.json", "type": "albums"},
                "songs.artist": {"href": "/artists/{songs.artist}.json", "type": "artists"},
            }

    class TestCustomPageSize:
        def test_page_size(self, assembler):
            meta = assembler.page("songs", {"page_size": "3"}).meta["songs"]
            assert meta.page_size == 3
            assert meta.page_count == 6

        def test_hrefs(self, assembler):
            meta = assembler.page("songs", {"page_size": "3"}).meta["songs"]
            assert meta.next_page == 2
            assert meta.next_href == "/songs.json?page=2&page_size=3"

    class TestCustomFilter:
        def test_valid_title(self, assembler, data):
            page = assembler.page("songs", {"title": data.songs[0].title})
            assert page.meta["songs"].count == 1

        def test_invalid_title(self, assembler):
            page = assembler.page("songs", {"title": "this doesn't exist"})
            assert page.meta["songs"].count == 0
            assert page.primary_records == ()

    def test_serializes_results(self, assembler, data):
        first = data.songs[0]
        assert assembler.page("songs").primary_records[0] == {
            "id": str(first.id),
            "title": first.title,
            "album_id": first.album_id,
            "links": {
                "album": str(first.album_id),
                "artist": str(first.artist_id),
            },
        }

    def test_first_page(self, assembler):
        meta = assembler.page("songs", {"page": "1"}).meta["songs"]
        assert meta.page == 1
        assert meta.page_size == 10
        assert meta.previous_page is None
        assert meta.next_page == 2

    def test_second_page(self, assembler):
        page = assembler.page("songs", {"page": "2"})
        meta = page.meta["songs"]
        assert len(page.primary_records) == 8
        assert meta.page == 2
        assert meta.previous_page == 1
        assert meta.next_page is None
        assert meta.previous_href == "/songs.json"

    def test_beyond_last_page(self, assembler):
        page = assembler.page("songs", {"page": "5"})
        meta = page.meta["songs"]
        assert page.primary_records == ()
        assert meta.count == 18
        assert meta.previous_page == 4
        assert meta.previous_href == "/songs.json?page=4"
        assert meta.next_page is None

    class TestSideloading:
        def test_sideloaded_models(self, assembler):
            page = assembler.page("songs", {"includes": "albums"})
            assert page.as_dict()["albums"] is not None
            assert [a["id"] for a in page.sideloaded["albums"]] == ["1"]

        def test_includes_in_meta(self, assembler):
            page = assembler.page("songs", {"includes": "albums"})
            assert page.as_dict()["meta"]["songs"]["includes"] == ["albums"]

        def test_includes_in_hrefs(self, assembler):
            meta = assembler.page("songs", {"includes": "albums"}).meta["songs"]
            assert meta.next_href == "/songs.json?page=2&includes=albums"

        def test_comma_delimited(self, assembler):
            page = assembler.page("songs", {"includes": "albums,artists"})
            document = page.as_dict()
            assert document["albums"] is not None
            assert document["artists"] is not None
            assert document["meta"]["songs"]["includes"] == ["albums", "artists"]
            assert page.meta["songs"].next_href == "/songs.json?page=2&includes=albums,artists"

        def test_links(self, assembler):
            page = assembler.page("songs", {"includes": "albums,artists"})
            assert set(page.links) == {
                "songs.album",
                "songs.artist",
                "albums.songs",
                "albums.artist",
                "artists.songs",
                "artists.albums",
            }

        def test_meta_order(self, assembler):
            page = assembler.page("songs", {"includes": "artists,albums"})
            assert list(page.meta) == ["songs", "artists", "albums"]
            assert list(page.as_dict()) == ["songs", "artists", "albums", "meta", "links"]

        def test_idempotent(self, assembler):
            once = assembler.page("songs", {"includes": "albums"})
            twice = assembler.page("songs", {"includes": "albums,albums"})
            assert once.sideloaded == twice.sideloaded

        def test_unknown_include(self, assembler):
            page = assembler.page("songs", {"includes": "bogus"})
            assert dict(page.sideloaded) == {}
            assert page.meta["songs"].includes == ("bogus",)

    class TestFiltering:
        def test_no_filters(self, assembler):
            assert assembler.page("songs", {}).meta["songs"].count == 18

        def test_album_id(self, assembler, data):
            album1 = data.albums[0]
            meta = assembler.page("songs", {"album_id": str(album1.id)}).meta["songs"]
            assert meta.count == 11
            assert meta.next_href == f"/songs.json?page=2&album_id={album1.id}"

    def test_custom_scope(self, assembler, driver, albums):
        driver.add("albums", [Album(id=3, title="A", year=1930), Album(id=4, title="B", year=1948)])
        scope = driver.scope_for(albums)
        classic = SequenceQueryScope(
            [a for a in scope.all() if a.year < 1950], driver, albums
        )
        assert assembler.page("albums", {}, classic).meta["albums"].count == 2

    def test_invalid_page(self, assembler):
        with pytest.raises(InvalidParameterError):
            assembler.page("songs", {"page": "abc"})

    def test_unknown_resource(self, assembler):
        with pytest.raises(UnknownResourceTypeError):
            assembler.page("bogus")


class TestAssemble:
    def test_defaults(self, assembler):
        options = assembler.resolver.resolve("songs", {})
        meta = assembler.assemble(options).meta["songs"]
        assert meta.count == 18
        assert meta.page_count == 2
        assert meta.previous_page is None
        assert meta.next_page == 2

    def test_custom_page_size(self, assembler):
        options = assembler.resolver.resolve("songs", {"page_size": "3"})
        meta = assembler.assemble(options).meta["songs"]
        assert meta.page_size == 3
        assert meta.page_count == 6

    def test_paged_sideload(self, assembler):
        options = assembler.resolver.resolve("albums", {"includes": "songs"})
        page = assembler.assemble(options)
        assert page.meta["albums"].page == 1
        assert page.meta["songs"].page == 1

    def test_two_paged_sideloads(self, assembler):
        options = assembler.resolver.resolve("artists", {"includes": "albums,songs"})
        page = assembler.assemble(options)
        assert page.meta["artists"].page == 1
        assert page.meta["albums"].page == 1
        assert page.meta["songs"].page == 1
        assert page.meta["songs"].count == 18

    def test_nested_links(self, assembler):
        options = assembler.resolver.resolve(
            "artists", {"includes": "albums", "albums.includes": "songs"}
        )
        page = assembler.assemble(options)
        assert "songs.album" in page.links
        assert list(page.sideloaded) == ["albums", "songs"]

    def test_no_retained_state(self, assembler):
        first = assembler.page("songs", {"includes": "albums"})
        second = assembler.page("songs", {"includes": "albums"})
        assert first == second


class TestRoundTrip:
    @pytest.mark.parametrize(
        "params",
        [
            {},
            {"page_size": "3"},
            {"page": "2", "page_size": "3", "includes": "albums"},
            {"album_id": "1", "page_size": "4"},
            {"includes": "albums", "albums.page_size": "1"},
            {"includes": "albums", "albums.includes": "artists", "albums.artists.page_size": "1"},
        ],
    )
    def test_next_then_previous(self, assembler, params):
        page = assembler.page("songs", params)
        meta = page.meta["songs"]
        assert meta.next_href is not None
        next_page = resolve_href(assembler, meta.next_href)
        back = resolve_href(assembler, next_page.meta["songs"].previous_href)
        assert back.meta["songs"].page == meta.page
        assert back.primary_records == page.primary_records

    def test_previous_of_second_page_is_default_href(self, assembler):
        page = assembler.page("songs")
        next_page = resolve_href(assembler, page.meta["songs"].next_href)
        assert next_page.meta["songs"].previous_href == "/songs.json"

    def test_nested_options_survive(self, assembler):
        page = assembler.page("songs", {"includes": "albums", "albums.page_size": "1"})
        meta = page.meta["songs"]
        assert meta.next_href == "/songs.json?page=2&includes=albums&albums.page_size=1"
        next_page = resolve_href(assembler, meta.next_href)
        assert next_page.meta["albums"].page_size == 1


class TestSideloadHrefs:
    def test_next_href_pages_the_related_records(self, assembler):
        page = assembler.page("albums", {"year": "1995", "includes": "songs"})
        meta = page.meta["songs"]
        assert meta.count == 11
        assert meta.next_href == "/albums.json?year=1995&includes=songs&songs.page=2"

        next_page = resolve_href(assembler, meta.next_href)
        assert [s["id"] for s in next_page.sideloaded["songs"]] == ["11"]
        assert next_page.meta["songs"].count == 11
        assert next_page.meta["songs"].page == 2
        assert next_page.primary_records == page.primary_records
        assert next_page.meta["songs"].previous_href == "/albums.json?year=1995&includes=songs"

    def test_nested_sideload(self, assembler):
        page = assembler.page(
            "artists",
            {"includes": "albums", "albums.includes": "songs", "albums.songs.page_size": "5"},
        )
        meta = page.meta["songs"]
        assert meta.next_href == (
            "/artists.json?includes=albums&albums.includes=songs"
            "&albums.songs.page=2&albums.songs.page_size=5"
        )
        next_page = resolve_href(assembler, meta.next_href)
        assert [s["id"] for s in next_page.sideloaded["songs"]] == ["6", "7", "8", "9", "10"]
        assert next_page.sideloaded["albums"] == page.sideloaded["albums"]

    def test_primary_page_kept(self, assembler):
        page = assembler.page("songs", {"page": "2", "includes": "albums"})
        assert page.meta["albums"].next_href is None
        assert page.meta["songs"].previous_href == "/songs.json?includes=albums"
