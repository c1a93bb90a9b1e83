import pytest

from ..declarative import declare, handle_meta, serializer
from ..exceptions import InvalidDeclarationError
from ..models import RelationshipType
from ..registry import ResourceRegistry


class TestDeclare:
    def test_it(self):
        registry = ResourceRegistry()
        descr = declare(
            "songs",
            ["id", "title", "album_id"],
            can_include=["albums", "artists"],
            can_filter_by=["title"],
            belongs_to=["artist"],
            registry=registry,
        )
        assert registry.query_descriptor_by_name("songs") is descr
        assert descr.attributes == ("id", "title", "album_id")
        assert descr.includable == ("albums", "artists")
        assert descr.filterable == ("title",)
        assert list(descr.relationships) == ["album", "artist"]

    def test_filter_must_be_exposed(self):
        with pytest.raises(InvalidDeclarationError):
            declare("songs", ["id", "title"], can_filter_by=["year"], registry=ResourceRegistry())


class TestSerializerDecorator:
    def test_it(self):
        registry = ResourceRegistry()

        @serializer(registry)
        class AlbumSerializer:
            class Meta:
                name = "albums"
                attributes = ("id", "title", "year", "artist_id")
                can_include = ("artists", "songs")
                can_filter_by = "year"

        descr = AlbumSerializer.descriptor  # type: ignore
        assert registry.query_descriptor_by_name("albums") is descr
        assert descr.filterable == ("year",)
        assert descr.relationships["artist"].type is RelationshipType.TO_ONE
        assert descr.relationships["songs"].type is RelationshipType.TO_MANY

    def test_no_meta(self):
        with pytest.raises(InvalidDeclarationError):

            @serializer(ResourceRegistry())
            class Foo:
                pass

    def test_no_name(self):
        with pytest.raises(InvalidDeclarationError):

            @serializer(ResourceRegistry())
            class Foo:
                class Meta:
                    attributes = ("id",)

    def test_unknown_meta_option(self):
        class Meta:
            name = "foos"
            can_sort_by = ("id",)

        with pytest.raises(InvalidDeclarationError) as e:
            handle_meta(Meta)
        assert "can_sort_by" in str(e.value)

    def test_non_str_members(self):
        class Meta:
            name = "foos"
            attributes = ("id", 1)

        with pytest.raises(InvalidDeclarationError):
            handle_meta(Meta)
