# ABOUTME: Unit tests for entity mapping between rows and dataclasses.
# ABOUTME: Validates insert column order, defaults for unset fields, and lenient decoding.

from novelshelf.db.mapping import (
    BOOKMARK_INSERT_COLUMNS,
    CHAPTER_INSERT_COLUMNS,
    NOVEL_INSERT_COLUMNS,
    VARIANT_INSERT_COLUMNS,
    NewBookmark,
    NewChapter,
    NewChapterVariant,
    NewNovel,
    VariantType,
    bookmark_to_insert_values,
    chapter_to_insert_values,
    novel_to_insert_values,
    row_to_folder,
    row_to_novel,
    row_to_variant,
    variant_to_insert_values,
)


def _variant_row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": 7,
        "chapter_id": 3,
        "variant_type": "MTL",
        "lang": "en",
        "title": "Chapter 1",
        "content": "text",
        "source_url": None,
        "provider": "google",
        "model_name": None,
        "is_primary": 1,
        "created_at": 100,
        "updated_at": 200,
    }
    row.update(overrides)
    return row


class TestInsertValues:
    """Tests for *_to_insert_values encoders."""

    def test_novel_values_match_columns(self) -> None:
        novel = NewNovel(title="Shadow Slave", author="Guiltythree", release_status="ongoing")
        values = novel_to_insert_values(novel)
        assert len(values) == len(NOVEL_INSERT_COLUMNS)
        by_column = dict(zip(NOVEL_INSERT_COLUMNS, values))
        assert by_column["title"] == "Shadow Slave"
        assert by_column["author"] == "Guiltythree"
        assert by_column["release_status"] == "ongoing"
        assert by_column["description"] is None

    def test_chapter_values(self) -> None:
        values = chapter_to_insert_values(NewChapter(novel_id=1, seq=4, display_title="Four"))
        assert dict(zip(CHAPTER_INSERT_COLUMNS, values)) == {
            "novel_id": 1,
            "seq": 4,
            "volume": None,
            "display_title": "Four",
        }

    def test_variant_primary_stored_as_integer(self) -> None:
        """is_primary True/False/None becomes 1/0/0."""
        for flag, stored in ((True, 1), (False, 0), (None, 0)):
            variant = NewChapterVariant(
                chapter_id=1, variant_type=VariantType.RAW, lang="zh", content="x", is_primary=flag
            )
            by_column = dict(zip(VARIANT_INSERT_COLUMNS, variant_to_insert_values(variant)))
            assert by_column["is_primary"] == stored

    def test_variant_type_stored_as_string(self) -> None:
        variant = NewChapterVariant(
            chapter_id=1, variant_type=VariantType.AI, lang="en", content=""
        )
        by_column = dict(zip(VARIANT_INSERT_COLUMNS, variant_to_insert_values(variant)))
        assert by_column["variant_type"] == "AI"

    def test_bookmark_defaults(self) -> None:
        """A bookmark with no position or device stores 0 and the empty string."""
        values = bookmark_to_insert_values(NewBookmark(chapter_id=9))
        assert dict(zip(BOOKMARK_INSERT_COLUMNS, values)) == {
            "chapter_id": 9,
            "position_pct": 0,
            "device_id": "",
        }

    def test_bookmark_keeps_given_values(self) -> None:
        values = bookmark_to_insert_values(
            NewBookmark(chapter_id=9, position_pct=0.5, device_id="tablet")
        )
        assert values == (9, 0.5, "tablet")


class TestRowDecoding:
    """Tests for row_to_* decoders."""

    def test_variant_is_primary_becomes_bool(self) -> None:
        assert row_to_variant(_variant_row(is_primary=1)).is_primary is True
        assert row_to_variant(_variant_row(is_primary=0)).is_primary is False

    def test_known_variant_type_becomes_enum(self) -> None:
        assert row_to_variant(_variant_row()).variant_type is VariantType.MTL

    def test_unknown_variant_type_passes_through(self) -> None:
        """A kind written by a newer version decodes as its raw string."""
        variant = row_to_variant(_variant_row(variant_type="FAN"))
        assert variant.variant_type == "FAN"

    def test_novel_nulls_preserved(self) -> None:
        row = {
            "id": 1,
            "title": "T",
            "author": None,
            "description": None,
            "cover_path": None,
            "lang_original": None,
            "status": None,
            "release_status": None,
            "slug": None,
            "created_at": 1,
            "updated_at": 2,
        }
        novel = row_to_novel(row)
        assert novel.title == "T"
        assert novel.author is None
        assert novel.updated_at == 2

    def test_folder(self) -> None:
        folder = row_to_folder({"id": 2, "name": "Later", "color": "#fff", "sort": 3})
        assert (folder.id, folder.name, folder.color, folder.sort) == (2, "Later", "#fff", 3)


class TestVariantType:
    def test_members(self) -> None:
        assert {member.value for member in VariantType} == {"RAW", "OFFICIAL", "MTL", "AI", "HUMAN"}
