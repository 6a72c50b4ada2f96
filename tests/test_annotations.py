"""Tests for the annotation store."""

import json

import pytest

from bible_companion.annotations import STORAGE_KEYS, AnnotationStore
from bible_companion.errors import (
    DuplicateBookmarkError,
    PersistenceError,
    UnknownHighlightColorError,
)
from bible_companion.models import DEFAULT_HIGHLIGHT_COLORS, NoteDraft, VerseReference
from bible_companion.storage import FileKeyValueStore, MemoryKeyValueStore

JOHN_3_16 = VerseReference(book="John", chapter=3, verse=16)
JOHN_3_17 = VerseReference(book="John", chapter=3, verse=17)


class FailingStore(MemoryKeyValueStore):
    """A store whose writes fail."""

    async def set_item(self, key, value):
        raise OSError("disk full")


class TestNotes:
    """Test note CRUD and queries."""

    async def test_create_and_query(self, store):
        note = await store.create_note(
            {"title": "T", "content": "C", "bookName": "John", "chapter": 3, "verse": 16}
        )
        found = await store.query_notes("John", 3, 16)
        assert [n.id for n in found] == [note.id]
        assert found[0].title == "T"

        assert await store.delete_note(note.id) is True
        assert await store.query_notes("John", 3, 16) == []

    async def test_create_sets_id_and_timestamps(self, store):
        a = await store.create_note(NoteDraft(title="A", content="x"))
        b = await store.create_note(NoteDraft(title="B", content="y"))
        assert a.id != b.id
        assert a.created_at == a.updated_at

    async def test_draft_defaults(self, store):
        note = await store.create_note(NoteDraft(title="  Title ", content=" Body ", book_name="  ", tags="a, ,b,"))
        assert note.title == "Title"
        assert note.content == "Body"
        assert note.book_name == "General"
        assert note.chapter == 1
        assert note.verse is None
        assert note.tags == ["a", "b"]

    async def test_query_does_not_leak_neighbors(self, store):
        await store.create_note(NoteDraft.for_reference(JOHN_3_16, "sixteen", "c"))
        await store.create_note(NoteDraft.for_reference(JOHN_3_17, "seventeen", "c"))

        titles = [n.title for n in await store.query_notes("John", 3, 16)]
        assert titles == ["sixteen"]

    async def test_query_chapter_includes_chapter_notes(self, store):
        await store.create_note(NoteDraft(title="whole", content="c", book_name="John", chapter=3))
        await store.create_note(NoteDraft.for_reference(JOHN_3_16, "verse", "c"))

        chapter_titles = {n.title for n in await store.query_notes("John", 3)}
        assert chapter_titles == {"whole", "verse"}
        assert [n.title for n in await store.query_notes("John", 3, 16)] == ["verse"]

    async def test_update_merges_partial(self, store):
        note = await store.create_note(NoteDraft.for_reference(JOHN_3_16, "T", "C"))
        updated = await store.update_note(note.id, {"content": "x"})

        assert updated.content == "x"
        assert updated.updated_at > note.updated_at
        assert updated.title == "T"
        assert (updated.book_name, updated.chapter, updated.verse) == ("John", 3, 16)
        assert updated.created_at == note.created_at

        stored = await store.get_note(note.id)
        assert stored.content == "x"

    async def test_update_accepts_aliases(self, store):
        note = await store.create_note(NoteDraft.for_reference(JOHN_3_16, "T", "C"))
        updated = await store.update_note(note.id, {"bookName": "Romans", "chapter": 8, "verse": 28})
        assert (updated.book_name, updated.chapter, updated.verse) == ("Romans", 8, 28)

    async def test_update_rejects_id_change(self, store):
        note = await store.create_note(NoteDraft(title="T", content="C"))
        with pytest.raises(ValueError):
            await store.update_note(note.id, {"id": "other"})

    async def test_update_missing(self, store):
        assert await store.update_note("nope", {"content": "x"}) is None

    async def test_delete_missing(self, store):
        assert await store.delete_note("nope") is False

    async def test_search(self, store):
        await store.create_note(NoteDraft(title="Grace", content="unearned", tags=["Faith"]))
        await store.create_note(NoteDraft(title="Law", content="Ten commandments"))
        await store.create_note(NoteDraft(title="Hope", content="anchor", tags=["future"]))

        assert {n.title for n in await store.search_notes("grace")} == {"Grace"}
        assert {n.title for n in await store.search_notes("COMMAND")} == {"Law"}
        assert {n.title for n in await store.search_notes("fait")} == {"Grace"}
        assert await store.search_notes("missing") == []

    async def test_persisted_layout(self, store, kv):
        await store.create_note(NoteDraft.for_reference(JOHN_3_16, "T", "C"))
        stored = json.loads(kv.data[STORAGE_KEYS["notes"]])
        assert len(stored) == 1
        assert set(stored[0]) == {"id", "title", "content", "bookName", "chapter", "verse", "createdAt", "updatedAt"}


class TestBookmarks:
    """Test bookmark uniqueness and removal."""

    async def test_add_and_check(self, store):
        bookmark = await store.add_bookmark(JOHN_3_16, title="Favorite")
        assert bookmark.title == "Favorite"
        assert await store.is_bookmarked("John", 3, 16)
        assert not await store.is_bookmarked("John", 3, 17)

    async def test_duplicate_rejected(self, store):
        await store.add_bookmark(JOHN_3_16)
        with pytest.raises(DuplicateBookmarkError) as exc:
            await store.add_bookmark(JOHN_3_16)
        assert exc.value.reference == JOHN_3_16
        assert len(await store.list_bookmarks()) == 1

    async def test_remove_idempotent(self, store):
        bookmark = await store.add_bookmark(JOHN_3_16)
        assert await store.remove_bookmark(bookmark.id) is True
        assert await store.remove_bookmark(bookmark.id) is False
        assert not await store.is_bookmarked("John", 3, 16)


class TestHighlights:
    """Test highlight replacement and the palette."""

    async def test_replace(self, store):
        await store.set_highlight("John", 3, 16, "yellow")
        await store.set_highlight("John", 3, 16, "blue")

        highlights = [h for h in await store.list_highlights() if h.matches("John", 3, 16)]
        assert len(highlights) == 1
        assert highlights[0].color_id == "blue"

    async def test_other_verses_untouched(self, store):
        await store.set_highlight("John", 3, 16, "yellow")
        await store.set_highlight("John", 3, 17, "green")
        await store.set_highlight("John", 3, 16, "pink")

        assert (await store.get_highlight("John", 3, 17)).color_id == "green"
        assert len(await store.list_highlights()) == 2

    async def test_unknown_color(self, store):
        with pytest.raises(UnknownHighlightColorError):
            await store.set_highlight("John", 3, 16, "octarine")
        assert await store.list_highlights() == []

    async def test_remove(self, store):
        await store.set_highlight("John", 3, 16, "yellow")
        assert await store.remove_highlight("John", 3, 16) is True
        assert await store.remove_highlight("John", 3, 16) is False
        assert await store.get_highlight("John", 3, 16) is None

    async def test_default_palette(self, store, kv):
        colors = await store.get_highlight_colors()
        assert [c.id for c in colors] == ["yellow", "green", "blue", "pink", "purple"]
        assert STORAGE_KEYS["highlight_colors"] not in kv.data

    async def test_seed_once(self, store, kv):
        assert await store.ensure_default_colors_seeded() is True
        assert await store.ensure_default_colors_seeded() is False
        assert len(json.loads(kv.data[STORAGE_KEYS["highlight_colors"]])) == len(DEFAULT_HIGHLIGHT_COLORS)

    async def test_seed_keeps_custom_palette(self, kv):
        kv.data[STORAGE_KEYS["highlight_colors"]] = json.dumps([{"id": "red", "name": "Red", "color": "#F00"}])
        store = AnnotationStore(kv)

        assert await store.ensure_default_colors_seeded() is False
        assert [c.id for c in await store.get_highlight_colors()] == ["red"]
        await store.set_highlight("John", 3, 16, "red")
        with pytest.raises(UnknownHighlightColorError):
            await store.set_highlight("John", 3, 16, "yellow")


class TestPersistenceFailures:
    """Test storage errors surface as PersistenceError."""

    async def test_corrupt_collection(self, kv, store):
        kv.data[STORAGE_KEYS["notes"]] = "{broken"
        with pytest.raises(PersistenceError) as exc:
            await store.list_notes()
        assert exc.value.key == STORAGE_KEYS["notes"]

    async def test_corrupt_does_not_affect_other_collections(self, kv, store):
        kv.data[STORAGE_KEYS["notes"]] = "[1, 2]"
        await store.add_bookmark(JOHN_3_16)
        assert len(await store.list_bookmarks()) == 1

    async def test_write_failure_keeps_previous_state(self):
        kv = FailingStore({STORAGE_KEYS["bookmarks"]: "[]"})
        store = AnnotationStore(kv)
        with pytest.raises(PersistenceError):
            await store.add_bookmark(JOHN_3_16)
        assert await store.list_bookmarks() == []

    async def test_undecodable_file(self, tmp_path):
        kv = FileKeyValueStore(tmp_path)
        kv.path_for(STORAGE_KEYS["notes"]).write_bytes(b"[\xff\xfe]")
        store = AnnotationStore(kv)

        with pytest.raises(PersistenceError) as exc:
            await store.list_notes()
        assert exc.value.key == STORAGE_KEYS["notes"]
        assert isinstance(exc.value.cause, UnicodeDecodeError)
