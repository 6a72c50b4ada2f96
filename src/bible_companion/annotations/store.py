"""
Annotation Store

Notes, bookmarks and highlights persisted as independent collections over a
key-value store. Every mutation reads the whole collection, applies the
change and writes the whole collection back. Operations are not atomic
across concurrent callers; the application issues one at a time.
"""

import json
import logging
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from bible_companion.errors import (
    DuplicateBookmarkError,
    PersistenceError,
    UnknownHighlightColorError,
)
from bible_companion.models.annotations import (
    DEFAULT_HIGHLIGHT_COLORS,
    Bookmark,
    Highlight,
    HighlightColor,
    Note,
    NoteDraft,
    advance_timestamp,
    new_id,
    utcnow,
)
from bible_companion.models.reference import VerseReference
from bible_companion.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "notes": "@bible_app_notes",
    "bookmarks": "@bible_app_bookmarks",
    "highlights": "@bible_app_highlights",
    "highlight_colors": "@bible_app_highlight_colors",
}

# Fields a note edit may change
NOTE_EDITABLE_FIELDS = ("title", "content", "book_name", "chapter", "verse", "tags")

R = TypeVar("R", bound=BaseModel)


class Collection(Generic[R]):
    """A list of records stored as one JSON array under a fixed key."""

    def __init__(self, kv: KeyValueStore, key: str, model: type[R]):
        self.kv = kv
        self.key = key
        self.model = model

    async def exists(self) -> bool:
        return await self._get_raw() is not None

    async def load(self) -> list[R]:
        raw = await self._get_raw()
        if raw is None:
            return []
        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError("expected a JSON array")
            return [self.model.model_validate(item) for item in items]
        except (ValueError, ValidationError) as e:
            logger.error("Corrupt collection %s: %s", self.key, e)
            raise PersistenceError(self.key, "Stored collection is corrupt", e) from e

    async def save(self, records: list[R]) -> None:
        payload = json.dumps([r.to_dict() for r in records], ensure_ascii=False)
        try:
            await self.kv.set_item(self.key, payload)
        except OSError as e:
            logger.error("Failed writing %s: %s", self.key, e)
            raise PersistenceError(self.key, "Could not write collection", e) from e

    async def _get_raw(self) -> Optional[str]:
        try:
            return await self.kv.get_item(self.key)
        except UnicodeDecodeError as e:
            logger.error("Corrupt collection %s: %s", self.key, e)
            raise PersistenceError(self.key, "Stored collection is corrupt", e) from e
        except OSError as e:
            logger.error("Failed reading %s: %s", self.key, e)
            raise PersistenceError(self.key, "Could not read collection", e) from e


class AnnotationStore:
    """
    CRUD and lookups over notes, bookmarks and highlights.

    Usage:
        store = AnnotationStore(FileKeyValueStore("data/storage"))
        note = await store.create_note(NoteDraft(title="T", content="C", book_name="John", chapter=3, verse=16))
        await store.query_notes("John", 3, 16)
    """

    def __init__(self, kv: KeyValueStore):
        self.kv = kv
        self.notes = Collection(kv, STORAGE_KEYS["notes"], Note)
        self.bookmarks = Collection(kv, STORAGE_KEYS["bookmarks"], Bookmark)
        self.highlights = Collection(kv, STORAGE_KEYS["highlights"], Highlight)
        self.colors = Collection(kv, STORAGE_KEYS["highlight_colors"], HighlightColor)

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    async def list_notes(self) -> list[Note]:
        return await self.notes.load()

    async def get_note(self, note_id: str) -> Optional[Note]:
        for note in await self.notes.load():
            if note.id == note_id:
                return note
        return None

    async def create_note(self, draft: NoteDraft | dict[str, Any]) -> Note:
        """Store a new note with a fresh id and timestamps."""
        if not isinstance(draft, NoteDraft):
            draft = NoteDraft.model_validate(draft)

        all_notes = await self.notes.load()
        existing = {n.id for n in all_notes}
        note_id = new_id()
        while note_id in existing:
            note_id = new_id()

        now = utcnow()
        note = Note(**draft.model_dump(), id=note_id, created_at=now, updated_at=now)
        all_notes.append(note)
        await self.notes.save(all_notes)
        logger.debug("Created note %s on %s %s", note.id, note.book_name, note.chapter)
        return note

    async def update_note(self, note_id: str, changes: dict[str, Any]) -> Optional[Note]:
        """
        Merge changes into a note and refresh updated_at.

        Keys may use field names or their camelCase aliases. Returns None if
        the note does not exist.
        """
        changes = _normalize_note_changes(changes)
        all_notes = await self.notes.load()

        for i, note in enumerate(all_notes):
            if note.id != note_id:
                continue
            data = note.model_dump()
            data.update(changes)
            data["updated_at"] = advance_timestamp(note.updated_at)
            updated = Note.model_validate(data)
            all_notes[i] = updated
            await self.notes.save(all_notes)
            return updated

        return None

    async def delete_note(self, note_id: str) -> bool:
        """Remove a note. False if it did not exist."""
        all_notes = await self.notes.load()
        remaining = [n for n in all_notes if n.id != note_id]
        if len(remaining) == len(all_notes):
            return False
        await self.notes.save(remaining)
        return True

    async def query_notes(self, book: str, chapter: int, verse: Optional[int] = None) -> list[Note]:
        """Notes on a chapter, narrowed to one verse when given."""
        return [
            n
            for n in await self.notes.load()
            if n.book_name == book
            and n.chapter == chapter
            and (verse is None or n.verse == verse)
        ]

    async def search_notes(self, query: str) -> list[Note]:
        """Case-insensitive substring search over title, content and tags."""
        return [n for n in await self.notes.load() if n.matches_text(query)]

    # ------------------------------------------------------------------
    # Bookmarks
    # ------------------------------------------------------------------

    async def list_bookmarks(self) -> list[Bookmark]:
        return await self.bookmarks.load()

    async def get_bookmark(self, book: str, chapter: int, verse: int) -> Optional[Bookmark]:
        for bookmark in await self.bookmarks.load():
            if bookmark.matches(book, chapter, verse):
                return bookmark
        return None

    async def is_bookmarked(self, book: str, chapter: int, verse: int) -> bool:
        return await self.get_bookmark(book, chapter, verse) is not None

    async def add_bookmark(self, ref: VerseReference, title: Optional[str] = None) -> Bookmark:
        """
        Bookmark a verse.

        Raises:
            DuplicateBookmarkError: If the verse is already bookmarked.
        """
        all_bookmarks = await self.bookmarks.load()
        if any(b.matches(ref.book, ref.chapter, ref.verse) for b in all_bookmarks):
            logger.info("Duplicate bookmark rejected for %s", ref.format())
            raise DuplicateBookmarkError(ref)

        bookmark = Bookmark(
            id=new_id(),
            book_name=ref.book,
            chapter=ref.chapter,
            verse=ref.verse,
            title=title,
            created_at=utcnow(),
        )
        all_bookmarks.append(bookmark)
        await self.bookmarks.save(all_bookmarks)
        return bookmark

    async def remove_bookmark(self, bookmark_id: str) -> bool:
        """Remove a bookmark by id. False if it did not exist."""
        all_bookmarks = await self.bookmarks.load()
        remaining = [b for b in all_bookmarks if b.id != bookmark_id]
        if len(remaining) == len(all_bookmarks):
            return False
        await self.bookmarks.save(remaining)
        return True

    # ------------------------------------------------------------------
    # Highlights
    # ------------------------------------------------------------------

    async def get_highlight_colors(self) -> list[HighlightColor]:
        """The stored palette, or the default palette if none was saved."""
        colors = await self.colors.load()
        if not colors and not await self.colors.exists():
            return list(DEFAULT_HIGHLIGHT_COLORS)
        return colors

    async def ensure_default_colors_seeded(self) -> bool:
        """Persist the default palette if no palette exists. True if seeded."""
        if await self.colors.exists():
            return False
        await self.colors.save(list(DEFAULT_HIGHLIGHT_COLORS))
        logger.info("Seeded %d default highlight colors", len(DEFAULT_HIGHLIGHT_COLORS))
        return True

    async def list_highlights(self) -> list[Highlight]:
        return await self.highlights.load()

    async def get_highlight(self, book: str, chapter: int, verse: int) -> Optional[Highlight]:
        for highlight in await self.highlights.load():
            if highlight.matches(book, chapter, verse):
                return highlight
        return None

    async def set_highlight(self, book: str, chapter: int, verse: int, color_id: str) -> Highlight:
        """
        Highlight a verse, replacing any existing highlight on it.

        Raises:
            UnknownHighlightColorError: If color_id is not in the palette.
        """
        palette = await self.get_highlight_colors()
        if color_id not in {c.id for c in palette}:
            raise UnknownHighlightColorError(color_id)

        all_highlights = await self.highlights.load()
        kept = [h for h in all_highlights if not h.matches(book, chapter, verse)]

        highlight = Highlight(
            id=new_id(),
            book_name=book,
            chapter=chapter,
            verse=verse,
            color_id=color_id,
            created_at=utcnow(),
        )
        kept.append(highlight)
        await self.highlights.save(kept)
        return highlight

    async def remove_highlight(self, book: str, chapter: int, verse: int) -> bool:
        """Remove the highlight on a verse. False if there was none."""
        all_highlights = await self.highlights.load()
        remaining = [h for h in all_highlights if not h.matches(book, chapter, verse)]
        if len(remaining) == len(all_highlights):
            return False
        await self.highlights.save(remaining)
        return True


def _normalize_note_changes(changes: dict[str, Any]) -> dict[str, Any]:
    aliases = {Note.model_fields[name].alias: name for name in NOTE_EDITABLE_FIELDS}
    normalized: dict[str, Any] = {}
    for key, value in changes.items():
        name = aliases.get(key, key)
        if name not in NOTE_EDITABLE_FIELDS:
            raise ValueError(f"Note field cannot be edited: {key}")
        normalized[name] = value
    return normalized
