"""Annotation models: notes, bookmarks, highlights and the highlight palette.

Records serialize with camelCase aliases (``bookName``, ``createdAt``, ...)
so the persisted collections keep a stable layout.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from bible_companion.models.reference import VerseReference


def new_id() -> str:
    """Generate a fresh record id."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def advance_timestamp(previous: Optional[datetime]) -> datetime:
    """Return now, bumped past ``previous`` if the clock has not moved."""
    now = utcnow()
    if previous is not None and now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def parse_tags(raw: Optional[str]) -> Optional[list[str]]:
    """Split a comma-separated tag string, dropping empty tags."""
    if not raw:
        return None
    tags = [tag.strip() for tag in raw.split(",")]
    tags = [tag for tag in tags if tag]
    return tags or None


class Record(BaseModel):
    """Base for persisted records."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class VerseAnchored(Record):
    """A record attached to one verse."""

    book_name: str
    chapter: int = Field(ge=1)
    verse: int = Field(ge=1)

    @property
    def reference(self) -> VerseReference:
        return VerseReference(book=self.book_name, chapter=self.chapter, verse=self.verse)

    def matches(self, book: str, chapter: int, verse: int) -> bool:
        return self.book_name == book and self.chapter == chapter and self.verse == verse


class NoteDraft(Record):
    """Input for creating a note. Verse absent means the whole chapter."""

    title: str
    content: str
    book_name: str = "General"
    chapter: int = Field(default=1, ge=1)
    verse: Optional[int] = Field(default=None, ge=1)
    tags: Optional[list[str]] = None

    @field_validator("title", "content")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator("book_name")
    @classmethod
    def _default_book(cls, value: str) -> str:
        return value.strip() or "General"

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value):
        if isinstance(value, str):
            return parse_tags(value)
        if value is not None:
            value = [tag.strip() for tag in value if tag and tag.strip()]
            return value or None
        return value

    @classmethod
    def for_reference(cls, ref: VerseReference, title: str, content: str, **kwargs) -> "NoteDraft":
        return cls(
            title=title,
            content=content,
            book_name=ref.book,
            chapter=ref.chapter,
            verse=ref.verse,
            **kwargs,
        )


class Note(NoteDraft):
    """A user note on a verse or a whole chapter."""

    id: str
    created_at: datetime
    updated_at: datetime

    def matches_text(self, query: str) -> bool:
        """Case-insensitive substring match on title, content and tags."""
        needle = query.lower()
        if needle in self.title.lower() or needle in self.content.lower():
            return True
        return any(needle in tag.lower() for tag in self.tags or [])


class Bookmark(VerseAnchored):
    """A bookmarked verse. Immutable once created."""

    id: str
    title: Optional[str] = None
    created_at: datetime


class Highlight(VerseAnchored):
    """A colored highlight on a verse."""

    id: str
    color_id: str
    created_at: datetime


class HighlightColor(Record):
    """A palette entry."""

    id: str
    name: str
    color: str


DEFAULT_HIGHLIGHT_COLORS: tuple[HighlightColor, ...] = (
    HighlightColor(id="yellow", name="Yellow", color="#FEF3C7"),
    HighlightColor(id="green", name="Green", color="#D1FAE5"),
    HighlightColor(id="blue", name="Blue", color="#DBEAFE"),
    HighlightColor(id="pink", name="Pink", color="#FCE7F3"),
    HighlightColor(id="purple", name="Purple", color="#E9D5FF"),
)
