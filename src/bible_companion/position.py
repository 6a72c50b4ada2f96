"""Reading-position memory: the single most recently viewed verse."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from bible_companion.models.annotations import utcnow
from bible_companion.models.reference import VerseReference


class ReadingPosition(BaseModel):
    """Snapshot of the last verse the reader viewed."""

    book: str
    chapter: int
    verse: int
    text: str
    reference: str
    timestamp: datetime

    @property
    def verse_ref(self) -> VerseReference:
        return VerseReference(book=self.book, chapter=self.chapter, verse=self.verse)


class ReadingPositionMemory:
    """
    A single mutable slot, owned by the application and passed to whoever
    needs it. Each record overwrites the previous one; no history is kept.
    """

    def __init__(self):
        self._position: Optional[ReadingPosition] = None

    def get(self) -> Optional[ReadingPosition]:
        return self._position

    def set(self, position: Optional[ReadingPosition]) -> None:
        self._position = position

    def record_position(self, ref: VerseReference, text: str) -> ReadingPosition:
        position = ReadingPosition(
            book=ref.book,
            chapter=ref.chapter,
            verse=ref.verse,
            text=text,
            reference=ref.format(),
            timestamp=utcnow(),
        )
        self._position = position
        return position

    def current_position(self) -> Optional[ReadingPosition]:
        """The last recorded position, or None before the first navigation."""
        return self._position

    def clear(self) -> None:
        self._position = None
