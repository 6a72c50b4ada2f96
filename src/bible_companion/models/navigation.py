"""Payloads handed to the navigation layer when moving between screens."""

from typing import Optional

from pydantic import BaseModel, Field

from bible_companion.models.annotations import Record
from bible_companion.models.reference import VerseReference


class BibleRoute(BaseModel):
    """Open the reader, optionally scrolled to a verse."""

    book: Optional[str] = None
    chapter: Optional[int] = Field(default=None, ge=1)
    verse: Optional[int] = Field(default=None, ge=1)
    reference: Optional[str] = None

    @classmethod
    def to_verse(cls, ref: VerseReference) -> "BibleRoute":
        return cls(book=ref.book, chapter=ref.chapter, verse=ref.verse, reference=ref.format())


class PrefilledNote(Record):
    """Note form contents pre-populated from a verse."""

    book_name: str
    chapter: int = Field(ge=1)
    verse: int = Field(ge=1)
    title: str


class NotesRoute(Record):
    """Open the notes screen, optionally with a prefilled note form."""

    prefilled_note: Optional[PrefilledNote] = None

    @classmethod
    def note_on(cls, ref: VerseReference) -> "NotesRoute":
        return cls(
            prefilled_note=PrefilledNote(
                book_name=ref.book,
                chapter=ref.chapter,
                verse=ref.verse,
                title=ref.format(),
            )
        )


class ChatRoute(Record):
    """Open the chat screen with an optional initial prompt."""

    initial_prompt: Optional[str] = None

    @classmethod
    def ask_about(cls, ref: VerseReference, text: str) -> "ChatRoute":
        prompt = f'Explain {ref.format()}: "{text}"'
        return cls(initial_prompt=prompt)
