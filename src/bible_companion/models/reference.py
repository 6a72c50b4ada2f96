"""Verse reference model."""

import re

from pydantic import BaseModel, ConfigDict, Field

from bible_companion.errors import ReferenceParseError

# "John 3:16", "1 John 4", "Song of Solomon 2:1"
_REFERENCE_RE = re.compile(r"^\s*(?P<book>.+?)\s+(?P<chapter>\d+)(?::(?P<verse>\d+))?\s*$")


class ChapterReference(BaseModel):
    """A (book, chapter) pair."""

    model_config = ConfigDict(frozen=True)

    book: str
    chapter: int = Field(ge=1)

    def format(self) -> str:
        return f"{self.book} {self.chapter}"


class VerseReference(ChapterReference):
    """A (book, chapter, verse) triple addressing one verse."""

    verse: int = Field(ge=1)

    def format(self) -> str:
        """Return the reference as "Book Chapter:Verse"."""
        return f"{self.book} {self.chapter}:{self.verse}"

    def __str__(self) -> str:
        return self.format()

    @classmethod
    def parse(cls, text: str) -> "VerseReference":
        """Parse "Book C:V"; a bare chapter reference is rejected."""
        ref = parse_reference(text)
        if not isinstance(ref, VerseReference):
            raise ReferenceParseError(f"Missing verse number: {text!r}")
        return ref


def parse_reference(text: str) -> ChapterReference:
    """
    Parse a reference string.

    Returns a VerseReference for "Book C:V" and a ChapterReference for
    "Book C". Book names may contain spaces and leading digits.

    Raises:
        ReferenceParseError: If the text is not a reference.
    """
    match = _REFERENCE_RE.match(text or "")
    if not match:
        raise ReferenceParseError(f"Not a verse reference: {text!r}")

    book = " ".join(match.group("book").split())
    chapter = int(match.group("chapter"))
    verse = match.group("verse")
    if chapter < 1 or (verse is not None and int(verse) < 1):
        raise ReferenceParseError(f"Chapter and verse must be positive: {text!r}")

    if verse is None:
        return ChapterReference(book=book, chapter=chapter)
    return VerseReference(book=book, chapter=chapter, verse=int(verse))
