"""Data models for references, annotations and navigation."""

from bible_companion.models.reference import ChapterReference, VerseReference, parse_reference
from bible_companion.models.annotations import (
    DEFAULT_HIGHLIGHT_COLORS,
    Bookmark,
    Highlight,
    HighlightColor,
    Note,
    NoteDraft,
)
from bible_companion.models.navigation import BibleRoute, ChatRoute, NotesRoute, PrefilledNote

__all__ = [
    "ChapterReference",
    "VerseReference",
    "parse_reference",
    "Note",
    "NoteDraft",
    "Bookmark",
    "Highlight",
    "HighlightColor",
    "DEFAULT_HIGHLIGHT_COLORS",
    "BibleRoute",
    "NotesRoute",
    "ChatRoute",
    "PrefilledNote",
]
