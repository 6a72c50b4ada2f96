"""
Scripture Corpus

Load a translation once and navigate it by book, chapter and verse.
"""

from .scripture import Book, Chapter, Corpus, Verse
from .loader import build_corpus, load_corpus
from .daily import daily_verse

__all__ = [
    "Corpus",
    "Book",
    "Chapter",
    "Verse",
    "build_corpus",
    "load_corpus",
    "daily_verse",
]
