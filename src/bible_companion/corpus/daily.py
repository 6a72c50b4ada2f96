"""Deterministic verse of the day."""

from datetime import date
import random
from typing import Optional

from bible_companion.corpus.scripture import Corpus
from bible_companion.models.reference import VerseReference


def daily_verse(corpus: Corpus, day: Optional[date] = None) -> tuple[VerseReference, str]:
    """
    Pick the verse for a given day.

    The choice is seeded from the date as YYYYMMDD, so every call for the
    same day returns the same verse.
    """
    day = day or date.today()
    rng = random.Random(int(day.strftime("%Y%m%d")))

    book = rng.choice(list(corpus))
    chapter = rng.choice(book.chapters)
    verse = rng.choice(chapter.verses)

    ref = VerseReference(book=book.name, chapter=chapter.chapter, verse=verse.verse)
    return ref, verse.text
