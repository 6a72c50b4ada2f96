"""Load a scripture corpus from JSON."""

import json
import logging
from pathlib import Path
from typing import Any

from bible_companion.corpus.scripture import Book, Chapter, Corpus, Verse
from bible_companion.errors import CorpusError

logger = logging.getLogger(__name__)


def load_corpus(path: Path, name: str | None = None) -> Corpus:
    """
    Load and validate a corpus file.

    Supports:
    - nested mappings: {book: {"1": {"1": "text", ...}, ...}, ...}
    - book lists: {"books": [{"name", "chapters": [{"chapter", "verses": [{"verse", "text"}]}]}]}

    Raises:
        CorpusError: If the file is missing, unreadable or malformed.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8-sig"))
    except OSError as e:
        raise CorpusError(f"Cannot read corpus {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CorpusError(f"Corpus {path} is not valid JSON: {e}") from e

    corpus = build_corpus(raw, name=name or path.stem.upper())
    logger.info("Loaded corpus %s: %s", corpus.name, corpus.stats)
    return corpus


def build_corpus(raw: Any, name: str = "NKJV") -> Corpus:
    """Parse raw corpus data into a typed Corpus, rejecting malformed entries."""
    if isinstance(raw, dict) and isinstance(raw.get("books"), list):
        books = [_book_from_list_entry(entry) for entry in raw["books"]]
    elif isinstance(raw, dict):
        books = [_book_from_mapping(book, chapters) for book, chapters in raw.items()]
    else:
        raise CorpusError(f"Corpus must be a JSON object, got {type(raw).__name__}")

    if not books:
        raise CorpusError("Corpus has no books")

    seen: set[str] = set()
    for book in books:
        if book.name in seen:
            raise CorpusError(f"Duplicate book: {book.name}")
        seen.add(book.name)

    return Corpus(books, name=name)


def _number(key: Any, what: str, where: str) -> int:
    if isinstance(key, bool):
        raise CorpusError(f"Invalid {what} number {key!r} in {where}")
    try:
        number = int(key)
    except (TypeError, ValueError):
        raise CorpusError(f"Invalid {what} number {key!r} in {where}") from None
    if number < 1 or str(number) != str(key).strip():
        raise CorpusError(f"Invalid {what} number {key!r} in {where}")
    return number


def _text(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise CorpusError(f"Verse text must be a string in {where}")
    return value


def _book_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise CorpusError(f"Invalid book name: {name!r}")
    return name


def _make_chapter(number: int, verses: list[Verse], where: str) -> Chapter:
    if not verses:
        raise CorpusError(f"{where} has no verses")
    verses.sort(key=lambda v: v.verse)
    for a, b in zip(verses, verses[1:]):
        if a.verse == b.verse:
            raise CorpusError(f"Duplicate verse {a.verse} in {where}")
    return Chapter(chapter=number, verses=tuple(verses))


def _make_book(name: str, chapters: list[Chapter]) -> Book:
    if not chapters:
        raise CorpusError(f"{name} has no chapters")
    chapters.sort(key=lambda c: c.chapter)
    for a, b in zip(chapters, chapters[1:]):
        if a.chapter == b.chapter:
            raise CorpusError(f"Duplicate chapter {a.chapter} in {name}")
    return Book(name=name, chapters=tuple(chapters))


def _book_from_mapping(name: Any, chapters: Any) -> Book:
    name = _book_name(name)
    if not isinstance(chapters, dict):
        raise CorpusError(f"{name} must map chapter numbers to verses")

    parsed: list[Chapter] = []
    for ch_key, verses in chapters.items():
        ch_num = _number(ch_key, "chapter", name)
        where = f"{name} {ch_num}"
        if not isinstance(verses, dict):
            raise CorpusError(f"{where} must map verse numbers to text")
        parsed.append(
            _make_chapter(
                ch_num,
                [Verse(verse=_number(k, "verse", where), text=_text(v, where)) for k, v in verses.items()],
                where,
            )
        )
    return _make_book(name, parsed)


def _book_from_list_entry(entry: Any) -> Book:
    if not isinstance(entry, dict):
        raise CorpusError("Book entries must be objects")
    name = _book_name(entry.get("name"))
    chapters = entry.get("chapters")
    if not isinstance(chapters, list):
        raise CorpusError(f"{name} must have a chapters list")

    parsed: list[Chapter] = []
    for ch in chapters:
        if not isinstance(ch, dict) or not isinstance(ch.get("verses"), list):
            raise CorpusError(f"{name} has a malformed chapter entry")
        ch_num = _number(ch.get("chapter"), "chapter", name)
        where = f"{name} {ch_num}"
        verses = []
        for v in ch["verses"]:
            if not isinstance(v, dict):
                raise CorpusError(f"{where} has a malformed verse entry")
            verses.append(Verse(verse=_number(v.get("verse"), "verse", where), text=_text(v.get("text"), where)))
        parsed.append(_make_chapter(ch_num, verses, where))
    return _make_book(name, parsed)
