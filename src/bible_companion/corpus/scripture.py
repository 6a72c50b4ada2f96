"""
Scripture Corpus

Typed, read-only view over a translation: an ordered sequence of books,
each an ordered sequence of chapters, each an ordered sequence of verses.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional

from bible_companion.models.reference import ChapterReference, VerseReference


@dataclass(frozen=True)
class Verse:
    """One verse of text."""
    verse: int
    text: str


@dataclass(frozen=True)
class Chapter:
    """A chapter and its verses in ascending order."""
    chapter: int
    verses: tuple[Verse, ...]
    _by_number: dict[int, Verse] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_by_number", {v.verse: v for v in self.verses})

    def get(self, verse: int) -> Optional[Verse]:
        return self._by_number.get(verse)


@dataclass(frozen=True)
class Book:
    """A book and its chapters in ascending order."""
    name: str
    chapters: tuple[Chapter, ...]
    _positions: dict[int, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(
            self, "_positions", {c.chapter: i for i, c in enumerate(self.chapters)}
        )

    def get(self, chapter: int) -> Optional[Chapter]:
        pos = self._positions.get(chapter)
        return None if pos is None else self.chapters[pos]

    def position(self, chapter: int) -> Optional[int]:
        return self._positions.get(chapter)

    @property
    def first_chapter(self) -> Chapter:
        return self.chapters[0]

    @property
    def last_chapter(self) -> Chapter:
        return self.chapters[-1]


class Corpus:
    """
    Read-only navigation over a loaded translation.

    Books keep their declaration order; chapters and verses are ascending.
    Build one with ``bible_companion.corpus.load_corpus``.
    """

    def __init__(self, books: list[Book] | tuple[Book, ...], name: str = "NKJV"):
        self.name = name
        self._books = tuple(books)
        self._index = {book.name: i for i, book in enumerate(self._books)}

    def __len__(self) -> int:
        return len(self._books)

    def __iter__(self) -> Iterator[Book]:
        return iter(self._books)

    def __contains__(self, book: str) -> bool:
        return book in self._index

    def get_book(self, book: str) -> Optional[Book]:
        pos = self._index.get(book)
        return None if pos is None else self._books[pos]

    def list_books(self) -> list[str]:
        """Book names in corpus order."""
        return [book.name for book in self._books]

    def list_chapters(self, book: str) -> list[int]:
        """Ascending chapter numbers; empty if the book is unknown."""
        found = self.get_book(book)
        if not found:
            return []
        return [c.chapter for c in found.chapters]

    def chapter_count(self, book: str) -> int:
        return len(self.list_chapters(book))

    def list_verses(self, book: str, chapter: int) -> list[Verse]:
        """Verses of a chapter in ascending order; empty if unknown."""
        found = self.get_book(book)
        if not found:
            return []
        ch = found.get(chapter)
        return list(ch.verses) if ch else []

    def resolve_verse_text(self, ref: VerseReference) -> Optional[str]:
        """Return the verse text, or None if the reference is not in the corpus."""
        found = self.get_book(ref.book)
        if not found:
            return None
        ch = found.get(ref.chapter)
        if not ch:
            return None
        verse = ch.get(ref.verse)
        return verse.text if verse else None

    def has_reference(self, ref: VerseReference) -> bool:
        return self.resolve_verse_text(ref) is not None

    def next_chapter(self, book: str, chapter: int) -> ChapterReference:
        """
        The chapter after (book, chapter).

        Past a book's last chapter this moves to the first chapter of the
        next book. At the last chapter of the last book, or for an unknown
        location, the input is returned unchanged.
        """
        here = ChapterReference(book=book, chapter=chapter)
        book_pos = self._index.get(book)
        if book_pos is None:
            return here
        current = self._books[book_pos]
        pos = current.position(chapter)
        if pos is None:
            return here

        if pos + 1 < len(current.chapters):
            return ChapterReference(book=book, chapter=current.chapters[pos + 1].chapter)
        if book_pos + 1 < len(self._books):
            following = self._books[book_pos + 1]
            return ChapterReference(book=following.name, chapter=following.first_chapter.chapter)
        return here

    def prev_chapter(self, book: str, chapter: int) -> ChapterReference:
        """
        The chapter before (book, chapter).

        Before a book's first chapter this moves to the last chapter of the
        previous book. At the very first chapter it is a no-op.
        """
        here = ChapterReference(book=book, chapter=chapter)
        book_pos = self._index.get(book)
        if book_pos is None:
            return here
        current = self._books[book_pos]
        pos = current.position(chapter)
        if pos is None:
            return here

        if pos > 0:
            return ChapterReference(book=book, chapter=current.chapters[pos - 1].chapter)
        if book_pos > 0:
            previous = self._books[book_pos - 1]
            return ChapterReference(book=previous.name, chapter=previous.last_chapter.chapter)
        return here

    def iter_references(self) -> Iterator[VerseReference]:
        """Every verse reference in reading order."""
        for book in self._books:
            for ch in book.chapters:
                for verse in ch.verses:
                    yield VerseReference(book=book.name, chapter=ch.chapter, verse=verse.verse)

    @property
    def stats(self) -> dict[str, int]:
        chapters = sum(len(b.chapters) for b in self._books)
        verses = sum(len(c.verses) for b in self._books for c in b.chapters)
        return {"books": len(self._books), "chapters": chapters, "verses": verses}
