"""
Application composition.

BibleApp owns one corpus, one annotation store, one reading-position
memory and one chat session, and wires the reader flow between them.
"""

from dataclasses import dataclass, field
import logging
from typing import Optional

from bible_companion.annotations import AnnotationStore
from bible_companion.chat import ChatGateway, ChatSession
from bible_companion.config import Settings, get_settings
from bible_companion.corpus import Corpus, load_corpus
from bible_companion.models import Bookmark, Highlight, Note, VerseReference
from bible_companion.position import ReadingPositionMemory
from bible_companion.storage import FileKeyValueStore, KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class VerseAnnotations:
    """Everything attached to one verse."""
    notes: list[Note] = field(default_factory=list)
    bookmark: Optional[Bookmark] = None
    highlight: Optional[Highlight] = None


@dataclass
class VerseView:
    """A verse as presented to the reader."""
    reference: VerseReference
    text: str
    annotations: VerseAnnotations = field(default_factory=VerseAnnotations)

    @property
    def is_bookmarked(self) -> bool:
        return self.annotations.bookmark is not None


@dataclass
class ChapterView:
    """A chapter with per-verse bookmark and highlight state."""
    book: str
    chapter: int
    verses: list[VerseView]
    chapter_notes: list[Note] = field(default_factory=list)


class BibleApp:
    """
    Top-level composition of the reader.

    Usage:
        app = BibleApp.from_settings()
        view = await app.open_verse(VerseReference(book="John", chapter=3, verse=16))
    """

    def __init__(
        self,
        corpus: Corpus,
        store: AnnotationStore,
        position: Optional[ReadingPositionMemory] = None,
        chat: Optional[ChatSession] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.corpus = corpus
        self.store = store
        self.position = position or ReadingPositionMemory()
        self.chat = chat or ChatSession(ChatGateway(self.settings))

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        kv: Optional[KeyValueStore] = None,
    ) -> "BibleApp":
        settings = settings or get_settings()
        corpus = load_corpus(settings.corpus_path)
        store = AnnotationStore(kv or FileKeyValueStore(settings.storage_dir))
        return cls(corpus, store, settings=settings)

    async def start(self) -> None:
        """One-time startup work."""
        await self.store.ensure_default_colors_seeded()

    async def annotations_for(self, ref: VerseReference) -> VerseAnnotations:
        """Union of the independent note, bookmark and highlight lookups."""
        return VerseAnnotations(
            notes=await self.store.query_notes(ref.book, ref.chapter, ref.verse),
            bookmark=await self.store.get_bookmark(ref.book, ref.chapter, ref.verse),
            highlight=await self.store.get_highlight(ref.book, ref.chapter, ref.verse),
        )

    async def open_verse(self, ref: VerseReference) -> Optional[VerseView]:
        """
        Resolve a verse, gather its annotations and record it as the
        reading position. None if the reference is not in the corpus.
        """
        text = self.corpus.resolve_verse_text(ref)
        if text is None:
            logger.info("Reference not in corpus: %s", ref.format())
            return None

        annotations = await self.annotations_for(ref)
        self.position.record_position(ref, text)
        return VerseView(reference=ref, text=text, annotations=annotations)

    async def open_chapter(self, book: str, chapter: int) -> Optional[ChapterView]:
        """A chapter's verses with bookmark and highlight state merged in."""
        verses = self.corpus.list_verses(book, chapter)
        if not verses:
            return None

        bookmarks = {
            b.verse: b for b in await self.store.list_bookmarks()
            if b.book_name == book and b.chapter == chapter
        }
        highlights = {
            h.verse: h for h in await self.store.list_highlights()
            if h.book_name == book and h.chapter == chapter
        }
        notes = await self.store.query_notes(book, chapter)

        views = []
        for v in verses:
            views.append(
                VerseView(
                    reference=VerseReference(book=book, chapter=chapter, verse=v.verse),
                    text=v.text,
                    annotations=VerseAnnotations(
                        notes=[n for n in notes if n.verse == v.verse],
                        bookmark=bookmarks.get(v.verse),
                        highlight=highlights.get(v.verse),
                    ),
                )
            )
        return ChapterView(
            book=book,
            chapter=chapter,
            verses=views,
            chapter_notes=[n for n in notes if n.verse is None],
        )

    async def toggle_bookmark(self, ref: VerseReference, title: Optional[str] = None) -> Optional[Bookmark]:
        """Remove the verse's bookmark if present, otherwise add one.

        Returns the new bookmark, or None when one was removed.
        """
        existing = await self.store.get_bookmark(ref.book, ref.chapter, ref.verse)
        if existing:
            await self.store.remove_bookmark(existing.id)
            return None
        return await self.store.add_bookmark(ref, title=title)
