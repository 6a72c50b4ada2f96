"""Tests for application composition and the reader flow."""

import httpx
import pytest

from bible_companion.app import BibleApp
from bible_companion.chat import ChatGateway, ChatSession
from bible_companion.config import Settings
from bible_companion.errors import DuplicateBookmarkError
from bible_companion.models import BibleRoute, ChatRoute, NoteDraft, NotesRoute, VerseReference
from bible_companion.storage import FileKeyValueStore

PSALM_23_1 = VerseReference(book="Psalms", chapter=23, verse=1)


@pytest.fixture
def settings(tmp_path, corpus_file):
    return Settings(_env_file=None, corpus_path=corpus_file, storage_dir=tmp_path / "storage")


@pytest.fixture
def app(corpus, store, settings):
    return BibleApp(corpus, store, settings=settings)


class TestOpenVerse:
    """Test the verse lookup flow."""

    async def test_records_position(self, app):
        view = await app.open_verse(PSALM_23_1)

        assert view.text == "The Lord is my shepherd; I shall not want."
        position = app.position.current_position()
        assert position.reference == "Psalms 23:1"
        assert position.text == view.text

    async def test_merges_annotations(self, app):
        await app.store.create_note(NoteDraft.for_reference(PSALM_23_1, "Shepherd", "Provision"))
        await app.store.add_bookmark(PSALM_23_1)
        await app.store.set_highlight("Psalms", 23, 1, "green")

        view = await app.open_verse(PSALM_23_1)
        assert [n.title for n in view.annotations.notes] == ["Shepherd"]
        assert view.is_bookmarked
        assert view.annotations.highlight.color_id == "green"

        neighbor = await app.open_verse(VerseReference(book="Psalms", chapter=23, verse=2))
        assert neighbor.annotations.notes == []
        assert not neighbor.is_bookmarked
        assert neighbor.annotations.highlight is None

    async def test_unknown_reference(self, app):
        assert await app.open_verse(VerseReference(book="Psalms", chapter=23, verse=9)) is None
        assert app.position.current_position() is None


class TestOpenChapter:
    """Test chapter views."""

    async def test_chapter_state(self, app):
        await app.store.add_bookmark(VerseReference(book="John", chapter=3, verse=17))
        await app.store.create_note(NoteDraft(title="Overview", content="c", book_name="John", chapter=3))

        chapter = await app.open_chapter("John", 3)
        assert [v.reference.verse for v in chapter.verses] == [16, 17]
        assert [v.is_bookmarked for v in chapter.verses] == [False, True]
        assert [n.title for n in chapter.chapter_notes] == ["Overview"]

    async def test_unknown_chapter(self, app):
        assert await app.open_chapter("John", 21) is None


class TestToggleBookmark:
    """Test bookmark toggling."""

    async def test_toggle(self, app):
        ref = VerseReference(book="John", chapter=3, verse=16)
        added = await app.toggle_bookmark(ref)
        assert added is not None
        assert await app.toggle_bookmark(ref) is None
        assert await app.store.list_bookmarks() == []

    async def test_direct_duplicate_still_rejected(self, app):
        ref = VerseReference(book="John", chapter=3, verse=16)
        await app.toggle_bookmark(ref)
        with pytest.raises(DuplicateBookmarkError):
            await app.store.add_bookmark(ref)


class TestComposition:
    """Test building the application."""

    async def test_from_settings(self, settings):
        app = BibleApp.from_settings(settings)
        assert isinstance(app.store.kv, FileKeyValueStore)
        assert app.corpus.list_books()[0] == "Genesis"

        await app.start()
        assert (settings.storage_dir / "bible_app_highlight_colors.json").exists()

    async def test_file_storage_survives_restart(self, settings):
        first = BibleApp.from_settings(settings)
        await first.store.add_bookmark(PSALM_23_1)

        second = BibleApp.from_settings(settings)
        assert await second.store.is_bookmarked("Psalms", 23, 1)
        assert second.position.current_position() is None

    async def test_ask_about_verse(self, app, settings):
        def handler(request):
            return httpx.Response(200, json={"choices": [{"message": {"content": "It speaks of care."}}]})

        gateway = ChatGateway(
            settings=settings.model_copy(update={"openrouter_api_key": "k"}),
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        app.chat = ChatSession(gateway)

        text = app.corpus.resolve_verse_text(PSALM_23_1)
        app.chat.prefill(ChatRoute.ask_about(PSALM_23_1, text).initial_prompt)
        reply = await app.chat.send()

        assert reply.content == "It speaks of care."
        assert "Psalms 23:1" in app.chat.messages[0].content


class TestNavigationPayloads:
    """Test route payloads built from references."""

    def test_bible_route(self):
        route = BibleRoute.to_verse(PSALM_23_1)
        assert route.model_dump() == {"book": "Psalms", "chapter": 23, "verse": 1, "reference": "Psalms 23:1"}

    def test_notes_route(self):
        route = NotesRoute.note_on(PSALM_23_1)
        assert route.prefilled_note.to_dict() == {
            "bookName": "Psalms",
            "chapter": 23,
            "verse": 1,
            "title": "Psalms 23:1",
        }

    def test_chat_route(self):
        route = ChatRoute.ask_about(PSALM_23_1, "The Lord is my shepherd")
        assert route.initial_prompt == 'Explain Psalms 23:1: "The Lord is my shepherd"'

    def test_route_keys_are_camel_case(self):
        assert set(NotesRoute.note_on(PSALM_23_1).to_dict()) == {"prefilledNote"}
        assert ChatRoute.ask_about(PSALM_23_1, "text").to_dict() == {
            "initialPrompt": 'Explain Psalms 23:1: "text"',
        }
