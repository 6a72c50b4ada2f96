"""Command-line interface for Bible Companion."""

import asyncio
from functools import wraps
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bible_companion import __version__
from bible_companion.errors import BibleCompanionError, DuplicateBookmarkError

console = Console()


def report_errors(func):
    """Report application errors as messages with exit code 1."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DuplicateBookmarkError as e:
            console.print(f"[yellow]{escape(str(e))}[/yellow]")
            raise SystemExit(1)
        except (BibleCompanionError, ValidationError) as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            raise SystemExit(1)

    return wrapper


def run_async(func):
    """Run an async click command inside the error boundary."""

    @report_errors
    @wraps(func)
    def wrapper(*args, **kwargs):
        return asyncio.run(func(*args, **kwargs))

    return wrapper


def get_app(ctx: click.Context):
    """Build the application once per invocation."""
    from bible_companion.app import BibleApp
    from bible_companion.config import get_settings

    if "app" not in ctx.obj:
        settings = get_settings()
        overrides = {k: v for k, v in ctx.obj.items() if v is not None}
        if overrides:
            settings = settings.model_copy(update=overrides)
        ctx.obj["app"] = BibleApp.from_settings(settings)
    return ctx.obj["app"]


def parse_ref(text: str):
    from bible_companion.models import VerseReference

    try:
        return VerseReference.parse(text)
    except ValueError as e:
        raise click.BadParameter(str(e)) from None


@click.group()
@click.version_option(version=__version__)
@click.option("--corpus", "corpus_path", type=click.Path(path_type=Path), help="Corpus JSON file")
@click.option("--storage", "storage_dir", type=click.Path(path_type=Path), help="Annotation storage directory")
@click.option("--log-level", default=None, help="Logging level (default from settings)")
@click.pass_context
def main(ctx: click.Context, corpus_path: Path | None, storage_dir: Path | None, log_level: str | None) -> None:
    """Bible Companion - read scripture, keep notes, bookmarks and highlights."""
    from bible_companion.config import get_settings
    from bible_companion.log import configure_logging

    configure_logging(log_level or get_settings().log_level)
    ctx.ensure_object(dict)
    ctx.obj.update(corpus_path=corpus_path, storage_dir=storage_dir)


@main.command()
@click.pass_context
@report_errors
def books(ctx: click.Context) -> None:
    """List the books of the corpus."""
    app = get_app(ctx)

    table = Table(title=f"{app.corpus.name} Books")
    table.add_column("Book", style="cyan")
    table.add_column("Chapters", style="green", justify="right")
    for name in app.corpus.list_books():
        table.add_row(name, str(app.corpus.chapter_count(name)))
    console.print(table)


@main.command()
@click.argument("reference")
@click.pass_context
@run_async
async def read(ctx: click.Context, reference: str) -> None:
    """Read a chapter ("John 3") or a verse ("John 3:16")."""
    from bible_companion.models import VerseReference, parse_reference

    app = get_app(ctx)
    try:
        ref = parse_reference(reference)
    except ValueError as e:
        raise click.BadParameter(str(e)) from None

    if isinstance(ref, VerseReference):
        view = await app.open_verse(ref)
        if not view:
            console.print(f"[red]Not found:[/red] {escape(reference)}")
            ctx.exit(1)
        marker = " [yellow]*[/yellow]" if view.is_bookmarked else ""
        console.print(f"[bold]{escape(ref.format())}[/bold]{marker}")
        console.print(escape(view.text))
        if view.annotations.highlight:
            console.print(f"[dim]Highlight: {view.annotations.highlight.color_id}[/dim]")
        for note in view.annotations.notes:
            console.print(f"  [cyan]{escape(note.title)}[/cyan]: {escape(note.content)}")
        return

    chapter = await app.open_chapter(ref.book, ref.chapter)
    if not chapter:
        console.print(f"[red]Not found:[/red] {escape(reference)}")
        ctx.exit(1)

    console.print(f"[bold]{escape(ref.format())}[/bold]\n")
    for view in chapter.verses:
        marker = "*" if view.is_bookmarked else " "
        color = f" [dim]({view.annotations.highlight.color_id})[/dim]" if view.annotations.highlight else ""
        console.print(f"{marker}[dim]{view.reference.verse:>3}[/dim] {escape(view.text)}{color}")
    for note in chapter.chapter_notes:
        console.print(f"\n[cyan]Note:[/cyan] {escape(note.title)}")

    prev_ch = app.corpus.prev_chapter(ref.book, ref.chapter)
    next_ch = app.corpus.next_chapter(ref.book, ref.chapter)
    console.print(f"\n[dim]Prev: {escape(prev_ch.format())} | Next: {escape(next_ch.format())}[/dim]")


@main.command()
@click.pass_context
@report_errors
def today(ctx: click.Context) -> None:
    """Show the verse of the day."""
    from bible_companion.corpus import daily_verse

    app = get_app(ctx)
    ref, text = daily_verse(app.corpus)
    console.print(f"[bold]{escape(ref.format())}[/bold]")
    console.print(escape(text))


# ============================================================================
# Note Commands
# ============================================================================

@main.group()
def note() -> None:
    """Note commands."""
    pass


def print_notes(notes) -> None:
    """Print notes as a table, most recently updated first."""
    if not notes:
        console.print("[yellow]No notes found[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim")
    table.add_column("Reference", style="cyan")
    table.add_column("Title")
    table.add_column("Tags", style="green")
    for n in sorted(notes, key=lambda n: n.updated_at, reverse=True):
        where = f"{n.book_name} {n.chapter}" + (f":{n.verse}" if n.verse else "")
        table.add_row(n.id, escape(where), escape(n.title), escape(", ".join(n.tags or [])))
    console.print(table)


@note.command(name="add")
@click.option("--title", "-t", required=True)
@click.option("--content", "-c", required=True)
@click.option("--book", "-b", default="General")
@click.option("--chapter", type=click.IntRange(min=1), default=1)
@click.option("--verse", type=click.IntRange(min=1), help="Omit for a chapter note")
@click.option("--tags", help="Comma-separated tags")
@click.pass_context
@run_async
async def note_add(ctx, title, content, book, chapter, verse, tags) -> None:
    """Add a note."""
    from bible_companion.models import NoteDraft

    if not title.strip() or not content.strip():
        console.print("[red]Please fill in title and content[/red]")
        ctx.exit(1)

    app = get_app(ctx)
    created = await app.store.create_note(
        NoteDraft(title=title, content=content, book_name=book, chapter=chapter, verse=verse, tags=tags)
    )
    console.print(f"[green]OK[/green] Saved note {created.id}")


@note.command(name="list")
@click.option("--book", "-b")
@click.option("--chapter", type=click.IntRange(min=1))
@click.option("--verse", type=click.IntRange(min=1))
@click.pass_context
@run_async
async def note_list(ctx, book, chapter, verse) -> None:
    """List notes, optionally for one chapter or verse."""
    app = get_app(ctx)
    if book and chapter:
        notes = await app.store.query_notes(book, chapter, verse)
    else:
        notes = await app.store.list_notes()
    print_notes(notes)


@note.command(name="search")
@click.argument("query")
@click.pass_context
@run_async
async def note_search(ctx, query) -> None:
    """Search notes by title, content or tag."""
    app = get_app(ctx)
    print_notes(await app.store.search_notes(query))


@note.command(name="edit")
@click.argument("note_id")
@click.option("--title", "-t")
@click.option("--content", "-c")
@click.option("--book", "-b")
@click.option("--chapter", type=click.IntRange(min=1))
@click.option("--verse", type=click.IntRange(min=1))
@click.option("--tags", help="Comma-separated tags")
@click.pass_context
@run_async
async def note_edit(ctx, note_id, title, content, book, chapter, verse, tags) -> None:
    """Edit fields of a note."""
    from bible_companion.models.annotations import parse_tags

    changes = {
        "title": title,
        "content": content,
        "book_name": book,
        "chapter": chapter,
        "verse": verse,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if tags is not None:
        changes["tags"] = parse_tags(tags)

    app = get_app(ctx)
    updated = await app.store.update_note(note_id, changes)
    if not updated:
        console.print(f"[yellow]No note with id {escape(note_id)}[/yellow]")
        ctx.exit(1)
    console.print(f"[green]OK[/green] Updated note {updated.id}")


@note.command(name="delete")
@click.argument("note_id")
@click.pass_context
@run_async
async def note_delete(ctx, note_id) -> None:
    """Delete a note."""
    app = get_app(ctx)
    if await app.store.delete_note(note_id):
        console.print(f"[green]OK[/green] Deleted note {escape(note_id)}")
    else:
        console.print(f"[yellow]No note with id {escape(note_id)}[/yellow]")


# ============================================================================
# Bookmark Commands
# ============================================================================

@main.group()
def bookmark() -> None:
    """Bookmark commands."""
    pass


@bookmark.command(name="toggle")
@click.argument("reference")
@click.option("--title", "-t")
@click.pass_context
@run_async
async def bookmark_toggle(ctx, reference, title) -> None:
    """Bookmark a verse, or remove its bookmark."""
    ref = parse_ref(reference)
    app = get_app(ctx)
    if not app.corpus.has_reference(ref):
        console.print(f"[red]Not found:[/red] {escape(reference)}")
        ctx.exit(1)

    added = await app.toggle_bookmark(ref, title=title)
    if added:
        console.print(f"[green]OK[/green] Bookmarked {escape(ref.format())}")
    else:
        console.print(f"[green]OK[/green] Removed bookmark on {escape(ref.format())}")


@bookmark.command(name="list")
@click.pass_context
@run_async
async def bookmark_list(ctx) -> None:
    """List bookmarks."""
    app = get_app(ctx)
    bookmarks = await app.store.list_bookmarks()
    if not bookmarks:
        console.print("[yellow]No bookmarks yet[/yellow]")
        return

    table = Table()
    table.add_column("Reference", style="cyan")
    table.add_column("Title")
    table.add_column("Created", style="dim")
    for b in bookmarks:
        table.add_row(escape(b.reference.format()), escape(b.title or ""), b.created_at.strftime("%Y-%m-%d"))
    console.print(table)


# ============================================================================
# Highlight Commands
# ============================================================================

@main.group()
def highlight() -> None:
    """Highlight commands."""
    pass


@highlight.command(name="set")
@click.argument("reference")
@click.argument("color")
@click.pass_context
@run_async
async def highlight_set(ctx, reference, color) -> None:
    """Highlight a verse with a palette color."""
    ref = parse_ref(reference)
    app = get_app(ctx)
    await app.start()
    await app.store.set_highlight(ref.book, ref.chapter, ref.verse, color)
    console.print(f"[green]OK[/green] Highlighted {escape(ref.format())} ({escape(color)})")


@highlight.command(name="remove")
@click.argument("reference")
@click.pass_context
@run_async
async def highlight_remove(ctx, reference) -> None:
    """Remove the highlight on a verse."""
    ref = parse_ref(reference)
    app = get_app(ctx)
    if await app.store.remove_highlight(ref.book, ref.chapter, ref.verse):
        console.print(f"[green]OK[/green] Removed highlight on {escape(ref.format())}")
    else:
        console.print(f"[yellow]{escape(ref.format())} is not highlighted[/yellow]")


@highlight.command(name="colors")
@click.pass_context
@run_async
async def highlight_colors(ctx) -> None:
    """Show the highlight palette."""
    app = get_app(ctx)
    await app.start()

    table = Table(title="Highlight Colors")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Color")
    for c in await app.store.get_highlight_colors():
        table.add_row(c.id, c.name, c.color)
    console.print(table)


# ============================================================================
# Chat
# ============================================================================

@main.command()
@click.argument("prompt", required=False)
@click.option("--about", "-a", help="Ask about a verse, e.g. \"John 3:16\"")
@click.pass_context
@run_async
async def ask(ctx, prompt, about) -> None:
    """Ask the assistant a question."""
    from bible_companion.models import ChatRoute

    app = get_app(ctx)
    if about:
        ref = parse_ref(about)
        text = app.corpus.resolve_verse_text(ref)
        if text is None:
            console.print(f"[red]Not found:[/red] {escape(about)}")
            ctx.exit(1)
        app.chat.prefill(ChatRoute.ask_about(ref, text).initial_prompt)

    if not prompt and not app.chat.input:
        console.print("[red]Nothing to ask[/red]")
        ctx.exit(1)

    with console.status("Asking the assistant..."):
        reply = await app.chat.send(prompt)

    if reply:
        console.print(escape(reply.content))


if __name__ == "__main__":
    main()
