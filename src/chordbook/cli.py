import functools
import logging
import re
import sys
from pathlib import Path
from typing import TextIO

import click

from . import views
from .annotation import RenderMode, format_text, render_content
from .chordpro import ChordProFormatter
from .exceptions import ChordbookError, NotFoundError, StoreError
from .markup import render_html, render_sheet_page
from .models import SheetWithAuthor, User
from .registry import DEFAULT_STORE_PATH, get_store
from .service import ChordSheetService
from .stores.memory import StaticAuth

NOT_FOUND_MESSAGE = "Chord sheet not found or not accessible."


def _slugify(text: str) -> str:
    """Convert a string to a lowercase hyphenated slug suitable for filenames."""
    text = text.lower()
    text = re.sub(r"[^\w\s-]", "", text)   # drop punctuation
    text = re.sub(r"[\s_]+", "-", text)     # spaces/underscores → hyphens
    text = re.sub(r"-{2,}", "-", text)      # collapse multiple hyphens
    return text.strip("-")


def _default_filename(artist: str, title: str) -> str:
    return f"{_slugify(artist)}-{_slugify(title)}.cho"


def _handle_errors(func):
    """Turn chordbook errors into an ``Error:`` line and exit status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StoreError as exc:
            msg = f"Error: Storage backend request failed: {exc.url}"
            if exc.status_code:
                msg += f" (HTTP {exc.status_code})"
            if exc.status_code in (401, 403):
                msg += "; check --token"
            click.echo(msg, err=True)
            sys.exit(1)
        except ChordbookError as exc:
            click.echo(f"Error: {exc}", err=True)
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# Group
# ---------------------------------------------------------------------------


@click.group()
@click.option("--store", "store_path", default=DEFAULT_STORE_PATH, show_default=True,
              envvar="CHORDBOOK_STORE", metavar="PATH",
              help="Local JSON file holding the chord sheets.")
@click.option("--backend-url", default=None, envvar="CHORDBOOK_BACKEND_URL", metavar="URL",
              help="Use a hosted backend instead of the local file.")
@click.option("--token", default=None, envvar="CHORDBOOK_TOKEN",
              help="Bearer token for the hosted backend.")
@click.option("--user", "user_id", default=None, envvar="CHORDBOOK_USER", metavar="ID",
              help="Act as this user (anonymous when omitted).")
@click.option("--name", "user_name", default=None, envvar="CHORDBOOK_NAME",
              help="Display name recorded for --user.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output.")
@click.pass_context
def cli(
    ctx: click.Context,
    store_path: str,
    backend_url: str | None,
    token: str | None,
    user_id: str | None,
    user_name: str | None,
    verbose: bool,
) -> None:
    """Share and browse song chord sheets.

    \b
    Chords go inline, in front of the lyric they belong to:
      [C]Twinkle, twinkle, [F]little [C]star
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)

    ctx.ensure_object(dict)
    ctx.obj["store_path"] = store_path
    ctx.obj["backend_url"] = backend_url
    ctx.obj["token"] = token
    ctx.obj["user_id"] = user_id
    ctx.obj["user_name"] = user_name


def get_service(ctx: click.Context) -> ChordSheetService:
    """Get or create the service for this invocation."""
    if "service" not in ctx.obj:
        store = get_store(ctx.obj["store_path"], ctx.obj["backend_url"], ctx.obj["token"])
        user_id = ctx.obj["user_id"]
        user_name = ctx.obj["user_name"]

        # Local stores keep a user directory; remote ones resolve names themselves
        users = store.users if hasattr(store, "users") else {}
        if user_id and user_name:
            user = User(id=user_id, name=user_name)
            if hasattr(store, "save_user"):
                store.save_user(user)
            else:
                users[user_id] = user

        ctx.obj["service"] = ChordSheetService(store, StaticAuth(user_id, users))
    return ctx.obj["service"]


# ---------------------------------------------------------------------------
# Browsing
# ---------------------------------------------------------------------------


def _format_item(item: SheetWithAuthor, mine: bool = False) -> str:
    sheet = item.sheet
    line = f"{sheet.id}  {sheet.title} by {sheet.artist}"
    author = "You" if mine else item.author_name
    line += f"  ({author}, {sheet.created_at.date().isoformat()}"
    if mine:
        line += ", Public" if sheet.is_public else ", Private"
    line += ")"
    if sheet.tags:
        shown = ", ".join(sheet.tags[:3])
        if len(sheet.tags) > 3:
            shown += f" +{len(sheet.tags) - 3} more"
        line += f"  [{shown}]"
    return line


def _echo_list(state: views.ViewState, items: list[SheetWithAuthor]) -> None:
    if not items:
        click.echo(views.empty_message(state))
        return
    mine = views.list_source(state) is views.ListSource.MINE
    click.echo(views.list_heading(state))
    click.echo(f"{len(items)} sheet{'s' if len(items) != 1 else ''}")
    for item in items:
        click.echo(_format_item(item, mine=mine))


@cli.command(name="list")
@click.option("--limit", type=click.IntRange(min=1), default=20, show_default=True,
              help="Maximum number of sheets.")
@click.pass_context
@_handle_errors
def list_command(ctx: click.Context, limit: int) -> None:
    """List the latest public chord sheets."""
    _echo_list(views.ViewState(), get_service(ctx).list(limit=limit))


@cli.command()
@click.argument("query")
@click.option("--limit", type=click.IntRange(min=1), default=20, show_default=True,
              help="Maximum number of sheets.")
@click.pass_context
@_handle_errors
def search(ctx: click.Context, query: str, limit: int) -> None:
    """Search public chord sheets by title."""
    state = views.search(views.ViewState(), query)
    _echo_list(state, get_service(ctx).search(query, limit=limit))


@cli.command()
@click.pass_context
@_handle_errors
def mine(ctx: click.Context) -> None:
    """List your own chord sheets, public and private."""
    state = views.show_my_sheets(views.ViewState())
    if views.resolve(state, logged_in=ctx.obj["user_id"] is not None) is views.View.LOGIN:
        click.echo("Error: Log in with --user to see your chord sheets.", err=True)
        sys.exit(1)
    _echo_list(state, get_service(ctx).my_chord_sheets())


@cli.command()
@click.argument("sheet_id")
@click.option("--preview", is_flag=True, default=False, help="Use the compact editor preview layout.")
@click.option("--html", "as_html", is_flag=True, default=False, help="Render a standalone HTML page.")
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Write to PATH instead of stdout.")
@click.pass_context
@_handle_errors
def show(ctx: click.Context, sheet_id: str, preview: bool, as_html: bool, output_path: str | None) -> None:
    """Show a chord sheet with chords above the lyrics."""
    item = get_service(ctx).get_by_id(sheet_id)
    if item is None:
        click.echo(NOT_FOUND_MESSAGE, err=True)
        sys.exit(1)

    mode = RenderMode.PREVIEW if preview else RenderMode.READ_ONLY
    if as_html:
        text = render_sheet_page(item, mode)
    else:
        text = _sheet_header(item) + format_text(render_content(item.sheet.content, mode))

    if output_path:
        Path(output_path).write_text(text, encoding="utf-8")
        click.echo(f"Written to {output_path}")
    else:
        click.echo(text, nl=False)


def _sheet_header(item: SheetWithAuthor) -> str:
    sheet = item.sheet
    lines = [
        sheet.title,
        f"by {sheet.artist}",
        f"by {item.author_name} • {sheet.created_at.date().isoformat()}",
    ]
    if sheet.tags:
        lines.append("Tags: " + ", ".join(sheet.tags))
    return "\n".join(lines) + "\n\n"


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--title", required=True, help="Song title.")
@click.option("--artist", required=True, help="Artist name.")
@click.option("--content-file", type=click.File("r", encoding="utf-8"), default=None,
              metavar="PATH", help="Lyrics with inline [Chord] markers ('-' for stdin).")
@click.option("--tags", default=None, help='Comma-separated tags, e.g. "rock, acoustic".')
@click.option("--public/--private", "is_public", default=True, show_default=True,
              help="Visibility of the sheet.")
@click.pass_context
@_handle_errors
def create(
    ctx: click.Context,
    title: str,
    artist: str,
    content_file: TextIO | None,
    tags: str | None,
    is_public: bool,
) -> None:
    """Create a new chord sheet."""
    content = content_file.read() if content_file else ""
    sheet_id = get_service(ctx).create(title, artist, content, tags=tags, is_public=is_public)
    click.echo(f"Created {sheet_id}")


@cli.command()
@click.argument("sheet_id")
@click.option("--title", default=None, help="New song title.")
@click.option("--artist", default=None, help="New artist name.")
@click.option("--content-file", type=click.File("r", encoding="utf-8"), default=None,
              metavar="PATH", help="New content ('-' for stdin).")
@click.option("--tags", default=None, help="New comma-separated tags ('' clears them).")
@click.option("--public/--private", "is_public", default=None, help="New visibility.")
@click.pass_context
@_handle_errors
def update(
    ctx: click.Context,
    sheet_id: str,
    title: str | None,
    artist: str | None,
    content_file: TextIO | None,
    tags: str | None,
    is_public: bool | None,
) -> None:
    """Update one of your chord sheets.

    Options left out keep their stored value.
    """
    service = get_service(ctx)
    existing = service.get_by_id(sheet_id)
    if existing is None:
        raise NotFoundError(sheet_id)

    sheet = existing.sheet
    service.update(
        sheet_id,
        title=sheet.title if title is None else title,
        artist=sheet.artist if artist is None else artist,
        content=sheet.content if content_file is None else content_file.read(),
        tags=sheet.tags if tags is None else tags,
        is_public=sheet.is_public if is_public is None else is_public,
    )
    click.echo(f"Updated {sheet_id}")


@cli.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--html", "as_html", is_flag=True, default=False, help="Render an HTML fragment.")
def preview(source: TextIO, as_html: bool) -> None:
    """Preview chord text from SOURCE (default: stdin) without saving it."""
    layout = render_content(source.read(), RenderMode.PREVIEW)
    if as_html:
        click.echo(render_html(layout))
    else:
        click.echo(format_text(layout), nl=False)


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("sheet_id")
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Output file path (default: <artist>-<title>.cho)")
@click.option("--stdout", is_flag=True, default=False,
              help="Print to stdout instead of writing a file.")
@click.pass_context
@_handle_errors
def export(ctx: click.Context, sheet_id: str, output_path: str | None, stdout: bool) -> None:
    """Export a chord sheet to ChordPro format."""
    item = get_service(ctx).get_by_id(sheet_id)
    if item is None:
        click.echo(NOT_FOUND_MESSAGE, err=True)
        sys.exit(1)

    chordpro_text = ChordProFormatter().render(item.sheet)

    if stdout:
        click.echo(chordpro_text, nl=False)
        return

    sheet = item.sheet
    dest = Path(output_path) if output_path else Path(_default_filename(sheet.artist, sheet.title))
    dest.write_text(chordpro_text, encoding="utf-8")
    click.echo(f"Written to {dest}")
