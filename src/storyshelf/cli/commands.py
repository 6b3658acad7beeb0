"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import SQLModel

from storyshelf.config import Settings, load_config
from storyshelf.core.models import ManuscriptInput
from storyshelf.core.store import VersionStore
from storyshelf.core.utils.logs import configure_logging
from storyshelf.crud.database import init_db, make_engine
from storyshelf.errors import StoryshelfError


AccountOpt = Annotated[Optional[str], typer.Option("--account", help="Owner account (default: settings.default_account)")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings.log_level)
    return settings


def _store(settings: Settings) -> VersionStore:
    engine = make_engine(settings.db_url, timeout=settings.query_timeout)
    init_db(engine)
    return VersionStore(engine, settings)


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        _fail(f"Cannot read {path}", e)


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url, timeout=settings.query_timeout)
    if reset:
        SQLModel.metadata.drop_all(engine)
        typer.echo("Existing data cleared.")
    init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def ingest_cmd(
    path: Annotated[Path, typer.Argument(help="Markdown manuscript to ingest")],
    slug: Annotated[str, typer.Option("--slug", help="URL-safe story identifier, e.g. the-gruffalo")],
    title: Annotated[str, typer.Option("--title", help="Title; falls back to frontmatter")] = "",
    author: Annotated[str, typer.Option("--author", help="Author; falls back to frontmatter")] = "",
    language: Annotated[str, typer.Option("--language", help="Language tag; falls back to frontmatter")] = "",
    source_url: Annotated[str, typer.Option("--source-url", help="Where the text came from")] = "",
    account: AccountOpt = None,
    ):
    """Normalize a manuscript and store it as the story's draft."""
    settings = _settings()
    store = _store(settings)
    manuscript = ManuscriptInput(
        slug=slug, title=title, author=author, markdown=_read(path),
        language=language, source_url=source_url,
    )
    try:
        result = store.ingest_and_upsert(account or settings.default_account, manuscript)
    except StoryshelfError as e:
        _fail(e.user_message())

    status = "created" if result.created else "unchanged"
    typer.echo(f"  {status}: {result.slug} v{result.version} ({result.segment_count} segments)")
    typer.echo(f"story_id:   {result.story_id}")
    typer.echo(f"version_id: {result.version_id}")


def publish_cmd(
    slug: Annotated[str, typer.Argument(help="Story slug")],
    version_id: Annotated[str, typer.Argument(help="Version id to make live")],
    account: AccountOpt = None,
    ):
    """Point the story's published version at VERSION_ID."""
    settings = _settings()
    store = _store(settings)
    try:
        store.publish(account or settings.default_account, slug, version_id)
    except StoryshelfError as e:
        _fail(e.user_message())
    typer.echo(f"Published {slug} -> {version_id}")


def preview_cmd(
    path: Annotated[Path, typer.Argument(help="Markdown manuscript to preview")],
    ):
    """Show the segments a manuscript would be stored as, without storing anything."""
    settings = _settings()
    store = VersionStore(None, settings)
    try:
        result = store.preview(_read(path))
    except StoryshelfError as e:
        _fail(e.user_message())
    for seg in result.segments:
        typer.echo(f"  {seg.ordinal:>4}  {seg.locator.model_dump_json()}  words={seg.word_count}")
    typer.echo(f"{len(result.segments)} segment(s)")


def list_cmd(account: AccountOpt = None):
    """List the account's stories, most recently updated first."""
    settings = _settings()
    store = _store(settings)
    try:
        stories = store.list_stories(account or settings.default_account)
    except StoryshelfError as e:
        _fail(e.user_message())
    if not stories:
        typer.echo("No stories found in database.")
        raise typer.Exit(1)
    for s in stories:
        state = "published" if s.is_published else "draft"
        typer.echo(f"{s.slug}\t{state}\t{s.title}")


def show_cmd(
    slug: Annotated[str, typer.Argument(help="Story slug")],
    draft: Annotated[bool, typer.Option("--draft", help="Show the draft instead of the published version")] = False,
    account: AccountOpt = None,
    ):
    """Print the rendered HTML of the published (or draft) version."""
    settings = _settings()
    store = _store(settings)
    account_id = account or settings.default_account
    try:
        payload = store.draft_story(account_id, slug) if draft else store.published_story(account_id, slug)
    except StoryshelfError as e:
        _fail(e.user_message())
    typer.echo(f"<!-- {payload.slug} v{payload.version} -->")
    typer.echo(payload.rendered_html)


def versions_cmd(
    slug: Annotated[str, typer.Argument(help="Story slug")],
    account: AccountOpt = None,
    ):
    """List a story's versions, oldest first, marking the draft and published pointers."""
    settings = _settings()
    store = _store(settings)
    try:
        versions = store.list_versions(account or settings.default_account, slug)
    except StoryshelfError as e:
        _fail(e.user_message())
    for v in versions:
        marks = ",".join(m for m, on in (("draft", v.is_draft), ("published", v.is_published)) if on)
        typer.echo(f"v{v.version}\t{v.version_id}\t{v.content_hash[:12]}\t{marks}")
