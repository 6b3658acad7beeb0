"""Version store: transactional draft upsert, publish, preview, and pointer-resolved reads"""

import logging
from contextlib import contextmanager
from typing import Iterator
from uuid import UUID

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from storyshelf.config import Settings
from storyshelf.core.ingest import ingest, preview
from storyshelf.core.models import (
    DraftResult, ManuscriptInput, NormalizedManuscript, PreviewResult, SegmentView,
    StoryPayload, StorySegmentsPayload, StorySummary, VersionInfo,
)
from storyshelf.core.render import MarkdownRenderer
from storyshelf.crud.contributors import link_contributor
from storyshelf.crud.database import transaction
from storyshelf.crud.models import Story
from storyshelf.crud import stories, versioning
from storyshelf.errors import ConflictError, NotFoundError, StorageError, ValidationError


logger = logging.getLogger(__name__)

# Constraint names (PostgreSQL) and column lists (SQLite) that signal a lost race.
CONFLICT_MARKERS = (
    "uq_storyver_story_num",
    "uq_storyver_story_hash",
    "uq_stories_account_slug",
    "story_versions.story_id, story_versions.version",
    "story_versions.story_id, story_versions.content_hash",
    "stories.account_id, stories.slug",
    "uq_contributors_name",
    "story_contributors_pkey",
    "contributors.name",
    "story_contributors.story_id, story_contributors.contributor_id",
)


def _is_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig) if exc.orig is not None else str(exc)
    return any(marker in message for marker in CONFLICT_MARKERS)


def _required(value, field: str) -> str:
    value = str(value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required", field=field)
    return value


def _as_uuid(value, field: str) -> UUID:
    if isinstance(value, UUID):
        return value
    value = _required(value, field)
    try:
        return UUID(value)
    except ValueError as e:
        raise ValidationError(f"{field} is not a valid id", field=field) from e


def _summary(story: Story) -> StorySummary:
    return StorySummary(
        slug=story.slug,
        title=story.title,
        author=story.author,
        language=story.language,
        is_published=story.is_published,
        created_at=story.created_at,
        updated_at=story.updated_at,
        draft_version_id=story.draft_version_id,
        published_version_id=story.published_version_id,
    )


class VersionStore:
    """Owns the draft/publish lifecycle of stories on top of a transactional engine."""

    def __init__(self, engine: Engine, settings: Settings = None, renderer: MarkdownRenderer = None):
        self.engine = engine
        self.settings = settings or Settings()
        self.renderer = renderer or MarkdownRenderer(self.settings.parser_config)

    @contextmanager
    def _unit_of_work(self, operation: str) -> Iterator[Session]:
        """One transaction; constraint races become ConflictError, other storage faults StorageError."""
        try:
            with transaction(self.engine) as session:
                yield session
        except IntegrityError as e:
            if _is_conflict(e):
                logger.warning("%s lost a concurrent write race: %s", operation, e.orig)
                raise ConflictError(f"{operation}: concurrent write conflict") from e
            raise StorageError(f"{operation}: integrity error") from e
        except SQLAlchemyError as e:
            logger.error("%s failed: %s", operation, e)
            raise StorageError(f"{operation}: storage failure") from e

    # --- writes ---

    def ingest_and_upsert(self, account_id: str, manuscript: ManuscriptInput) -> DraftResult:
        """Normalize a raw manuscript and store it as the story's draft."""
        doc = ingest(manuscript, self.renderer, self.settings.default_language)
        return self.upsert_draft(account_id, doc)

    def upsert_draft(self, account_id: str, doc: NormalizedManuscript) -> DraftResult:
        """Store doc as the draft of (account_id, doc.slug).

        Content already stored for the story (same hash) is reused: the draft
        pointer moves to it and no version number is consumed. Otherwise a new
        version numbered MAX+1 is inserted with its sections and segments.
        The published pointer is never touched here.
        """
        account_id = _required(account_id, "account")
        strict = self.settings.contributor_linking == "strict"

        with self._unit_of_work("upsert draft") as session:
            story, _ = stories.upsert_story(session, account_id, doc)

            version = versioning.find_by_hash(session, story.id, doc.content_hash)
            created = version is None
            if created:
                version = versioning.create_version(session, story.id, doc)
            stories.set_draft(session, story, version.id)

            if strict and doc.author:
                link_contributor(session, story.id, doc.author)

            result = DraftResult(
                story_id=story.id,
                version_id=version.id,
                slug=doc.slug,
                version=version.version,
                segment_count=len(doc.segments),
                rendered_html=version.rendered_html,
                created=created,
            )

        if created:
            logger.info("Stored %s v%d (%d segments)", doc.slug, result.version, result.segment_count)
        else:
            logger.info("Content of %s matches v%d; draft re-pointed", doc.slug, result.version)

        if not strict and doc.author:
            self._link_best_effort(result.story_id, doc.author)
        return result

    def _link_best_effort(self, story_id: UUID, author: str) -> None:
        """Credit the author in a separate transaction; failures are logged, not raised."""
        try:
            with self._unit_of_work("link contributor") as session:
                link_contributor(session, story_id, author)
        except (ConflictError, StorageError):
            logger.warning("Could not link contributor %r to story %s", author, story_id, exc_info=True)

    def publish(self, account_id: str, slug: str, version_id) -> None:
        """Point the story's published pointer at version_id.

        Raises NotFoundError if the story does not exist or the version belongs
        to a different story. Publishing the already-published version is a no-op.
        """
        account_id = _required(account_id, "account")
        slug = _required(slug, "slug")
        if not isinstance(version_id, UUID):
            version_id = _required(version_id, "version_id")

        with self._unit_of_work("publish") as session:
            story = stories.get_story(session, account_id, slug)
            if story is None:
                raise NotFoundError(f"story '{slug}' not found", entity="story")
            version_uuid = _as_uuid(version_id, "version_id")
            version = versioning.get_version_for_story(session, story.id, version_uuid)
            if version is None:
                raise NotFoundError(f"version {version_uuid} does not belong to story '{slug}'", entity="version")
            stories.set_published(session, story, version.id)
            number = version.version

        logger.info("Published %s v%d", slug, number)

    # --- reads ---

    def preview(self, markdown: str) -> PreviewResult:
        """Normalize markdown without storing anything; same segments upsert_draft would persist."""
        return preview(markdown, self.renderer)

    def _require_story(self, session: Session, account_id: str, slug: str) -> Story:
        story = stories.get_story(session, _required(account_id, "account"), _required(slug, "slug"))
        if story is None:
            raise NotFoundError(f"story '{slug}' not found", entity="story")
        return story

    def _story_payload(self, account_id: str, slug: str, which: str) -> StoryPayload:
        with self._unit_of_work(f"read {which}") as session:
            story = self._require_story(session, account_id, slug)
            version = stories.pointed_version(session, story, which)
            if version is None:
                raise NotFoundError(f"story '{slug}' has no {which} version", entity="version")
            return StoryPayload(
                slug=story.slug,
                title=story.title,
                author=story.author,
                version_id=version.id,
                version=version.version,
                rendered_html=version.rendered_html,
            )

    def published_story(self, account_id: str, slug: str) -> StoryPayload:
        """What the reader shows: the version behind the published pointer."""
        return self._story_payload(account_id, slug, "published")

    def draft_story(self, account_id: str, slug: str) -> StoryPayload:
        """What the editor shows: the version behind the draft pointer."""
        return self._story_payload(account_id, slug, "draft")

    def published_segments(self, account_id: str, slug: str) -> StorySegmentsPayload:
        with self._unit_of_work("read segments") as session:
            story = self._require_story(session, account_id, slug)
            version = stories.pointed_version(session, story, "published")
            if version is None:
                raise NotFoundError(f"story '{slug}' has no published version", entity="version")
            return StorySegmentsPayload(
                slug=story.slug,
                version=version.version,
                segments=[
                    SegmentView(ordinal=s.ordinal, locator=s.locator, rendered_html=s.rendered_html)
                    for s in versioning.version_segments(session, version.id)
                ],
            )

    def list_stories(self, account_id: str) -> list[StorySummary]:
        with self._unit_of_work("list stories") as session:
            return [_summary(s) for s in stories.list_stories(session, _required(account_id, "account"))]

    def library(self, account_id: str) -> list[StorySummary]:
        with self._unit_of_work("library") as session:
            return [_summary(s) for s in stories.library(session, _required(account_id, "account"))]

    def list_versions(self, account_id: str, slug: str) -> list[VersionInfo]:
        with self._unit_of_work("list versions") as session:
            story = self._require_story(session, account_id, slug)
            return [
                VersionInfo(
                    version_id=v.id,
                    version=v.version,
                    content_hash=v.content_hash,
                    created_at=v.created_at,
                    is_draft=v.id == story.draft_version_id,
                    is_published=v.id == story.published_version_id,
                )
                for v in versioning.list_versions(session, story.id)
            ]
