"""Story identity persistence: account-scoped upsert, lookup, pointer updates, listings"""

import logging
from datetime import datetime
from uuid import UUID

from sqlmodel import Session, select

from storyshelf.core.models import NormalizedManuscript
from storyshelf.crud.models import Story, StoryVersion


logger = logging.getLogger(__name__)

ADMIN_LIST_LIMIT = 200
LIBRARY_LIMIT = 100


def get_story(session: Session, account_id: str, slug: str) -> Story | None:
    """Return the account's Story with the given slug, or None if not found."""
    return session.exec(
        select(Story).where(Story.account_id == account_id).where(Story.slug == slug)
    ).one_or_none()


def upsert_story(session: Session, account_id: str, doc: NormalizedManuscript) -> tuple[Story, bool]:
    """Insert the story for (account_id, slug) or update its cached metadata in place.

    Returns (story, created). Flushes but does not commit; caller controls the transaction.
    """
    story = get_story(session, account_id, doc.slug)
    created = story is None
    if created:
        story = Story(account_id=account_id, slug=doc.slug, title=doc.title)

    story.title = doc.title
    story.author = doc.author or None
    story.language = doc.language
    story.source = dict(doc.source)
    story.rights = dict(doc.rights)
    story.updated_at = datetime.now()
    session.add(story)
    session.flush()

    if created:
        logger.info("Created story %s for account %s", doc.slug, account_id)
    return story, created


def set_draft(session: Session, story: Story, version_id: UUID) -> Story:
    """Point the draft at version_id; the published pointer is untouched."""
    story.draft_version_id = version_id
    story.updated_at = datetime.now()
    session.add(story)
    session.flush()
    return story


def set_published(session: Session, story: Story, version_id: UUID) -> Story:
    """Point the published pointer at version_id and mark the story published."""
    story.published_version_id = version_id
    story.is_published = True
    story.updated_at = datetime.now()
    session.add(story)
    session.flush()
    return story


def list_stories(session: Session, account_id: str, limit: int = ADMIN_LIST_LIMIT) -> list[Story]:
    """All of an account's stories, most recently updated first."""
    return list(session.exec(
        select(Story)
        .where(Story.account_id == account_id)
        .order_by(Story.updated_at.desc())
        .limit(limit)
    ).all())


def library(session: Session, account_id: str, limit: int = LIBRARY_LIMIT) -> list[Story]:
    """Stories with a published version, most recently updated first."""
    return list(session.exec(
        select(Story)
        .where(Story.account_id == account_id)
        .where(Story.published_version_id.is_not(None))
        .order_by(Story.updated_at.desc(), Story.created_at.desc())
        .limit(limit)
    ).all())


def pointed_version(session: Session, story: Story, which: str) -> StoryVersion | None:
    """Resolve the 'draft' or 'published' pointer to its StoryVersion, or None if unset."""
    version_id = story.draft_version_id if which == "draft" else story.published_version_id
    if version_id is None:
        return None
    return session.get(StoryVersion, version_id)
