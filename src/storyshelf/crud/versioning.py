"""Story version persistence: hash lookup, numbering, immutable inserts, sections and segments"""

import logging
from uuid import UUID

from sqlalchemy import func
from sqlmodel import Session, select

from storyshelf.core.extract.sections import plan_sections
from storyshelf.core.models import NormalizedManuscript, Segment
from storyshelf.crud.models import StorySection, StorySegment, StoryVersion


logger = logging.getLogger(__name__)


def find_by_hash(session: Session, story_id: UUID, content_hash: str) -> StoryVersion | None:
    """Return the story's version with this content hash, or None."""
    return session.exec(
        select(StoryVersion)
        .where(StoryVersion.story_id == story_id)
        .where(StoryVersion.content_hash == content_hash)
    ).first()


def next_version_num(session: Session, story_id: UUID) -> int:
    """MAX(version)+1 for this story; 1 for a story with no versions.

    Racy on its own: concurrent writers can compute the same number, and the
    (story_id, version) unique constraint rejects the loser at flush/commit.
    """
    result = session.exec(
        select(func.max(StoryVersion.version)).where(StoryVersion.story_id == story_id)
    ).one()
    return (result or 0) + 1


def get_version_for_story(session: Session, story_id: UUID, version_id: UUID) -> StoryVersion | None:
    """Return the version only if it belongs to story_id."""
    return session.exec(
        select(StoryVersion)
        .where(StoryVersion.id == version_id)
        .where(StoryVersion.story_id == story_id)
    ).one_or_none()


def list_versions(session: Session, story_id: UUID) -> list[StoryVersion]:
    """Return all versions for a story ordered by version ascending."""
    return list(
        session.exec(
            select(StoryVersion)
            .where(StoryVersion.story_id == story_id)
            .order_by(StoryVersion.version.asc())
        ).all()
    )


def _write_segments(session: Session, version_id: UUID, segments: list[Segment]) -> list[StorySection]:
    """Insert sections from chapter inference, then segments assigned by the same pass."""
    plans, assignment = plan_sections(segments)

    sections = []
    for plan in plans:
        section = StorySection(
            story_version_id=version_id, kind=plan.kind.value, title=plan.title, ordinal=plan.ordinal,
        )
        session.add(section)
        sections.append(section)
    session.flush()
    section_ids = {s.ordinal: s.id for s in sections}

    for seg in segments:
        section_ordinal = assignment.get(seg.ordinal)
        session.add(StorySegment(
            story_version_id=version_id,
            section_id=section_ids[section_ordinal] if section_ordinal is not None else None,
            ordinal=seg.ordinal,
            locator=seg.locator.model_dump(),
            markdown=seg.markdown,
            rendered_html=seg.rendered_html,
            word_count=seg.word_count,
        ))
    session.flush()

    logger.debug("Version %s: %d sections, %d segments", version_id, len(sections), len(segments))
    return sections


def create_version(session: Session, story_id: UUID, doc: NormalizedManuscript) -> StoryVersion:
    """Insert a new immutable StoryVersion numbered MAX+1, with its sections and segments.

    Flushes but does not commit; caller controls the transaction.
    """
    version = StoryVersion(
        story_id=story_id,
        version=next_version_num(session, story_id),
        frontmatter=dict(doc.frontmatter),
        markdown=doc.markdown,
        rendered_html=doc.rendered_html,
        content_hash=doc.content_hash,
    )
    session.add(version)
    session.flush()

    _write_segments(session, version.id, doc.segments)
    return version


def version_segments(session: Session, version_id: UUID) -> list[StorySegment]:
    """Return a version's segments in reading order."""
    return list(session.exec(
        select(StorySegment)
        .where(StorySegment.story_version_id == version_id)
        .order_by(StorySegment.ordinal.asc())
    ).all())


def version_sections(session: Session, version_id: UUID) -> list[StorySection]:
    """Return a version's sections in ordinal order."""
    return list(session.exec(
        select(StorySection)
        .where(StorySection.story_version_id == version_id)
        .order_by(StorySection.ordinal.asc())
    ).all())
