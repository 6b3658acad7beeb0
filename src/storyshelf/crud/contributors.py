"""Contributor records and story credit links"""

from uuid import UUID

from sqlmodel import Session, select

from storyshelf.crud.models import Contributor, StoryContributor


AUTHOR_ROLE = "author"


def ensure_contributor(session: Session, name: str) -> Contributor:
    """Return the Contributor with this exact name, creating it if needed."""
    contributor = session.exec(select(Contributor).where(Contributor.name == name)).one_or_none()
    if contributor is None:
        contributor = Contributor(name=name)
        session.add(contributor)
        session.flush()
    return contributor


def link_contributor(session: Session, story_id: UUID, name: str, role: str = AUTHOR_ROLE) -> StoryContributor:
    """Ensure a (story, contributor, role) credit exists. Flushes but does not commit."""
    contributor = ensure_contributor(session, name)
    link = session.get(StoryContributor, (story_id, contributor.id, role))
    if link is None:
        link = StoryContributor(story_id=story_id, contributor_id=contributor.id, role=role)
        session.add(link)
        session.flush()
    return link


def list_contributors(session: Session, story_id: UUID) -> list[tuple[str, str]]:
    """Return (name, role) pairs credited on a story, sorted by role then name."""
    rows = session.exec(
        select(Contributor.name, StoryContributor.role)
        .join(StoryContributor, StoryContributor.contributor_id == Contributor.id)
        .where(StoryContributor.story_id == story_id)
        .order_by(StoryContributor.role, Contributor.name)
    ).all()
    return [(name, role) for name, role in rows]
