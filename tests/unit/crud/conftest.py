"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from storyshelf.core.ingest import ingest
from storyshelf.core.models import ManuscriptInput
from storyshelf.crud.stories import upsert_story


FOX_MD = "# The Fox\n\nOnce upon a time.\n\nThe end.\n"


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="doc")
def doc_fixture():
    """A normalized manuscript ready for storage."""
    return ingest(ManuscriptInput(slug="fox", title="The Fox", author="Aesop", markdown=FOX_MD))


@pytest.fixture(name="story")
def story_fixture(session, doc):
    """The fox story persisted to the session."""
    story, _ = upsert_story(session, "acct", doc)
    return story
