"""Database table definitions for stories, immutable versions, sections, segments, and contributors"""

from datetime import datetime
from typing import Optional, Dict, Any
from uuid import UUID, uuid4

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, ForeignKey, JSON, Text, String, UniqueConstraint, Uuid


class Story(SQLModel, table=True):
    """Stable story identity per account, with draft and published version pointers"""
    __tablename__ = "stories"
    __table_args__ = (UniqueConstraint("account_id", "slug", name="uq_stories_account_slug"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    account_id: str = Field(..., index=True, nullable=False)
    slug: str = Field(..., index=True, nullable=False)
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    author: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    language: str = Field(default="en-GB", nullable=False)
    source: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    rights: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    is_published: bool = Field(default=False, nullable=False)
    draft_version_id: Optional[UUID] = Field(default=None, sa_column=Column(
        Uuid, ForeignKey("story_versions.id", use_alter=True, name="fk_stories_draft_version", ondelete="SET NULL"),
        nullable=True, index=True,
    ))
    published_version_id: Optional[UUID] = Field(default=None, sa_column=Column(
        Uuid, ForeignKey("story_versions.id", use_alter=True, name="fk_stories_published_version", ondelete="SET NULL"),
        nullable=True, index=True,
    ))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class StoryVersion(SQLModel, table=True):
    """Immutable snapshot of one distinct body of content for a story."""
    __tablename__ = "story_versions"
    __table_args__ = (
        UniqueConstraint("story_id", "version", name="uq_storyver_story_num"),
        UniqueConstraint("story_id", "content_hash", name="uq_storyver_story_hash"),
    )
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    story_id: UUID = Field(..., foreign_key="stories.id", index=True, nullable=False)
    version: int = Field(..., nullable=False, description="Gapless per-story version number starting at 1")
    frontmatter: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    markdown: str = Field(..., sa_column=Column(Text, nullable=False))
    rendered_html: str = Field(..., sa_column=Column(Text, nullable=False))
    content_hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class StorySection(SQLModel, table=True):
    """Chapter or implicit section grouping consecutive segments of one version"""
    __tablename__ = "story_sections"
    __table_args__ = (UniqueConstraint("story_version_id", "ordinal", name="uq_sections_version_ordinal"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    story_version_id: UUID = Field(..., foreign_key="story_versions.id", index=True, nullable=False)
    kind: str = Field(..., nullable=False, description="section | chapter")
    title: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    ordinal: int = Field(..., nullable=False, description="1..N within the version")
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class StorySegment(SQLModel, table=True):
    """Reader-navigable chunk in reading order across the whole version"""
    __tablename__ = "story_segments"
    __table_args__ = (UniqueConstraint("story_version_id", "ordinal", name="uq_segments_version_ordinal"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    story_version_id: UUID = Field(..., foreign_key="story_versions.id", index=True, nullable=False)
    section_id: Optional[UUID] = Field(default=None, foreign_key="story_sections.id", index=True, nullable=True)
    ordinal: int = Field(..., nullable=False)
    locator: Dict[str, Any] = Field(..., sa_column=Column(JSON, nullable=False))
    markdown: str = Field(..., sa_column=Column(Text, nullable=False))
    rendered_html: str = Field(..., sa_column=Column(Text, nullable=False))
    word_count: int = Field(default=0, nullable=False)
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class Contributor(SQLModel, table=True):
    """A named person credited on stories; name is the dedup key"""
    __tablename__ = "contributors"
    __table_args__ = (UniqueConstraint("name", name="uq_contributors_name"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(..., sa_column=Column(Text, nullable=False))
    sort_name: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))


class StoryContributor(SQLModel, table=True):
    """Many-to-many link between stories and contributors, qualified by role"""
    __tablename__ = "story_contributors"
    story_id: UUID = Field(foreign_key="stories.id", primary_key=True)
    contributor_id: UUID = Field(foreign_key="contributors.id", primary_key=True)
    role: str = Field(primary_key=True, description="author | translator | editor | illustrator")
