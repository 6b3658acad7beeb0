"""Intermediate data models for the ingest pipeline and store results"""

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field


class HeadingLocator(BaseModel):
    """Heading segment: level and 0-based running heading index."""
    type: Literal["heading"] = "heading"
    h: int
    index: int


class ParagraphLocator(BaseModel):
    """Paragraph segment: 1-based running paragraph number."""
    type: Literal["para"] = "para"
    n: int


class BlockLocator(BaseModel):
    """Any other block that carries visible text (lists, code, quotes, tables, html)."""
    type: Literal["block"] = "block"
    kind: str


Locator = Annotated[Union[HeadingLocator, ParagraphLocator, BlockLocator], Field(discriminator="type")]


class Segment(BaseModel):
    """One reader-navigable chunk of a story version."""
    ordinal:       int              # 1-based, dense within a version
    locator:       Locator
    markdown:      str
    rendered_html: str
    word_count:    int = 0


class Frontmatter(BaseModel):
    """Parsed frontmatter: recognised keys promoted, everything else kept opaque in order."""
    title:      Optional[str] = None
    author:     Optional[str] = None
    language:   Optional[str] = None
    source_url: Optional[str] = None
    extra:      dict[str, Any] = {}


class ManuscriptInput(BaseModel):
    """Caller-supplied manuscript; blank fields fall back to frontmatter."""
    slug:       str
    title:      str = ""
    author:     str = ""
    markdown:   str
    language:   str = ""
    source_url: str = ""
    rights:     Optional[dict[str, Any]] = None


class NormalizedManuscript(BaseModel):
    """Output of ingest(): everything the version store needs, no I/O performed."""
    slug:          str
    title:         str
    author:        str
    language:      str
    source:        dict[str, Any] = {}
    rights:        dict[str, Any] = {}
    frontmatter:   dict[str, Any] = {}
    markdown:      str              # body with frontmatter stripped
    rendered_html: str
    content_hash:  str              # sha256 of markdown; the dedup key
    segments:      list[Segment]


class PreviewResult(BaseModel):
    rendered_html: str
    segments:      list[Segment]


class DraftResult(BaseModel):
    story_id:      UUID
    version_id:    UUID
    slug:          str
    version:       int
    segment_count: int
    rendered_html: str
    created:       bool             # False when the content hash matched an existing version


class StorySummary(BaseModel):
    slug:                 str
    title:                str
    author:               Optional[str] = None
    language:             str
    is_published:         bool
    created_at:           datetime
    updated_at:           datetime
    draft_version_id:     Optional[UUID] = None
    published_version_id: Optional[UUID] = None


class StoryPayload(BaseModel):
    slug:          str
    title:         str
    author:        Optional[str] = None
    version_id:    UUID
    version:       int
    rendered_html: str


class SegmentView(BaseModel):
    ordinal:       int
    locator:       dict[str, Any]
    rendered_html: str


class StorySegmentsPayload(BaseModel):
    slug:     str
    version:  int
    segments: list[SegmentView]


class VersionInfo(BaseModel):
    version_id:   UUID
    version:      int
    content_hash: str
    created_at:   datetime
    is_draft:     bool = False
    is_published: bool = False
