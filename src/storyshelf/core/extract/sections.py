"""Chapter inference: group a version's segments into ordered sections"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from storyshelf.core.models import HeadingLocator, Segment


CHAPTER_LEVEL = 2
TITLE_LEVEL = 1


class SectionKind(str, Enum):
    section = "section"
    chapter = "chapter"


@dataclass
class SectionPlan:
    """A section to persist and the segment ordinals it owns."""
    ordinal:  int
    kind:     SectionKind
    title:    Optional[str] = None
    segments: list[int] = field(default_factory=list)


def _heading_text(markdown: str) -> str:
    return markdown.strip().lstrip('#').strip()


def plan_sections(segments: list[Segment]) -> tuple[list[SectionPlan], dict[int, Optional[int]]]:
    """Infer sections from h2 headings.

    Every h2 starts a chapter titled from its text ("Chapter N" when blank);
    h1 headings stay outside any chapter, as does anything before the first h2.
    Without any h2 the whole version is one untitled section.

    Returns (sections, assignment) where assignment maps each segment ordinal
    to its section ordinal, or None when unsectioned.
    """
    chapter_starts = [
        s for s in segments
        if isinstance(s.locator, HeadingLocator) and s.locator.h == CHAPTER_LEVEL
    ]
    if not chapter_starts:
        only = SectionPlan(ordinal=1, kind=SectionKind.section, segments=[s.ordinal for s in segments])
        return [only], {s.ordinal: 1 for s in segments}

    sections: list[SectionPlan] = []
    assignment: dict[int, Optional[int]] = {}
    current: Optional[SectionPlan] = None

    for seg in segments:
        loc = seg.locator
        if isinstance(loc, HeadingLocator) and loc.h == TITLE_LEVEL:
            assignment[seg.ordinal] = None
            continue
        if isinstance(loc, HeadingLocator) and loc.h == CHAPTER_LEVEL:
            ordinal = len(sections) + 1
            current = SectionPlan(
                ordinal=ordinal,
                kind=SectionKind.chapter,
                title=_heading_text(seg.markdown) or f"Chapter {ordinal}",
            )
            sections.append(current)
        if current is None:
            assignment[seg.ordinal] = None
        else:
            current.segments.append(seg.ordinal)
            assignment[seg.ordinal] = current.ordinal

    return sections, assignment
