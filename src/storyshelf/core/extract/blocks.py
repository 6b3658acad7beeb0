"""Top-level block walk producing ordered, individually rendered Segments"""

from storyshelf.core.models import BlockLocator, HeadingLocator, ParagraphLocator, Segment
from storyshelf.core.render import MarkdownRenderer
from storyshelf.core.utils.tokens import block_kind, heading_level, inline_text, top_level_blocks, visible_text
from storyshelf.errors import RenderError


def _source_slice(token, source_lines: list[str]) -> str:
    """Extract raw source for a block via token.map; fallback to token.content."""
    if token.map:
        start, end = token.map
        return ''.join(source_lines[start:end]).strip()
    return token.content.strip()


def word_count(text: str) -> int:
    return len(text.split())


def tokens_to_segments(tokens: list, source: str, renderer: MarkdownRenderer) -> list[Segment]:
    """Turn each heading, paragraph, and visible-text block into one Segment, ordinals from 1.

    Segments share one heading id map, so their ids match the full-document render.
    """
    source_lines = source.splitlines(keepends=True)
    segments: list[Segment] = []
    heading_index = 0
    para_n = 0
    heading_ids: dict[str, int] = {}

    for span in top_level_blocks(tokens):
        opener = span[0]
        level = heading_level(opener)

        if level is not None:
            text = inline_text(span[1]) if len(span) > 1 and span[1].type == 'inline' else ''
            markdown = '#' * level + ' ' + text
            locator = HeadingLocator(h=level, index=heading_index)
            heading_index += 1
            words = word_count(text)
        elif opener.type == 'paragraph_open':
            markdown = _source_slice(opener, source_lines)
            if not markdown and len(span) > 1:
                markdown = span[1].content.strip()
            para_n += 1
            locator = ParagraphLocator(n=para_n)
            words = word_count(markdown)
        else:
            if not visible_text(span):
                continue
            markdown = _source_slice(opener, source_lines)
            if not markdown:
                continue
            locator = BlockLocator(kind=block_kind(opener))
            words = word_count(markdown)

        try:
            html = renderer.render(markdown, heading_ids)
        except RenderError as e:
            raise RenderError(f"segment {len(segments) + 1}: {e}") from e
        segments.append(Segment(
            ordinal=len(segments) + 1,
            locator=locator,
            markdown=markdown,
            rendered_html=html,
            word_count=words,
        ))

    return segments
