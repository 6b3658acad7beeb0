"""Unit tests for core/extract/blocks.py"""

import pytest

from storyshelf.core.extract.blocks import tokens_to_segments, word_count
from storyshelf.core.models import BlockLocator, HeadingLocator, ParagraphLocator
from storyshelf.errors import RenderError


def _segments(renderer, md: str):
    return tokens_to_segments(renderer.parse(md), md, renderer)


def test_heading_and_paragraphs(renderer):
    """A heading and two paragraphs give three segments with running locators."""
    segs = _segments(renderer, "# The Fox\n\nOnce upon a time.\n\nThe end.\n")
    assert [s.ordinal for s in segs] == [1, 2, 3]
    assert segs[0].locator == HeadingLocator(h=1, index=0)
    assert segs[1].locator == ParagraphLocator(n=1)
    assert segs[2].locator == ParagraphLocator(n=2)
    assert segs[1].markdown == "Once upon a time."
    assert segs[1].word_count == 4


def test_heading_markdown_normalised_to_atx(renderer):
    """Setext headings are stored in ATX form."""
    segs = _segments(renderer, "The Fox\n=======\n\nText.\n")
    assert segs[0].markdown == "# The Fox"
    assert segs[0].word_count == 2


def test_heading_index_is_zero_based_and_running(renderer):
    """Heading index counts every heading regardless of level."""
    segs = _segments(renderer, "# A\n\n## B\n\n### C\n")
    assert [(s.locator.h, s.locator.index) for s in segs] == [(1, 0), (2, 1), (3, 2)]


def test_list_becomes_block_segment(renderer):
    """A bullet list is one generic block segment with the raw list source."""
    segs = _segments(renderer, "- item one\n- item two\n")
    assert len(segs) == 1
    assert segs[0].locator == BlockLocator(kind="bullet_list")
    assert segs[0].markdown == "- item one\n- item two"
    assert "<ul>" in segs[0].rendered_html


@pytest.mark.parametrize("md,kind", [
    ("```python\nprint('x')\n```\n", "fence"),
    ("> quoted text\n", "blockquote"),
    ("1. first\n2. second\n", "ordered_list"),
    ("| a | b |\n|---|---|\n| 1 | 2 |\n", "table"),
])
def test_block_kinds(renderer, md, kind):
    """Other visible blocks carry their markdown-it block name."""
    segs = _segments(renderer, md)
    assert len(segs) == 1
    assert segs[0].locator == BlockLocator(kind=kind)


def test_thematic_break_dropped(renderer):
    """Horizontal rules carry no visible text and produce no segment."""
    segs = _segments(renderer, "Para.\n\n---\n\nFooter text.\n")
    assert [s.locator for s in segs] == [ParagraphLocator(n=1), ParagraphLocator(n=2)]
    assert [s.ordinal for s in segs] == [1, 2]


def test_segment_html_is_rendered_individually(renderer):
    """Each segment's HTML is the renderer's output for that segment's markdown."""
    for seg in _segments(renderer, "# The Fox\n\nOnce upon a *time*.\n"):
        assert seg.rendered_html == renderer.render(seg.markdown)


def test_duplicate_heading_ids_match_full_render(renderer):
    """Repeated headings get the same suffixed ids in segments as in the full document."""
    md = "## Part\n\nOne.\n\n## Part\n\nTwo.\n"
    segs = _segments(renderer, md)
    assert segs[0].rendered_html == '<h2 id="part">Part</h2>\n'
    assert segs[2].rendered_html == '<h2 id="part-1">Part</h2>\n'
    assert "".join(s.rendered_html for s in segs) == renderer.render(md)


def test_heading_link_id_matches_full_render(renderer):
    """Link markup in a heading does not change its id between segment and document."""
    md = "# See [the fox](https://example.org)\n"
    assert 'id="see-the-fox"' in renderer.render(md)
    assert 'id="see-the-fox"' in _segments(renderer, md)[0].rendered_html


def test_segment_render_error_names_segment(renderer, monkeypatch):
    """A render failure reports which segment failed."""
    tokens = renderer.parse("# A\n\nB\n")

    def boom(*args):
        raise RenderError("bad")

    monkeypatch.setattr(renderer, "render", boom)
    with pytest.raises(RenderError, match="segment 1"):
        tokens_to_segments(tokens, "# A\n\nB\n", renderer)


def test_empty_body_has_no_segments(renderer):
    assert _segments(renderer, "") == []


@pytest.mark.parametrize("text,expected", [
    ("", 0),
    ("one", 1),
    ("  two   words ", 2),
    ("line one\nline two", 4),
])
def test_word_count(text, expected):
    """word_count splits on any whitespace."""
    assert word_count(text) == expected
