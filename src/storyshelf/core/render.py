"""Markdown rendering and block parsing through a shared MarkdownIt instance"""

from markdown_it import MarkdownIt

from storyshelf.core.utils.slug import heading_id
from storyshelf.core.utils.tokens import inline_text
from storyshelf.errors import RenderError


def _heading_open(self, tokens, idx, options, env):
    """Render heading_open with an automatic id derived from the heading text."""
    text = inline_text(tokens[idx + 1]) if idx + 1 < len(tokens) else ''
    tokens[idx].attrSet('id', heading_id(text, env.setdefault('heading_ids', {})))
    return self.renderToken(tokens, idx, options, env)


def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    md = MarkdownIt(preset, options_update={"linkify": False})
    md.add_render_rule('heading_open', _heading_open)
    return md


class MarkdownRenderer:
    """Deterministic markdown -> HTML renderer used for whole documents and single segments."""

    def __init__(self, preset: str = 'gfm-like'):
        self.preset = preset
        self._md = _make_parser(preset)

    def parse(self, markdown: str) -> list:
        """Return the markdown-it block token stream for markdown."""
        try:
            return self._md.parse(markdown)
        except Exception as e:
            raise RenderError(f"Failed to parse markdown: {e}") from e

    def render(self, markdown: str, heading_ids: dict[str, int] = None) -> str:
        """Render markdown to HTML.

        Heading ids are unique within one call, or across calls that share the
        same heading_ids map (used to render segments in document order).
        """
        env = {} if heading_ids is None else {"heading_ids": heading_ids}
        try:
            return self._md.render(markdown, env)
        except Exception as e:
            raise RenderError(f"Failed to render markdown: {e}") from e
