"""Ingest normalizer: raw manuscript -> NormalizedManuscript (pure, no storage)"""

import logging

from storyshelf.core.extract.blocks import tokens_to_segments
from storyshelf.core.models import ManuscriptInput, NormalizedManuscript, PreviewResult
from storyshelf.core.parse import parse_frontmatter, split_frontmatter
from storyshelf.core.render import MarkdownRenderer
from storyshelf.core.utils.hashing import sha256
from storyshelf.core.utils.slug import is_valid_slug
from storyshelf.errors import InvalidSlug, MissingContent, MissingTitle, RenderError


logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en-GB"
PREVIEW_SLUG = "preview"
PREVIEW_TITLE = "Preview"


def _first(*values) -> str:
    """First non-blank value, stripped; '' if none."""
    for v in values:
        if v and v.strip():
            return v.strip()
    return ""


def ingest(
    manuscript: ManuscriptInput,
    renderer: MarkdownRenderer = None,
    default_language: str = DEFAULT_LANGUAGE,
    ) -> NormalizedManuscript:
    """Validate and normalize a manuscript.

    Explicit fields win over frontmatter; language falls back to default_language.
    The content hash covers only the frontmatter-stripped body, so frontmatter-only
    edits hash identically and resolve to the same stored version.
    Raises InvalidSlug, MissingTitle, MissingContent, or RenderError.
    """
    renderer = renderer or MarkdownRenderer()

    slug = manuscript.slug.strip()
    if not slug or not is_valid_slug(slug):
        raise InvalidSlug()
    if not manuscript.markdown.strip():
        raise MissingContent()

    raw_fm, body = split_frontmatter(manuscript.markdown)
    fm = parse_frontmatter(raw_fm)

    title = _first(manuscript.title, fm.title)
    if not title:
        raise MissingTitle()
    if not body.strip():
        raise MissingContent("markdown body is empty after frontmatter")

    author = _first(manuscript.author, fm.author)
    language = _first(manuscript.language, fm.language) or default_language
    source_url = _first(manuscript.source_url, fm.source_url)

    try:
        rendered_html = renderer.render(body)
        tokens = renderer.parse(body)
    except RenderError as e:
        raise RenderError(f"document: {e}") from e
    content_hash = sha256(body)
    segments = tokens_to_segments(tokens, body, renderer)

    frontmatter = {"title": title, "author": author, "language": language, "sourceUrl": source_url}
    for key, value in fm.extra.items():
        frontmatter.setdefault(key, value)

    logger.debug("Normalized %s: %d segments, hash %s", slug, len(segments), content_hash[:12])
    return NormalizedManuscript(
        slug=slug,
        title=title,
        author=author,
        language=language,
        source={"url": source_url} if source_url else {},
        rights=dict(manuscript.rights or {}),
        frontmatter=frontmatter,
        markdown=body,
        rendered_html=rendered_html,
        content_hash=content_hash,
        segments=segments,
    )


def preview(markdown: str, renderer: MarkdownRenderer = None) -> PreviewResult:
    """Normalize markdown with a throwaway slug/title for live editor preview."""
    out = ingest(
        ManuscriptInput(slug=PREVIEW_SLUG, title=PREVIEW_TITLE, markdown=markdown),
        renderer=renderer,
    )
    return PreviewResult(rendered_html=out.rendered_html, segments=out.segments)
