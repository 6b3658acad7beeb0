"""Story slug validation and heading anchor generation"""

import re


SLUG_RE = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')


def is_valid_slug(slug: str) -> bool:
    """True for lowercase alphanumeric runs joined by single hyphens (e.g. 'the-gruffalo')."""
    return bool(SLUG_RE.match(slug))


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def heading_id(text: str, seen: dict[str, int]) -> str:
    """Return a unique anchor id for heading text; repeats get -1, -2, ... suffixes."""
    base = slugify(text) or 'heading'
    count = seen.get(base, 0)
    seen[base] = count + 1
    return base if count == 0 else f"{base}-{count}"
