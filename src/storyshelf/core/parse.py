"""Frontmatter extraction for pasted or imported manuscripts"""

import logging
from typing import Any

import yaml

from storyshelf.core.models import Frontmatter


logger = logging.getLogger(__name__)

DELIMITER = '---'
PROMOTED_KEYS = {'title': 'title', 'author': 'author', 'language': 'language', 'sourceUrl': 'source_url'}


def _jsonable(value, active: tuple = ()):
    """Coerce YAML values JSON lacks (dates, non-string keys) to strings, preserving key order.

    Raises ValueError for a value that contains itself (self-referencing anchors).
    """
    if id(value) in active:
        raise ValueError("circular reference")
    if isinstance(value, dict):
        inner = active + (id(value),)
        return {str(k): _jsonable(v, inner) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        inner = active + (id(value),)
        return [_jsonable(v, inner) for v in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body). Unparseable frontmatter degrades to {} but is still stripped."""
    s = text.lstrip('\ufeff \t\r\n')
    if not (s.startswith('---\n') or s.startswith('---\r\n')):
        return {}, text

    lines = s.split('\n')
    end = next((i for i in range(1, len(lines)) if lines[i].strip() == DELIMITER), None)
    if end is None:
        return {}, text

    fm_text = '\n'.join(lines[1:end])
    body = '\n'.join(lines[end + 1:])
    try:
        fm = yaml.safe_load(fm_text) or {}
    except yaml.YAMLError as e:
        logger.debug("Ignoring unparseable frontmatter: %s", e)
        return {}, body
    if not isinstance(fm, dict):
        return {}, body
    data = {}
    for key, value in fm.items():
        try:
            data[str(key)] = _jsonable(value)
        except ValueError as e:
            logger.debug("Dropping frontmatter key %r: %s", key, e)
    return data, body


def parse_frontmatter(fm: dict[str, Any]) -> Frontmatter:
    """Promote recognised string keys to typed fields; keep the rest in `extra`."""
    promoted = {}
    extra = {}
    for key, value in fm.items():
        field = PROMOTED_KEYS.get(key)
        if field is None:
            extra[key] = value
        elif isinstance(value, str) and value.strip():
            promoted[field] = value.strip()
    return Frontmatter(**promoted, extra=extra)
