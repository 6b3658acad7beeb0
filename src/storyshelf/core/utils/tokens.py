"""Shared markdown-it token utilities"""

import re


_TAG_RE = re.compile(r'<[^>]+>')
_TEXT_CHILDREN = ('text', 'code_inline')


def heading_level(token) -> int | None:
    """Return the heading level (1-6) for a heading_open token, else None."""
    if token.type == 'heading_open' and token.tag and token.tag[0] == 'h' and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return None


def inline_text(token) -> str:
    """Flatten an inline token's children to plain text (breaks become spaces)."""
    parts = []
    for child in token.children or []:
        if child.type in _TEXT_CHILDREN:
            parts.append(child.content)
        elif child.type in ('softbreak', 'hardbreak'):
            parts.append(' ')
    return ''.join(parts).strip()


def block_kind(token) -> str:
    """Block name without the _open suffix (e.g. 'bullet_list_open' -> 'bullet_list')."""
    return token.type[:-len('_open')] if token.type.endswith('_open') else token.type


def top_level_blocks(tokens: list) -> list[list]:
    """Split a token stream into the token spans of each top-level block, in document order."""
    spans: list[list] = []
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if tok.level != 0 or tok.nesting == -1:
            i += 1
            continue
        j = i
        if tok.nesting == 1:
            j = i + 1
            while j < len(tokens) and not (tokens[j].level == 0 and tokens[j].nesting == -1):
                j += 1
        spans.append(tokens[i:j + 1])
        i = j + 1
    return spans


def visible_text(span: list) -> str:
    """Text a reader would see for a block span; empty for e.g. thematic breaks."""
    parts = []
    for tok in span:
        if tok.type == 'inline':
            parts.append(inline_text(tok))
        elif tok.type in ('fence', 'code_block'):
            parts.append(tok.content)
        elif tok.type == 'html_block':
            parts.append(_TAG_RE.sub('', tok.content))
    return ' '.join(p.strip() for p in parts if p.strip())
