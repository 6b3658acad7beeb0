"""Shared fixtures for core unit tests"""

import pytest

from storyshelf.core.render import MarkdownRenderer


FOX_MD = """\
---
title: The Fox
author: Aesop
---
# The Fox

Once upon a time.

The end.
"""

CHAPTERS_MD = """\
# Title

Intro paragraph.

## One

First chapter text.

## Two

Second chapter text.
"""


@pytest.fixture(name="renderer")
def renderer_fixture():
    return MarkdownRenderer()


@pytest.fixture(name="parser")
def parser_fixture(renderer):
    """Block tokenizer shared with the renderer."""
    return renderer


@pytest.fixture(name="fox_md")
def fox_md_fixture():
    return FOX_MD


@pytest.fixture(name="chapters_md")
def chapters_md_fixture():
    return CHAPTERS_MD
