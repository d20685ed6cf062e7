"""Markdown to HTML rendering for the read-only view."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import markdown

DEFAULT_EXTENSIONS: tuple[str, ...] = (
    "tables",
    "fenced_code",
    "sane_lists",
    "toc",
    "wikilinks",
    "pymdownx.tilde",  # ~~del~~
    "pymdownx.caret",  # ^^ins^^
    "pymdownx.tasklist",
    "pymdownx.magiclink",
)


class Renderer(Protocol):
    def render(self, text: str) -> str:
        """Return HTML for the given markdown source."""


class MarkdownRenderer:
    """Python-Markdown backed renderer.

    A fresh ``markdown.Markdown`` instance is used per call so extension state
    (toc anchors, wikilink bookkeeping) never leaks between documents.
    """

    def __init__(self, extensions: Sequence[str] | None = None) -> None:
        self.extensions = list(DEFAULT_EXTENSIONS if extensions is None else extensions)

    def render(self, text: str | None) -> str:
        if not text:
            return ""
        return markdown.markdown(text, extensions=self.extensions, output_format="html")
