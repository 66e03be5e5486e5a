"""
Markdown rendering for release notes and readmes.
"""

from typing import Callable, Optional

import markdown


Renderer = Callable[[str], str]

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]


def render_markdown(text: Optional[str]) -> str:
    """Render lightweight markup to HTML; empty input gives an empty string."""

    if not text:
        return ""
    return markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)


__all__ = [
    "Renderer",
    "MARKDOWN_EXTENSIONS",
    "render_markdown",
]
