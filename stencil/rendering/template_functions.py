"""
Generic helpers registered on every ``Template``.

Helpers:
    markdown: Convert a Markdown string to HTML

"""

from __future__ import annotations

from typing import TYPE_CHECKING

import mistune

if TYPE_CHECKING:
    from stencil.rendering.helpers import HelperRegistry

__all__ = ["markdown", "register_defaults"]

_markdown = mistune.create_markdown(escape=False, plugins=["strikethrough", "table"])


def markdown(text: str | None) -> str:
    """
    Render Markdown to HTML.

    Example:
        <%= markdown("# Title") %>  ->  <h1>Title</h1>

    """
    if not text:
        return ""
    return str(_markdown(text))


def register_defaults(helpers: HelperRegistry) -> None:
    helpers.add("markdown", markdown)
