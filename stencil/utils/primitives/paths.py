"""Extension helpers used for registry lookups."""

from __future__ import annotations

from pathlib import PurePath

__all__ = ["UNIVERSAL", "extname", "format_ext"]

# Key of the universal parser stack, engine and delimiter set.
UNIVERSAL = "*"


def format_ext(ext: str | None) -> str | None:
    """
    Normalize an extension for registry lookups.

    Example:
        >>> format_ext("md")
        '.md'
        >>> format_ext(".md")
        '.md'
        >>> format_ext("*")
        '*'

    """
    if not ext:
        return None
    if ext == UNIVERSAL or ext.startswith("."):
        return ext
    return f".{ext}"


def extname(path: str | None) -> str | None:
    """Return the final suffix of ``path`` (``".md"``), or None."""
    if not path:
        return None
    return PurePath(path).suffix or None
