"""Temporary keys for templates that arrive without a path."""

from __future__ import annotations

import itertools

__all__ = ["IdGenerator"]


class IdGenerator:
    """
    Produce ``__id__1``, ``__id__2``, ... keys.

    One generator per ``Template`` instance so independent instances never
    share a counter.
    """

    def __init__(self, prefix: str = "__id__") -> None:
        self.prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self.prefix}{next(self._counter)}"

    def owns(self, key: str) -> bool:
        return key.startswith(self.prefix)
