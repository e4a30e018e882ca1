"""Pass-through engine: content is already final output."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = ["NoopEngine"]


class NoopEngine:
    """Returns content unchanged, with or without an event loop."""

    name = "noop"

    def __init__(self) -> None:
        self.helpers: dict[str, Any] = {}

    async def render(self, content: str, context: Mapping[str, Any]) -> str:
        return content

    def render_sync(self, content: str, context: Mapping[str, Any]) -> str:
        return content
