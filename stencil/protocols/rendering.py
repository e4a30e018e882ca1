"""Protocol definitions for the pluggable collaborators.

The core never imports a concrete parser, engine or loader. Anything that
satisfies these protocols can be registered on a ``Template``.

Protocols:
    Parser: Transform applied to a record before it is cached
    TemplateEngine: Turns content plus a context into a string
    Loader: Resolves a bulk-add source into raw record mappings

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from stencil.core.record import TemplateRecord


@runtime_checkable
class Parser(Protocol):
    """A record transform.

    Plain callables taking and returning a record are accepted as well;
    objects are used through their ``parse`` method. A parser may return
    an awaitable; such parsers only run under ``await Template.parse()``.

    Example:
        class Upper:
            def parse(self, record):
                record.content = record.content.upper()
                return record

    """

    def parse(self, record: TemplateRecord) -> TemplateRecord | Awaitable[TemplateRecord]:
        """Return the (possibly mutated) record."""
        ...


@runtime_checkable
class TemplateEngine(Protocol):
    """Render capability bound to one or more extensions.

    ``render`` is awaited by ``Template.render``. Engines that can also
    render without an event loop implement ``render_sync``; without it
    ``Template.render_sync`` raises ``UnsupportedOperationError``.

    The context always carries ``helpers`` (name -> callable) and
    ``delims`` (the resolved ``DelimiterSet``).

    """

    helpers: dict[str, Callable[..., Any]]

    async def render(self, content: str, context: Mapping[str, Any]) -> str:
        """Render ``content`` with ``context``."""
        ...


@runtime_checkable
class SyncTemplateEngine(TemplateEngine, Protocol):
    """Engine that also offers a synchronous render."""

    def render_sync(self, content: str, context: Mapping[str, Any]) -> str:
        """Render ``content`` with ``context`` without awaiting."""
        ...


@runtime_checkable
class Loader(Protocol):
    """Resolve a bulk-add source (pattern, list or mapping) to raw records."""

    def load(
        self,
        source: Any,
        locals: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, dict[str, Any]]:
        """Return raw record mappings keyed by template path."""
        ...
