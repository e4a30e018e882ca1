"""
Template engine registry for stencil.

Engines are bound to extensions on a ``Template`` instance. The core only
relies on the ``TemplateEngine`` protocol; two engines ship by default:

Built-in engines:
    noop: Treats content as final output (registered as ``*``)
    interpolate: ``<%= expr %>`` / ``<% stmt %>`` templates backed by Jinja2,
        with delimiters taken from the resolved ``DelimiterSet``
        (registered as ``md`` and ``hbs``)

Public API:
- EngineCapability: Registered engine plus its per-extension settings
- EngineRegistry: Extension -> capability lookup with ``*`` fallback
- create_engine(): Factory for built-in engines by name
- TemplateEngineProtocol: Interface for custom implementations

Usage:
    >>> from stencil import Template
    >>> template = Template()
    >>> template.engine("tmpl", create_engine("interpolate"))

Custom Engines:
Implement ``TemplateEngineProtocol`` (an async ``render`` and, optionally,
``render_sync``) and register it for one or more extensions:

    >>> template.engine(["txt", "text"], MyEngine(), layout_delims=["[[", "]]"])

"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from stencil.errors import ConfigurationError, ErrorCode, UnsupportedOperationError
from stencil.protocols import TemplateEngine as TemplateEngineProtocol
from stencil.utils.observability.logger import get_logger
from stencil.utils.primitives.paths import UNIVERSAL, format_ext

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from stencil.rendering.delimiters import DelimiterSet

logger = get_logger(__name__)


@dataclass
class EngineCapability:
    """
    An engine registered for one extension.

    Attributes:
        ext: Normalized extension key (``".md"`` or ``"*"``)
        engine: The engine object
        helpers: Engine-scoped helpers, merged over generic helpers at render
        delims: Delimiters declared at registration, if any
        layout_delims: Delimiters around the layout body tag for this extension
        dest_ext: Extension of rendered output (``".html"``)
        options: Remaining registration options

    """

    ext: str
    engine: Any
    helpers: dict[str, Any] = field(default_factory=dict)
    delims: DelimiterSet | None = None
    layout_delims: tuple[str, str] | None = None
    dest_ext: str | None = None
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return getattr(self.engine, "name", type(self.engine).__name__)

    @property
    def supports_sync(self) -> bool:
        return callable(getattr(self.engine, "render_sync", None))

    async def render(self, content: str, context: Mapping[str, Any]) -> str:
        result = self.engine.render(content, context)
        if inspect.isawaitable(result):
            result = await result
        return result

    def render_sync(self, content: str, context: Mapping[str, Any]) -> str:
        """
        Render without awaiting.

        Raises:
            UnsupportedOperationError: If the engine has no ``render_sync``
        """
        if not self.supports_sync:
            raise UnsupportedOperationError(
                f"Engine '{self.name}' registered for '{self.ext}' does not support synchronous rendering",
                code=ErrorCode.R003,
                suggestion="Use 'await template.render(...)' or register an engine with render_sync()",
            )
        return self.engine.render_sync(content, context)


class EngineRegistry:
    """Extension-keyed engine capabilities."""

    def __init__(self) -> None:
        self._engines: dict[str, EngineCapability] = {}

    def register(
        self,
        ext: str,
        engine: Any,
        *,
        delims: DelimiterSet | None = None,
        layout_delims: Iterable[str] | None = None,
        dest_ext: str | None = None,
        **options: Any,
    ) -> EngineCapability:
        """
        Register ``engine`` for ``ext``.

        Raises:
            ConfigurationError: If ``engine`` has no ``render`` method

        """
        if not callable(getattr(engine, "render", None)):
            raise ConfigurationError(
                f"Engine {engine!r} for '{ext}' must define render(content, context)",
                code=ErrorCode.C003,
            )
        key = format_ext(ext) or UNIVERSAL
        capability = EngineCapability(
            ext=key,
            engine=engine,
            helpers=dict(getattr(engine, "helpers", None) or {}),
            delims=delims,
            layout_delims=tuple(layout_delims) if layout_delims else None,
            dest_ext=format_ext(dest_ext),
            options=dict(options),
        )
        self._engines[key] = capability
        logger.debug("engine_registered", ext=key, engine=capability.name)
        return capability

    def get(self, ext: str | None) -> EngineCapability | None:
        key = format_ext(ext)
        if key is None:
            return None
        return self._engines.get(key)

    def __contains__(self, ext: object) -> bool:
        return isinstance(ext, str) and format_ext(ext) in self._engines

    def named(self, name: str) -> EngineCapability | None:
        """First capability whose engine is called ``name``, in registration order."""
        for capability in self._engines.values():
            if capability.name == name:
                return capability
        return None

    def extensions(self) -> tuple[str, ...]:
        return tuple(self._engines)


def create_engine(name: str, **options: Any) -> TemplateEngineProtocol:
    """
    Create a built-in engine by name.

    Args:
        name: ``"noop"`` or ``"interpolate"``
        **options: Passed to the engine constructor

    Raises:
        ConfigurationError: If the name is unknown

    """
    if name == "noop":
        from stencil.rendering.engines.noop import NoopEngine

        return NoopEngine()

    if name == "interpolate":
        from stencil.rendering.engines.interpolate import InterpolationEngine

        return InterpolationEngine(**options)

    raise ConfigurationError(
        f"Unknown template engine: '{name}'. Available: interpolate, noop",
        code=ErrorCode.C003,
        suggestion="Pass an engine instance to template.engine() for custom engines",
    )


# Public API
__all__ = [
    "EngineCapability",
    "EngineRegistry",
    "TemplateEngineProtocol",
    "create_engine",
]
