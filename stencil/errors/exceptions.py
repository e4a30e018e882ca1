"""
Exception hierarchy for stencil.

All errors carry an optional ``ErrorCode``, a human suggestion and an
``ErrorDebugPayload``. Configuration errors are raised synchronously at
setup time; render-time errors are raised out of ``render`` /
``render_sync`` with the failing record and stage attached.

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from stencil.errors.types import ErrorDebugPayload

if TYPE_CHECKING:
    from collections.abc import Sequence

    from stencil.errors.codes import ErrorCode


class StencilError(Exception):
    """Base class for every error raised by stencil."""

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        suggestion: str | None = None,
        file_path: str | None = None,
        debug_payload: ErrorDebugPayload | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.suggestion = suggestion
        self.file_path = file_path
        self.debug_payload = debug_payload

    def __str__(self) -> str:
        parts = []
        if self.code is not None:
            parts.append(f"[{self.code}]")
        parts.append(self.message)
        if self.file_path:
            parts.append(f"(template: {self.file_path})")
        text = " ".join(parts)
        if self.suggestion:
            text = f"{text}\n  Tip: {self.suggestion}"
        return text


class ConfigurationError(StencilError):
    """Invalid setup: bad template type registration or option value."""


class NormalizationError(StencilError):
    """A template could not be turned into a record (no derivable path)."""


class LayoutNotFoundError(StencilError):
    """A layout name was referenced but is not registered."""

    def __init__(self, layout: str, **kwargs: Any) -> None:
        super().__init__(f"Layout '{layout}' is not registered", **kwargs)
        self.layout = layout


class LayoutCycleError(StencilError):
    """A layout chain references a layout it already visited."""

    def __init__(self, chain: Sequence[str], **kwargs: Any) -> None:
        self.chain = list(chain)
        super().__init__(
            f"Layout cycle detected: {' -> '.join(self.chain)}",
            **kwargs,
        )


class UnsupportedOperationError(StencilError):
    """An engine, helper or parser cannot perform the requested operation."""


class TemplateRenderError(StencilError):
    """Rendering failed at a given stage."""

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.stage = stage
