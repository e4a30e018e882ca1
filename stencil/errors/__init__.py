"""
Error handling for stencil.

Public API:
- StencilError: Base exception
- ConfigurationError, NormalizationError: Setup-time failures
- LayoutNotFoundError, LayoutCycleError: Layout composition failures
- UnsupportedOperationError, TemplateRenderError: Render-time failures
- ErrorCode, ErrorSeverity, RelatedFile, ErrorDebugPayload: Shared types

"""

from __future__ import annotations

from stencil.errors.codes import ErrorCode
from stencil.errors.exceptions import (
    ConfigurationError,
    LayoutCycleError,
    LayoutNotFoundError,
    NormalizationError,
    StencilError,
    TemplateRenderError,
    UnsupportedOperationError,
)
from stencil.errors.types import ErrorDebugPayload, ErrorSeverity, RelatedFile

__all__ = [
    "ConfigurationError",
    "ErrorCode",
    "ErrorDebugPayload",
    "ErrorSeverity",
    "LayoutCycleError",
    "LayoutNotFoundError",
    "NormalizationError",
    "RelatedFile",
    "StencilError",
    "TemplateRenderError",
    "UnsupportedOperationError",
]
