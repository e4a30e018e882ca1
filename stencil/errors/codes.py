"""
Stable error codes.

Codes are grouped by prefix:

- ``C`` configuration (type registration, options)
- ``N`` normalization (adding templates)
- ``L`` layouts
- ``R`` rendering

"""

from __future__ import annotations

from enum import Enum

from stencil.errors.types import ErrorSeverity


class ErrorCode(Enum):
    """Error codes with their default severity."""

    C001 = "invalid_template_type"
    C002 = "unknown_template_type"
    C003 = "invalid_option"
    N001 = "missing_template_path"
    N002 = "missing_template_content"
    N003 = "invalid_template_input"
    N004 = "async_parser_in_sync_path"
    L001 = "layout_not_found"
    L002 = "layout_cycle"
    R001 = "invalid_render_target"
    R002 = "engine_render_failed"
    R003 = "sync_render_unsupported"
    R004 = "helper_failed"
    R005 = "invalid_context"

    @property
    def severity(self) -> ErrorSeverity:
        if self is ErrorCode.L001:
            return ErrorSeverity.WARNING
        if self.name.startswith("C"):
            return ErrorSeverity.FATAL
        return ErrorSeverity.ERROR

    def __str__(self) -> str:
        return self.name
