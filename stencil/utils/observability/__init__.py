"""Observability helpers (structured logging)."""

from __future__ import annotations

from stencil.utils.observability.logger import StencilLogger, configure_logging, get_logger

__all__ = ["StencilLogger", "configure_logging", "get_logger"]
