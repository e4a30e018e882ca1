"""
Shared types for the errors package.

This module contains types shared between codes.py and exceptions.py
so neither has to import the other.

Types:
    ErrorSeverity: Error severity classification enum
    RelatedFile: A template related to an error for debugging context
    ErrorDebugPayload: Machine-parseable debug context for troubleshooting

"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """
    Error severity classification.

    Determines whether a render can carry on after the error is seen.

    Levels (highest to lowest):

    - **FATAL** - Setup or render cannot continue. Raises immediately.
    - **ERROR** - This render failed, other renders are unaffected.
    - **WARNING** - Recovered locally (missing layout, unknown include).

    Example:
        >>> ErrorSeverity.WARNING.can_continue
        True

    """

    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"

    @property
    def can_continue(self) -> bool:
        """True for ERROR and WARNING. False only for FATAL."""
        return self != ErrorSeverity.FATAL


@dataclass
class RelatedFile:
    """
    A template related to an error.

    Attributes:
        role: What role this template plays (e.g., "page", "layout", "partial")
        path: Template key or filesystem path

    """

    role: str
    path: str

    def __str__(self) -> str:
        return f"{self.role}: {self.path}"


@dataclass
class ErrorDebugPayload:
    """Structured context attached to render-time errors."""

    # What was being processed
    template_path: str | None = None  # e.g., "home.md"
    template_type: str | None = None  # e.g., "pages"
    stage: str | None = None  # e.g., "invoke_engine"

    extension: str | None = None
    engine: str | None = None
    layout_chain: list[str] = field(default_factory=list)
    available_context_vars: list[str] = field(default_factory=list)
    related_files: list[RelatedFile] = field(default_factory=list)

    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "template_path": self.template_path,
            "template_type": self.template_type,
            "stage": self.stage,
            "extension": self.extension,
            "engine": self.engine,
            "layout_chain": self.layout_chain,
            "available_context_vars": self.available_context_vars,
            "related_files": [str(f) for f in self.related_files],
            "timestamp": self.timestamp.isoformat(),
        }
