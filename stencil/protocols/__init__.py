"""
Canonical protocol definitions.

Import protocols from here rather than from the modules implementing them.
"""

from __future__ import annotations

from stencil.protocols.rendering import Loader, Parser, SyncTemplateEngine, TemplateEngine

__all__ = ["Loader", "Parser", "SyncTemplateEngine", "TemplateEngine"]
