"""Template records, template types and the normalization pipeline."""

from __future__ import annotations

from stencil.core.record import ROOT_KEYS, TemplateRecord
from stencil.core.types import Role, TemplateType, TypeRegistry

__all__ = ["ROOT_KEYS", "Role", "TemplateRecord", "TemplateType", "TypeRegistry"]
