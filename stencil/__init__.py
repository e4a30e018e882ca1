"""
Stencil: a template registration and rendering engine.

Register template types (pages, layouts, partials), add templates to
them, and render with pluggable engines, parsers, delimiters, layouts and
helpers:

    >>> from stencil import Template
    >>> template = Template()
    >>> template.add("page", "hello.md", "Hello <%= name %>!")
    >>> template.render_sync("hello.md", {"name": "World"})
    'Hello World!'

"""

from __future__ import annotations

from stencil.config import Options
from stencil.core import TemplateRecord, TemplateType
from stencil.errors import (
    ConfigurationError,
    LayoutCycleError,
    NormalizationError,
    StencilError,
    TemplateRenderError,
    UnsupportedOperationError,
)
from stencil.rendering.delimiters import DelimiterSet
from stencil.template import RenderPlan, Template

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DelimiterSet",
    "LayoutCycleError",
    "NormalizationError",
    "Options",
    "RenderPlan",
    "StencilError",
    "Template",
    "TemplateRecord",
    "TemplateRenderError",
    "TemplateType",
    "UnsupportedOperationError",
    "__version__",
]
