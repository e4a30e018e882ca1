"""Small data helpers shared across the package."""

from __future__ import annotations

from stencil.utils.primitives.dicts import deep_merge, omit, pick
from stencil.utils.primitives.ids import IdGenerator
from stencil.utils.primitives.paths import UNIVERSAL, extname, format_ext

__all__ = ["UNIVERSAL", "IdGenerator", "deep_merge", "extname", "format_ext", "omit", "pick"]
