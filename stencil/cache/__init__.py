"""Cache contracts for in-memory template records."""

from __future__ import annotations

from stencil.cache.cacheable import Cacheable, CacheableMixin

__all__ = ["Cacheable", "CacheableMixin"]
