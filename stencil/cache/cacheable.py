"""
Cacheable Protocol and Mixin - Type-safe cache contracts for stencil.

This module provides:
- Cacheable: protocol for objects stored in template collections
- CacheableMixin: Provides to_dict/from_dict aliases

Usage:
    @dataclass
    class MyEntry(CacheableMixin):
        value: str

        def to_cache_dict(self) -> dict[str, Any]:
            return {"value": self.value}

        @classmethod
        def from_cache_dict(cls, data: dict[str, Any]) -> "MyEntry":
            return cls(value=data["value"])

    # Now has to_dict() and from_dict() aliases automatically

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typing import Self


@runtime_checkable
class Cacheable(Protocol):
    """Objects that can round-trip through a plain dictionary."""

    def to_cache_dict(self) -> dict[str, Any]: ...

    @classmethod
    def from_cache_dict(cls, data: dict[str, Any]) -> Any: ...


class CacheableMixin:
    """
    Mixin providing to_dict/from_dict aliases for Cacheable implementations.

    Classes using this mixin must implement to_cache_dict() and from_cache_dict().

    """

    def to_cache_dict(self) -> dict[str, Any]:
        """Serialize to cache-friendly dictionary (must be implemented by subclass)."""
        raise NotImplementedError

    @classmethod
    def from_cache_dict(cls, data: dict[str, Any]) -> Self:
        """Deserialize from cache dictionary (must be implemented by subclass)."""
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        """Alias for to_cache_dict."""
        return self.to_cache_dict()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Alias for from_cache_dict."""
        return cls.from_cache_dict(data)


__all__ = ["Cacheable", "CacheableMixin"]
