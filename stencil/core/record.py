"""
The canonical template record.

Every template, whatever shape it was added in, ends up as a
``TemplateRecord`` stored in its type's collection. Records round-trip
through plain dictionaries via the cache protocol, which is also how
mapping input is turned into a record during normalization.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stencil.cache.cacheable import CacheableMixin
from stencil.utils.primitives.dicts import deep_merge

__all__ = ["ROOT_KEYS", "TemplateRecord"]

# Keys that live on the record itself. Anything else found on an input
# mapping is treated as a local.
ROOT_KEYS: tuple[str, ...] = (
    "path",
    "content",
    "data",
    "locals",
    "options",
    "layout",
    "orig",
    "ext",
    "engine",
    "type",
    "layout_applied",
)

# Record fields that never become part of a render context on their own.
CONTEXT_EXCLUDED: frozenset[str] = frozenset({"data", "locals", "orig", "meta", "type", "layout_applied"})


@dataclass
class TemplateRecord(CacheableMixin):
    """
    A normalized template.

    Attributes:
        path: Unique key within the owning type's collection
        content: Current body; parsers and the layout resolver rewrite it
        data: Values extracted by parsers (front matter)
        locals: Values supplied by the caller when the template was added
        options: Per-template overrides (``ext``, ``engine``, ``delims``)
        layout: Name of the layout to wrap this template with
        orig: Snapshot of the input before parsing (``orig["content"]``)
        ext: Extension declared by the template itself
        engine: Engine name declared by the template itself
        type: Plural name of the owning template type
        layout_applied: Set once the layout chain has been composed
        meta: Derived values resolved during normalization (not serialized)

    """

    path: str | None = None
    content: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    locals: dict[str, Any] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)
    layout: str | None = None
    orig: dict[str, Any] = field(default_factory=dict)
    ext: str | None = None
    engine: str | None = None
    type: str | None = None
    layout_applied: bool = False
    meta: dict[str, Any] = field(default_factory=dict, compare=False)

    def context_fields(self) -> dict[str, Any]:
        """Top-level fields that take part in the render context."""
        fields = {
            "path": self.path,
            "content": self.content,
            "options": self.options,
            "layout": self.layout,
            "ext": self.ext,
            "engine": self.engine,
        }
        return {key: value for key, value in fields.items() if value is not None}

    def to_cache_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "content": self.content,
            "data": dict(self.data),
            "locals": dict(self.locals),
            "options": dict(self.options),
            "layout": self.layout,
            "orig": dict(self.orig),
            "ext": self.ext,
            "engine": self.engine,
            "type": self.type,
            "layout_applied": self.layout_applied,
        }

    @classmethod
    def from_cache_dict(cls, data: dict[str, Any]) -> TemplateRecord:
        """
        Build a record from a mapping.

        Unknown top-level keys are folded into ``locals`` beneath any
        explicit ``locals`` mapping.
        """
        extra = {key: value for key, value in data.items() if key not in ROOT_KEYS}
        return cls(
            path=data.get("path"),
            content=data.get("content"),
            data=dict(data.get("data") or {}),
            locals=deep_merge(extra, data.get("locals")),
            options=dict(data.get("options") or {}),
            layout=data.get("layout"),
            orig=dict(data.get("orig") or {}),
            ext=data.get("ext"),
            engine=data.get("engine"),
            type=data.get("type"),
            layout_applied=bool(data.get("layout_applied", False)),
        )
