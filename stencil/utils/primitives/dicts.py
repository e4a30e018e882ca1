"""
Dictionary helpers.

``deep_merge`` is the merge used when building render contexts: nested
mappings are merged recursively, everything else is replaced by the
later source. Inputs are never mutated.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from typing import Any

__all__ = ["deep_merge", "omit", "pick"]


def deep_merge(*sources: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Merge mappings left to right; later sources win on key collision.

    Example:
        >>> deep_merge({"a": {"x": 1}}, {"a": {"y": 2}}, {"b": 3})
        {'a': {'x': 1, 'y': 2}, 'b': 3}

    """
    result: dict[str, Any] = {}
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            current = result.get(key)
            if isinstance(current, Mapping) and isinstance(value, Mapping):
                result[key] = deep_merge(current, value)
            elif isinstance(value, Mapping):
                result[key] = deep_merge(value)
            else:
                result[key] = copy.copy(value) if isinstance(value, list) else value
    return result


def omit(source: Mapping[str, Any] | None, keys: Iterable[str]) -> dict[str, Any]:
    """Return a shallow copy of ``source`` without ``keys``."""
    if source is None:
        return {}
    excluded = set(keys)
    return {key: value for key, value in source.items() if key not in excluded}


def pick(source: Mapping[str, Any] | None, keys: Iterable[str]) -> dict[str, Any]:
    """Return a shallow copy of ``source`` limited to ``keys``."""
    if source is None:
        return {}
    return {key: source[key] for key in keys if key in source}
