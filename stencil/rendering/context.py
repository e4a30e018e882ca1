"""
Render context construction.

Context layers, lowest priority first:

1. process-wide data (``Template.data``)
2. call-site locals (passed to ``render``)
3. the record's own top-level fields (``path``, ``layout``, ...)
4. the record's ``locals`` and parsed ``data``

With ``prefer_data`` (the default) parsed ``data`` is applied last, so
front matter is authoritative over locals. Without it the record's
``locals`` are applied last.

A ``context_fn`` replaces the layering entirely; it receives the record
and the call-site locals and returns the context mapping.

"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from stencil.errors import ErrorCode, TemplateRenderError
from stencil.utils.primitives.dicts import deep_merge

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from stencil.core.record import TemplateRecord
    from stencil.core.types import TemplateType

__all__ = ["CONTEXT_LAYERS", "LOCALS_LAST_LAYERS", "build_context", "merge_partials"]

CONTEXT_LAYERS: tuple[str, ...] = ("global_data", "call_locals", "record_fields", "record_locals", "record_data")

# Layer order used when ``prefer_data`` is off
LOCALS_LAST_LAYERS: tuple[str, ...] = (*CONTEXT_LAYERS[:3], "record_data", "record_locals")


def build_context(
    global_data: Mapping[str, Any] | None,
    record: TemplateRecord,
    call_locals: Mapping[str, Any] | None = None,
    *,
    prefer_data: bool = True,
    context_fn: Callable[[TemplateRecord, Mapping[str, Any]], Mapping[str, Any]] | None = None,
) -> dict[str, Any]:
    """
    Deep-merge the context layers for ``record``.

    Raises:
        TemplateRenderError: If ``context_fn`` returns something other
            than a mapping
    """
    if context_fn is not None:
        context = context_fn(record, dict(call_locals or {}))
        if not isinstance(context, Mapping):
            raise TemplateRenderError(
                f"context_fn must return a mapping, got {type(context).__name__}",
                code=ErrorCode.R005,
                stage="build_context",
                file_path=record.path,
            )
        return dict(context)

    sources: dict[str, Mapping[str, Any] | None] = {
        "global_data": global_data,
        "call_locals": call_locals,
        "record_fields": record.context_fields(),
        "record_locals": record.locals,
        "record_data": record.data,
    }
    order = CONTEXT_LAYERS if prefer_data else LOCALS_LAST_LAYERS
    return deep_merge(*(sources[name] for name in order))


def merge_partials(
    context: Mapping[str, Any],
    partial_types: Iterable[TemplateType],
    *,
    merge: bool = True,
) -> dict[str, Any]:
    """
    Expose partial collections to the engine.

    With ``merge`` every partial lands in one ``partials`` map
    (path -> content); otherwise each type gets its own map under its
    plural name. Each partial's ``data`` and ``locals`` are folded over
    the context in registration order, so a later partial's values win
    over an earlier one's and over the page's.
    """
    result = dict(context)
    partials: dict[str, str] = dict(context.get("partials") or {}) if merge else {}
    per_type: dict[str, dict[str, str]] = {}

    for template_type in partial_types:
        bucket = partials if merge else per_type.setdefault(template_type.plural, {})
        for key, record in template_type.collection.items():
            bucket[key] = record.content or ""
            result = deep_merge(result, record.data, record.locals)

    if merge:
        result["partials"] = partials
    else:
        for plural, bucket in per_type.items():
            result[plural] = bucket
    return result
