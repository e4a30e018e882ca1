"""
Normalization pipeline.

Turns whatever a caller hands to ``add`` / ``add_many`` / ``render`` into
canonical ``TemplateRecord`` objects:

1. Coerce the input shape into ``{key: raw_mapping}``:

   - a bare string becomes ``{"content": string}`` under a generated key
   - a record-shaped mapping (has ``content`` or ``path``) is used as-is,
     keyed by its ``path`` or a generated key
   - a mapping of entries is used entry by entry, each ``path``
     defaulting to its key
   - a ``key, value`` pair coerces a string ``value`` to
     ``{"content": value}`` with ``path`` defaulting to ``key``

2. Build the record, merge caller locals/options, snapshot ``orig``.
3. Resolve the extension and run that extension's parser stack (or the
   universal stack).

A batch is normalized completely before anything is returned; one bad
entry fails the whole batch with ``NormalizationError``.

"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from stencil.core.record import TemplateRecord
from stencil.errors import ErrorCode, NormalizationError
from stencil.rendering.resolution import resolve_extension
from stencil.utils.observability.logger import get_logger
from stencil.utils.primitives.dicts import deep_merge

if TYPE_CHECKING:
    from stencil.config import Options
    from stencil.core.types import TemplateType
    from stencil.parsing.stack import ParserRegistry
    from stencil.utils.primitives.ids import IdGenerator

__all__ = ["Normalizer", "is_record_shaped"]

logger = get_logger(__name__)


def is_record_shaped(value: Any) -> bool:
    """True for a single record mapping rather than a mapping of entries."""
    if isinstance(value, TemplateRecord):
        return True
    if not isinstance(value, Mapping):
        return False
    return isinstance(value.get("content"), str) or isinstance(value.get("path"), str)


class Normalizer:
    """
    Normalization for one ``Template`` instance.

    Args:
        parsers: Parser stacks to run
        options: Process options (``ext``, ``view_engine``, ``strict_errors``)
        ids: Generator for temporary keys

    """

    def __init__(self, parsers: ParserRegistry, options: Options, ids: IdGenerator) -> None:
        self.parsers = parsers
        self.options = options
        self.ids = ids

    def coerce(self, key: Any, value: Any = None) -> dict[str, dict[str, Any]]:
        """
        Coerce add-style arguments into ``{key: raw_mapping}``.

        Raises:
            NormalizationError: If an entry has no derivable path
        """
        if value is not None:
            if not isinstance(key, str) or not key:
                raise NormalizationError(
                    f"Template key must be a non-empty string, got {key!r}",
                    code=ErrorCode.N001,
                )
            raw = self._as_raw(value)
            if not raw.get("path"):
                raw["path"] = key
            return {key: raw}

        if isinstance(key, str):
            return {self.ids(): {"content": key}}

        if is_record_shaped(key):
            raw = self._as_raw(key)
            path = raw.get("path") or self.ids()
            raw["path"] = path
            return {path: raw}

        if isinstance(key, Mapping):
            entries: dict[str, dict[str, Any]] = {}
            for entry_key, entry_value in key.items():
                raw = self._as_raw(entry_value)
                if not raw.get("path"):
                    if not isinstance(entry_key, str) or not entry_key:
                        raise NormalizationError(
                            f"Cannot derive a path for entry {entry_key!r}",
                            code=ErrorCode.N001,
                            suggestion="Key every entry by its path or give it a 'path' field",
                        )
                    raw["path"] = entry_key
                entries[str(entry_key)] = raw
            return entries

        raise NormalizationError(
            f"Cannot normalize a template from {type(key).__name__}",
            code=ErrorCode.N003,
        )

    @staticmethod
    def _as_raw(value: Any) -> dict[str, Any]:
        if isinstance(value, TemplateRecord):
            return value.to_dict()
        if isinstance(value, str):
            return {"content": value}
        if isinstance(value, Mapping):
            return dict(value)
        raise NormalizationError(
            f"Template value must be a string or mapping, got {type(value).__name__}",
            code=ErrorCode.N003,
        )

    def normalize(
        self,
        entries: Mapping[str, Mapping[str, Any]],
        *,
        locals: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
        template_type: TemplateType | None = None,
    ) -> dict[str, TemplateRecord]:
        """
        Normalize coerced entries into records.

        Nothing is stored here; the caller decides where records go.
        """
        records: dict[str, TemplateRecord] = {}
        for key, raw in entries.items():
            record = self.normalize_one(
                key,
                raw,
                locals=locals,
                options=options,
                template_type=template_type,
            )
            if record is not None:
                records[key] = record
        return records

    def normalize_one(
        self,
        key: str,
        raw: Mapping[str, Any],
        *,
        locals: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
        template_type: TemplateType | None = None,
    ) -> TemplateRecord | None:
        record = TemplateRecord.from_cache_dict(dict(raw))
        if not record.path:
            record.path = key

        if record.content is None:
            message = f"Template '{record.path}' has no content"
            if self.options.get("strict_errors"):
                raise NormalizationError(message, code=ErrorCode.N002, file_path=record.path)
            logger.warning("template_missing_content", path=record.path)
            return None

        if locals:
            record.locals = deep_merge(record.locals, locals)
        if options:
            record.options = deep_merge(record.options, options)
        if not record.orig:
            record.orig = {"content": record.content}
        if template_type is not None:
            record.type = template_type.plural

        type_ext = template_type.options.get("ext") if template_type is not None else None
        ext = resolve_extension(
            record,
            fallbacks=(type_ext, self.options.get("view_engine"), self.options.get("ext")),
        )
        record = self.parsers.run(record, self.parsers.resolve(ext))

        record.meta["ext"] = ext
        record.meta["parsed_content"] = record.content
        logger.debug("template_normalized", path=record.path, type=record.type, ext=ext)
        return record
