"""
Bulk-add source resolution.

``Template.add_many`` accepts:

- a mapping of key -> record mapping (or key -> content string)
- a list of record mappings, each carrying its own ``path``
- a glob pattern (or list of patterns) matched against the filesystem;
  each file becomes ``{"path": <key>, "content": <text>}`` keyed by
  ``rename(filepath)`` (the file name by default)

Robustness:
- File size limit to prevent memory exhaustion (10MB default)
- Undecodable files are skipped with a warning

"""

from __future__ import annotations

import glob
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from stencil.config import basename
from stencil.core.record import TemplateRecord
from stencil.errors import ErrorCode, NormalizationError
from stencil.utils.observability.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

__all__ = ["MAX_TEMPLATE_SIZE", "TemplateLoader"]

logger = get_logger(__name__)

MAX_TEMPLATE_SIZE = 10 * 1024 * 1024  # 10 MB


class TemplateLoader:
    """
    Default ``Loader`` implementation.

    Args:
        cwd: Directory glob patterns are resolved against
        rename: Maps a matched file path to its template key
        encoding: Encoding used to read matched files

    """

    def __init__(
        self,
        cwd: str | Path | None = None,
        rename: Callable[[str], str] = basename,
        encoding: str = "utf-8",
    ) -> None:
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.rename = rename
        self.encoding = encoding

    def load(
        self,
        source: Any,
        locals: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> dict[str, dict[str, Any]]:
        """
        Resolve ``source`` into raw record mappings keyed by path.

        Raises:
            NormalizationError: If a list entry has no ``path``, or the
                source is of an unsupported type
        """
        options = options or {}
        rename = options.get("rename") or self.rename

        if isinstance(source, Mapping):
            return {str(key): self._as_mapping(value) for key, value in source.items()}

        if isinstance(source, str):
            return self._load_glob([source], rename)

        if isinstance(source, (list, tuple)):
            if all(isinstance(item, str) for item in source):
                return self._load_glob(list(source), rename)
            return self._load_list(source)

        raise NormalizationError(
            f"Cannot load templates from {type(source).__name__}",
            code=ErrorCode.N003,
            suggestion="Pass a mapping, a list of records or a glob pattern",
        )

    @staticmethod
    def _as_mapping(value: Any) -> dict[str, Any]:
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

    def _load_list(self, items: list[Any] | tuple[Any, ...]) -> dict[str, dict[str, Any]]:
        loaded: dict[str, dict[str, Any]] = {}
        for index, item in enumerate(items):
            value = self._as_mapping(item)
            path = value.get("path")
            if not path:
                raise NormalizationError(
                    f"Template at index {index} has no 'path'",
                    code=ErrorCode.N001,
                    suggestion="Give every template in a list a 'path', or pass a mapping keyed by path",
                )
            loaded[str(path)] = value
        return loaded

    def _load_glob(self, patterns: list[str], rename: Callable[[str], str]) -> dict[str, dict[str, Any]]:
        loaded: dict[str, dict[str, Any]] = {}
        for pattern in patterns:
            full_pattern = pattern if Path(pattern).is_absolute() else str(self.cwd / pattern)
            matches = sorted(glob.glob(full_pattern, recursive=True))
            if not matches:
                logger.debug("loader_no_matches", pattern=pattern)
            for match in matches:
                file_path = Path(match)
                if not file_path.is_file():
                    continue
                content = self._read(file_path)
                if content is None:
                    continue
                key = rename(str(file_path))
                loaded[key] = {"path": key, "content": content, "locals": {"src": str(file_path)}}
        return loaded

    def _read(self, file_path: Path) -> str | None:
        try:
            size = file_path.stat().st_size
            if size > MAX_TEMPLATE_SIZE:
                logger.warning(
                    "loader_file_too_large",
                    path=str(file_path),
                    size_bytes=size,
                    max_bytes=MAX_TEMPLATE_SIZE,
                )
                return None
            return file_path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("loader_read_failed", path=str(file_path), error=str(exc))
            return None
