"""
Process-wide options for a ``Template`` instance.

Options are a flat, dict-backed store with defaults. They can be loaded
from the ``[template]`` table of a TOML file or from ``STENCIL_*``
environment variables, and changed at runtime with ``Template.option()``.

Recognized keys:
    ext: Fallback extension for records without one (``"*"``)
    view_engine: Extension used when nothing else resolves one
    layout: Default layout for renderable templates
    partial_layout: Default layout for partials (``None`` keeps partials bare)
    layout_tag: Body marker inside layouts (``{% body %}``)
    layout_delims: Delimiters around the body marker
    prefer_data: Parsed ``data`` beats record ``locals`` in the context
    merge_partials: Expose all partials as one flat ``partials`` map
    cache_anonymous: Keep ad-hoc templates passed straight to ``render``
    strict_errors: Raise instead of warn on malformed ``add`` input
    rename: Callable mapping a loaded file path to its template key
    delims: Default delimiter pair applied to every template
    context_fn: Callable ``(record, locals) -> mapping`` replacing context layering

"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path, PurePath
from typing import Any

from stencil.errors import ConfigurationError, ErrorCode

__all__ = ["DEFAULT_OPTIONS", "ENV_PREFIX", "Options", "basename"]

ENV_PREFIX = "STENCIL_"

BOOL_TRUE = {"1", "true", "yes", "on"}
BOOL_FALSE = {"0", "false", "no", "off"}


def basename(filepath: str) -> str:
    """Default ``rename``: key loaded files by their file name."""
    return PurePath(filepath).name


DEFAULT_OPTIONS: dict[str, Any] = {
    "ext": "*",
    "view_engine": None,
    "layout": None,
    "partial_layout": None,
    "layout_tag": "body",
    "layout_delims": ("{%", "%}"),
    "prefer_data": True,
    "merge_partials": True,
    "cache_anonymous": False,
    "strict_errors": True,
    "rename": basename,
    "delims": None,
    "context_fn": None,
}

_BOOL_KEYS = frozenset({"prefer_data", "merge_partials", "cache_anonymous", "strict_errors"})
_ENV_KEYS = ("layout", "partial_layout", "view_engine", "layout_tag", "merge_partials", "prefer_data", "cache_anonymous")


def _coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in BOOL_TRUE:
        return True
    if normalized in BOOL_FALSE:
        return False
    raise ConfigurationError(
        f"Invalid value '{value}' for option '{key}'. Expected a boolean (true/false).",
        code=ErrorCode.C003,
    )


def _coerce_pair(key: str, value: Any) -> tuple[str, str]:
    if isinstance(value, (list, tuple)) and len(value) == 2 and all(isinstance(v, str) for v in value):
        return (value[0], value[1])
    raise ConfigurationError(
        f"Invalid value '{value}' for option '{key}'. Expected an [open, close] pair of strings.",
        code=ErrorCode.C003,
    )


class Options:
    """
    Option store with defaults.

    Example:
        >>> opts = Options({"layout": "default"})
        >>> opts.get("layout")
        'default'
        >>> opts.get("layout_tag")
        'body'

    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(DEFAULT_OPTIONS)
        if values:
            self.update(values)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if key in _BOOL_KEYS:
            value = _coerce_bool(key, value)
        elif key == "layout_delims":
            value = _coerce_pair(key, value)
        elif key == "rename" and not callable(value):
            raise ConfigurationError(
                "Option 'rename' must be callable.",
                code=ErrorCode.C003,
            )
        elif key == "context_fn" and value is not None and not callable(value):
            raise ConfigurationError(
                "Option 'context_fn' must be callable or None.",
                code=ErrorCode.C003,
            )
        self._values[key] = value

    def update(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self.set(key, value)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def as_dict(self) -> dict[str, Any]:
        return dict(self._values)

    @classmethod
    def from_toml(cls, path: str | Path) -> Options:
        """
        Load options from the ``[template]`` table of a TOML file.

        Raises:
            ConfigurationError: If the file cannot be parsed
        """
        path = Path(path)
        try:
            with path.open("rb") as fh:
                document = tomllib.load(fh)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigurationError(
                f"Cannot read options from {path}: {exc}",
                code=ErrorCode.C003,
                file_path=str(path),
            ) from exc
        table = document.get("template", {})
        if not isinstance(table, dict):
            raise ConfigurationError(
                f"[template] in {path} must be a table.",
                code=ErrorCode.C003,
                file_path=str(path),
            )
        return cls(table)

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> Options:
        """Build options from ``STENCIL_*`` variables (e.g. ``STENCIL_LAYOUT``)."""
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for key in _ENV_KEYS:
            raw = environ.get(f"{ENV_PREFIX}{key.upper()}")
            if raw is not None and raw != "":
                values[key] = raw
        return cls(values)
