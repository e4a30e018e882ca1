"""
Delimiter sets.

A delimiter set names the tokens an engine looks for:

- ``open`` / ``close`` around statements (``<% if x %>``)
- ``interpolate_open`` / ``interpolate_close`` around expressions whose
  value is written to the output (``<%= name %>``)
- ``layout_open`` / ``layout_close`` around the body marker inside layouts
  (``{% body %}``)

Sets are registered by extension (``"md"``) or by any user-chosen name
(``"es6"``) and looked up the same way.

"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from stencil.errors import ConfigurationError, ErrorCode
from stencil.utils.observability.logger import get_logger
from stencil.utils.primitives.paths import UNIVERSAL, format_ext

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = ["DEFAULT_DELIMS", "DelimiterRegistry", "DelimiterSet"]

logger = get_logger(__name__)


@dataclass(frozen=True)
class DelimiterSet:
    """Open/close tokens for one engine configuration."""

    open: str = "<%"
    close: str = "%>"
    interpolate_open: str = ""
    interpolate_close: str = ""
    layout_open: str = "{%"
    layout_close: str = "%}"
    statements: bool = True

    def __post_init__(self) -> None:
        # Interpolation defaults to ``<open>=`` ... ``<close>``
        if not self.interpolate_open:
            object.__setattr__(self, "interpolate_open", f"{self.open}=")
        if not self.interpolate_close:
            object.__setattr__(self, "interpolate_close", self.close)

    @classmethod
    def from_pair(
        cls,
        delims: Sequence[str],
        layout_delims: Sequence[str] | None = None,
        **overrides: Any,
    ) -> DelimiterSet:
        if len(delims) != 2:
            raise ConfigurationError(
                f"Delimiters must be an [open, close] pair, got {list(delims)!r}",
                code=ErrorCode.C003,
            )
        kwargs: dict[str, Any] = {"open": delims[0], "close": delims[1]}
        if layout_delims:
            kwargs["layout_open"], kwargs["layout_close"] = layout_delims[0], layout_delims[1]
        kwargs.update(overrides)
        return cls(**kwargs)

    def with_layout_delims(self, layout_delims: Sequence[str]) -> DelimiterSet:
        return replace(self, layout_open=layout_delims[0], layout_close=layout_delims[1])

    @property
    def interpolation_regex(self) -> re.Pattern[str]:
        return re.compile(
            re.escape(self.interpolate_open) + r"([\s\S]+?)" + re.escape(self.interpolate_close)
        )

    @property
    def evaluate_regex(self) -> re.Pattern[str]:
        return re.compile(re.escape(self.open) + r"([\s\S]+?)" + re.escape(self.close))

    def layout_tag_regex(self, tag: str) -> re.Pattern[str]:
        """Pattern matching ``{% body %}`` for ``tag="body"``."""
        return re.compile(
            re.escape(self.layout_open) + r"\s*" + re.escape(tag) + r"\s*" + re.escape(self.layout_close)
        )


DEFAULT_DELIMS = DelimiterSet()


class DelimiterRegistry:
    """Named delimiter sets with the universal ``*`` set as fallback."""

    def __init__(self) -> None:
        self._sets: dict[str, DelimiterSet] = {UNIVERSAL: DEFAULT_DELIMS}

    def add(
        self,
        name: str,
        delims: Sequence[str] | DelimiterSet,
        layout_delims: Sequence[str] | None = None,
        **overrides: Any,
    ) -> DelimiterSet:
        """
        Register a delimiter set under ``name``.

        Args:
            name: Extension or arbitrary name
            delims: ``[open, close]`` pair or a ready ``DelimiterSet``
            layout_delims: Optional ``[open, close]`` pair for layout tags
            **overrides: Any other ``DelimiterSet`` field
                (``interpolate_open``, ``statements``, ...)

        """
        if isinstance(delims, DelimiterSet):
            delim_set = delims
            if layout_delims:
                delim_set = delim_set.with_layout_delims(layout_delims)
            if overrides:
                delim_set = replace(delim_set, **overrides)
        else:
            delim_set = DelimiterSet.from_pair(delims, layout_delims, **overrides)
        key = format_ext(name) or UNIVERSAL
        self._sets[key] = delim_set
        logger.debug("delims_registered", name=key, open=delim_set.open, close=delim_set.close)
        return delim_set

    def get(self, name: str | None) -> DelimiterSet | None:
        key = format_ext(name)
        if key is None:
            return None
        return self._sets.get(key)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and format_ext(name) in self._sets

    def coerce(self, value: Any) -> DelimiterSet | None:
        """
        Turn a per-template or per-type ``delims`` value into a set.

        Accepts a ``DelimiterSet``, an ``[open, close]`` pair, or the name
        of a registered set. Returns None for empty values.
        """
        if not value:
            return None
        if isinstance(value, DelimiterSet):
            return value
        if isinstance(value, str):
            found = self.get(value)
            if found is None:
                raise ConfigurationError(
                    f"Unknown delimiter set: '{value}'",
                    code=ErrorCode.C003,
                    suggestion="Register it with add_delims(name, [open, close])",
                )
            return found
        return DelimiterSet.from_pair(list(value))
