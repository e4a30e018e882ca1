"""
Per-extension parser stacks.

Each extension owns an ordered list of transforms. Normalization runs the
stack for a record's extension, feeding the output of one parser to the
next. The ``*`` stack is used when an extension has none of its own.

"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any

from stencil.errors import ConfigurationError, ErrorCode, NormalizationError, UnsupportedOperationError
from stencil.utils.observability.logger import get_logger
from stencil.utils.primitives.paths import UNIVERSAL, format_ext

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from stencil.core.record import TemplateRecord

    ParserFn = Callable[[TemplateRecord], TemplateRecord]

__all__ = ["ParserRegistry", "as_parser_fn"]

logger = get_logger(__name__)


def as_parser_fn(parser: Any) -> ParserFn:
    """Accept a callable or an object with ``parse(record)``."""
    parse = getattr(parser, "parse", None)
    if callable(parse):
        return parse
    if callable(parser):
        return parser
    raise ConfigurationError(
        f"Parser {parser!r} is neither callable nor has a parse() method",
        code=ErrorCode.C003,
    )


class ParserRegistry:
    """Ordered parser stacks keyed by extension."""

    def __init__(self) -> None:
        self._stacks: dict[str, list[ParserFn]] = {}

    def register(self, ext: str | Iterable[str], parser: Any) -> None:
        fn = as_parser_fn(parser)
        exts = [ext] if isinstance(ext, str) else list(ext)
        for one in exts:
            key = format_ext(one) or UNIVERSAL
            self._stacks.setdefault(key, []).append(fn)
            logger.debug("parser_registered", ext=key, parser=_parser_name(fn))

    def get(self, ext: str | None) -> list[ParserFn] | None:
        """Return a copy of the stack for ``ext``, or None if it has none."""
        key = format_ext(ext)
        if key is None or key not in self._stacks:
            return None
        return list(self._stacks[key])

    def resolve(self, ext: str | None) -> list[ParserFn]:
        """Stack for ``ext``, falling back to the universal stack."""
        stack = self.get(ext)
        if stack is None:
            stack = self.get(UNIVERSAL) or []
        return stack

    def __contains__(self, ext: object) -> bool:
        return isinstance(ext, str) and format_ext(ext) in self._stacks

    def run(self, record: TemplateRecord, stack: Sequence[ParserFn]) -> TemplateRecord:
        """
        Apply ``stack`` to ``record`` in order.

        Raises:
            NormalizationError: If a parser returns something other than a
                record with content
            UnsupportedOperationError: If a parser is asynchronous
        """
        for parser in stack:
            result = parser(record)
            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                raise UnsupportedOperationError(
                    f"Parser {_parser_name(parser)!r} is asynchronous",
                    code=ErrorCode.N004,
                    file_path=record.path,
                    suggestion="Use 'await template.parse(...)' or register a synchronous parser",
                )
            record = _checked(parser, record, result)
        return record

    async def run_async(self, record: TemplateRecord, stack: Sequence[ParserFn]) -> TemplateRecord:
        """Like ``run``, awaiting parsers that return an awaitable."""
        for parser in stack:
            result = parser(record)
            if inspect.isawaitable(result):
                result = await result
            record = _checked(parser, record, result)
        return record


def _parser_name(parser: ParserFn) -> str:
    return getattr(parser, "__qualname__", repr(parser))


def _checked(parser: ParserFn, record: TemplateRecord, result: Any) -> TemplateRecord:
    if result is None or getattr(result, "content", None) is None:
        raise NormalizationError(
            f"Parser {_parser_name(parser)!r} did not return a record with content",
            code=ErrorCode.N002,
            file_path=record.path,
        )
    return result
