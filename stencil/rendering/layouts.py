"""
Layout composition.

A layout is a template containing a body marker (``{% body %}`` by
default). Applying a layout substitutes the current content for the
marker; if the layout names a layout of its own, the result is wrapped
again, until a layout with no further reference is reached.

Layouts form a directed graph keyed by name. Resolution threads a visited
list through the walk and fails with ``LayoutCycleError`` the moment a
name repeats (``a -> b -> a``), rather than counting depth.

Resolvers are per extension because each extension can use its own body
marker delimiters; all of them read from the same layout lookup table.

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from stencil.errors import ErrorCode, LayoutCycleError, LayoutNotFoundError
from stencil.rendering.delimiters import DEFAULT_DELIMS
from stencil.utils.observability.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from stencil.core.record import TemplateRecord

__all__ = ["LAYOUT_PRECEDENCE", "LayoutResolver", "determine_layout"]

logger = get_logger(__name__)


def _from_record(record: TemplateRecord) -> Any:
    return record.layout


def _from_data(record: TemplateRecord) -> Any:
    return record.data.get("layout")


def _from_locals(record: TemplateRecord) -> Any:
    return record.locals.get("layout")


# Where a record's layout name comes from, highest priority first.
LAYOUT_PRECEDENCE: tuple[tuple[str, Callable[[TemplateRecord], Any]], ...] = (
    ("record.layout", _from_record),
    ("record.data.layout", _from_data),
    ("record.locals.layout", _from_locals),
)


def determine_layout(record: TemplateRecord, default: str | None = None) -> str | None:
    """
    Name of the layout ``record`` should be wrapped with.

    Falls back to ``default`` when no source in ``LAYOUT_PRECEDENCE``
    names one.
    """
    for _, provider in LAYOUT_PRECEDENCE:
        value = provider(record)
        if value:
            return str(value)
    return default or None


def layout_body(layout: TemplateRecord) -> str:
    """Parsed content of a layout, ignoring any wrapping applied to it since."""
    return layout.meta.get("parsed_content", layout.content) or ""


class LayoutResolver:
    """
    Compose layout chains for one extension.

    Args:
        ext: Extension this resolver serves
        tag: Body marker name
        delims: ``(open, close)`` around the body marker
        layouts: Shared name -> layout record lookup

    """

    def __init__(
        self,
        ext: str,
        *,
        tag: str = "body",
        delims: Sequence[str] = (DEFAULT_DELIMS.layout_open, DEFAULT_DELIMS.layout_close),
        layouts: Mapping[str, TemplateRecord] | None = None,
    ) -> None:
        self.ext = ext
        self.tag = tag
        self.delims = (delims[0], delims[1])
        self.body_regex = DEFAULT_DELIMS.with_layout_delims(self.delims).layout_tag_regex(tag)
        self.layouts: Mapping[str, TemplateRecord] = layouts if layouts is not None else {}

    def set_layouts(self, layouts: Mapping[str, TemplateRecord]) -> None:
        self.layouts = layouts

    def compose(self, content: str, name: str) -> tuple[str, list[str]]:
        """
        Wrap ``content`` in the chain starting at layout ``name``.

        Returns:
            The composed content and the chain of layout names applied,
            innermost first.

        Raises:
            LayoutNotFoundError: If a layout in the chain is not registered
            LayoutCycleError: If the chain revisits a layout

        """
        visited: list[str] = []
        current: str | None = name
        while current:
            if current in visited:
                raise LayoutCycleError(
                    [*visited, current],
                    code=ErrorCode.L002,
                    suggestion="Remove the 'layout' reference that points back into the chain",
                )
            layout = self.layouts.get(current)
            if layout is None:
                raise LayoutNotFoundError(
                    current,
                    code=ErrorCode.L001,
                    suggestion="Register it with template.add('layout', name, content)",
                )
            visited.append(current)

            body = layout_body(layout)
            if self.body_regex.search(body) is None:
                logger.warning("layout_missing_body_tag", layout=current, tag=self.tag)
            content = self.body_regex.sub(lambda _match, inner=content: inner, body)
            current = determine_layout(layout)

        return content, visited

    def apply(self, record: TemplateRecord, name: str | None) -> str:
        """
        Apply the layout chain to ``record`` once.

        The record's content is replaced by the composed result and the
        record is flagged, so applying again returns the same content.
        A missing layout is logged and leaves the content unwrapped; a
        cycle propagates.
        """
        if record.layout_applied or not name:
            return record.content or ""

        try:
            composed, chain = self.compose(record.content or "", name)
        except LayoutNotFoundError as exc:
            logger.warning("layout_not_found", layout=exc.layout, path=record.path, ext=self.ext)
            return record.content or ""

        record.content = composed
        record.layout_applied = True
        record.meta["layout_chain"] = chain
        logger.debug("layout_applied", path=record.path, chain=chain)
        return composed
