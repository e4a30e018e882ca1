"""
YAML front-matter parser.

Splits a leading block delimited by ``---`` lines from the body:

    ---
    title: Home
    layout: default
    ---
    Body text.

The YAML mapping is merged over ``record.data`` (front matter wins, since
it travels with the content) and ``record.content`` becomes the body.
Content without a front-matter block is left alone, so running the parser
twice is harmless.

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import yaml

from stencil.errors import ErrorCode, NormalizationError
from stencil.utils.observability.logger import get_logger
from stencil.utils.primitives.dicts import deep_merge

if TYPE_CHECKING:
    from stencil.core.record import TemplateRecord

__all__ = ["FrontMatterParser", "split_front_matter"]

logger = get_logger(__name__)

_FRONT_MATTER = re.compile(
    r"\A---[ \t]*\r?\n(?P<yaml>.*?)^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


def split_front_matter(text: str) -> tuple[str | None, str]:
    """
    Return ``(yaml_source, body)``; ``yaml_source`` is None without a block.

    Example:
        >>> split_front_matter("---\\nname: AAA\\n---\\nThis is content.")
        ('name: AAA\\n', 'This is content.')

    """
    match = _FRONT_MATTER.match(text)
    if match is None:
        return None, text
    return match.group("yaml"), text[match.end() :]


class FrontMatterParser:
    """Extract YAML front matter into ``record.data``."""

    def parse(self, record: TemplateRecord) -> TemplateRecord:
        source, body = split_front_matter(record.content or "")
        if source is None:
            return record

        try:
            parsed = yaml.safe_load(source)
        except yaml.YAMLError as exc:
            raise NormalizationError(
                f"Invalid front matter: {exc}",
                code=ErrorCode.N003,
                file_path=record.path,
                suggestion="Check the YAML between the leading '---' lines",
            ) from exc

        if parsed is None:
            parsed = {}
        if not isinstance(parsed, dict):
            raise NormalizationError(
                f"Front matter must be a mapping, got {type(parsed).__name__}",
                code=ErrorCode.N003,
                file_path=record.path,
            )

        record.data = deep_merge(record.data, parsed)
        record.content = body
        logger.debug("front_matter_parsed", path=record.path, keys=sorted(parsed))
        return record
