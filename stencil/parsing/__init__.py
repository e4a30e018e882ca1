"""
Parsers applied to records before they are cached.

Public API:
- ParserRegistry: per-extension ordered parser stacks
- FrontMatterParser: YAML front matter into ``record.data``
- NoopParser: pass-through for the universal stack

"""

from __future__ import annotations

from stencil.parsing.front_matter import FrontMatterParser, split_front_matter
from stencil.parsing.noop import NoopParser
from stencil.parsing.stack import ParserRegistry, as_parser_fn

__all__ = [
    "FrontMatterParser",
    "NoopParser",
    "ParserRegistry",
    "as_parser_fn",
    "split_front_matter",
]
