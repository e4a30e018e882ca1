"""Pass-through parser used for the universal ``*`` stack."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stencil.core.record import TemplateRecord

__all__ = ["NoopParser"]


class NoopParser:
    """Returns the record unchanged."""

    def parse(self, record: TemplateRecord) -> TemplateRecord:
        return record
