"""
Tests for TemplateRecord and its cache protocol.
"""

from __future__ import annotations

from stencil.cache import Cacheable
from stencil.core.record import ROOT_KEYS, TemplateRecord


class TestTemplateRecord:
    def test_is_cacheable(self) -> None:
        assert isinstance(TemplateRecord(path="a.md", content="A"), Cacheable)

    def test_unknown_keys_become_locals(self) -> None:
        record = TemplateRecord.from_dict({"path": "a.md", "content": "A", "title": "Home"})
        assert record.locals == {"title": "Home"}
        assert record.data == {}

    def test_explicit_locals_win_over_unknown_keys(self) -> None:
        record = TemplateRecord.from_dict(
            {"path": "a.md", "content": "A", "title": "top", "locals": {"title": "explicit"}}
        )
        assert record.locals == {"title": "explicit"}

    def test_round_trip(self) -> None:
        record = TemplateRecord(
            path="a.md",
            content="body",
            data={"name": "AAA"},
            locals={"name": "BBB"},
            options={"ext": ".hbs"},
            layout="default",
            orig={"content": "---\nname: AAA\n---\nbody"},
            type="pages",
        )
        record.meta["ext"] = ".hbs"

        restored = TemplateRecord.from_dict(record.to_dict())

        assert restored == record
        assert restored.meta == {}
        assert set(record.to_dict()) == set(ROOT_KEYS)

    def test_context_fields_skip_unset_values(self) -> None:
        record = TemplateRecord(path="a.md", content="A", data={"x": 1})
        assert record.context_fields() == {"path": "a.md", "content": "A", "options": {}}
