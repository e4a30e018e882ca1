"""
Tests for the front matter parser and parser registry.
"""

from __future__ import annotations

import pytest

from stencil.core.record import TemplateRecord
from stencil.errors import ConfigurationError, ErrorCode, NormalizationError
from stencil.parsing import FrontMatterParser, NoopParser, ParserRegistry, split_front_matter


class TestSplitFrontMatter:
    def test_block_and_body(self) -> None:
        assert split_front_matter("---\nname: AAA\n---\nThis is content.") == ("name: AAA\n", "This is content.")

    def test_no_block(self) -> None:
        assert split_front_matter("plain") == (None, "plain")

    def test_block_must_start_the_text(self) -> None:
        assert split_front_matter("x\n---\na: 1\n---\n")[0] is None

    def test_crlf(self) -> None:
        source, body = split_front_matter("---\r\ntitle: Home\r\n---\r\nBody")
        assert "title: Home" in source
        assert body == "Body"

    def test_empty_block(self) -> None:
        assert split_front_matter("---\n---\nBody") == ("", "Body")


class TestFrontMatterParser:
    def test_data_merges_over_existing(self) -> None:
        record = TemplateRecord(path="a.md", content="---\nname: AAA\n---\nbody", data={"c": "c", "name": "old"})
        parsed = FrontMatterParser().parse(record)
        assert parsed.data == {"c": "c", "name": "AAA"}
        assert parsed.content == "body"

    def test_invalid_yaml(self) -> None:
        record = TemplateRecord(path="a.md", content="---\nname: [unclosed\n---\nbody")
        with pytest.raises(NormalizationError) as exc_info:
            FrontMatterParser().parse(record)
        assert exc_info.value.code is ErrorCode.N003
        assert isinstance(exc_info.value.__cause__, Exception)

    def test_non_mapping_front_matter(self) -> None:
        record = TemplateRecord(path="a.md", content="---\n- a\n- b\n---\nbody")
        with pytest.raises(NormalizationError):
            FrontMatterParser().parse(record)

    def test_empty_front_matter(self) -> None:
        record = TemplateRecord(path="a.md", content="---\n---\nbody")
        assert FrontMatterParser().parse(record).data == {}


class TestParserRegistry:
    def test_unknown_extension_falls_back_to_universal(self) -> None:
        registry = ParserRegistry()
        noop = NoopParser()
        registry.register("*", noop)
        assert registry.get("txt") is None
        assert registry.resolve("txt") == [noop.parse]

    def test_register_many(self) -> None:
        registry = ParserRegistry()
        registry.register(["md", "markdown"], FrontMatterParser())
        assert "md" in registry
        assert ".markdown" in registry

    def test_get_returns_copy(self) -> None:
        registry = ParserRegistry()
        registry.register("md", NoopParser())
        registry.get("md").clear()
        assert len(registry.get("md")) == 1

    def test_rejects_non_parser(self) -> None:
        with pytest.raises(ConfigurationError):
            ParserRegistry().register("md", 42)
