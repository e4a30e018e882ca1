"""
Tests for normalization: input shapes, front matter, batch policy and
the fixed point property.
"""

from __future__ import annotations

import asyncio
import logging

import pytest

from stencil import Template
from stencil.errors import ErrorCode, NormalizationError, UnsupportedOperationError

FRONT_MATTER = "---\nname: AAA\n---\nThis is content."


class TestInputShapes:
    def test_key_and_content(self, template) -> None:
        template.add("partial", "a.md", FRONT_MATTER)
        record = template.get("partial", "a.md")
        assert record.path == "a.md"
        assert record.content == "This is content."
        assert record.data == {"name": "AAA"}
        assert record.orig == {"content": FRONT_MATTER}

    def test_mapping_of_entries_uses_key_as_path(self, template) -> None:
        template.add("partial", {"a.md": {"content": FRONT_MATTER, "data": {"c": "c"}}})
        record = template.get("partial", "a.md")
        assert record.path == "a.md"
        assert record.data == {"c": "c", "name": "AAA"}

    def test_entry_path_is_kept(self, template) -> None:
        template.add("partial", {"a": {"path": "a.md", "content": FRONT_MATTER}})
        assert template.get("partial", "a").path == "a.md"

    def test_record_shaped_mapping(self, template) -> None:
        template.add("partial", {"path": "a.md", "content": "A", "title": "x"})
        record = template.get("partial", "a.md")
        assert record.locals == {"title": "x"}

    def test_front_matter_and_locals_are_both_kept(self, template) -> None:
        template.add("partials", {"a.md": {"content": FRONT_MATTER, "name": "BBB"}})
        record = template.get("partial", "a.md")
        assert record.data == {"name": "AAA"}
        assert record.locals == {"name": "BBB"}

    def test_add_locals_and_options(self, template) -> None:
        template.add("page", "a.md", "A", {"title": "Home"}, {"ext": "hbs"})
        record = template.get("page", "a.md")
        assert record.locals == {"title": "Home"}
        assert record.options == {"ext": "hbs"}
        assert record.type == "pages"

    def test_bare_string_gets_generated_key(self, template) -> None:
        records = template.normalize("Just text")
        (key, record), = records.items()
        assert template.ids.owns(key)
        assert record.path == key
        assert record.content == "Just text"

    def test_front_matter_only_for_markdown(self, template) -> None:
        template.add("partial", "a.txt", FRONT_MATTER)
        record = template.get("partial", "a.txt")
        assert record.content == FRONT_MATTER
        assert record.data == {}


class TestBatchPolicy:
    def test_missing_content_aborts_whole_batch(self, template) -> None:
        with pytest.raises(NormalizationError) as exc_info:
            template.add_many("page", {"a.md": "A", "b.md": {"title": "no content"}})
        assert exc_info.value.code is ErrorCode.N002
        assert template.get_all("page") == {}

    def test_list_entry_without_path_aborts_whole_batch(self, template) -> None:
        with pytest.raises(NormalizationError) as exc_info:
            template.add_many("page", [{"path": "a.md", "content": "A"}, {"content": "B"}])
        assert exc_info.value.code is ErrorCode.N001
        assert template.get_all("page") == {}

    def test_lenient_mode_skips_entry(self, log_events) -> None:
        template = Template({"strict_errors": False})
        template.add_many("page", {"a.md": "A", "b.md": {"title": "no content"}})
        assert set(template.get_all("page")) == {"a.md"}
        assert "template_missing_content" in log_events(logging.WARNING)

    def test_add_many_locals_apply_to_every_entry(self, template) -> None:
        template.add_many("page", {"a.md": "A", "b.md": "B"}, {"site": "docs"})
        assert all(record.locals == {"site": "docs"} for record in template.get_all("page").values())


class TestFixedPoint:
    def test_renormalizing_a_record_is_a_no_op(self, template) -> None:
        template.add("page", "a.md", {"content": FRONT_MATTER, "name": "BBB"}, options={"ext": "md"})
        record = template.get("page", "a.md")

        again = template.normalize(record.to_dict())[record.path]

        assert again == record

    def test_renormalizing_twice_is_stable(self, template) -> None:
        first = template.normalize({"path": "x.md", "content": FRONT_MATTER})["x.md"]
        second = template.normalize(first.to_dict())["x.md"]
        third = template.normalize(second.to_dict())["x.md"]
        assert first == second == third


class TestParse:
    def test_parse_uses_extension_stack(self, template) -> None:
        record = template.parse_sync({"path": "a.md", "content": FRONT_MATTER})
        assert record.data == {"name": "AAA"}

    def test_parse_with_explicit_stack(self, template) -> None:
        def shout(record):
            record.content = record.content.upper()
            return record

        record = template.parse_sync("quiet", stack=[shout])
        assert record.content == "QUIET"

    def test_custom_parser_runs_after_front_matter(self, template) -> None:
        def add_title(record):
            record.data.setdefault("title", record.data.get("name", "").lower())
            return record

        template.parser("md", add_title)
        assert len(template.get_parsers("md")) == 2

        template.add("page", "a.md", FRONT_MATTER)
        assert template.get("page", "a.md").data == {"name": "AAA", "title": "aaa"}

    def test_parser_returning_nothing_fails(self, template) -> None:
        template.parser("txt", lambda record: None)
        with pytest.raises(NormalizationError):
            template.add("page", "a.txt", "A")

    def test_get_parsers_unknown_extension(self, template) -> None:
        assert template.get_parsers("nope") is None

    def test_async_parse_awaits_async_parsers(self, template) -> None:
        async def stamp(record):
            await asyncio.sleep(0)
            record.data["stamped"] = True
            return record

        template.parser("md", stamp)
        record = asyncio.run(template.parse({"path": "a.md", "content": FRONT_MATTER}))
        assert record.data == {"name": "AAA", "stamped": True}
        assert record.content == "This is content."

    def test_async_parse_runs_sync_parsers(self, template) -> None:
        record = asyncio.run(template.parse({"path": "a.md", "content": FRONT_MATTER}))
        assert record.data == {"name": "AAA"}

    def test_async_parser_in_sync_path_fails(self, template) -> None:
        async def stamp(record):
            return record

        template.parser("txt", stamp)
        with pytest.raises(UnsupportedOperationError) as exc_info:
            template.parse_sync({"path": "a.txt", "content": "A"})
        assert exc_info.value.code is ErrorCode.N004
        with pytest.raises(UnsupportedOperationError):
            template.add("page", "a.txt", "A")
