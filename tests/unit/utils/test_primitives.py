"""
Tests for dictionary, id and path primitives.
"""

from __future__ import annotations

from stencil.utils.primitives import IdGenerator, deep_merge, extname, format_ext, omit, pick


class TestDeepMerge:
    def test_later_sources_win(self) -> None:
        assert deep_merge({"a": 1, "b": 1}, {"b": 2}, None, {"c": 3}) == {"a": 1, "b": 2, "c": 3}

    def test_nested_mappings_merge(self) -> None:
        assert deep_merge({"a": {"x": 1}}, {"a": {"y": 2}}) == {"a": {"x": 1, "y": 2}}

    def test_inputs_are_not_mutated(self) -> None:
        first = {"a": {"x": 1}, "items": [1]}
        result = deep_merge(first, {"a": {"y": 2}})
        result["a"]["z"] = 3
        result["items"].append(2)
        assert first == {"a": {"x": 1}, "items": [1]}

    def test_non_mapping_replaces_mapping(self) -> None:
        assert deep_merge({"a": {"x": 1}}, {"a": "flat"}) == {"a": "flat"}


def test_omit_and_pick() -> None:
    source = {"a": 1, "b": 2, "c": 3}
    assert omit(source, ["a"]) == {"b": 2, "c": 3}
    assert pick(source, ["a", "z"]) == {"a": 1}
    assert omit(None, ["a"]) == {}


def test_id_generator() -> None:
    ids = IdGenerator()
    assert [ids(), ids()] == ["__id__1", "__id__2"]
    assert ids.owns("__id__7")
    assert not ids.owns("home.md")
    assert IdGenerator()() == "__id__1"


def test_extensions() -> None:
    assert format_ext("md") == ".md"
    assert format_ext(".md") == ".md"
    assert format_ext("*") == "*"
    assert format_ext(None) is None
    assert extname("posts/a.md") == ".md"
    assert extname("about") is None
