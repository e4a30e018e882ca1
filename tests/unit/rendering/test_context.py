"""
Tests for render context layering and partial merging.
"""

from __future__ import annotations

import pytest

from stencil.core.record import TemplateRecord
from stencil.core.types import TypeRegistry
from stencil.errors import TemplateRenderError
from stencil.rendering.context import CONTEXT_LAYERS, LOCALS_LAST_LAYERS, build_context, merge_partials


class TestBuildContext:
    def test_layer_order(self) -> None:
        assert CONTEXT_LAYERS == ("global_data", "call_locals", "record_fields", "record_locals", "record_data")
        assert LOCALS_LAST_LAYERS == ("global_data", "call_locals", "record_fields", "record_data", "record_locals")

    def test_front_matter_is_authoritative(self) -> None:
        record = TemplateRecord(path="a.md", content="x", data={"name": "AAA"}, locals={"name": "BBB"})
        context = build_context({"name": "global"}, record, {"name": "call"})
        assert context["name"] == "AAA"

    def test_locals_win_without_prefer_data(self) -> None:
        record = TemplateRecord(path="a.md", content="x", data={"name": "AAA"}, locals={"name": "BBB"})
        assert build_context(None, record, prefer_data=False)["name"] == "BBB"

    def test_nested_values_merge(self) -> None:
        record = TemplateRecord(path="a.md", content="x", data={"site": {"title": "Docs"}})
        context = build_context({"site": {"title": "Site", "url": "/"}}, record)
        assert context["site"] == {"title": "Docs", "url": "/"}

    def test_record_fields_are_exposed(self) -> None:
        record = TemplateRecord(path="a.md", content="x", layout="default")
        context = build_context(None, record)
        assert context["path"] == "a.md"
        assert context["layout"] == "default"
        assert "orig" not in context

    def test_context_fn_overrides_layers(self) -> None:
        record = TemplateRecord(path="a.md", content="x", data={"name": "AAA"})
        context = build_context(
            {"site": "global"},
            record,
            {"name": "call"},
            context_fn=lambda rec, locals: {"only": rec.path, **locals},
        )
        assert context == {"only": "a.md", "name": "call"}

    def test_context_fn_result_must_be_mapping(self) -> None:
        record = TemplateRecord(path="a.md", content="x")
        with pytest.raises(TemplateRenderError):
            build_context(None, record, context_fn=lambda rec, locals: None)

    def test_inputs_are_not_mutated(self) -> None:
        global_data = {"site": {"title": "Site"}}
        record = TemplateRecord(path="a.md", content="x", data={"site": {"title": "Docs"}})
        build_context(global_data, record)
        assert global_data == {"site": {"title": "Site"}}


class TestMergePartials:
    def _partials(self) -> TypeRegistry:
        registry = TypeRegistry()
        partials = registry.create("partial", "partials")
        snippets = registry.create("snippet", "snippets")
        partials.collection["p.md"] = TemplateRecord(path="p.md", content="P", data={"color": "red"})
        snippets.collection["s.md"] = TemplateRecord(path="s.md", content="S", locals={"color": "blue"})
        return registry

    def test_merged_map(self) -> None:
        context = merge_partials({"title": "x"}, self._partials().partials)
        assert context["partials"] == {"p.md": "P", "s.md": "S"}
        assert context["title"] == "x"

    def test_per_type_maps(self) -> None:
        context = merge_partials({}, self._partials().partials, merge=False)
        assert context["partials"] == {"p.md": "P"}
        assert context["snippets"] == {"s.md": "S"}

    def test_partial_values_fold_over_context(self) -> None:
        registry = self._partials()
        assert merge_partials({}, registry.partials)["color"] == "blue"
        assert merge_partials({"color": "green"}, registry.partials)["color"] == "blue"

    def test_context_is_not_mutated(self) -> None:
        context = {"color": "green", "partials": {"x.md": "X"}}
        merged = merge_partials(context, self._partials().partials)
        assert merged["partials"] == {"x.md": "X", "p.md": "P", "s.md": "S"}
        assert context == {"color": "green", "partials": {"x.md": "X"}}
