"""
Tests for delimiter sets, their registry and per-template isolation.
"""

from __future__ import annotations

import pytest

from stencil import Template
from stencil.errors import ConfigurationError
from stencil.rendering.delimiters import DEFAULT_DELIMS, DelimiterRegistry, DelimiterSet


class TestDelimiterSet:
    def test_interpolation_defaults_follow_open_close(self) -> None:
        delims = DelimiterSet.from_pair(["{{", "}}"])
        assert delims.interpolate_open == "{{="
        assert delims.interpolate_close == "}}"

    def test_pair_must_have_two_items(self) -> None:
        with pytest.raises(ConfigurationError):
            DelimiterSet.from_pair(["<%"])

    def test_regexes(self) -> None:
        assert DEFAULT_DELIMS.interpolation_regex.findall("a <%= b %> c") == [" b "]
        assert DEFAULT_DELIMS.layout_tag_regex("body").search("x{%  body %}y") is not None

    def test_sets_are_hashable(self) -> None:
        assert len({DEFAULT_DELIMS, DelimiterSet(), DelimiterSet.from_pair(["<<", ">>"])}) == 2


class TestDelimiterRegistry:
    def test_universal_set_is_primed(self) -> None:
        assert DelimiterRegistry().get("*") == DEFAULT_DELIMS

    def test_names_are_normalized(self) -> None:
        registry = DelimiterRegistry()
        registry.add("hbs", ["{{", "}}"])
        assert registry.get(".hbs") == registry.get("hbs")
        assert "hbs" in registry

    def test_coerce(self) -> None:
        registry = DelimiterRegistry()
        registry.add("es6", ["${", "}"], interpolate_open="${", statements=False)
        assert registry.coerce(None) is None
        assert registry.coerce(["<<", ">>"]).open == "<<"
        assert registry.coerce("es6").statements is False
        with pytest.raises(ConfigurationError):
            registry.coerce("unknown")


class TestDelimiterIsolation:
    @pytest.fixture
    def both(self, template) -> Template:
        template.add("page", "a.md", {"content": "<<= name >>|{{= name }}", "name": "A"}, options={"delims": ["<<", ">>"]})
        template.add("page", "b.md", {"content": "<<= name >>|{{= name }}", "name": "B"}, options={"delims": ["{{", "}}"]})
        return template

    def test_each_template_uses_its_own_delimiters(self, both: Template) -> None:
        assert both.render_sync("a.md") == "A|{{= name }}"
        assert both.render_sync("b.md") == "<<= name >>|B"

    def test_render_order_does_not_matter(self, both: Template) -> None:
        assert both.render_sync("b.md") == "<<= name >>|B"
        assert both.render_sync("a.md") == "A|{{= name }}"

    def test_default_delimiters_are_unaffected(self, both: Template) -> None:
        both.add("page", "c.md", "<%= 'default' %>")
        assert both.render_sync("c.md") == "default"

    def test_type_level_delimiters(self, template) -> None:
        template.create("doc", "docs", is_renderable=True, delims=["<<", ">>"])
        template.add("doc", "foo.md", {"content": "<<= name >>", "name": "Jon"})
        assert template.render_sync("foo.md") == "Jon"

    def test_front_matter_delimiters(self, template) -> None:
        template.add("page", "a.md", "---\ndelims: ['[[', ']]']\nname: Jon\n---\n[[= name ]]")
        assert template.render_sync("a.md") == "Jon"

    def test_es6_set(self, template) -> None:
        template.add("page", "a.md", "Hello ${ name }!", options={"delims": "es6"})
        assert template.render_sync("a.md", {"name": "World"}) == "Hello World!"

    def test_extension_delimiters(self, template) -> None:
        template.add_delims("md", ["{{", "}}"])
        template.add("page", "a.md", "{{= name }}")
        assert template.render_sync("a.md", {"name": "Jon"}) == "Jon"
        assert template.get_delims("md").open == "{{"

    def test_delims_option(self) -> None:
        template = Template({"delims": ["<<", ">>"]})
        template.add("page", "a.md", "<<= name >>")
        assert template.render_sync("a.md", {"name": "Jon"}) == "Jon"
