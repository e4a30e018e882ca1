"""
Tests for Options defaults, coercion, TOML files and environment overrides.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from stencil import Template
from stencil.config import DEFAULT_OPTIONS, Options, basename
from stencil.errors import ConfigurationError, ErrorCode


class TestOptions:
    def test_defaults(self) -> None:
        options = Options()
        assert options.get("layout_tag") == "body"
        assert options.get("layout_delims") == ("{%", "%}")
        assert options.get("prefer_data") is True
        assert options.get("merge_partials") is True
        assert options.get("cache_anonymous") is False
        assert options.get("partial_layout") is None
        assert options.as_dict() == DEFAULT_OPTIONS

    def test_bool_coercion(self) -> None:
        options = Options({"prefer_data": "false", "cache_anonymous": "yes"})
        assert options["prefer_data"] is False
        assert options["cache_anonymous"] is True

    def test_invalid_bool(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            Options({"merge_partials": "sometimes"})
        assert exc_info.value.code is ErrorCode.C003

    def test_layout_delims_must_be_pair(self) -> None:
        assert Options({"layout_delims": ["[[", "]]"]})["layout_delims"] == ("[[", "]]")
        with pytest.raises(ConfigurationError):
            Options({"layout_delims": "{%"})

    def test_context_fn_must_be_callable(self) -> None:
        assert Options().get("context_fn") is None
        assert callable(Options({"context_fn": lambda record, locals: {}})["context_fn"])
        with pytest.raises(ConfigurationError):
            Options({"context_fn": "not callable"})

    def test_rename_must_be_callable(self) -> None:
        with pytest.raises(ConfigurationError):
            Options({"rename": "stem"})

    def test_basename(self) -> None:
        assert basename("content/posts/a.md") == "a.md"


class TestOptionsFromToml:
    def test_reads_template_table(self, tmp_path: Path) -> None:
        config = tmp_path / "stencil.toml"
        config.write_text(
            """
[template]
layout = "default"
merge_partials = false
layout_delims = ["[[", "]]"]
            """,
            encoding="utf-8",
        )
        options = Options.from_toml(config)
        assert options["layout"] == "default"
        assert options["merge_partials"] is False
        assert options["layout_delims"] == ("[[", "]]")

    def test_missing_table_uses_defaults(self, tmp_path: Path) -> None:
        config = tmp_path / "stencil.toml"
        config.write_text("[other]\nx = 1\n", encoding="utf-8")
        assert Options.from_toml(config).as_dict() == DEFAULT_OPTIONS

    def test_invalid_toml(self, tmp_path: Path) -> None:
        config = tmp_path / "stencil.toml"
        config.write_text("[template\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            Options.from_toml(config)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            Options.from_toml(tmp_path / "nope.toml")

    def test_template_accepts_loaded_options(self, tmp_path: Path) -> None:
        config = tmp_path / "stencil.toml"
        config.write_text('[template]\nlayout = "default"\n', encoding="utf-8")
        template = Template(Options.from_toml(config))
        template.add("layout", "default", "<main>{% body %}</main>")
        template.add("page", "a.md", "x")
        assert template.render_sync("a.md") == "<main>x</main>"


class TestOptionsFromEnvironment:
    def test_reads_prefixed_variables(self, monkeypatch) -> None:
        monkeypatch.setenv("STENCIL_LAYOUT", "base")
        monkeypatch.setenv("STENCIL_PREFER_DATA", "0")
        monkeypatch.setenv("STENCIL_VIEW_ENGINE", "md")
        options = Options.from_environment()
        assert options["layout"] == "base"
        assert options["prefer_data"] is False
        assert options["view_engine"] == "md"

    def test_empty_values_are_ignored(self, monkeypatch) -> None:
        monkeypatch.setenv("STENCIL_LAYOUT", "")
        assert Options.from_environment()["layout"] is None

    def test_explicit_mapping(self) -> None:
        options = Options.from_environment({"STENCIL_PARTIAL_LAYOUT": "plain", "OTHER": "x"})
        assert options["partial_layout"] == "plain"


class TestTemplateOption:
    def test_get_and_set(self, template) -> None:
        assert template.option("layout") is None
        assert template.option("layout", "default") is template
        assert template.option("layout") == "default"

    def test_set_many(self, template) -> None:
        template.option({"layout": "a", "cache_anonymous": "true"})
        assert template.option("layout") == "a"
        assert template.option("cache_anonymous") is True
