"""
Tests for TemplateLoader and bulk adds from disk.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from stencil.core.loader import TemplateLoader
from stencil.core.record import TemplateRecord
from stencil.errors import NormalizationError


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    (tmp_path / "a.md").write_text("---\ntitle: A\n---\n<%= title %> page", encoding="utf-8")
    (tmp_path / "b.md").write_text("B page", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
    return tmp_path


class TestTemplateLoader:
    def test_glob_keys_by_basename(self, template_dir: Path) -> None:
        loaded = TemplateLoader(cwd=template_dir).load("*.md")
        assert set(loaded) == {"a.md", "b.md"}
        assert loaded["b.md"]["content"] == "B page"
        assert loaded["b.md"]["locals"] == {"src": str(template_dir / "b.md")}

    def test_glob_list(self, template_dir: Path) -> None:
        loaded = TemplateLoader(cwd=template_dir).load(["a.md", "*.txt"])
        assert set(loaded) == {"a.md", "notes.txt"}

    def test_rename_option(self, template_dir: Path) -> None:
        loaded = TemplateLoader(cwd=template_dir).load("*.md", options={"rename": lambda p: Path(p).stem})
        assert set(loaded) == {"a", "b"}

    def test_mapping_values(self) -> None:
        loaded = TemplateLoader().load(
            {
                "a.md": "A",
                "b.md": {"content": "B"},
                "c.md": TemplateRecord(path="c.md", content="C"),
            }
        )
        assert loaded["a.md"] == {"content": "A"}
        assert loaded["b.md"] == {"content": "B"}
        assert loaded["c.md"]["content"] == "C"

    def test_list_requires_path(self) -> None:
        with pytest.raises(NormalizationError):
            TemplateLoader().load([{"content": "no path"}])

    def test_unsupported_source(self) -> None:
        with pytest.raises(NormalizationError):
            TemplateLoader().load(42)

    def test_no_matches_is_empty(self, tmp_path: Path) -> None:
        assert TemplateLoader(cwd=tmp_path).load("*.md") == {}


class TestAddManyFromDisk:
    def test_add_many_glob_and_render(self, template, template_dir: Path) -> None:
        template.add_many("page", str(template_dir / "*.md"))

        assert set(template.get_all("page")) == {"a.md", "b.md"}
        assert template.render_sync("a.md") == "A page"

    def test_rename_via_option(self, template, template_dir: Path) -> None:
        template.option("rename", lambda p: Path(p).stem)
        template.add_many("page", str(template_dir / "*.md"))
        assert set(template.get_all("page")) == {"a", "b"}

    def test_loaded_source_path_is_a_local(self, template, template_dir: Path) -> None:
        template.add_many("page", str(template_dir / "b.md"))
        assert template.get("page", "b.md").locals["src"] == str(template_dir / "b.md")
