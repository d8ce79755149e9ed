"""
Tests for template sources and loaders.
"""

from pathlib import Path

import pytest

from hbs.errors import TemplateNotFoundError
from hbs.io import FileTemplateLoader, FileTemplateSource, MapTemplateLoader, StringTemplateSource

from tests.infrastructure import write


class TestSources:

    def test_string_source_identity_is_filename(self):
        a = StringTemplateSource("x", "one")
        b = StringTemplateSource("x", "two")

        assert a == b
        assert hash(a) == hash(b)
        assert a.last_modified() != b.last_modified()

    def test_string_source_freshness_is_stable(self):
        assert StringTemplateSource("x", "t").last_modified() == StringTemplateSource("y", "t").last_modified()

    def test_file_source_freshness_changes(self, tmp_path: Path):
        path = write(tmp_path / "a.hbs", "one")
        source = FileTemplateSource(path, "a.hbs")
        before = source.last_modified()

        write(path, "changed text")

        assert source.last_modified() != before
        assert source.content() == "changed text"

    def test_file_source_missing(self, tmp_path: Path):
        source = FileTemplateSource(tmp_path / "gone.hbs")

        with pytest.raises(TemplateNotFoundError):
            source.content()
        with pytest.raises(TemplateNotFoundError):
            source.last_modified()


class TestFileTemplateLoader:

    def test_suffix_applied(self, template_dir: Path):
        loader = FileTemplateLoader(template_dir)
        source = loader.source_at("partials/footer")

        assert source.filename == "partials/footer.hbs"
        assert source.content() == "<footer>{{year}}</footer>"

    def test_explicit_suffix_not_doubled(self, template_dir: Path):
        assert FileTemplateLoader(template_dir).source_at("page.hbs").filename == "page.hbs"

    def test_prefix(self, template_dir: Path):
        loader = FileTemplateLoader(template_dir, prefix="partials")

        assert loader.source_at("footer").filename == "partials/footer.hbs"

    def test_missing(self, template_dir: Path):
        with pytest.raises(TemplateNotFoundError) as exc:
            FileTemplateLoader(template_dir).source_at("nope")

        assert exc.value.location == "nope"

    def test_no_escape_from_base_dir(self, tmp_path: Path, template_dir: Path):
        write(tmp_path / "secret.hbs", "s")

        with pytest.raises(TemplateNotFoundError):
            FileTemplateLoader(template_dir).source_at("../secret")

    def test_list_templates(self, template_dir: Path):
        loader = FileTemplateLoader(template_dir)

        assert loader.list_templates() == ["drafts/wip", "page", "partials/footer"]

    def test_list_templates_exclude(self, template_dir: Path):
        loader = FileTemplateLoader(template_dir, exclude=["drafts/"])

        assert loader.list_templates() == ["page", "partials/footer"]
        assert loader.list_templates(exclude=["partials/*"]) == ["page"]

    def test_list_templates_ignore_file(self, template_dir: Path):
        write(template_dir / ".hbsignore", "# drafts are private\ndrafts/\n")
        write(template_dir / "notes.txt", "not a template")

        assert FileTemplateLoader(template_dir).list_templates() == ["page", "partials/footer"]

    def test_list_templates_missing_root(self, tmp_path: Path):
        assert FileTemplateLoader(tmp_path / "absent").list_templates() == []


class TestMapTemplateLoader:

    def test_put_and_resolve(self):
        loader = MapTemplateLoader().put("a", "A").put("/b", "B")

        assert loader.source_at("a").content() == "A"
        assert loader.source_at("b").filename == "b"
        assert loader.list_templates() == ["a", "b"]

    def test_constructor_templates_with_suffix(self):
        loader = MapTemplateLoader({"row": "R"}, suffix=".hbs")

        assert loader.source_at("row").filename == "row.hbs"

    def test_missing(self):
        with pytest.raises(TemplateNotFoundError):
            MapTemplateLoader().source_at("x")
