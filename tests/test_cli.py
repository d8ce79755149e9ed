"""
Command-line entry point: render, inspect and list.
"""

import json
from pathlib import Path

import pytest

from hbs.cli import main

from tests.infrastructure import write


@pytest.fixture
def project(tmp_path: Path, template_dir: Path) -> Path:
    write(tmp_path / "hbs.yaml", "templates:\n  base_dir: views\n")
    return tmp_path


class TestRender:

    def test_render_with_data(self, project: Path, capsys):
        data = write(project / "model.yaml", "title: Home\nyear: 2024\n")

        code = main(["render", "page", "--config", str(project), "--data", str(data)])

        assert code == 0
        assert capsys.readouterr().out == "<h1>Home</h1>\n<footer>2024</footer>"

    def test_render_without_data(self, project: Path, capsys):
        assert main(["render", "drafts/wip", "--config", str(project)]) == 0
        assert capsys.readouterr().out == ""

    def test_missing_template(self, project: Path, capsys):
        code = main(["render", "nope", "--config", str(project)])

        assert code == 2
        assert "Template not found: 'nope'" in capsys.readouterr().err

    def test_dir_overrides_config(self, tmp_path: Path, capsys):
        write(tmp_path / "other" / "x.hbs", "other {{v}}")

        code = main(["render", "x", "--config", str(tmp_path), "--dir", str(tmp_path / "other")])

        assert code == 0
        assert capsys.readouterr().out == "other "

    def test_bad_config(self, tmp_path: Path, capsys):
        write(tmp_path / "hbs.yaml", "strict: 3\n")

        assert main(["render", "x", "--config", str(tmp_path)]) == 2
        assert "hbs.yaml.strict" in capsys.readouterr().err


class TestInspect:

    def test_reports_structure(self, tmp_path: Path, capsys):
        write(tmp_path / "t.hbs", "{{#each items}}{{name}}{{{html}}}{{/each}}{{#if (lookup a b)}}{{/if}}")

        code = main(["inspect", "t", "--config", str(tmp_path), "--dir", str(tmp_path)])

        assert code == 0
        report = json.loads(capsys.readouterr().out)
        assert report["template"] == "t.hbs"
        assert report["sections"] == ["each", "if"]
        assert report["variables"] == ["name", "html"]
        assert report["references"] == ["items", "a", "b"]


class TestList:

    def test_lists_templates(self, project: Path, capsys):
        assert main(["list", "--config", str(project)]) == 0
        assert capsys.readouterr().out.splitlines() == ["drafts/wip", "page", "partials/footer"]

    def test_exclude(self, project: Path, capsys):
        assert main(["list", "--config", str(project), "--exclude", "drafts/", "--exclude", "page.hbs"]) == 0
        assert capsys.readouterr().out.splitlines() == ["partials/footer"]


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])

    assert exc.value.code == 0
    assert capsys.readouterr().out.startswith("hbs ")
