"""
YAML config loading (`hbs.config.load_config`) and engine construction from
the loaded settings.
"""

from pathlib import Path

import pytest

from hbs import Handlebars
from hbs.cache import ConcurrentMapTemplateCache, NullTemplateCache
from hbs.config import ConfigLoadError, load_config, load_data
from hbs.config.load import RELOAD_ENV
from hbs.errors import MissingValueError
from hbs.escaping import NO_ESCAPING

from tests.infrastructure import write, write_templates


@pytest.fixture(autouse=True)
def _no_reload_env(monkeypatch):
    monkeypatch.delenv(RELOAD_ENV, raising=False)


class TestLoadConfig:

    def test_defaults_without_file(self, tmp_path: Path):
        cfg = load_config(tmp_path)

        assert cfg.escape_html is True
        assert cfg.strict is False
        assert cfg.cache.enabled and not cfg.cache.reload
        assert cfg.templates.base_dir == "."

    def test_full_file(self, tmp_path: Path):
        write(tmp_path / "hbs.yaml", """
delimiters:
  start: "<%"
  end: "%>"
escape_html: false
strict: true
cache:
  enabled: false
templates:
  base_dir: views
  suffix: .html
  exclude: ["drafts/"]
""")
        cfg = load_config(tmp_path)

        assert (cfg.delimiters.start, cfg.delimiters.end) == ("<%", "%>")
        assert cfg.escape_html is False
        assert cfg.strict is True
        assert cfg.cache.enabled is False
        assert cfg.templates.suffix == ".html"
        assert cfg.templates.exclude == ["drafts/"]

    def test_relative_base_dir_follows_config_file(self, tmp_path: Path):
        write(tmp_path / "conf" / "engine.yaml", "templates:\n  base_dir: ../views\n")

        cfg = load_config(tmp_path / "conf" / "engine.yaml")

        assert cfg.templates.base_dir == str((tmp_path / "views").resolve())

    def test_wrong_type_reports_field_path(self, tmp_path: Path):
        write(tmp_path / "hbs.yaml", "strict: maybe\n")

        with pytest.raises(ConfigLoadError, match=r"hbs\.yaml\.strict"):
            load_config(tmp_path)

    def test_unknown_key(self, tmp_path: Path):
        write(tmp_path / "hbs.yaml", "cache:\n  ttl: 5\n")

        with pytest.raises(ConfigLoadError, match="ttl"):
            load_config(tmp_path)

    def test_root_must_be_mapping(self, tmp_path: Path):
        write(tmp_path / "hbs.yaml", "- a\n- b\n")

        with pytest.raises(ConfigLoadError, match="mapping"):
            load_config(tmp_path)

    def test_invalid_yaml(self, tmp_path: Path):
        write(tmp_path / "hbs.yaml", "cache: [unclosed\n")

        with pytest.raises(ConfigLoadError, match="invalid YAML"):
            load_config(tmp_path)

    @pytest.mark.parametrize("value, expected", [("1", True), ("true", True), ("0", False), ("off", False)])
    def test_reload_env_override(self, tmp_path: Path, monkeypatch, value, expected):
        write(tmp_path / "hbs.yaml", "cache:\n  reload: false\n")
        monkeypatch.setenv(RELOAD_ENV, value)

        assert load_config(tmp_path).cache.reload is expected


class TestLoadData:

    def test_yaml_and_json(self, tmp_path: Path):
        assert load_data(write(tmp_path / "m.yaml", "title: T\nxs: [1, 2]\n")) == {"title": "T", "xs": [1, 2]}
        assert load_data(write(tmp_path / "m.json", '{"a": {"b": 1}}')) == {"a": {"b": 1}}

    def test_missing(self, tmp_path: Path):
        with pytest.raises(ConfigLoadError):
            load_data(tmp_path / "none.yaml")


class TestEngineFromConfig:

    def test_cache_selection(self, tmp_path: Path):
        cfg = load_config(tmp_path)
        assert isinstance(Handlebars.from_config(cfg).cache, ConcurrentMapTemplateCache)

        cfg.cache.enabled = False
        assert Handlebars.from_config(cfg).cache is NullTemplateCache.INSTANCE

    def test_renders_from_base_dir(self, tmp_path: Path):
        write_templates(tmp_path / "views", {"hello": "Hi <%name%>"}, suffix=".html")
        write(tmp_path / "hbs.yaml", """
delimiters: {start: "<%", end: "%>"}
escape_html: false
templates: {base_dir: views, suffix: .html}
""")
        engine = Handlebars.from_config(load_config(tmp_path))

        assert engine.escaping is NO_ESCAPING
        assert engine.render("hello", {"name": "<b>"}) == "Hi <b>"

    def test_strict(self, tmp_path: Path):
        write(tmp_path / "hbs.yaml", "strict: true\n")
        engine = Handlebars.from_config(load_config(tmp_path))

        with pytest.raises(MissingValueError):
            engine.render(engine.compile_inline("{{nope}}"), {})

    def test_overrides_win(self, tmp_path: Path):
        cache = ConcurrentMapTemplateCache()

        engine = Handlebars.from_config(load_config(tmp_path), cache=cache)

        assert engine.cache is cache
