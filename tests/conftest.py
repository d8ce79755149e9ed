from pathlib import Path

import pytest

from hbs import Handlebars, MapTemplateLoader

from tests.infrastructure.file_utils import write_templates


@pytest.fixture
def loader() -> MapTemplateLoader:
    """Empty in-memory loader; tests add partials with `loader.put()`."""
    return MapTemplateLoader()


@pytest.fixture
def engine(loader: MapTemplateLoader) -> Handlebars:
    return Handlebars(loader)


@pytest.fixture
def render(engine: Handlebars):
    """Compile template text with the test engine and render it."""
    def _render(text: str, model=None, **kwargs) -> str:
        return engine.render(engine.compile_inline(text), model, **kwargs)
    return _render


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """A small template tree: a page that includes a nested partial."""
    return write_templates(tmp_path / "views", {
        "page": "<h1>{{title}}</h1>\n{{> partials/footer}}",
        "partials/footer": "<footer>{{year}}</footer>",
        "drafts/wip": "{{draft}}",
    })
