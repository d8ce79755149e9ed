"""
Partials: loader-backed and inline, with context and hash arguments.
"""

from pathlib import Path

import pytest

from hbs import Handlebars
from hbs.errors import TemplateNotFoundError
from hbs.io import FileTemplateLoader


class TestLoaderPartials:

    def test_renders_in_current_scope(self, loader, render):
        loader.put("name", "<{{name}}>")

        assert render("Hi {{> name}}!", {"name": "Ann"}) == "Hi <Ann>!"

    def test_context_argument(self, loader, render):
        loader.put("user", "{{name}}/{{../site}}")
        model = {"site": "S", "owner": {"name": "Ann"}}

        assert render("{{> user owner}}", model) == "Ann/S"

    def test_hash_arguments_become_locals(self, loader, render):
        loader.put("badge", "[{{label}}:{{name}}]")

        assert render('{{> badge label="admin"}}', {"name": "Ann"}) == "[admin:Ann]"

    def test_context_and_hash(self, loader, render):
        loader.put("badge", "[{{label}}:{{name}}]")
        model = {"owner": {"name": "Ann"}, "role": "lead"}

        assert render("{{> badge owner label=role}}", model) == "[lead:Ann]"

    def test_inside_each(self, loader, render):
        loader.put("item", "<li>{{this}}</li>")

        assert render("{{#each xs}}{{> item}}{{/each}}", {"xs": ["a", "b"]}) == "<li>a</li><li>b</li>"

    def test_nested_partials(self, loader, render):
        loader.put("outer", "({{> inner}})").put("inner", "{{v}}")

        assert render("{{> outer}}", {"v": 1}) == "(1)"

    def test_missing(self, render):
        with pytest.raises(TemplateNotFoundError) as exc:
            render("{{> nope}}")

        assert exc.value.location == "nope"

    def test_standalone_partial_line(self, loader, render):
        loader.put("row", "R\n")

        assert render("A\n{{> row}}\nB") == "A\nR\nB"


class TestInlinePartials:

    def test_shadows_loader_template(self, loader, render):
        loader.put("p", "from loader")

        assert render('{{#*inline "p"}}inline{{/inline}}{{> p}}') == "inline"

    def test_inline_partial_with_context(self, render):
        template = '{{#*inline "name"}}{{first}} {{last}}{{/inline}}{{#each people}}{{> name this}};{{/each}}'
        model = {"people": [{"first": "A", "last": "B"}, {"first": "C", "last": "D"}]}

        assert render(template, model) == "A B;C D;"


class TestFileTemplates:

    def test_page_with_nested_partial(self, template_dir: Path):
        engine = Handlebars(FileTemplateLoader(template_dir))

        assert engine.render("page", {"title": "T", "year": 2024}) == "<h1>T</h1>\n<footer>2024</footer>"
