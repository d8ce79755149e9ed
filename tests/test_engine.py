"""
Tests for the engine facade: compiling named and inline templates, rendering
to a string or a writer, and error locations.
"""

import io
import threading

import pytest

from hbs import ConcurrentMapTemplateCache, Handlebars, MapTemplateLoader, default_registry
from hbs.errors import (
    HelperError,
    HelperNotFoundError,
    MissingValueError,
    TemplateCompileError,
    TemplateNotFoundError,
)
from hbs.helpers import HELPER_MISSING
from hbs.lambdas import IdentityTransformer


@pytest.fixture
def cached_engine(loader):
    return Handlebars(loader, cache=ConcurrentMapTemplateCache())


class TestCompile:

    def test_render_by_name(self, engine, loader):
        loader.put("greet", "Hello {{name}}")

        assert engine.render("greet", {"name": "Ann"}) == "Hello Ann"
        assert str(engine.compile("greet")) == "greet"

    def test_missing_template(self, engine):
        with pytest.raises(TemplateNotFoundError):
            engine.compile("nope")

    def test_compile_error_names_template(self, engine, loader):
        loader.put("broken", "ok\n{{#if x}}never closed")

        with pytest.raises(TemplateCompileError) as exc:
            engine.compile("broken")

        assert exc.value.filename == "broken"
        assert "Unterminated section 'if'" in str(exc.value)

    def test_inline_compile_is_cached(self, cached_engine):
        first = cached_engine.compile_inline("{{a}}")

        assert cached_engine.compile_inline("{{a}}") is first
        assert cached_engine.compile_inline("{{b}}") is not first

    def test_inline_key_includes_delimiters(self, cached_engine):
        plain = cached_engine.compile_inline("<%a%>")
        custom = cached_engine.compile_inline("<%a%>", "<%", "%>")

        assert plain is not custom
        assert len(cached_engine.cache) == 2
        assert cached_engine.render(plain, {"a": 1}) == "<%a%>"
        assert cached_engine.render(custom, {"a": 1}) == "1"

    def test_engine_delimiters(self):
        engine = Handlebars(start_delimiter="[[", end_delimiter="]]")

        assert engine.render(engine.compile_inline("[[#xs]][[.]]{{.}}[[/xs]]"), {"xs": [1]}) == "1{{.}}"


class TestRender:

    def test_writer_receives_output(self, engine):
        out = io.StringIO()

        result = engine.render(engine.compile_inline("x{{y}}"), {"y": 1}, out)

        assert result is None
        assert out.getvalue() == "x1"

    def test_data_seeds_at_variables(self, render):
        assert render("{{@lang}}-{{lang}}", {"lang": "model"}, data={"lang": "en"}) == "en-model"

    def test_html_escaping(self, render):
        model = {"v": "<a href='x'>&</a>"}

        assert render("{{v}}", model) == "&lt;a href&#x3D;&#x27;x&#x27;&gt;&amp;&lt;/a&gt;"
        assert render("{{{v}}}|{{&v}}", model) == "<a href='x'>&</a>|<a href='x'>&</a>"

    def test_template_render_shortcut(self, engine):
        template = engine.compile_inline("{{#each xs}}{{this}}{{/each}}")

        assert template.render({"xs": [1, 2]}) == "12"

    def test_unknown_helper_with_params(self, render):
        with pytest.raises(HelperNotFoundError) as exc:
            render("{{nope 1}}")

        assert exc.value.name == "nope"

    def test_render_error_located_at_innermost_tag(self, engine, loader):
        def boom(ctx, options):
            raise RuntimeError("kaput")

        engine.register_helper("boom", boom)
        loader.put("page", "line one\n{{#each xs}}{{boom 1}}{{/each}}")

        with pytest.raises(HelperError) as exc:
            engine.render("page", {"xs": [1]})

        err = exc.value
        assert (err.filename, err.line, err.column) == ("page", 2, 13)
        assert isinstance(err.__cause__, RuntimeError)
        assert str(err).startswith("page:2:13:")

    def test_register_helper_is_fluent(self, render, engine):
        result = engine.register_helper("twice", lambda ctx, options: f"{ctx}{ctx}")

        assert result is engine
        assert render("{{twice name}}", {"name": "ab"}) == "abab"

    def test_helper_bound_at_compile_time(self, engine):
        engine.register_helper("v", lambda ctx, options: "old")
        template = engine.compile_inline("{{v 1}}")

        engine.register_helper("v", lambda ctx, options: "new")

        assert engine.render(template) == "old"
        assert engine.render(engine.compile_inline("{{v 2}}")) == "new"

    def test_concurrent_renders_share_template(self, cached_engine):
        template = cached_engine.compile_inline("{{#each xs}}{{this}}{{/each}}")
        results = {}

        def worker(n):
            results[n] = cached_engine.render(template, {"xs": list(range(n))})

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(1, 9)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == {n: "".join(str(i) for i in range(n)) for n in range(1, 9)}


class TestEngineSettings:

    def test_strict_engine_leaves_shared_registry_alone(self):
        registry = default_registry()
        strict = Handlebars(registry=registry, strict=True)
        lax = Handlebars(registry=registry)

        assert lax.render(lax.compile_inline("[{{nope}}]"), {}) == "[]"
        assert HELPER_MISSING not in registry
        with pytest.raises(MissingValueError):
            strict.render(strict.compile_inline("[{{nope}}]"), {})

    def test_strict_registry_keeps_host_helpers(self):
        registry = default_registry().register("shout", lambda ctx, options: f"{ctx}!")
        strict = Handlebars(registry=registry, strict=True)

        assert strict.render(strict.compile_inline("{{shout name}}"), {"name": "hi"}) == "hi!"

    def test_lambda_output_is_not_cached(self, cached_engine):
        template = cached_engine.compile_inline("{{#stamp}}x{{/stamp}}{{tick}}")
        size = len(cached_engine.cache)

        for n in range(20):
            model = {"stamp": lambda text, n=n: f"v{n} {text}", "tick": lambda n=n: f"t{n}"}
            assert cached_engine.render(template, model) == f"v{n} xt{n}"

        assert len(cached_engine.cache) == size

    def test_identity_transformer_keeps_callables_as_values(self):
        class Stamp:
            def __call__(self):
                return "called"

            def __str__(self):
                return "plain"

        lambdas = Handlebars()
        values = Handlebars(transformer=IdentityTransformer())

        assert lambdas.render(lambdas.compile_inline("{{s}}"), {"s": Stamp()}) == "called"
        assert values.render(values.compile_inline("{{s}}"), {"s": Stamp()}) == "plain"


def test_repr_names_loader_and_cache():
    assert "MapTemplateLoader" in repr(Handlebars(MapTemplateLoader()))
