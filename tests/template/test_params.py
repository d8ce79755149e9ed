"""
Tests for parameter classification and resolution.
"""

import pytest

from hbs.context import Context
from hbs.template.params import (
    Param,
    ParamType,
    determine_context,
    hash_to_text,
    params_to_text,
    reference_names,
    resolve_hash,
    resolve_params,
)


class TestParamLiterals:

    @pytest.mark.parametrize("raw, kind, value", [
        ('"hello"', ParamType.STRING, "hello"),
        ("'single'", ParamType.STRING, "single"),
        ('"say \\"hi\\""', ParamType.STRING, 'say "hi"'),
        ("42", ParamType.NUMBER, 42),
        ("-3", ParamType.NUMBER, -3),
        ("2.5", ParamType.NUMBER, 2.5),
        ("true", ParamType.BOOLEAN, True),
        ("false", ParamType.BOOLEAN, False),
        ("null", ParamType.NULL, None),
        ("undefined", ParamType.NULL, None),
        ("user.name", ParamType.REFERENCE, None),
        ("../title", ParamType.REFERENCE, None),
    ])
    def test_from_literal(self, raw, kind, value):
        param = Param.from_literal(raw)

        assert param.type is kind
        assert param.value == value
        assert param.raw == raw

    def test_text_keeps_source_form(self):
        assert Param.from_literal('"a b"').text() == '"a b"'


class TestResolution:

    def test_resolve_params_against_scope(self):
        context = Context({"user": {"name": "Ann"}})
        params = (Param.from_literal("user.name"), Param.from_literal("7"), Param.from_literal('"x"'))

        assert resolve_params(params, context) == ("Ann", 7, "x")

    def test_resolve_hash_is_read_only(self):
        context = Context({"v": 1})
        resolved = resolve_hash((("k", Param.from_literal("v")),), context)

        assert dict(resolved) == {"k": 1}
        with pytest.raises(TypeError):
            resolved["k"] = 2  # type: ignore[index]

    def test_missing_reference_resolves_to_none(self):
        assert resolve_params((Param.from_literal("nope"),), Context({})) == (None,)

    def test_determine_context(self):
        model = {"a": 1}
        context = Context(model)

        assert determine_context((), context) is model
        assert determine_context((Param.from_literal("a"),), context) == 1


class TestSerialization:

    def test_params_and_hash_text(self):
        params = (Param.from_literal("x"), Param.from_literal('"y"'))
        hash_items = (("k", Param.from_literal("v")), ("n", Param.from_literal("1")))

        assert params_to_text(params) == 'x "y"'
        assert hash_to_text(hash_items) == "k=v n=1"

    def test_reference_names(self):
        params = (Param.from_literal("x"), Param.from_literal('"lit"'))
        hash_items = (("k", Param.from_literal("v")), ("n", Param.from_literal("1")))

        assert reference_names(params, hash_items) == ["x", "v"]
