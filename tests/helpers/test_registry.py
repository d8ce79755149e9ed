"""
Tests for the helper registry.
"""

import logging

import pytest

from hbs.helpers import FunctionHelper, HelperRegistry, default_registry


class _Upper:
    def apply(self, context, options):
        return str(context).upper()


class TestHelperRegistry:

    def test_register_and_lookup(self):
        helper = _Upper()
        registry = HelperRegistry()

        assert registry.register("upper", helper) is registry
        assert registry.lookup("upper") is helper
        assert "upper" in registry
        assert len(registry) == 1

    def test_lookup_is_case_sensitive(self):
        registry = HelperRegistry().register("upper", _Upper())

        assert registry.lookup("Upper") is None

    def test_functions_are_adapted(self):
        registry = HelperRegistry().register("f", lambda ctx, options: ctx)
        helper = registry.lookup("f")

        assert isinstance(helper, FunctionHelper)
        assert helper.apply(5, None) == 5

    def test_replacement_logged(self, caplog):
        registry = HelperRegistry().register("h", _Upper())
        replacement = _Upper()

        with caplog.at_level(logging.INFO, logger="hbs.helpers.registry"):
            registry.register("h", replacement)

        assert registry.lookup("h") is replacement
        assert "replaces" in caplog.text

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            HelperRegistry().register("", _Upper())

    def test_non_callable_rejected(self):
        with pytest.raises(TypeError):
            HelperRegistry().register("x", 42)

    def test_decorator(self):
        registry = HelperRegistry()

        @registry.helper()
        def shout(ctx, options):
            return "!"

        @registry.helper("alias")
        def other(ctx, options):
            return "?"

        assert registry.names() == ["alias", "shout"]
        assert shout(None, None) == "!"

    def test_copy_is_independent(self):
        registry = HelperRegistry().register("a", _Upper())
        clone = registry.copy()

        clone.register("b", _Upper())

        assert "b" not in registry
        assert clone.lookup("a") is registry.lookup("a")

    def test_default_registry(self):
        registry = default_registry()

        assert registry.names() == ["each", "if", "log", "lookup", "unless", "with"]
        assert "helperMissing" in default_registry(strict=True)
