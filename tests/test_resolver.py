"""Tests for lookup call recognition and argument resolution."""

import ast

import pytest

from envreport.declarations import DeclarationTracker
from envreport.errors import UnsupportedArgumentError
from envreport.nodes import Identifier, Literal, Unsupported, classify
from envreport.resolver import is_environment_lookup, make_lookup_call, resolve_argument

DEFAULT = ("os.getenv",)


def call_of(expr: str) -> ast.Call:
    node = ast.parse(expr, mode="eval").body
    assert isinstance(node, ast.Call)
    return node


class TestIsEnvironmentLookup:

    @pytest.mark.parametrize("expr", [
        'os.getenv("HOME")',
        "os.getenv(NAME, 'fallback')",
    ])
    def test_matches_default(self, expr):
        assert is_environment_lookup(call_of(expr), DEFAULT) == "os.getenv"

    @pytest.mark.parametrize("expr", [
        'getenv("HOME")',             # from os import getenv
        'o.getenv("HOME")',           # import os as o
        'os.environ.get("HOME")',     # not configured
        'os.putenv("HOME", "x")',
        'factory().getenv("HOME")',
        'mods["os"].getenv("HOME")',
    ])
    def test_rejects_other_shapes(self, expr):
        assert is_environment_lookup(call_of(expr), DEFAULT) is None

    def test_configured_longer_lookup(self):
        lookups = ("os.getenv", "os.environ.get")
        assert is_environment_lookup(call_of('os.environ.get("HOME")'), lookups) == "os.environ.get"


class TestMakeLookupCall:

    def test_first_positional_argument(self):
        call = make_lookup_call(call_of('os.getenv("A", "B")'), "os.getenv", "app.py")
        assert call.argument == Literal(text="A", raw="'A'", lineno=1, col_offset=10)
        assert call.filepath == "app.py"
        assert call.lineno == 1

    def test_keyword_argument(self):
        call = make_lookup_call(call_of('os.getenv(key="KW")'), "os.getenv", "app.py")
        assert isinstance(call.argument, Literal)
        assert call.argument.text == "KW"

    def test_key_keyword_after_default(self):
        call = make_lookup_call(call_of('os.getenv(default="fallback", key="REAL_KEY")'), "os.getenv", "app.py")
        assert isinstance(call.argument, Literal)
        assert call.argument.text == "REAL_KEY"

    def test_only_default_keyword_is_unsupported(self):
        call = make_lookup_call(call_of('os.getenv(default="fallback")'), "os.getenv", "app.py")
        assert isinstance(call.argument, Unsupported)

    def test_missing_argument(self):
        call = make_lookup_call(call_of("os.getenv()"), "os.getenv", "app.py")
        assert isinstance(call.argument, Unsupported)


class TestResolveArgument:

    def _lookup(self, expr: str):
        return make_lookup_call(call_of(expr), "os.getenv", "app.py")

    def test_literal(self):
        resolved = resolve_argument(self._lookup('os.getenv("FOO")'), DeclarationTracker())
        assert resolved.text == "FOO"

    def test_identifier(self):
        tracker = DeclarationTracker()
        tracker.register_declaration("NAME", Literal(text="FOO", raw='"FOO"'))
        assert resolve_argument(self._lookup("os.getenv(NAME)"), tracker).text == "FOO"

    def test_unknown_identifier(self):
        assert resolve_argument(self._lookup("os.getenv(NAME)"), DeclarationTracker()) is None

    @pytest.mark.parametrize("expr, kind", [
        ('os.getenv(PREFIX + "_URL")', "BinOp"),
        ('os.getenv(f"{PREFIX}_URL")', "JoinedStr"),
        ('os.getenv("{}_URL".format(PREFIX))', "Call"),
        ("os.getenv(names[0])", "Subscript"),
    ])
    def test_dynamic_argument_raises(self, expr, kind):
        with pytest.raises(UnsupportedArgumentError) as exc_info:
            resolve_argument(self._lookup(expr), DeclarationTracker())
        assert exc_info.value.kind == kind
        assert "app.py:1" in str(exc_info.value)


class TestClassify:

    def test_raw_source_text(self):
        source = "X = 'single'"
        node = ast.parse(source).body[0].value
        value = classify(node, source)
        assert value.text == "single"
        assert value.raw == "'single'"

    def test_bytes_and_numbers(self):
        assert classify(ast.parse('b"RAW"', mode="eval").body).text == "RAW"
        assert classify(ast.parse("42", mode="eval").body).text == "42"

    def test_name(self):
        assert classify(ast.parse("NAME", mode="eval").body) == Identifier("NAME", 1, 0)
