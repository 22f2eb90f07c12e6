"""
EnvReport call resolver — recognize environment lookup calls and resolve
their first argument to a literal.

Matching is purely syntactic. `os.getenv("X")` matches the default
lookup; `import os as o; o.getenv("X")` does not, and neither does a
`getenv` imported with `from os import getenv`. Conversely, any object
that happens to be named `os` with a `getenv` attribute matches.
"""

import ast
from dataclasses import dataclass
from typing import Iterable, Optional

from envreport.declarations import DeclarationTracker
from envreport.errors import UnsupportedArgumentError
from envreport.nodes import Identifier, Literal, SyntaxValue, Unsupported, classify, get_dotted_name


# os.getenv(key, default=None) and Mapping.get(key, default=None)
KEY_KEYWORD = "key"


@dataclass
class LookupCall:
    """An environment lookup call found in source code (e.g., os.getenv(DB_ENV))."""
    function: str            # e.g., "os.getenv"
    argument: SyntaxValue    # classified first positional argument
    filepath: str
    lineno: int
    col_offset: int


@dataclass
class UnresolvedLookup:
    """A lookup whose identifier argument did not resolve to a literal."""
    name: str
    function: str
    filepath: str
    lineno: int

    def __str__(self) -> str:
        return f"{self.filepath}:{self.lineno}: could not resolve {self.function}({self.name})"


def is_environment_lookup(call: ast.Call, lookups: Iterable[str]) -> Optional[str]:
    """Return the matched lookup name if `call` has the shape `pkg.func(...)`.

    Bare function names never match, even when they equal the last part
    of a configured lookup.
    """
    if not isinstance(call.func, ast.Attribute):
        return None
    dotted = get_dotted_name(call.func)
    if dotted is None:
        return None
    if dotted in lookups:
        return dotted
    return None


def make_lookup_call(
    call: ast.Call,
    function: str,
    filepath: str,
    source: Optional[str] = None,
) -> LookupCall:
    """Build a `LookupCall` from a call matched by `is_environment_lookup`.

    The name comes from the first positional argument, or else from the
    `key=` keyword. Any other keyword (e.g., `default=`) is never the name.
    """
    key = next((kw for kw in call.keywords if kw.arg == KEY_KEYWORD), None)
    if call.args:
        argument = classify(call.args[0], source)
    elif key is not None:
        # os.getenv(default="x", key="X")
        argument = classify(key.value, source)
    else:
        argument = Unsupported(kind="missing argument", lineno=call.lineno, col_offset=call.col_offset)
    return LookupCall(
        function=function,
        argument=argument,
        filepath=filepath,
        lineno=call.lineno,
        col_offset=call.col_offset,
    )


def resolve_argument(call: LookupCall, tracker: DeclarationTracker) -> Optional[Literal]:
    """Resolve a lookup call's argument to a literal.

    Returns:
        The literal, or None when an identifier argument does not resolve.

    Raises:
        UnsupportedArgumentError: the argument is neither a literal nor a name.
        IndirectionCycleError: the identifier chain loops.
    """
    match call.argument:
        case Literal():
            return call.argument
        case Identifier():
            return tracker.resolve_identifier(call.argument)
        case Unsupported(kind=kind):
            raise UnsupportedArgumentError(kind, call.filepath, call.lineno, call.function)
