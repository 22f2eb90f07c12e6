"""
EnvReport syntax values — the closed set of expression shapes the
resolver understands.

Every `ast.expr` the engine looks at is first classified into one of:
  1. Literal      — an `ast.Constant` (e.g., "DATABASE_URL")
  2. Identifier   — an `ast.Name` (e.g., DB_ENV)
  3. Unsupported  — anything else (calls, f-strings, concatenation, ...)

Consumers `match` on these three variants instead of on raw `ast` classes.
"""

import ast
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Literal:
    """A constant value, unquoted."""
    text: str                # e.g., "DATABASE_URL"
    raw: str                 # e.g., '"DATABASE_URL"' — source text when known
    lineno: int = 0
    col_offset: int = 0


@dataclass(frozen=True)
class Identifier:
    """A bare name reference."""
    name: str
    lineno: int = 0
    col_offset: int = 0


@dataclass(frozen=True)
class Unsupported:
    """Any expression that is neither a constant nor a name."""
    kind: str                # ast class name, e.g., "JoinedStr"
    lineno: int = 0
    col_offset: int = 0


SyntaxValue = Union[Literal, Identifier, Unsupported]


def _constant_text(value: object) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return repr(value)


def classify(node: ast.expr, source: Optional[str] = None) -> SyntaxValue:
    """Classify an expression node into a `SyntaxValue`.

    Args:
        node: The expression to classify.
        source: Source text of the module, used to recover the raw literal.
    """
    lineno = getattr(node, "lineno", 0)
    col_offset = getattr(node, "col_offset", 0)

    if isinstance(node, ast.Constant):
        text = _constant_text(node.value)
        raw = None
        if source is not None:
            raw = ast.get_source_segment(source, node)
        return Literal(text=text, raw=raw or repr(node.value), lineno=lineno, col_offset=col_offset)
    if isinstance(node, ast.Name):
        return Identifier(name=node.id, lineno=lineno, col_offset=col_offset)
    return Unsupported(kind=type(node).__name__, lineno=lineno, col_offset=col_offset)


def get_dotted_name(node: ast.AST) -> Optional[str]:
    """Reconstruct a dotted name from an AST node (e.g., os.environ.get → 'os.environ.get')."""
    if isinstance(node, ast.Name):
        return node.id
    elif isinstance(node, ast.Attribute):
        parent = get_dotted_name(node.value)
        if parent:
            return f"{parent}.{node.attr}"
    return None


def first_target(node: ast.expr) -> tuple[ast.expr, Optional[int]]:
    """Return the first element of a (possibly unpacking) assignment target.

    The second item is the index used to pick the matching value element,
    or None when the target is not an unpacking target.
    """
    if isinstance(node, (ast.Tuple, ast.List)) and node.elts:
        return node.elts[0], 0
    return node, None


def first_value(node: ast.expr, index: Optional[int]) -> Optional[ast.expr]:
    """Return the value element matching `first_target`'s index.

    Unpacking a value that is not a literal tuple/list (e.g., `a, b = pair`)
    has no matching element and returns None.
    """
    if index is None:
        return node
    if isinstance(node, (ast.Tuple, ast.List)) and len(node.elts) > index:
        element = node.elts[index]
        if not isinstance(element, ast.Starred):
            return element
    return None
