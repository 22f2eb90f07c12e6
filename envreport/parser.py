"""
EnvReport AST Parser — Feed declarations into the tracker and collect
environment lookup calls.

Uses Python's ast module to walk each source file once, in document order:
  1. Declarations (module-scope assignments, annotated assignments)
     register names in the DeclarationTracker
  2. Assignments inside functions, classes and lambdas, and `:=`
     expressions, update names that were already declared
  3. Calls matching a configured lookup (e.g., os.getenv) are collected

This module does NOT resolve the collected calls. That happens in the
scanner once every file has been visited.
"""

import ast
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, TextIO

from envreport.config import DEFAULT_LOOKUPS
from envreport.declarations import DeclarationTracker
from envreport.nodes import Unsupported, classify, first_target, first_value
from envreport.resolver import LookupCall, is_environment_lookup, make_lookup_call

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """Parse result for a single source file."""
    filepath: str
    lookup_calls: list[LookupCall] = field(default_factory=list)
    parse_errors: list[str] = field(default_factory=list)


class _SourceVisitor(ast.NodeVisitor):
    """AST visitor that updates the declaration tracker and collects lookup calls."""

    def __init__(
        self,
        tracker: DeclarationTracker,
        lookups: Iterable[str],
        filepath: str,
        source: Optional[str] = None,
    ):
        self.tracker = tracker
        self.lookups = frozenset(lookups)
        self.filepath = filepath
        self.source = source
        self.lookup_calls: list[LookupCall] = []
        # enclosing scopes, innermost last; empty while in module scope
        self._scopes: list[str] = []

    def _visit_scope(self, node: ast.AST):
        self._scopes.append("class" if isinstance(node, ast.ClassDef) else "function")
        self.generic_visit(node)
        self._scopes.pop()

    visit_FunctionDef = _visit_scope
    visit_AsyncFunctionDef = _visit_scope
    visit_ClassDef = _visit_scope
    visit_Lambda = _visit_scope

    def _in_class_body(self) -> bool:
        return bool(self._scopes) and self._scopes[-1] == "class"

    def visit_Assign(self, node: ast.Assign):
        """Handle `X = "A"`; only the first target and matching value are tracked."""
        if self._in_class_body():
            # class attributes never rebind a module-level name
            self.generic_visit(node)
            return

        target, index = first_target(node.targets[0])
        if not isinstance(target, ast.Name):
            logger.debug("%s:%d: skipping assignment to %s",
                         self.filepath, node.lineno, type(target).__name__)
            self.generic_visit(node)
            return

        value_node = first_value(node.value, index)
        if value_node is None:
            value = Unsupported(kind=f"unpacked {type(node.value).__name__}",
                                lineno=node.lineno, col_offset=node.col_offset)
        else:
            value = classify(value_node, self.source)

        if not self._scopes:
            self.tracker.register_declaration(target.id, value)
        else:
            self.tracker.record_assignment(target.id, value)
        self.generic_visit(node)

    def visit_AnnAssign(self, node: ast.AnnAssign):
        """Handle `X: str = "A"` and `X: str` — declarations in module and function scope.

        Directly inside a class body they are field definitions and are skipped.
        """
        if isinstance(node.target, ast.Name) and not self._in_class_body():
            value = classify(node.value, self.source) if node.value is not None else None
            self.tracker.register_declaration(node.target.id, value)
        self.generic_visit(node)

    def visit_NamedExpr(self, node: ast.NamedExpr):
        """Handle `(X := "A")` as a plain assignment."""
        self.tracker.record_assignment(node.target.id, classify(node.value, self.source))
        self.generic_visit(node)

    def visit_Call(self, node: ast.Call):
        """Collect calls like `os.getenv(DB_ENV)`."""
        function = is_environment_lookup(node, self.lookups)
        if function:
            call = make_lookup_call(node, function, self.filepath, self.source)
            logger.debug("%s:%d: found %s call", self.filepath, node.lineno, function)
            self.lookup_calls.append(call)
        self.generic_visit(node)


class _DumpVisitor(ast.NodeVisitor):
    """AST visitor that writes every node it visits, resolving nothing."""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def generic_visit(self, node: ast.AST):
        self.stream.write(ast.dump(node, include_attributes=True) + "\n")
        super().generic_visit(node)


def _parse(source_code: str, filepath: str, result: ParseResult) -> Optional[ast.Module]:
    try:
        return ast.parse(source_code, filename=filepath)
    except SyntaxError as e:
        result.parse_errors.append(f"{filepath}: SyntaxError at line {e.lineno}: {e.msg}")
        return None


def _read(filepath: Path) -> tuple[Optional[str], ParseResult]:
    result = ParseResult(filepath=str(filepath))
    try:
        return filepath.read_text(encoding="utf-8"), result
    except (OSError, UnicodeDecodeError) as e:
        result.parse_errors.append(f"Could not read {filepath}: {e}")
        return None, result


def parse_source(
    source_code: str,
    tracker: DeclarationTracker,
    lookups: Iterable[str] = DEFAULT_LOOKUPS,
    filepath: str = "<string>",
) -> ParseResult:
    """Parse a Python source string, update `tracker` and collect lookup calls.

    Args:
        source_code: The Python source code to parse.
        tracker: Declaration tracker shared by every file of the run.
        lookups: Dotted names of the lookup functions to collect.
        filepath: The path to the source file (for error reporting).

    Returns:
        ParseResult with the collected lookup calls.
    """
    result = ParseResult(filepath=filepath)
    tree = _parse(source_code, filepath, result)
    if tree is None:
        return result

    visitor = _SourceVisitor(tracker, lookups, filepath, source_code)
    visitor.visit(tree)
    result.lookup_calls = visitor.lookup_calls

    return result


def parse_file(
    filepath: str | Path,
    tracker: DeclarationTracker,
    lookups: Iterable[str] = DEFAULT_LOOKUPS,
) -> ParseResult:
    """Parse a Python file, update `tracker` and collect lookup calls."""
    source_code, result = _read(Path(filepath))
    if source_code is None:
        return result

    return parse_source(source_code, tracker, lookups, filepath=str(filepath))


def dump_source(source_code: str, stream: TextIO, filepath: str = "<string>") -> ParseResult:
    """Write every AST node of `source_code` to `stream`, in document order."""
    result = ParseResult(filepath=filepath)
    tree = _parse(source_code, filepath, result)
    if tree is not None:
        _DumpVisitor(stream).visit(tree)
    return result


def dump_file(filepath: str | Path, stream: TextIO) -> ParseResult:
    """Write every AST node of a Python file to `stream`."""
    source_code, result = _read(Path(filepath))
    if source_code is None:
        return result

    return dump_source(source_code, stream, filepath=str(filepath))
