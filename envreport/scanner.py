"""
EnvReport Scanner — Core analysis run.

Walks every source file once with the parser (which fills a shared
DeclarationTracker and collects lookup calls), then resolves the
collected calls in a second pass and produces a report of the distinct
environment variable names.

Usage:
    from envreport.scanner import scan_source, scan_project

    report = scan_source('import os\\nos.getenv("HOME")\\n')
    print(report)

    report = scan_project(["./src"])
    print(report)
"""

import fnmatch
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional, TextIO

from envreport.config import ScanConfig
from envreport.declarations import DeclarationTracker
from envreport.nodes import Identifier
from envreport.parser import ParseResult, dump_file, parse_file, parse_source
from envreport.resolver import LookupCall, UnresolvedLookup, resolve_argument

logger = logging.getLogger(__name__)


@dataclass
class ScanReport:
    """Complete scan report for one or more source files."""
    values: list[str] = field(default_factory=list)
    unresolved: list[UnresolvedLookup] = field(default_factory=list)
    files_scanned: int = 0
    lookups_found: int = 0
    scan_time_ms: float = 0.0
    errors: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return "\n".join(self.values)


def _collect(report: ScanReport, result: ParseResult) -> None:
    if result.parse_errors:
        for err in result.parse_errors:
            logger.warning("%s", err)
        report.errors.extend(result.parse_errors)
    else:
        report.files_scanned += 1


def _resolve_calls(
    calls: list[LookupCall],
    tracker: DeclarationTracker,
    report: ScanReport,
) -> None:
    """Resolve every collected lookup call; add each distinct value once."""
    seen = set(report.values)
    for call in calls:
        literal = resolve_argument(call, tracker)
        if literal is None:
            if isinstance(call.argument, Identifier):
                unresolved = UnresolvedLookup(
                    name=call.argument.name,
                    function=call.function,
                    filepath=call.filepath,
                    lineno=call.lineno,
                )
                logger.warning("%s", unresolved)
                report.unresolved.append(unresolved)
            continue
        if literal.text not in seen:
            seen.add(literal.text)
            report.values.append(literal.text)
    report.lookups_found += len(calls)


def _is_excluded(path: Path, root: Path, patterns: Iterable[str]) -> bool:
    try:
        parts = path.relative_to(root).parts
    except ValueError:
        parts = path.parts
    return any(
        fnmatch.fnmatch(part, pattern)
        for part in parts
        for pattern in patterns
    )


def iter_python_files(
    paths: Iterable[str | Path],
    exclude: Iterable[str] = (),
    errors: Optional[list[str]] = None,
) -> Iterator[Path]:
    """Yield .py files under `paths` in sorted order.

    Explicitly named files are always yielded. Files found by searching a
    directory are skipped when any part of their path below that directory
    matches an `exclude` glob. Each file is yielded at most once, even
    when `paths` overlap. Missing paths are appended to `errors`.
    """
    exclude = tuple(exclude)
    seen: set[Path] = set()
    for raw in paths:
        path = Path(raw)
        problem = None
        if path.is_file():
            py_files = [path]
        elif path.is_dir():
            py_files = [p for p in sorted(path.glob("**/*.py")) if not _is_excluded(p, path, exclude)]
            if not py_files:
                problem = f"No .py files found in {path}"
        else:
            py_files = []
            problem = f"No such file or directory: {path}"

        for py_file in py_files:
            # overlapping arguments (src src/app.py) name a file only once
            resolved = py_file.resolve()
            if resolved not in seen:
                seen.add(resolved)
                yield py_file

        if problem:
            logger.warning("%s", problem)
            if errors is not None:
                errors.append(problem)


def scan_source(
    source_code: str,
    config: Optional[ScanConfig] = None,
    filepath: str = "<string>",
) -> ScanReport:
    """Scan a Python source string for environment lookups.

    Args:
        source_code: Python source code to scan.
        config: Scan settings; defaults to `ScanConfig()`.
        filepath: Source file path (for reporting).

    Returns:
        ScanReport with the distinct resolved variable names.

    Raises:
        UnsupportedArgumentError: a lookup argument is a dynamic expression.
        IndirectionCycleError: an identifier chain loops.
    """
    config = config or ScanConfig()
    start = time.perf_counter()
    report = ScanReport()
    tracker = DeclarationTracker(max_depth=config.max_depth)

    parse_result = parse_source(source_code, tracker, config.lookups, filepath=filepath)
    _collect(report, parse_result)
    _resolve_calls(parse_result.lookup_calls, tracker, report)

    report.scan_time_ms = (time.perf_counter() - start) * 1000
    return report


def scan_file(filepath: str | Path, config: Optional[ScanConfig] = None) -> ScanReport:
    """Scan a single Python file for environment lookups."""
    return scan_project([filepath], config)


def scan_project(
    paths: Iterable[str | Path],
    config: Optional[ScanConfig] = None,
) -> ScanReport:
    """Scan files and directories as one unit.

    All files share one DeclarationTracker, so a name declared in one
    module can be used by a lookup in another. Lookups are resolved only
    after every file has been visited.

    Args:
        paths: Files and/or directories to scan.
        config: Scan settings; defaults to `ScanConfig()`.

    Returns:
        Combined ScanReport for all files.
    """
    config = config or ScanConfig()
    start = time.perf_counter()
    combined = ScanReport()
    tracker = DeclarationTracker(max_depth=config.max_depth)

    calls: list[LookupCall] = []
    for py_file in iter_python_files(paths, config.exclude, combined.errors):
        parse_result = parse_file(py_file, tracker, config.lookups)
        _collect(combined, parse_result)
        calls.extend(parse_result.lookup_calls)

    logger.info("Visited %d file(s), %d declared name(s), %d lookup call(s)",
                combined.files_scanned, len(tracker), len(calls))
    _resolve_calls(calls, tracker, combined)

    combined.scan_time_ms = (time.perf_counter() - start) * 1000
    return combined


def dump_project(
    paths: Iterable[str | Path],
    stream: TextIO,
    config: Optional[ScanConfig] = None,
) -> ScanReport:
    """Write every AST node of every file under `paths` to `stream`.

    Nothing is resolved, so unsupported lookup arguments never abort.
    """
    config = config or ScanConfig()
    start = time.perf_counter()
    combined = ScanReport()

    for py_file in iter_python_files(paths, config.exclude, combined.errors):
        _collect(combined, dump_file(py_file, stream))

    combined.scan_time_ms = (time.perf_counter() - start) * 1000
    return combined
