"""
EnvReport command-line interface.

Usage:
    envreport                        # Scan the current directory
    envreport src/ scripts/tool.py   # Scan specific files and directories
    envreport --lookup os.getenv --lookup os.environ.get src/
    envreport --dump app.py          # Dump AST nodes instead of resolving
    envreport -vv src/               # Debug logging on stderr

Prints one environment variable name per line on stdout.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from envreport import __version__
from envreport.config import DEFAULT_LOOKUPS, ScanConfig
from envreport.errors import ConfigError, IndirectionCycleError, UnsupportedArgumentError
from envreport.scanner import dump_project, scan_project

_log = logging.getLogger("envreport")

EXIT_OK = 0
EXIT_ERROR = 1      # scan finished, but some paths could not be parsed
EXIT_USAGE = 2      # bad arguments or missing paths
EXIT_ABORTED = 3    # unsupported lookup argument or indirection cycle


def _configure_logging(verbosity: int) -> None:
    """Set up the ``envreport`` logger: 0 → WARNING, 1 → INFO, 2+ → DEBUG."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    _log.setLevel(level)
    # main() may run several times in one process
    _log.handlers = [handler]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="envreport",
        description="Find requests for environment variables to add to the readme",
    )
    parser.add_argument("paths", nargs="*", default=["."],
                        help="Files or directories to scan (default: current directory)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--dump", action="store_true",
                        help="Dump the AST nodes found instead of resolving lookups. "
                             "Generally used for debugging")
    parser.add_argument("--lookup", action="append", metavar="DOTTED",
                        help="Dotted name of an environment lookup function; repeatable "
                             f"(default: {', '.join(DEFAULT_LOOKUPS)})")
    parser.add_argument("--exclude", action="append", metavar="GLOB",
                        help="Skip directory entries matching this glob; repeatable")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase log verbosity (-v info, -vv debug)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = ScanConfig.from_args(args)
    except ConfigError as e:
        _log.error("%s", e)
        return EXIT_USAGE

    missing = [p for p in args.paths if not Path(p).exists()]
    if missing:
        for path in missing:
            _log.error("No such file or directory: %s", path)
        return EXIT_USAGE

    if config.dump:
        report = dump_project(args.paths, sys.stdout, config)
    else:
        try:
            report = scan_project(args.paths, config)
        except (UnsupportedArgumentError, IndirectionCycleError) as e:
            _log.error("%s", e)
            return EXIT_ABORTED

        for value in report.values:
            print(value)

    _log.info("Scanned %d file(s) in %.1fms", report.files_scanned, report.scan_time_ms)
    if report.errors:
        return EXIT_ERROR
    return EXIT_OK
