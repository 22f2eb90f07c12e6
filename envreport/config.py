"""
EnvReport scan configuration.

A `ScanConfig` is built once (usually from CLI arguments) and passed to
every scan entry point.
"""

import argparse
import re
from dataclasses import dataclass

from envreport.declarations import DEFAULT_MAX_DEPTH
from envreport.errors import ConfigError

DEFAULT_LOOKUPS: tuple[str, ...] = ("os.getenv",)

DEFAULT_EXCLUDES: tuple[str, ...] = (
    ".git",
    ".tox",
    ".venv",
    "venv",
    "__pycache__",
    "build",
    "dist",
    "node_modules",
)

_DOTTED_NAME = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)+$")


def validate_lookup(lookup: str) -> str:
    """Check that `lookup` is a dotted `package.function` name."""
    lookup = lookup.strip()
    if not _DOTTED_NAME.match(lookup):
        raise ConfigError(
            f"invalid lookup {lookup!r}: expected a dotted name such as 'os.getenv'"
        )
    return lookup


@dataclass(frozen=True)
class ScanConfig:
    """Settings for one analysis run.

    Attributes:
        dump: Dump every visited AST node instead of resolving lookups
        lookups: Dotted names of the environment lookup functions
        exclude: Glob patterns for paths skipped during directory scans
        max_depth: Longest identifier chain followed before giving up
    """
    dump: bool = False
    lookups: tuple[str, ...] = DEFAULT_LOOKUPS
    exclude: tuple[str, ...] = DEFAULT_EXCLUDES
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self):
        if not self.lookups:
            raise ConfigError("at least one lookup function is required")
        for lookup in self.lookups:
            validate_lookup(lookup)
        if self.max_depth < 1:
            raise ConfigError(f"max_depth must be positive, got {self.max_depth}")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ScanConfig":
        """Build a config from parsed command-line arguments."""
        lookups = DEFAULT_LOOKUPS
        if args.lookup:
            lookups = tuple(validate_lookup(lookup) for lookup in args.lookup)
        return cls(
            dump=args.dump,
            lookups=lookups,
            exclude=DEFAULT_EXCLUDES + tuple(args.exclude or ()),
        )
