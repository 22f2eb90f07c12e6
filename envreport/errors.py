"""
EnvReport errors.

    EnvReportError
    ├── UnsupportedArgumentError  - lookup argument is a dynamic expression
    ├── IndirectionCycleError     - identifier chain loops or is too deep
    └── ConfigError               - invalid scan configuration

The first two abort a scan. Everything else the scanner runs into
(unreadable files, odd declarations, unresolved names) is recovered
locally and recorded on the report.
"""

from typing import Optional


class EnvReportError(Exception):
    """Base class for all envreport errors."""


class UnsupportedArgumentError(EnvReportError):
    """A lookup call's argument cannot be resolved statically."""

    def __init__(self, kind: str, filepath: str, lineno: int, function: str):
        self.kind = kind
        self.filepath = filepath
        self.lineno = lineno
        self.function = function
        super().__init__(
            f"{filepath}:{lineno}: unsupported argument to {function}(): "
            f"{kind} expressions cannot be resolved statically"
        )


class IndirectionCycleError(EnvReportError):
    """Following an identifier chain revisited a name or went too deep."""

    def __init__(self, chain: list[str], max_depth: Optional[int] = None):
        self.chain = chain
        self.max_depth = max_depth
        path = " -> ".join(chain)
        if max_depth is not None:
            msg = f"unresolvable indirection: chain exceeds {max_depth} hops ({path})"
        else:
            msg = f"unresolvable indirection cycle: {path}"
        super().__init__(msg)


class ConfigError(EnvReportError):
    """The scan configuration is invalid."""
