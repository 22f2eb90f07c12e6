"""
EnvReport — Find the environment variables a Python code base reads.

Statically scans source code for environment lookups (os.getenv by
default) and resolves each argument, through simple variable
indirection, to the literal variable name.
"""

from envreport.config import ScanConfig
from envreport.errors import (
    ConfigError,
    EnvReportError,
    IndirectionCycleError,
    UnsupportedArgumentError,
)
from envreport.parser import dump_source
from envreport.scanner import ScanReport, dump_project, scan_file, scan_project, scan_source

__version__ = "0.1.0"
