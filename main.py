"""
EnvReport runner.

Usage:
    python main.py                  # Scan the current directory
    python main.py src/             # Scan a specific directory
    python main.py --dump app.py    # Dump AST nodes for debugging
"""

import sys

from envreport.cli import main

if __name__ == "__main__":
    sys.exit(main())
