"""
Entry point for running the mlinfer CLI as a module.

Usage:
    python -m mlinfer infer program.json
"""

import sys

from mlinfer.cli import main

if __name__ == "__main__":
    sys.exit(main())
