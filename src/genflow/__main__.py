"""
Entry point for running GenFlow as a module.

Usage:
    python -m genflow
"""

import sys

from genflow.main import main

if __name__ == "__main__":
    sys.exit(main())
