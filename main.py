"""Bluefruit AT - command-line entry point.

Equivalent to the ``bluefruit-at`` console script.
"""

import sys

from bluefruit_at.cli import main

if __name__ == "__main__":
    sys.exit(main())
