#!/usr/bin/env python3
"""Entry point for the SmartBFT WAL reader.

Usage:
    python main.py -f <wal file or directory> [--to <output file>]
"""

import sys

from walreader.cli import main

if __name__ == "__main__":
    sys.exit(main())
