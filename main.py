#!/usr/bin/env python3
"""
RowForge - A distributed Monte Carlo path tracer

Main entry point for rendering the Cornell box.
"""

import sys

from rowforge.cli import main


if __name__ == '__main__':
    sys.exit(main())
