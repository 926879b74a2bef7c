"""
Package entry point for python -m execution.

USAGE:
    python -m coach_timeline dashboard  # Launch web dashboard
    python -m coach_timeline report     # Print attendance report
    python -m coach_timeline timeline   # Print today's timeline
"""

import sys

from coach_timeline.cli import main

if __name__ == "__main__":
    sys.exit(main())
