"""
Main entry point for running the package as a module.

Uses the Click-based CLI from zedviewer/cli/.
"""
import sys

from zedviewer.cli import main

if __name__ == "__main__":
    sys.exit(main())
