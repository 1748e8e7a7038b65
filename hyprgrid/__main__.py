"""
Main entry point for running hyprgrid as a module.

Usage:
    python -m hyprgrid [options]
"""

from .cli import main

if __name__ == "__main__":
    import sys

    sys.exit(main())
