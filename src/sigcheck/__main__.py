"""
Entry point for `python -m sigcheck`.

Usage:
    python -m sigcheck check document.pdf
    python -m sigcheck info document.pdf
"""

from .ui.cli import main

main()
