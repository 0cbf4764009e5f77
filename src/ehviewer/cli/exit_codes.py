"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Clean exit, including sessions ended by count, timeout or Ctrl+C."""

GENERAL_ERROR: int = 1
"""A known EhViewerError was caught. User-facing message was displayed."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries.

argparse also exits with 2 on malformed arguments.
"""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C outside a consume session (128 + SIGINT=2)."""
