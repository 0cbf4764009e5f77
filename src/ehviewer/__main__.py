"""Allow ``python -m ehviewer`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m ehviewer`` behaves identically to the ``ehviewer`` console
script.
"""

from __future__ import annotations

from ehviewer.cli.app import cli

if __name__ == "__main__":
    cli()
