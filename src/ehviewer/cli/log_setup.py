"""Logging configuration for the CLI.

Log records go to stderr through :class:`rich.logging.RichHandler`.
Verbosity levels:

* 0: WARNING everywhere.
* 1: ``ehviewer`` at DEBUG.
* 2+: ``azure`` (the client library and its AMQP transport) at DEBUG too.
"""

from __future__ import annotations

import logging

from ehviewer.cli.console import get_rich_console
from ehviewer.exceptions import missing_dependency

_LIBRARY_LOGGERS: tuple[str, ...] = ("azure", "uamqp")


def configure_logging(verbosity: int) -> None:
    try:
        from rich.logging import RichHandler
    except ModuleNotFoundError as exc:
        raise missing_dependency("rich") from exc

    handler = RichHandler(
        console=get_rich_console(stderr=True),
        show_path=verbosity > 1,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=logging.WARNING,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )

    logging.getLogger("ehviewer").setLevel(logging.DEBUG if verbosity >= 1 else logging.WARNING)
    library_level = logging.DEBUG if verbosity >= 2 else logging.WARNING
    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
