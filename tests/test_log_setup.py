"""Tests for CLI logging configuration (cli/log_setup.py)."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from ehviewer.cli.log_setup import configure_logging

_NAMED = ("ehviewer", "azure", "uamqp")


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    named = {name: logging.getLogger(name).level for name in _NAMED}
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)
    for name, saved in named.items():
        logging.getLogger(name).setLevel(saved)


def test_installs_rich_handler() -> None:
    from rich.logging import RichHandler

    configure_logging(0)

    assert any(isinstance(handler, RichHandler) for handler in logging.getLogger().handlers)
    assert logging.getLogger().level == logging.WARNING


def test_quiet_by_default() -> None:
    configure_logging(0)

    for name in _NAMED:
        assert logging.getLogger(name).level == logging.WARNING


def test_single_v_enables_application_debug() -> None:
    configure_logging(1)

    assert logging.getLogger("ehviewer").level == logging.DEBUG
    assert logging.getLogger("azure").level == logging.WARNING


def test_double_v_enables_client_library_debug() -> None:
    configure_logging(2)

    assert logging.getLogger("ehviewer").level == logging.DEBUG
    assert logging.getLogger("azure").level == logging.DEBUG
    assert logging.getLogger("uamqp").level == logging.DEBUG
