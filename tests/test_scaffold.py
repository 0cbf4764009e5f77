"""Smoke tests — verify scaffold wiring.

These tests prove that:
* The CLI entry point is importable and callable.
* The exception hierarchy is correctly structured.
* Version is accessible.
* Exit codes are defined.
* ``--help`` and ``--version`` work without the optional UI packages.
"""

from __future__ import annotations

import sys

import pytest

from ehviewer import __version__
from ehviewer.cli import exit_codes
from ehviewer.cli.app import main
from ehviewer.exceptions import (
    EhViewerError,
    EventHubServiceError,
    InvalidConnectionStringError,
    InvalidStartTimeError,
    MissingDependencyError,
    OutputWriteError,
    PartitionNotFoundError,
)


def _hide_optional_packages(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "rich",
        "rich.console",
        "rich.live",
        "rich.logging",
        "rich.table",
        "questionary",
        "azure.eventhub",
        "azure.eventhub.aio",
    ):
        monkeypatch.setitem(sys.modules, name, None)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_string(self) -> None:
        assert isinstance(__version__, str)

    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            InvalidStartTimeError,
            InvalidConnectionStringError,
            EventHubServiceError,
            PartitionNotFoundError,
            OutputWriteError,
            MissingDependencyError,
        ],
    )
    def test_all_exceptions_inherit_from_base(self, exc_class: type[EhViewerError]) -> None:
        assert issubclass(exc_class, EhViewerError)

    def test_partition_not_found_is_a_service_error(self) -> None:
        assert issubclass(PartitionNotFoundError, EventHubServiceError)

    def test_hint_is_stored(self) -> None:
        err = EhViewerError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.hint == "try this"

    def test_hint_defaults_to_none(self) -> None:
        assert EhViewerError("boom").hint is None


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_success_is_zero(self) -> None:
        assert exit_codes.SUCCESS == 0

    def test_general_error_is_one(self) -> None:
        assert exit_codes.GENERAL_ERROR == 1

    def test_keyboard_interrupt_is_130(self) -> None:
        assert exit_codes.KEYBOARD_INTERRUPT == 130

    def test_unexpected_error_is_two(self) -> None:
        assert exit_codes.UNEXPECTED_ERROR == 2


# ---------------------------------------------------------------------------
# Bootstrap paths
# ---------------------------------------------------------------------------

class TestBootstrap:
    def test_version_flag(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_help_lists_camel_case_aliases(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            main(["--help"])
        help_text = capsys.readouterr().out
        assert "--eventhub-name" in help_text
        assert "--eventHubName" in help_text

    def test_help_works_without_optional_packages(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _hide_optional_packages(monkeypatch)

        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_version_works_without_optional_packages(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _hide_optional_packages(monkeypatch)

        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
