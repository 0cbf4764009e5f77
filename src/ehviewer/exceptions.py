"""Custom exception hierarchy for ehviewer.

All exceptions that cross layer boundaries must inherit from
:class:`EhViewerError`.  Raw ``azure-eventhub`` exceptions must never
propagate beyond the infrastructure layer; they are caught there and
re-raised as a typed subclass defined here.

Hierarchy
---------
EhViewerError
├── InvalidStartTimeError
├── InvalidConnectionStringError
├── EventHubServiceError
│   └── PartitionNotFoundError
├── OutputWriteError
└── MissingDependencyError
"""

from __future__ import annotations


class EhViewerError(Exception):
    """Base exception for all ehviewer errors.

    Every user-visible error condition maps to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without a stack trace.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Argument values -------------------------------------------------------

class InvalidStartTimeError(EhViewerError):
    """Raised when ``--from-time`` is not an ISO 8601 timestamp."""


class InvalidConnectionStringError(EhViewerError):
    """Raised when the client library rejects the connection string."""


# --- Service ---------------------------------------------------------------

class EventHubServiceError(EhViewerError):
    """Raised when the Event Hubs service or transport reports a failure."""


class PartitionNotFoundError(EventHubServiceError):
    """Raised when the requested partition does not exist on the hub."""


# --- Output ----------------------------------------------------------------

class OutputWriteError(EhViewerError):
    """Raised when a message cannot be written to the output directory."""


# --- Environment -----------------------------------------------------------

class MissingDependencyError(EhViewerError):
    """Raised when a required third-party package is not installed."""


def missing_dependency(package: str) -> MissingDependencyError:
    """Build the standard error for an absent *package*."""
    return MissingDependencyError(
        f"{package} is not installed. Install with: pip install {package}",
    )
