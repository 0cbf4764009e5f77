"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends only on these protocols, never on ``azure-eventhub``
directly.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol

from ehviewer.core.models import (
    HubProperties,
    PartitionProperties,
    ReceivedEvent,
    StartPosition,
)

EventCallback = Callable[[ReceivedEvent], Awaitable[None]]


class EventHubProvider(Protocol):
    """Contract for event hub backends.

    Implementations must map all backend-specific exceptions to
    :class:`~ehviewer.exceptions.EhViewerError` subclasses.
    """

    @property
    def fully_qualified_namespace(self) -> str:
        """Host name of the namespace, e.g. ``contoso.servicebus.windows.net``."""
        ...  # pragma: no cover

    @property
    def eventhub_name(self) -> str:
        ...  # pragma: no cover

    async def get_hub_properties(self) -> HubProperties:
        ...  # pragma: no cover

    async def get_partition_properties(self, partition_id: str) -> PartitionProperties:
        """Return properties for *partition_id*.

        Raises
        ------
        PartitionNotFoundError
            When the hub has no such partition.
        EventHubServiceError
            For any other service or transport failure.
        """
        ...  # pragma: no cover

    async def receive(
        self,
        on_event: EventCallback,
        *,
        partition_id: str | None,
        position: StartPosition,
    ) -> None:
        """Read events and await *on_event* for each one.

        Reads a single partition when *partition_id* is given, otherwise
        every partition of the hub.  Runs until cancelled.
        """
        ...  # pragma: no cover

    async def close(self) -> None:
        """Release the connection.  Safe to call more than once."""
        ...  # pragma: no cover


class EventSink(Protocol):
    """A destination for received events (console, files, …)."""

    async def emit(self, event: ReceivedEvent) -> None:
        ...  # pragma: no cover
