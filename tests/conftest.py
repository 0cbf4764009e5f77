"""Shared pytest fixtures and configuration for the ehviewer test suite.

Guidelines
----------
* No network access in any test.
* The event hub is replaced by :class:`FakeProvider`, an in-memory
  implementation of the provider protocol.
* The ``azure-eventhub`` SDK is mocked at the infra boundary.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

import pytest

from ehviewer.core.models import (
    HubProperties,
    PartitionProperties,
    ReceivedEvent,
    StartPosition,
)
from ehviewer.exceptions import PartitionNotFoundError

NAMESPACE = "contoso.servicebus.windows.net"
ENQUEUED = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def make_event(**overrides: Any) -> ReceivedEvent:
    defaults: dict[str, Any] = {
        "partition_id": "0",
        "sequence_number": 42,
        "offset": "8192",
        "enqueued_time": ENQUEUED,
        "body": b'{"temp": 21.5}',
    }
    defaults.update(overrides)
    return ReceivedEvent(**defaults)


def make_partition(**overrides: Any) -> PartitionProperties:
    defaults: dict[str, Any] = {
        "partition_id": "0",
        "is_empty": False,
        "beginning_sequence_number": 0,
        "last_enqueued_sequence_number": 100,
        "last_enqueued_offset": "102400",
        "last_enqueued_time": ENQUEUED,
    }
    defaults.update(overrides)
    return PartitionProperties(**defaults)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeProvider:
    """In-memory event hub.

    ``receive`` replays *events* (filtered by partition), then raises
    *receive_error* if given, returns if *end_stream* is set, and
    otherwise blocks until cancelled like the real client.

    *partitions* maps a partition id to one or more successive samples;
    the last sample repeats once the others are used up.
    """

    def __init__(
        self,
        *,
        events: Iterable[ReceivedEvent] = (),
        partitions: dict[str, list[PartitionProperties]] | None = None,
        hub_name: str = "events",
        receive_error: Exception | None = None,
        end_stream: bool = False,
        hub_delay: float = 0.0,
    ) -> None:
        self.events = list(events)
        self.partitions = partitions if partitions is not None else {"0": [make_partition()]}
        self.hub_name = hub_name
        self.receive_error = receive_error
        self.end_stream = end_stream
        self.hub_delay = hub_delay
        self.receive_calls: list[tuple[str | None, StartPosition]] = []
        self.partition_calls: list[str] = []
        self.close_count = 0

    @property
    def fully_qualified_namespace(self) -> str:
        return NAMESPACE

    @property
    def eventhub_name(self) -> str:
        return self.hub_name

    async def get_hub_properties(self) -> HubProperties:
        if self.hub_delay:
            await asyncio.sleep(self.hub_delay)
        return HubProperties(
            name=self.hub_name,
            created_at=ENQUEUED,
            partition_ids=tuple(self.partitions),
        )

    async def get_partition_properties(self, partition_id: str) -> PartitionProperties:
        self.partition_calls.append(partition_id)
        samples = self.partitions.get(partition_id)
        if not samples:
            raise PartitionNotFoundError(f"Partition {partition_id} was not found")
        if len(samples) > 1:
            return samples.pop(0)
        return samples[0]

    async def receive(self, on_event: Any, *, partition_id: str | None, position: StartPosition) -> None:
        self.receive_calls.append((partition_id, position))
        for event in self.events:
            if partition_id is None or event.partition_id == partition_id:
                await on_event(event)
        if self.receive_error is not None:
            raise self.receive_error
        if self.end_stream:
            return
        await asyncio.Event().wait()

    async def close(self) -> None:
        self.close_count += 1


class RecordingSink:
    def __init__(self, log: list[tuple[str, int]] | None = None, name: str = "sink") -> None:
        self.events: list[ReceivedEvent] = []
        self._log = log
        self._name = name

    async def emit(self, event: ReceivedEvent) -> None:
        self.events.append(event)
        if self._log is not None:
            self._log.append((self._name, event.sequence_number))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clear_connection_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's shell settings out of argument parsing."""
    for name in ("EVENTHUB_CONNECTION_STRING", "EVENTHUB_NAME", "EVENTHUB_CONSUMER_GROUP"):
        monkeypatch.delenv(name, raising=False)
