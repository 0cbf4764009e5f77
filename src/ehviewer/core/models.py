"""Domain models for ehviewer.

Value objects are **frozen** dataclasses with no I/O and no dependency
on the client library.  The infrastructure layer converts SDK results
into these types before anything else sees them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


# ---------------------------------------------------------------------------
# Hub and partition metadata
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class HubProperties:
    """Top-level properties of a single event hub."""

    name: str
    """Event hub name as reported by the service."""

    created_at: datetime | None
    """Creation time of the hub, or ``None`` if not reported."""

    partition_ids: tuple[str, ...]
    """Identifiers of every partition, in service order."""


@dataclass(frozen=True, slots=True)
class PartitionProperties:
    """Point-in-time properties of one partition."""

    partition_id: str
    is_empty: bool
    beginning_sequence_number: int
    last_enqueued_sequence_number: int

    last_enqueued_offset: str
    """Offset of the newest event.  Kept as text; numeric on most hubs."""

    last_enqueued_time: datetime | None


# ---------------------------------------------------------------------------
# Received events
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ReceivedEvent:
    """A single event read from a partition."""

    partition_id: str
    sequence_number: int
    offset: str
    enqueued_time: datetime | None
    body: bytes
    content_type: str | None = None
    correlation_id: str | None = None
    message_id: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    """Application properties set by the publisher."""

    system_properties: dict[str, Any] = field(default_factory=dict)
    """Broker-assigned annotations."""

    @property
    def size(self) -> int:
        """Body size in bytes."""
        return len(self.body)

    def body_text(self) -> str:
        """Decode the body as UTF-8, replacing undecodable bytes."""
        return self.body.decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# Start position
# ---------------------------------------------------------------------------

class PositionKind(enum.Enum):
    EARLIEST = "earliest"
    LATEST = "latest"
    ENQUEUED_TIME = "enqueued_time"
    OFFSET = "offset"
    SEQUENCE_NUMBER = "sequence_number"


@dataclass(frozen=True, slots=True)
class StartPosition:
    """Where a consumption session begins reading.

    ``value`` is ``None`` for the earliest/latest markers, a timezone
    aware :class:`datetime` for enqueued time, and an ``int`` for
    offsets and sequence numbers.
    """

    kind: PositionKind
    value: datetime | int | None = None

    @classmethod
    def earliest(cls) -> StartPosition:
        return cls(PositionKind.EARLIEST)

    @classmethod
    def latest(cls) -> StartPosition:
        return cls(PositionKind.LATEST)

    @property
    def inclusive(self) -> bool:
        """Whether the event at the position itself is delivered."""
        return self.kind in (PositionKind.OFFSET, PositionKind.SEQUENCE_NUMBER)

    def describe(self) -> str:
        """Render the ``Consuming from…`` header line."""
        if self.kind is PositionKind.EARLIEST:
            return "Consuming from: Start"
        if self.kind is PositionKind.LATEST:
            return "Consuming from: End"
        if self.kind is PositionKind.ENQUEUED_TIME:
            return f"Consuming from Time: {self.value}"
        if self.kind is PositionKind.OFFSET:
            return f"Consuming from Offset: {self.value}"
        return f"Consuming from Sequence Number: {self.value}"


# ---------------------------------------------------------------------------
# Session configuration and outcome
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ConsumeOptions:
    """Everything the session controller needs to decide what to read."""

    position: StartPosition
    partition_id: str | None = None
    """Single partition to read, or ``None`` for all partitions."""

    message_count: int | None = None
    """Stop after this many messages; ``None`` means no limit."""

    timeout: float = 300.0
    """Wall-clock seconds before the session terminates."""

    def describe_partition(self) -> str:
        return "All" if self.partition_id is None else self.partition_id

    def describe_count(self) -> str:
        return "All" if self.message_count is None else str(self.message_count)


class StopReason(enum.Enum):
    COUNT_REACHED = "count_reached"
    TIMEOUT = "timeout"
    STREAM_ENDED = "stream_ended"


@dataclass(frozen=True, slots=True)
class SessionResult:
    received: int
    reason: StopReason


# ---------------------------------------------------------------------------
# Live metrics
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class PartitionStatistics:
    """Last observed counters for one partition, mutated on every sample."""

    last_sequence_number: int
    last_offset: int | None


@dataclass(frozen=True, slots=True)
class PartitionThroughput:
    partition_id: str
    last_sequence_number: int
    last_offset: str
    last_enqueued_time: datetime | None
    messages_per_second: float
    kb_per_second: float | None
    """``None`` when the partition's offsets are not numeric."""


@dataclass(frozen=True, slots=True)
class ThroughputSnapshot:
    rows: tuple[PartitionThroughput, ...]
    total_messages_per_second: float
    total_kb_per_second: float | None
    """``None`` when no partition has numeric offsets."""

    sampled_at: datetime
