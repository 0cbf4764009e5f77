"""Core / service layer — pure models, position resolution and session control.

Rules
-----
* No console output.
* No imports from ``cli`` or ``infra``.
* No ``azure`` imports; the client library is reached through protocols.
"""

from ehviewer.core.models import (
    ConsumeOptions,
    HubProperties,
    PartitionProperties,
    PositionKind,
    ReceivedEvent,
    SessionResult,
    StartPosition,
    StopReason,
    ThroughputSnapshot,
)
from ehviewer.core.positions import parse_enqueued_time, resolve_start_position
from ehviewer.core.protocols import EventHubProvider, EventSink
from ehviewer.core.session import ConsumeSession
from ehviewer.core.throughput import ThroughputTracker

__all__: list[str] = [
    "ConsumeOptions",
    "ConsumeSession",
    "EventHubProvider",
    "EventSink",
    "HubProperties",
    "PartitionProperties",
    "PositionKind",
    "ReceivedEvent",
    "SessionResult",
    "StartPosition",
    "StopReason",
    "ThroughputSnapshot",
    "ThroughputTracker",
    "parse_enqueued_time",
    "resolve_start_position",
]
