"""Per-partition throughput from successive partition-property samples.

Pure computation, no I/O.  The caller samples partition properties at
an interval and hands them to :meth:`ThroughputTracker.update` together
with a monotonic timestamp; rates are deltas divided by the elapsed
time between samples.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from ehviewer.core.models import (
    PartitionProperties,
    PartitionStatistics,
    PartitionThroughput,
    ThroughputSnapshot,
)


def offset_as_int(offset: str) -> int | None:
    """Return *offset* as an ``int`` or ``None`` when it is not numeric."""
    try:
        return int(offset)
    except (TypeError, ValueError):
        return None


class ThroughputTracker:
    """Keep the last counters per partition and turn new samples into rates.

    Parameters
    ----------
    initial:
        Properties used as the baseline for the first sample.
    started_at:
        Monotonic time at which *initial* was sampled.
    """

    def __init__(self, initial: Sequence[PartitionProperties], started_at: float) -> None:
        self._statistics: dict[str, PartitionStatistics] = {
            props.partition_id: PartitionStatistics(
                last_sequence_number=props.last_enqueued_sequence_number,
                last_offset=offset_as_int(props.last_enqueued_offset),
            )
            for props in initial
        }
        self._last_sampled: float = started_at

    @property
    def partition_ids(self) -> tuple[str, ...]:
        return tuple(self._statistics)

    def update(
        self,
        partitions: Sequence[PartitionProperties],
        now: float,
        sampled_at: datetime,
    ) -> ThroughputSnapshot:
        """Fold a new sample into the statistics and return the rates."""
        elapsed = now - self._last_sampled
        if elapsed <= 0:
            elapsed = 1.0
        self._last_sampled = now

        rows: list[PartitionThroughput] = []
        total_messages = 0.0
        total_bytes: float | None = None
        for props in partitions:
            stats = self._statistics.setdefault(
                props.partition_id,
                PartitionStatistics(props.last_enqueued_sequence_number, None),
            )

            sequence_delta = max(props.last_enqueued_sequence_number - stats.last_sequence_number, 0)
            messages_per_second = sequence_delta / elapsed
            stats.last_sequence_number = props.last_enqueued_sequence_number

            offset = offset_as_int(props.last_enqueued_offset)
            kb_per_second: float | None = None
            if offset is not None and stats.last_offset is not None:
                bytes_per_second = max(offset - stats.last_offset, 0) / elapsed
                kb_per_second = round(bytes_per_second / 1024, 2)
                total_bytes = (total_bytes or 0.0) + bytes_per_second
            stats.last_offset = offset

            total_messages += messages_per_second
            rows.append(
                PartitionThroughput(
                    partition_id=props.partition_id,
                    last_sequence_number=props.last_enqueued_sequence_number,
                    last_offset=props.last_enqueued_offset,
                    last_enqueued_time=props.last_enqueued_time,
                    messages_per_second=messages_per_second,
                    kb_per_second=kb_per_second,
                )
            )

        return ThroughputSnapshot(
            rows=tuple(rows),
            total_messages_per_second=total_messages,
            total_kb_per_second=None if total_bytes is None else round(total_bytes / 1024, 2),
            sampled_at=sampled_at,
        )
