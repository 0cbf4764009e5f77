"""``--live-metrics`` — live per-partition throughput table.

Samples every partition's properties at a fixed interval and renders
the rates computed by :class:`~ehviewer.core.throughput.ThroughputTracker`
in a Rich table inside :class:`rich.live.Live`.  Runs until Ctrl+C.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any

from ehviewer.cli.console import get_rich_console
from ehviewer.cli.details import print_lines, render_hub_header
from ehviewer.core.models import PartitionProperties, ThroughputSnapshot
from ehviewer.core.protocols import EventHubProvider
from ehviewer.core.throughput import ThroughputTracker
from ehviewer.exceptions import missing_dependency

logger = logging.getLogger(__name__)

COLUMNS: tuple[str, ...] = (
    "Partition",
    "Last Sequence Number",
    "Last Offset",
    "Last Enqueued Time",
    "Messages per Second",
    "Throughput (KB/sec)",
)


def _import_rich_live() -> tuple[type[Any], type[Any], Any]:
    """Import ``Live``, ``Table`` and the table box style lazily."""
    try:
        from rich import box
        from rich.live import Live
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise missing_dependency("rich") from exc
    return Live, Table, box.SIMPLE_HEAVY


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------

def format_clock(value: datetime | None) -> str:
    """Render ``HH:MM:SS.ffff`` or ``—`` when unknown."""
    if value is None:
        return "—"
    return value.strftime("%H:%M:%S.%f")[:-2]


def format_rate(value: float) -> str:
    return f"{value:,.1f}"


def format_throughput(kb_per_second: float | None) -> str:
    if kb_per_second is None:
        return "n/a"
    return f"{kb_per_second:,.2f} KB/sec"


def build_metrics_table(snapshot: ThroughputSnapshot) -> Any:
    """Build the Rich table for one snapshot, with a totals row."""
    _live_class, table_class, border = _import_rich_live()
    table = table_class(box=border)
    for column in COLUMNS:
        justify = "left" if column == "Partition" else "right"
        table.add_column(f"[bold]{column}[/]", justify=justify)

    for row in snapshot.rows:
        table.add_row(
            row.partition_id,
            str(row.last_sequence_number),
            row.last_offset,
            format_clock(row.last_enqueued_time),
            f"[green]{format_rate(row.messages_per_second)}[/]",
            f"[green]{format_throughput(row.kb_per_second)}[/]",
        )

    table.add_row(
        "",
        "",
        "",
        f"[bold green]{format_clock(snapshot.sampled_at)}[/]",
        f"[bold green]{format_rate(snapshot.total_messages_per_second)}[/]",
        f"[bold green]{format_throughput(snapshot.total_kb_per_second)}[/]",
    )
    return table


# ---------------------------------------------------------------------------
# Sampling loop
# ---------------------------------------------------------------------------

async def _sample(
    provider: EventHubProvider,
    partition_ids: Sequence[str],
) -> list[PartitionProperties]:
    return list(
        await asyncio.gather(*(provider.get_partition_properties(pid) for pid in partition_ids))
    )


async def run_live_metrics(
    provider: EventHubProvider,
    *,
    interval: float = 1.0,
    max_refreshes: int | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Render the live metrics table until cancelled.

    Parameters
    ----------
    provider:
        Event hub backend; closed before returning.
    interval:
        Seconds between samples.
    max_refreshes:
        Stop after this many samples.  ``None`` runs until Ctrl+C.
    clock:
        Monotonic time source used for rate computation.
    """
    live_class, _table_class, _border = _import_rich_live()
    try:
        hub = await provider.get_hub_properties()
        print_lines(render_hub_header(provider.fully_qualified_namespace, hub))

        initial = await _sample(provider, hub.partition_ids)
        tracker = ThroughputTracker(initial, clock())
        snapshot = tracker.update(initial, clock(), datetime.now(timezone.utc))

        with live_class(
            build_metrics_table(snapshot),
            console=get_rich_console(stderr=False),
            refresh_per_second=4,
        ) as live:
            refreshes = 0
            while max_refreshes is None or refreshes < max_refreshes:
                await asyncio.sleep(interval)
                partitions = await _sample(provider, hub.partition_ids)
                snapshot = tracker.update(partitions, clock(), datetime.now(timezone.utc))
                live.update(build_metrics_table(snapshot))
                refreshes += 1
                logger.debug("Refreshed metrics for %d partition(s)", len(partitions))
    finally:
        await provider.close()
