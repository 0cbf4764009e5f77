"""Tests for the live throughput table (cli/live_metrics.py)."""

from __future__ import annotations

import asyncio
import io
from collections.abc import Iterator
from datetime import datetime, timezone

import pytest
from conftest import ENQUEUED, FakeProvider, make_partition

from ehviewer.cli.live_metrics import (
    COLUMNS,
    build_metrics_table,
    format_clock,
    format_rate,
    format_throughput,
    run_live_metrics,
)
from ehviewer.core.models import PartitionThroughput, ThroughputSnapshot


def _snapshot() -> ThroughputSnapshot:
    rows = (
        PartitionThroughput("0", 120, "20480", ENQUEUED, 10.0, 10.0),
        PartitionThroughput("1", 7, "a:1", None, 0.0, None),
    )
    return ThroughputSnapshot(
        rows=rows,
        total_messages_per_second=10.0,
        total_kb_per_second=10.0,
        sampled_at=ENQUEUED,
    )


class TestFormatting:
    def test_clock(self) -> None:
        value = datetime(2024, 5, 1, 10, 0, 1, 123456, tzinfo=timezone.utc)
        assert format_clock(value) == "10:00:01.1234"

    def test_clock_unknown(self) -> None:
        assert format_clock(None) == "—"

    def test_rate(self) -> None:
        assert format_rate(12345.678) == "12,345.7"

    def test_throughput(self) -> None:
        assert format_throughput(1.5) == "1.50 KB/sec"
        assert format_throughput(None) == "n/a"


class TestBuildMetricsTable:
    def test_one_row_per_partition_plus_totals(self) -> None:
        table = build_metrics_table(_snapshot())

        assert len(table.columns) == len(COLUMNS)
        assert table.row_count == 3

    def test_header_names(self) -> None:
        table = build_metrics_table(_snapshot())
        headers = [str(column.header) for column in table.columns]

        assert all(name in header for name, header in zip(COLUMNS, headers))
        assert COLUMNS[-1] == "Throughput (KB/sec)"

    def test_totals_without_numeric_offsets_are_not_available(self) -> None:
        from rich.console import Console

        row = PartitionThroughput("0", 7, "a:1", None, 2.0, None)
        snapshot = ThroughputSnapshot(
            rows=(row,),
            total_messages_per_second=2.0,
            total_kb_per_second=None,
            sampled_at=ENQUEUED,
        )
        console = Console(file=io.StringIO(), width=200, color_system=None)

        console.print(build_metrics_table(snapshot))

        rendered = console.file.getvalue()
        assert rendered.count("n/a") == 2
        assert "0.00 KB/sec" not in rendered


class TestRunLiveMetrics:
    def test_samples_and_closes(self, capsys: pytest.CaptureFixture[str]) -> None:
        provider = FakeProvider(
            partitions={
                "0": [
                    make_partition(last_enqueued_sequence_number=100, last_enqueued_offset="0"),
                    make_partition(last_enqueued_sequence_number=110, last_enqueued_offset="10240"),
                    make_partition(last_enqueued_sequence_number=130, last_enqueued_offset="30720"),
                ],
            }
        )
        ticks: Iterator[float] = iter([0.0, 0.0, 1.0, 2.0])

        asyncio.run(
            run_live_metrics(provider, interval=0, max_refreshes=2, clock=lambda: next(ticks))
        )

        output = capsys.readouterr().out
        assert "Event Hub Name: events" in output
        assert "20.0" in output
        assert provider.partition_calls == ["0", "0", "0"]
        assert provider.close_count == 1

    def test_closes_provider_when_cancelled(self) -> None:
        provider = FakeProvider()

        async def _cancel_soon() -> None:
            task = asyncio.create_task(run_live_metrics(provider, interval=60))
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(_cancel_soon())

        assert provider.close_count == 1
