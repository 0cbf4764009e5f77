"""CLI application entry point and command routing for ehviewer.

This module is the **sole error boundary** for the entire application.
It catches :class:`~ehviewer.exceptions.EhViewerError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, rendering
user-friendly messages via Rich and returning well-defined exit codes.

Architecture notes
------------------
* Reading decisions live in :mod:`ehviewer.core`; this module only maps
  flags onto core options and wires providers and sinks together.
* ``print()`` is not used; Rich consoles render all output.
* This module is the only place that translates between the domain
  world and the OS process exit code.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Any

from ehviewer.cli import exit_codes
from ehviewer.cli.console import console, escape, out
from ehviewer.core.models import ConsumeOptions, SessionResult
from ehviewer.exceptions import EhViewerError
from ehviewer.version import __version__

ENV_CONNECTION_STRING = "EVENTHUB_CONNECTION_STRING"
ENV_EVENTHUB_NAME = "EVENTHUB_NAME"
ENV_CONSUMER_GROUP = "EVENTHUB_CONSUMER_GROUP"
DEFAULT_CONSUMER_GROUP = "$Default"

_EXAMPLES = """\
examples:
  Consume messages from all partitions starting at the end:
    ehviewer --connection-string "$CONN" --eventhub-name events --consumer-group console_viewer

  Consume messages from partition 2 starting at sequence number 3823:
    ehviewer ... --partition-id 2 --from-sequence 3823

  Consume messages from partition 2 for sequence range 3823-3832:
    ehviewer ... --partition-id 2 --from-sequence 3823 --message-count 10
"""


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Every long option also accepts its camelCase spelling
    (``--eventHubName``) for compatibility with older scripts.
    """
    parser = argparse.ArgumentParser(
        prog="ehviewer",
        description="View metadata, messages and live throughput of an Azure Event Hub.",
        epilog=_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log output. Repeat (-vv) to include client library logs.",
    )

    connection = parser.add_argument_group("connection")
    connection.add_argument(
        "--connection-string",
        "--connectionString",
        dest="connection_string",
        default=os.environ.get(ENV_CONNECTION_STRING),
        help=f"Connection string for the Event Hub namespace (env: {ENV_CONNECTION_STRING}).",
    )
    connection.add_argument(
        "--eventhub-name",
        "--eventHubName",
        dest="eventhub_name",
        default=os.environ.get(ENV_EVENTHUB_NAME),
        help=f"Name of the Event Hub (env: {ENV_EVENTHUB_NAME}).",
    )
    connection.add_argument(
        "--consumer-group",
        "--consumerGroup",
        dest="consumer_group",
        default=os.environ.get(ENV_CONSUMER_GROUP, DEFAULT_CONSUMER_GROUP),
        help=f"Consumer group to use (env: {ENV_CONSUMER_GROUP}, default: %(default)s).",
    )

    modes = parser.add_argument_group("modes").add_mutually_exclusive_group()
    modes.add_argument(
        "--get-details",
        "--getDetails",
        dest="get_details",
        action="store_true",
        help="Display information about the Event Hub and its partitions and exit.",
    )
    modes.add_argument(
        "--live-metrics",
        "--getLiveMetrics",
        dest="live_metrics",
        action="store_true",
        help="Show a live per-partition throughput table until Ctrl+C.",
    )
    parser.add_argument(
        "--refresh-interval",
        dest="refresh_interval",
        type=float,
        default=1.0,
        help="Seconds between live metric samples (default: %(default)s).",
    )

    reading = parser.add_argument_group("reading")
    reading.add_argument(
        "--partition-id",
        "--partitionId",
        dest="partition_id",
        default=None,
        help="Partition to consume from. All partitions by default (-1).",
    )
    positions = reading.add_mutually_exclusive_group()
    positions.add_argument(
        "--from-start",
        "--fromStart",
        dest="from_start",
        action="store_true",
        help="Start consuming messages from the first sequence number.",
    )
    positions.add_argument(
        "--from-end",
        "--fromEnd",
        dest="from_end",
        action="store_true",
        help="Start consuming new messages only (default).",
    )
    positions.add_argument(
        "--from-time",
        "--fromTime",
        dest="from_time",
        default=None,
        help="Start at an ISO 8601 enqueued time, e.g. 2022-03-10T14:59:59+00:00. "
        "Requires --partition-id.",
    )
    positions.add_argument(
        "--from-offset",
        "--fromOffset",
        dest="from_offset",
        type=int,
        default=None,
        help="Start at this offset (inclusive). Requires --partition-id.",
    )
    positions.add_argument(
        "--from-sequence",
        "--fromSequence",
        dest="from_sequence",
        type=int,
        default=None,
        help="Start at this sequence number (inclusive). Requires --partition-id.",
    )
    reading.add_argument(
        "--message-count",
        "--messageCount",
        dest="message_count",
        type=int,
        default=-1,
        help="Consume this many messages and terminate. No limit by default (-1). "
        "--timeout always wins.",
    )
    reading.add_argument(
        "--timeout",
        type=float,
        default=300.0,
        help="Seconds before terminating (default: %(default)s).",
    )

    output = parser.add_argument_group("output")
    output.add_argument(
        "--output-path",
        "--outputPath",
        dest="output_path",
        type=Path,
        default=None,
        help="Write each message to its own file in this directory.",
    )
    output.add_argument(
        "--quiet",
        action="store_true",
        help="Don't print messages to the console.",
    )
    output.add_argument(
        "--properties",
        action="store_true",
        help="Also print content type, correlation id and message id.",
    )
    output.add_argument(
        "--app-properties",
        "--appProperties",
        dest="app_properties",
        action="store_true",
        help="Also print application properties.",
    )
    output.add_argument(
        "--system-properties",
        "--systemProperties",
        dest="system_properties",
        action="store_true",
        help="Also print system properties.",
    )
    output.add_argument(
        "--step",
        action="store_true",
        help="Wait for a key press after each message.",
    )
    return parser


def _validate_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    """Reject flag combinations argparse cannot express.

    Normalises the ``-1`` sentinels to ``None``.  Calls
    :meth:`argparse.ArgumentParser.error` (exit status 2) on failure.
    """
    if not args.connection_string:
        parser.error(f"--connection-string is required (or set {ENV_CONNECTION_STRING})")
    if not args.eventhub_name:
        parser.error(f"--eventhub-name is required (or set {ENV_EVENTHUB_NAME})")

    if args.partition_id is not None:
        partition_id = args.partition_id.strip()
        if partition_id in ("", "-1"):
            args.partition_id = None
        elif partition_id.isascii() and partition_id.isdigit():
            args.partition_id = partition_id
        else:
            parser.error(f"--partition-id must be a partition number or -1, got {args.partition_id!r}")

    for flag, value in (("--from-offset", args.from_offset), ("--from-sequence", args.from_sequence)):
        if value is not None and value < -1:
            parser.error(f"{flag} must not be negative")
    if args.from_offset == -1:
        args.from_offset = None
    if args.from_sequence == -1:
        args.from_sequence = None

    needs_partition = [
        flag
        for flag, value in (
            ("--from-time", args.from_time),
            ("--from-offset", args.from_offset),
            ("--from-sequence", args.from_sequence),
        )
        if value is not None
    ]
    if needs_partition and args.partition_id is None:
        parser.error(f"{needs_partition[0]} requires --partition-id")

    if args.message_count == 0 or args.message_count < -1:
        parser.error("--message-count must be a positive number, or -1 for no limit")
    if args.timeout <= 0:
        parser.error("--timeout must be greater than zero")
    if args.refresh_interval <= 0:
        parser.error("--refresh-interval must be greater than zero")


def build_consume_options(args: argparse.Namespace) -> ConsumeOptions:
    """Map validated arguments onto :class:`ConsumeOptions`.

    Raises
    ------
    InvalidStartTimeError
        If ``--from-time`` is not ISO 8601.
    """
    from ehviewer.core.positions import resolve_start_position

    position = resolve_start_position(
        from_start=args.from_start,
        from_time=args.from_time,
        from_offset=args.from_offset,
        from_sequence=args.from_sequence,
    )
    return ConsumeOptions(
        position=position,
        partition_id=args.partition_id,
        message_count=None if args.message_count == -1 else args.message_count,
        timeout=args.timeout,
    )


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _create_provider(args: argparse.Namespace) -> Any:
    from ehviewer.infra.eventhub_provider import EventHubConsumerProvider

    return EventHubConsumerProvider.from_connection_string(
        args.connection_string,
        eventhub_name=args.eventhub_name,
        consumer_group=args.consumer_group,
        logging_enable=args.verbose >= 2,
    )


def _build_sinks(args: argparse.Namespace, provider: Any) -> list[Any]:
    from ehviewer.cli.message_view import ConsoleEventSink, MessageViewOptions
    from ehviewer.infra.file_sink import FileEventSink, namespace_label

    sinks: list[Any] = []
    if not args.quiet:
        sinks.append(
            ConsoleEventSink(
                MessageViewOptions(
                    properties=args.properties,
                    app_properties=args.app_properties,
                    system_properties=args.system_properties,
                    step=args.step,
                )
            )
        )
    if args.output_path is not None:
        sinks.append(
            FileEventSink(
                args.output_path,
                namespace=namespace_label(provider.fully_qualified_namespace),
                eventhub_name=provider.eventhub_name,
            )
        )
    return sinks


def _print_consume_header(provider: Any, options: ConsumeOptions) -> None:
    from ehviewer.cli.details import print_lines

    print_lines(
        [
            f"Event Hub Namespace: {provider.fully_qualified_namespace}",
            f"Event Hub Name: {provider.eventhub_name}",
            f"Consuming from Partition: {options.describe_partition()}",
            options.position.describe(),
            f"Messages to Consume: {options.describe_count()}",
            "",
        ]
    )


async def _consume(args: argparse.Namespace, options: ConsumeOptions) -> SessionResult:
    """Create the provider and sinks, then run one session.

    The session closes the provider; if building the sinks fails the
    provider is closed here.
    """
    from ehviewer.core.session import ConsumeSession

    provider = _create_provider(args)
    try:
        sinks = _build_sinks(args, provider)
    except BaseException:
        await provider.close()
        raise
    _print_consume_header(provider, options)
    return await ConsumeSession(provider, options, sinks).run()


def _handle_consume(args: argparse.Namespace) -> int:
    """Stream messages until count, timeout or Ctrl+C."""
    options = build_consume_options(args)
    try:
        asyncio.run(_consume(args, options))
    except KeyboardInterrupt:
        pass
    out.print("Terminated", markup=False, highlight=False)
    return exit_codes.SUCCESS


def _handle_details(args: argparse.Namespace) -> int:
    from ehviewer.cli.details import show_details

    async def _run() -> None:
        await show_details(_create_provider(args))

    asyncio.run(_run())
    return exit_codes.SUCCESS


def _handle_live_metrics(args: argparse.Namespace) -> int:
    """Render live metrics; Ctrl+C is the normal way out."""
    from ehviewer.cli.live_metrics import run_live_metrics

    async def _run() -> None:
        await run_live_metrics(_create_provider(args), interval=args.refresh_interval)

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        pass
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the ehviewer CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    _validate_args(parser, args)

    from ehviewer.cli.log_setup import configure_logging

    configure_logging(args.verbose)

    if args.live_metrics:
        return _handle_live_metrics(args)
    if args.get_details:
        return _handle_details(args)
    return _handle_consume(args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    Wraps :func:`main` and guarantees the process never exits with a raw
    stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except EhViewerError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", highlight=False)
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}", highlight=False)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
