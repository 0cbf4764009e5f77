"""Console rendering of received events.

Each event is printed as a block::

    Enqueued: 2024-05-01 10:00:00+00:00
    Partition: 0
    Sequence: 42
    Offset: 8192
    Bytes: 14
    Body:
    {"temp": 21.5}

Extra sections (properties, application properties, system
properties) are opt-in.  Rich markup, emoji codes and highlighting
inside a body are never interpreted.  The console view is not
byte-exact: Rich drops control characters such as ``\\r`` and expands
tabs to spaces, both in bodies and in the property lines.  Use
``--output-path`` for the exact body bytes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ehviewer.cli.console import out
from ehviewer.core.models import ReceivedEvent
from ehviewer.exceptions import missing_dependency

STEP_PROMPT = "Press any key for the next message..."


def _import_questionary() -> Any:
    """Import questionary lazily for step mode."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise missing_dependency("questionary") from exc
    return questionary


@dataclass(frozen=True, slots=True)
class MessageViewOptions:
    properties: bool = False
    app_properties: bool = False
    system_properties: bool = False
    step: bool = False


# ---------------------------------------------------------------------------
# Pure rendering
# ---------------------------------------------------------------------------

def _property_lines(title: str, values: Mapping[str, Any]) -> list[str]:
    lines = [f"{title}:"]
    lines.extend(f"\t{key}: {value}" for key, value in values.items())
    return lines


def render_event(event: ReceivedEvent, options: MessageViewOptions) -> list[str]:
    """Return the console block for *event* as a list of lines."""
    lines = [
        f"Enqueued: {event.enqueued_time}",
        f"Partition: {event.partition_id}",
        f"Sequence: {event.sequence_number}",
        f"Offset: {event.offset}",
        f"Bytes: {event.size}",
    ]
    if options.properties:
        lines.append(f"ContentType: {event.content_type or ''}")
        lines.append(f"CorrelationId: {event.correlation_id or ''}")
        lines.append(f"MessageId: {event.message_id or ''}")
    if options.app_properties:
        lines.extend(_property_lines("Application Properties", event.properties))
    if options.system_properties:
        lines.extend(_property_lines("System Properties", event.system_properties))
    lines.append("Body:")
    lines.append(event.body_text())
    lines.append("")
    return lines


# ---------------------------------------------------------------------------
# Sink
# ---------------------------------------------------------------------------

class ConsoleEventSink:
    """:class:`~ehviewer.core.protocols.EventSink` printing to stdout."""

    def __init__(self, options: MessageViewOptions | None = None) -> None:
        self._options = options or MessageViewOptions()
        self._questionary: Any = _import_questionary() if self._options.step else None

    async def emit(self, event: ReceivedEvent) -> None:
        out.print(
            "\n".join(render_event(event, self._options)),
            markup=False,
            highlight=False,
            emoji=False,
            soft_wrap=True,
        )
        if self._questionary is not None:
            # Ctrl+C here raises KeyboardInterrupt and ends the session.
            await self._questionary.press_any_key_to_continue(STEP_PROMPT).unsafe_ask_async()
