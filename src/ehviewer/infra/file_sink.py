"""Infrastructure: write each received event to its own file.

File names follow
``{namespace}-{eventhub}-partition-{id}-seq-{n}-offset-{o}`` where
``namespace`` is the first label of the fully qualified namespace.
Bodies are written as raw bytes.
"""

from __future__ import annotations

from pathlib import Path

from ehviewer.core.models import ReceivedEvent
from ehviewer.exceptions import OutputWriteError


def namespace_label(fully_qualified_namespace: str) -> str:
    """Return ``contoso`` for ``contoso.servicebus.windows.net``."""
    return fully_qualified_namespace.split(".", 1)[0]


def message_file_name(namespace: str, eventhub_name: str, event: ReceivedEvent) -> str:
    return (
        f"{namespace}-{eventhub_name}-partition-{event.partition_id}"
        f"-seq-{event.sequence_number}-offset-{event.offset}"
    )


class FileEventSink:
    """:class:`~ehviewer.core.protocols.EventSink` writing one file per event.

    The directory is created on construction if it does not exist.
    """

    def __init__(self, directory: Path, *, namespace: str, eventhub_name: str) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputWriteError(
                f"Cannot create output directory {directory}: {exc}",
            ) from exc
        self._directory = directory
        self._namespace = namespace
        self._eventhub_name = eventhub_name

    def path_for(self, event: ReceivedEvent) -> Path:
        return self._directory / message_file_name(self._namespace, self._eventhub_name, event)

    async def emit(self, event: ReceivedEvent) -> None:
        path = self.path_for(event)
        try:
            path.write_bytes(event.body)
        except OSError as exc:
            raise OutputWriteError(
                f"Cannot write {path}: {exc}",
                hint="Check that the output directory is writable.",
            ) from exc
