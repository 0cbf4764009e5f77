"""Infrastructure layer — external system integration.

Wraps all interaction with ``azure-eventhub`` and the filesystem.
Every raw third-party exception is caught here and re-raised as an
:class:`~ehviewer.exceptions.EhViewerError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output.
"""

from ehviewer.infra.eventhub_provider import EventHubConsumerProvider
from ehviewer.infra.file_sink import FileEventSink, namespace_label

__all__: list[str] = [
    "EventHubConsumerProvider",
    "FileEventSink",
    "namespace_label",
]
