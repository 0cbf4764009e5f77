"""ehviewer — command-line viewer for Azure Event Hubs.

Built on the ``azure-eventhub`` async client with a layered architecture.
"""

from ehviewer.version import __version__

__all__: list[str] = ["__version__"]
