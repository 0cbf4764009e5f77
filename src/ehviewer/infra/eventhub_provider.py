"""``azure-eventhub`` backed implementation of :class:`~ehviewer.core.protocols.EventHubProvider`.

This module is the **only** place in the codebase that imports
``azure.eventhub``.  SDK results are converted to core models and SDK
exceptions are re-raised as typed
:class:`~ehviewer.exceptions.EhViewerError` subclasses.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ehviewer.core.models import (
    HubProperties,
    PartitionProperties,
    PositionKind,
    ReceivedEvent,
    StartPosition,
)
from ehviewer.core.protocols import EventCallback
from ehviewer.exceptions import (
    EhViewerError,
    EventHubServiceError,
    InvalidConnectionStringError,
    PartitionNotFoundError,
    missing_dependency,
)

logger = logging.getLogger(__name__)

RETRY_MODE: str = "fixed"
RETRY_TOTAL: int = 5


def _import_consumer_client() -> type[Any]:
    """Import ``EventHubConsumerClient`` (async) lazily."""
    try:
        from azure.eventhub.aio import EventHubConsumerClient
    except ModuleNotFoundError as exc:
        raise missing_dependency("azure-eventhub") from exc
    return EventHubConsumerClient


# ---------------------------------------------------------------------------
# SDK → core conversions (pure)
# ---------------------------------------------------------------------------

def to_sdk_position(position: StartPosition) -> tuple[Any, bool]:
    """Return ``(starting_position, starting_position_inclusive)`` for the SDK.

    The SDK reads a ``str`` as an offset, an ``int`` as a sequence
    number and a ``datetime`` as an enqueued time.
    """
    if position.kind is PositionKind.EARLIEST:
        return "-1", False
    if position.kind is PositionKind.LATEST:
        return "@latest", False
    if position.kind is PositionKind.ENQUEUED_TIME:
        return position.value, False
    if position.kind is PositionKind.OFFSET:
        return str(position.value), True
    return int(position.value), True  # type: ignore[arg-type]


def _decode(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return value


def _decode_mapping(raw: Mapping[Any, Any] | None) -> dict[str, Any]:
    if not raw:
        return {}
    return {str(_decode(key)): _decode(value) for key, value in raw.items()}


def _body_bytes(event: Any) -> bytes:
    body = event.body
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")
    try:
        return b"".join(body)
    except TypeError:
        # Value or sequence bodies; fall back to the SDK's text rendering.
        return event.body_as_str(encoding="UTF-8").encode("utf-8")


def to_received_event(partition_id: str, event: Any) -> ReceivedEvent:
    """Convert an SDK ``EventData`` into a :class:`ReceivedEvent`."""
    sequence_number = event.sequence_number
    offset = event.offset
    return ReceivedEvent(
        partition_id=str(partition_id),
        sequence_number=int(sequence_number) if sequence_number is not None else -1,
        offset=str(offset) if offset is not None else "",
        enqueued_time=event.enqueued_time,
        body=_body_bytes(event),
        content_type=event.content_type,
        correlation_id=_decode(event.correlation_id),
        message_id=_decode(event.message_id),
        properties=_decode_mapping(event.properties),
        system_properties=_decode_mapping(event.system_properties),
    )


def to_hub_properties(raw: Mapping[str, Any]) -> HubProperties:
    return HubProperties(
        name=str(raw["eventhub_name"]),
        created_at=raw.get("created_at"),
        partition_ids=tuple(str(pid) for pid in raw["partition_ids"]),
    )


def to_partition_properties(raw: Mapping[str, Any]) -> PartitionProperties:
    return PartitionProperties(
        partition_id=str(raw["id"]),
        is_empty=bool(raw["is_empty"]),
        beginning_sequence_number=int(raw["beginning_sequence_number"]),
        last_enqueued_sequence_number=int(raw["last_enqueued_sequence_number"]),
        last_enqueued_offset=str(raw["last_enqueued_offset"]),
        last_enqueued_time=raw.get("last_enqueued_time_utc"),
    )


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

class EventHubConsumerProvider:
    """Concrete :class:`EventHubProvider` backed by the async consumer client.

    Usage::

        provider = EventHubConsumerProvider.from_connection_string(
            conn_str, eventhub_name="events", consumer_group="$Default",
        )
        async with provider:
            hub = await provider.get_hub_properties()
    """

    # Substrings in service error messages that mean the partition id
    # itself is wrong (as opposed to a transient failure).
    _NOT_FOUND_SIGNALS: tuple[str, ...] = (
        "not found",
        "does not exist",
        "could not be found",
        "out of range",
        "invalid partition",
    )

    def __init__(self, client: Any) -> None:
        self._client = client
        self._closed = False

    @classmethod
    def from_connection_string(
        cls,
        connection_string: str,
        *,
        eventhub_name: str,
        consumer_group: str,
        logging_enable: bool = False,
    ) -> EventHubConsumerProvider:
        """Build a provider with fixed-mode retries.

        Raises
        ------
        InvalidConnectionStringError
            When the SDK rejects the connection string.
        """
        client_class = _import_consumer_client()
        try:
            client = client_class.from_connection_string(
                connection_string,
                consumer_group=consumer_group,
                eventhub_name=eventhub_name,
                retry_total=RETRY_TOTAL,
                retry_mode=RETRY_MODE,
                logging_enable=logging_enable,
            )
        except (ValueError, KeyError, TypeError) as exc:
            raise InvalidConnectionStringError(
                f"Invalid connection string: {exc}",
                hint="Copy the connection string from the namespace's "
                "Shared access policies blade.",
            ) from exc
        return cls(client)

    # ------------------------------------------------------------------
    # Async context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> EventHubConsumerProvider:
        return self

    async def __aexit__(self, *_args: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Protocol members
    # ------------------------------------------------------------------

    @property
    def fully_qualified_namespace(self) -> str:
        return str(self._client.fully_qualified_namespace)

    @property
    def eventhub_name(self) -> str:
        return str(self._client.eventhub_name)

    async def get_hub_properties(self) -> HubProperties:
        try:
            raw = await self._client.get_eventhub_properties()
        except Exception as exc:
            raise self._map_error(exc, "read event hub properties") from exc
        return to_hub_properties(raw)

    async def get_partition_properties(self, partition_id: str) -> PartitionProperties:
        try:
            raw = await self._client.get_partition_properties(partition_id)
        except Exception as exc:
            raise self._map_error(exc, f"read partition {partition_id}", partition_id) from exc
        return to_partition_properties(raw)

    async def receive(
        self,
        on_event: EventCallback,
        *,
        partition_id: str | None,
        position: StartPosition,
    ) -> None:
        starting_position, inclusive = to_sdk_position(position)

        async def _on_event(partition_context: Any, event: Any) -> None:
            if event is None:
                return
            await on_event(to_received_event(partition_context.partition_id, event))

        async def _on_error(partition_context: Any, error: Exception) -> None:
            where = partition_context.partition_id if partition_context is not None else "-"
            logger.warning("Receive error on partition %s: %s", where, error)

        kwargs: dict[str, Any] = {
            "starting_position": starting_position,
            "starting_position_inclusive": inclusive,
            "on_error": _on_error,
        }
        if partition_id is not None:
            kwargs["partition_id"] = partition_id

        logger.debug("Receiving from partition %s at %s", partition_id or "all", starting_position)
        try:
            await self._client.receive(_on_event, **kwargs)
        except EhViewerError:
            raise
        except Exception as exc:
            raise self._map_error(exc, "receive events", partition_id) from exc

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._client.close()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Error while closing the consumer client: %s", exc)

    # ------------------------------------------------------------------
    # Exception mapping
    # ------------------------------------------------------------------

    @classmethod
    def _map_error(
        cls,
        exc: Exception,
        action: str,
        partition_id: str | None = None,
    ) -> EhViewerError:
        """Translate an SDK exception into a domain exception."""
        if isinstance(exc, EhViewerError):
            return exc
        message = str(exc) or type(exc).__name__
        if partition_id is not None and any(
            signal in message.lower() for signal in cls._NOT_FOUND_SIGNALS
        ):
            return PartitionNotFoundError(
                f"Partition {partition_id} was not found: {message}",
                hint="Run with --get-details to list the hub's partitions.",
            )
        return EventHubServiceError(f"Could not {action}: {message}")
