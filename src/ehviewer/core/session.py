"""Consumption-session controller.

Decides which partitions to read, from which position, and when to
stop.  The provider's receive coroutine feeds a bounded queue; the
session drains that queue into the sinks in order until one of:

* the message-count limit is reached (exactly that many messages are
  delivered),
* the wall-clock timeout elapses (measured from session start, so the
  preflight call counts against it),
* the receive coroutine returns on its own.

Outside cancellation (Ctrl+C) propagates as ``CancelledError``.  In
every case the receive task is cancelled and the provider is closed
before :meth:`ConsumeSession.run` returns or raises.

Guarantees
----------
* No console output and no azure import.
* Provider errors propagate unchanged after cleanup.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from ehviewer.core.models import ConsumeOptions, ReceivedEvent, SessionResult, StopReason
from ehviewer.core.protocols import EventHubProvider, EventSink

logger = logging.getLogger(__name__)

QUEUE_SIZE: int = 300
"""Events buffered between the receiver and the sinks."""


class ConsumeSession:
    """Run one read of the hub under count/timeout limits.

    Parameters
    ----------
    provider:
        Any object satisfying the :class:`EventHubProvider` protocol.
    options:
        Partition, start position and termination limits.
    sinks:
        Destinations each event is handed to, in order.
    """

    def __init__(
        self,
        provider: EventHubProvider,
        options: ConsumeOptions,
        sinks: Sequence[EventSink],
    ) -> None:
        self._provider = provider
        self._options = options
        self._sinks = tuple(sinks)

    async def run(self) -> SessionResult:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._options.timeout
        try:
            try:
                await asyncio.wait_for(self._preflight(), timeout=self._options.timeout)
            except asyncio.TimeoutError:
                logger.debug("Timed out before the first read")
                return SessionResult(received=0, reason=StopReason.TIMEOUT)
            result = await self._drain(deadline)
            logger.debug("Session finished: %s after %d message(s)", result.reason.value, result.received)
            return result
        finally:
            await self._provider.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _preflight(self) -> None:
        """Fail fast on bad partitions or credentials before reading."""
        partition_id = self._options.partition_id
        if partition_id is None:
            hub = await self._provider.get_hub_properties()
            logger.debug("Reading %d partition(s) of %s", len(hub.partition_ids), hub.name)
        else:
            props = await self._provider.get_partition_properties(partition_id)
            logger.debug(
                "Partition %s holds sequence numbers %d..%d",
                props.partition_id,
                props.beginning_sequence_number,
                props.last_enqueued_sequence_number,
            )

    async def _drain(self, deadline: float) -> SessionResult:
        loop = asyncio.get_running_loop()
        limit = self._options.message_count
        queue: asyncio.Queue[ReceivedEvent] = asyncio.Queue(maxsize=QUEUE_SIZE)
        receiver = asyncio.ensure_future(
            self._provider.receive(
                queue.put,
                partition_id=self._options.partition_id,
                position=self._options.position,
            )
        )
        getter: asyncio.Future[ReceivedEvent] | None = None
        received = 0
        try:
            while limit is None or received < limit:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    return SessionResult(received, StopReason.TIMEOUT)

                getter = asyncio.ensure_future(queue.get())
                done, _ = await asyncio.wait(
                    {getter, receiver},
                    timeout=remaining,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if getter not in done:
                    if receiver in done:
                        # Surfaces provider errors.
                        receiver.result()
                        return SessionResult(received, StopReason.STREAM_ENDED)
                    return SessionResult(received, StopReason.TIMEOUT)

                await self._dispatch(getter.result())
                received += 1
            return SessionResult(received, StopReason.COUNT_REACHED)
        finally:
            if getter is not None and not getter.done():
                getter.cancel()
            receiver.cancel()
            await asyncio.gather(receiver, return_exceptions=True)

    async def _dispatch(self, event: ReceivedEvent) -> None:
        for sink in self._sinks:
            await sink.emit(event)
