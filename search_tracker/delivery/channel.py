"""
Delivery channel: serialize a queue's contents and transmit them.

``send()`` swaps the queue out synchronously, builds the request body
from the swapped batch, and then either hands it to the beacon or
spawns a non-blocking POST task.  A delivery failure puts the batch
back in front of the live queue exactly once and reports it; the next
flush trigger is the retry.  A batch that cannot be serialized would
fail the same way on every retry, so it is dropped and reported
instead.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from typing import Generic, TypeVar

import pydantic
import pydantic_core

from search_tracker.delivery.queue import BatchQueue
from search_tracker.delivery.transport import HttpTransport
from search_tracker.utils import errors, logger

log = logger.create_logger("Delivery")

T = TypeVar("T")

ErrorReporter = Callable[[BaseException, str], None]


class DeliveryChannel(Generic[T]):
    """Sends batches of one queue to one endpoint."""

    def __init__(
        self,
        name: str,
        queue: BatchQueue[T],
        transport: HttpTransport,
        endpoint: Callable[[], str],
        *,
        headers: Mapping[str, str] | None = None,
        error_reporter: ErrorReporter | None = None,
    ) -> None:
        self.name = name
        self._queue = queue
        self._transport = transport
        self._endpoint = endpoint
        self._headers = dict(headers or {"Content-Type": "application/json"})
        self._error_reporter = error_reporter
        self._in_flight: set[asyncio.Task[bool]] = set()

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def send(
        self,
        build_payload: Callable[[list[T]], pydantic.BaseModel],
        *,
        use_beacon: bool = False,
    ) -> asyncio.Task[bool] | None:
        """Flush the queue.

        Args:
            build_payload: Wraps the swapped batch into the request body.
            use_beacon: Prefer the transport's beacon when it has one.

        Returns:
            The spawned POST task, or ``None`` when the queue was empty
            or the batch went through the beacon.
        """
        batch = self._queue.take()
        if not batch:
            return None

        try:
            body = build_payload(batch).model_dump_json(by_alias=True).encode("utf-8")
        except (pydantic.ValidationError, pydantic_core.PydanticSerializationError) as error:
            self._drop(batch, error)
            return None
        url = self._endpoint()

        if use_beacon and self._transport.supports_beacon:
            if self._transport.send_beacon(url, body):
                log.debug("Batch handed to beacon", {"channel": self.name, "size": len(batch)})
            else:
                self._fail(batch, errors.DeliveryError(self.name, f"Failed to send {self.name} via beacon"))
            return None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._fail(batch, errors.DeliveryError(self.name, "No running event loop to carry the request"))
            return None

        task = loop.create_task(self._post(url, body, batch), name=f"send:{self.name}")
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait until every in-flight POST has settled."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    async def _post(self, url: str, body: bytes, batch: list[T]) -> bool:
        try:
            status = await self._transport.post(url, body, self._headers)
            if not 200 <= status < 300:
                raise errors.DeliveryError(self.name, f"Failed to send {self.name}: HTTP {status}", status=status)
        except asyncio.CancelledError:
            self._queue.requeue(batch)
            raise
        except Exception as error:
            self._fail(batch, error)
            return False

        log.debug("Batch delivered", {"channel": self.name, "size": len(batch), "status": status})
        return True

    def _fail(self, batch: list[T], error: BaseException) -> None:
        self._queue.requeue(batch)
        log.error(
            f"Error sending {self.name}",
            {
                "error": errors.get_error_message(error),
                "batchSize": len(batch),
                "queued": len(self._queue),
            },
        )
        self._report(error)

    def _drop(self, batch: list[T], error: BaseException) -> None:
        log.error(
            f"Dropping unserializable {self.name} batch",
            {"error": errors.get_error_message(error), "batchSize": len(batch)},
        )
        self._report(error)

    def _report(self, error: BaseException) -> None:
        if self._error_reporter is None:
            return
        try:
            self._error_reporter(error, self.name)
        except Exception as report_error:
            log.warn("Error reporter failed", {"error": errors.get_error_message(report_error)})
