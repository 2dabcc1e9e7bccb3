"""
HTTP transport used by the delivery channels.

``AiohttpTransport`` posts JSON bodies with a shared
``aiohttp.ClientSession`` so that TCP connections are reused across
flushes.  Its beacon emulates ``navigator.sendBeacon``: the request is
queued as a fire-and-forget task, the call answers immediately whether
the payload was accepted, and the outcome is only logged.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Protocol

import aiohttp

from search_tracker.utils import errors, logger

log = logger.create_logger("Transport")

# Browsers refuse beacon payloads above this size.
BEACON_MAX_BYTES = 64 * 1024

_REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=10)
_BEACON_HEADERS = {"Content-Type": "application/json"}


class HttpTransport(Protocol):
    """Transport capability injected into the collector."""

    @property
    def supports_beacon(self) -> bool: ...

    async def post(self, url: str, body: bytes, headers: Mapping[str, str]) -> int:
        """POST *body* and return the HTTP status code.

        Raises on network-level failure.
        """
        ...

    def send_beacon(self, url: str, body: bytes) -> bool:
        """Queue a best-effort send; return whether it was accepted."""
        ...


class AiohttpTransport:
    """``HttpTransport`` backed by aiohttp."""

    supports_beacon = True

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        timeout: aiohttp.ClientTimeout = _REQUEST_TIMEOUT,
    ) -> None:
        self._session = session
        self._owns_session = session is None
        self._timeout = timeout
        self._beacons: set[asyncio.Task[None]] = set()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def post(self, url: str, body: bytes, headers: Mapping[str, str]) -> int:
        session = self._get_session()
        async with session.post(url, data=body, headers=dict(headers)) as response:
            await response.read()
            return response.status

    def send_beacon(self, url: str, body: bytes) -> bool:
        if len(body) > BEACON_MAX_BYTES:
            log.warn("Beacon payload too large", {"bytes": len(body), "limit": BEACON_MAX_BYTES})
            return False
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return False

        task = loop.create_task(self._deliver_beacon(url, body), name="beacon")
        self._beacons.add(task)
        task.add_done_callback(self._beacons.discard)
        return True

    async def _deliver_beacon(self, url: str, body: bytes) -> None:
        try:
            status = await self.post(url, body, _BEACON_HEADERS)
        except Exception as error:
            log.warn("Beacon delivery failed", {"url": url, "error": errors.get_error_message(error)})
            return
        if status >= 400:
            log.warn("Beacon rejected by endpoint", {"url": url, "status": status})

    async def close(self) -> None:
        """Wait for queued beacons, then close an owned session."""
        if self._beacons:
            await asyncio.gather(*list(self._beacons), return_exceptions=True)
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
