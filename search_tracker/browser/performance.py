"""
Performance timeline surface and typed performance entries.

``PerformanceSource`` is the observer API the performance monitor
subscribes to.  ``PerformanceTimeline`` is an in-process source: hosts
(the Playwright bridge, tests, replay tools) push raw entries in with
``record()`` and the timeline validates them into entry models and
dispatches each batch to the live subscriptions of that entry type.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Protocol

import pydantic

from search_tracker.utils import errors, logger
from search_tracker.utils.serialization import snake_to_camel

log = logger.create_logger("Performance")

# Matches the browser's default resource timing buffer size.
MAX_BUFFERED_ENTRIES = 250

_CAMEL = pydantic.ConfigDict(
    alias_generator=snake_to_camel, populate_by_name=True, extra="ignore"
)


# ============================================================================
# Entry models
# ============================================================================


class LargestContentfulPaintEntry(pydantic.BaseModel):
    """A ``largest-contentful-paint`` candidate."""

    model_config = _CAMEL

    start_time: float
    element_tag_name: str | None = None
    size: float | None = None
    url: str | None = None


class PaintEntry(pydantic.BaseModel):
    """A ``paint`` entry (first-paint or first-contentful-paint)."""

    model_config = _CAMEL

    name: str = ""
    start_time: float


class FirstInputEntry(pydantic.BaseModel):
    """A ``first-input`` entry."""

    model_config = _CAMEL

    name: str
    start_time: float
    processing_start: float


class LayoutShiftEntry(pydantic.BaseModel):
    """A ``layout-shift`` entry."""

    model_config = _CAMEL

    value: float
    had_recent_input: bool = False


class ResourceTimingEntry(pydantic.BaseModel):
    """A ``resource`` timing entry."""

    model_config = _CAMEL

    name: str
    duration: float
    transfer_size: float | None = None
    initiator_type: str = "other"


class NavigationTimingEntry(pydantic.BaseModel):
    """The document's ``navigation`` timing entry."""

    model_config = _CAMEL

    start_time: float = 0.0
    domain_lookup_start: float = 0.0
    domain_lookup_end: float = 0.0
    connect_start: float = 0.0
    connect_end: float = 0.0
    request_start: float = 0.0
    response_start: float = 0.0
    response_end: float = 0.0
    dom_content_loaded_event_end: float = 0.0
    load_event_end: float = 0.0


ENTRY_MODELS: dict[str, type[pydantic.BaseModel]] = {
    "largest-contentful-paint": LargestContentfulPaintEntry,
    "paint": PaintEntry,
    "first-input": FirstInputEntry,
    "layout-shift": LayoutShiftEntry,
    "resource": ResourceTimingEntry,
    "navigation": NavigationTimingEntry,
}


# ============================================================================
# Observer surface
# ============================================================================


class Subscription(Protocol):
    """Handle returned by ``observe``."""

    def disconnect(self) -> None: ...


class PerformanceSource(Protocol):
    """Observer-style access to performance entries."""

    @property
    def supported(self) -> bool:
        """Whether the host exposes an observer API at all."""
        ...

    def observe(self, entry_type: str, callback: Callable[[list[Any]], None]) -> Subscription: ...

    def get_entries_by_type(self, entry_type: str) -> list[Any]: ...


class _TimelineSubscription:
    """A live observer registered on a ``PerformanceTimeline``."""

    def __init__(self, timeline: PerformanceTimeline, entry_type: str, callback: Callable[[list[Any]], None]) -> None:
        self.entry_type = entry_type
        self.callback = callback
        self.connected = True
        self._timeline = timeline

    def disconnect(self) -> None:
        if self.connected:
            self.connected = False
            self._timeline._remove(self)


class PerformanceTimeline:
    """In-process performance timeline fed by the host."""

    supported = True

    def __init__(self) -> None:
        self._subscriptions: dict[str, list[_TimelineSubscription]] = {}
        self._buffer: dict[str, list[pydantic.BaseModel]] = {}

    def observe(self, entry_type: str, callback: Callable[[list[Any]], None]) -> _TimelineSubscription:
        """Subscribe *callback* to future entries of *entry_type*."""
        if entry_type not in ENTRY_MODELS:
            raise ValueError(
                f"Unknown entry type {entry_type!r}. "
                f"Valid types: {', '.join(ENTRY_MODELS)}"
            )
        subscription = _TimelineSubscription(self, entry_type, callback)
        self._subscriptions.setdefault(entry_type, []).append(subscription)
        return subscription

    def get_entries_by_type(self, entry_type: str) -> list[Any]:
        """Return buffered entries of *entry_type*, oldest first."""
        return list(self._buffer.get(entry_type, []))

    def subscriber_count(self, entry_type: str | None = None) -> int:
        """Count live subscriptions, optionally for one entry type."""
        if entry_type is not None:
            return len(self._subscriptions.get(entry_type, []))
        return sum(len(subs) for subs in self._subscriptions.values())

    def record(
        self,
        entry_type: str,
        entries: Iterable[Mapping[str, Any] | pydantic.BaseModel],
    ) -> int:
        """Validate, buffer and dispatch a batch of raw entries.

        Every live subscription for *entry_type* receives the whole
        batch in one callback, like a ``PerformanceObserver``.  A
        failing callback is logged and does not prevent delivery to
        the others.

        Returns:
            The number of entries recorded.
        """
        model = ENTRY_MODELS.get(entry_type)
        if model is None:
            log.debug("Ignoring unknown entry type", {"entryType": entry_type})
            return 0

        batch = [
            entry if isinstance(entry, model) else model.model_validate(entry)
            for entry in entries
        ]
        if not batch:
            return 0

        buffered = self._buffer.setdefault(entry_type, [])
        buffered.extend(batch)
        if len(buffered) > MAX_BUFFERED_ENTRIES:
            del buffered[: len(buffered) - MAX_BUFFERED_ENTRIES]

        for subscription in list(self._subscriptions.get(entry_type, [])):
            if not subscription.connected:
                continue
            try:
                subscription.callback(list(batch))
            except Exception as error:
                log.error(
                    "Performance observer callback failed",
                    {"entryType": entry_type, "error": errors.get_error_message(error)},
                )
        return len(batch)

    def clear(self) -> None:
        """Drop buffered entries (subscriptions stay connected)."""
        self._buffer.clear()

    def _remove(self, subscription: _TimelineSubscription) -> None:
        subs = self._subscriptions.get(subscription.entry_type, [])
        if subscription in subs:
            subs.remove(subscription)
