"""
Search behavior collector.

Wires the identity store, context snapshot, event and metric queues,
delivery channels, performance monitor and navigation tracker into
the object an embedding host talks to.

Host signals (clicks, visibility changes, unload, navigation) arrive
through the ``handle_*`` and ``notify_navigation`` hooks.  After
``destroy()`` those hooks ignore further signals.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from typing import Any

from search_tracker import config as config_mod
from search_tracker.browser import dom
from search_tracker.browser.environment import Environment
from search_tracker.browser.performance import PerformanceSource
from search_tracker.browser.storage import Storage
from search_tracker.context import snapshot
from search_tracker.delivery.channel import DeliveryChannel, ErrorReporter
from search_tracker.delivery.queue import BatchQueue
from search_tracker.delivery.transport import AiohttpTransport, HttpTransport
from search_tracker.identity import anonymous
from search_tracker.identity.session import SessionStore
from search_tracker.models.events import ClickData, ClickEvent, CustomEvent
from search_tracker.models.metrics import PerformanceMetric
from search_tracker.models.payloads import EventBatch, MetricBatch
from search_tracker.monitoring.performance import PerformanceMonitor
from search_tracker.navigation.tracker import NavigationTracker
from search_tracker.utils import clock as clock_mod
from search_tracker.utils import logger
from search_tracker.utils import url as url_mod
from search_tracker.utils.randomness import RandomSource, SystemRandomSource
from search_tracker.utils.timers import Interval

log = logger.create_logger("Collector")


class SearchBehaviorCollector:
    """Captures interaction events and performance metrics for one page."""

    def __init__(
        self,
        config: config_mod.CollectorConfig | None = None,
        *,
        storage: Storage,
        environment: Environment | None = None,
        transport: HttpTransport | None = None,
        document: dom.Document | None = None,
        timeline: PerformanceSource | None = None,
        clock: clock_mod.Clock | None = None,
        random_source: RandomSource | None = None,
        error_reporter: ErrorReporter | None = None,
    ) -> None:
        """Derive identity and context for the page.

        Storage errors raised here are not caught: the collector
        cannot work without identity.
        """
        self.config = config or config_mod.CollectorConfig()
        self.environment = environment or Environment()
        self.document = document
        self._clock = clock or clock_mod.SystemClock()
        self._random = random_source or SystemRandomSource()
        self._owns_transport = transport is None
        self._transport: HttpTransport = transport or AiohttpTransport()

        self._sessions = SessionStore(
            storage,
            self._clock,
            self._random,
            self.config.session_timeout,
            self.config.session_id,
        )
        self.browser_info = snapshot.capture(self.environment, self._clock)
        self.color_identifier = anonymous.get_or_create_color_identifier(storage, self._random)
        self.utm_params = url_mod.get_utm_parameters(self.environment.url)

        self._events: BatchQueue[ClickEvent | CustomEvent] = BatchQueue()
        self._metrics: BatchQueue[PerformanceMetric] = BatchQueue()

        event_headers = {"Content-Type": "application/json"}
        if self.config.bearer_token:
            event_headers["Authorization"] = f"Bearer {self.config.bearer_token}"
        self._event_channel: DeliveryChannel[ClickEvent | CustomEvent] = DeliveryChannel(
            "events",
            self._events,
            self._transport,
            lambda: url_mod.resolve_endpoint(self.config.endpoint, self.environment.url),
            headers=event_headers,
            error_reporter=error_reporter,
        )
        self._metric_channel: DeliveryChannel[PerformanceMetric] = DeliveryChannel(
            "performance metrics",
            self._metrics,
            self._transport,
            lambda: url_mod.resolve_endpoint(self.config.metrics_endpoint, self.environment.url),
            error_reporter=error_reporter,
        )

        self._monitor = PerformanceMonitor(timeline, self.track_performance_metric)
        self._navigation = NavigationTracker(self.environment.pathname, self._on_path_change)
        self._session_timer = Interval(
            "session-check",
            config_mod.SESSION_CHECK_INTERVAL_SECONDS,
            self.check_session_expiration,
        )
        self._batch_timer = Interval("batch-send", self.config.send_interval, self._flush_pending_events)

        self._teardown_callbacks: list[Callable[[], None]] = []
        self._listening = True
        self._started = False

        log.info(
            "Collector initialised",
            {"sessionId": self.session_id, "path": self.current_path, "browser": self.browser_info.browser},
        )

    # ==========================================================================
    # State
    # ==========================================================================

    @property
    def session_id(self) -> str:
        return self._sessions.session_id

    @property
    def current_path(self) -> str:
        return self._navigation.current_path

    @property
    def events(self) -> list[ClickEvent | CustomEvent]:
        """Queued events not yet handed to the transport."""
        return self._events.items()

    @property
    def performance_metrics(self) -> list[PerformanceMetric]:
        """Queued metrics not yet handed to the transport."""
        return self._metrics.items()

    @property
    def performance_monitor(self) -> PerformanceMonitor:
        return self._monitor

    @property
    def destroyed(self) -> bool:
        return not self._listening

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    def start(self) -> None:
        """Install the performance monitor and start the timers.

        Must be called from within a running event loop.
        """
        if not self._listening:
            raise RuntimeError("Collector has been destroyed")
        if self._started:
            return
        self._started = True
        if self.config.performance_metrics_enabled:
            self._monitor.start()
        self._session_timer.start()
        self._batch_timer.start()
        log.debug("Collector started", {"sendInterval": self.config.send_interval})

    def destroy(self) -> None:
        """Stop timers, disconnect observers and detach host hooks.

        In-flight sends are left to finish on their own.
        """
        if not self._listening:
            return
        self._listening = False
        self._session_timer.stop()
        self._batch_timer.stop()
        self._monitor.stop()
        for callback in self._teardown_callbacks:
            callback()
        self._teardown_callbacks.clear()
        log.info("Collector destroyed", {"pendingEvents": len(self._events)})

    def on_destroy(self, callback: Callable[[], None]) -> None:
        """Register a host hook remover to run on ``destroy()``."""
        self._teardown_callbacks.append(callback)

    async def wait_for_pending(self) -> None:
        """Wait for every in-flight send to settle."""
        await self._event_channel.wait_idle()
        await self._metric_channel.wait_idle()

    async def aclose(self) -> None:
        """Destroy, let in-flight sends settle and close an owned transport."""
        self.destroy()
        await self._session_timer.aclose()
        await self._batch_timer.aclose()
        await self.wait_for_pending()
        if self._owns_transport and isinstance(self._transport, AiohttpTransport):
            await self._transport.close()

    async def __aenter__(self) -> SearchBehaviorCollector:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ==========================================================================
    # Session
    # ==========================================================================

    def reset_session(self) -> str:
        """Discard the current session and start a new one."""
        return self._sessions.reset_session()

    def check_session_expiration(self) -> bool:
        """Reset the session when it has outlived the timeout."""
        return self._sessions.check_expiration()

    def update_search_request_id(self, search_request_id: str | None) -> None:
        """Change the fallback search request id used for clicks."""
        self.config = self.config.with_search_request_id(search_request_id)

    # ==========================================================================
    # Events
    # ==========================================================================

    def track_event(self, name: str, data: Mapping[str, Any] | None = None) -> CustomEvent:
        """Queue a custom event, flushing once the batch size is reached.

        Raises:
            pydantic.ValidationError: *data* is not JSON-compatible.  The
                event is rejected before it reaches the queue.
        """
        event = CustomEvent(
            name=name,
            data=dict(data or {}),
            session_id=self.session_id,
            timestamp=self._now(),
        )
        self._enqueue(event)
        return event

    def track_click(self, click: ClickData | Mapping[str, Any]) -> ClickEvent:
        """Queue a click event, flushing once the batch size is reached."""
        data = click if isinstance(click, ClickData) else ClickData.model_validate(click)
        event = ClickEvent(
            **data.model_dump(exclude={"timestamp"}),
            timestamp=data.timestamp or self._now(),
            session_id=self.session_id,
        )
        self._enqueue(event)
        return event

    def track_conversion(self, data: Mapping[str, Any] | None = None) -> CustomEvent:
        """Queue a conversion event, then start a new session."""
        event = self.track_event("conversion", data)
        self.reset_session()
        return event

    def send_events(self, force_beacon: bool = False) -> asyncio.Task[bool] | None:
        """Flush the event queue.

        Returns:
            The spawned POST task, or ``None`` when nothing was queued
            or the beacon carried the batch.
        """
        return self._event_channel.send(self._build_event_batch, use_beacon=force_beacon)

    def _enqueue(self, event: ClickEvent | CustomEvent) -> None:
        if self._events.append(event) >= self.config.batch_size:
            self.send_events()

    def _flush_pending_events(self) -> None:
        if len(self._events) > 0:
            self.send_events()

    def _build_event_batch(self, batch: list[ClickEvent | CustomEvent]) -> EventBatch:
        return EventBatch(
            events=batch,
            session_id=self.session_id,
            color_identifier=self.color_identifier,
            browser_info=self.browser_info,
            utm_params=dict(self.utm_params),
            timestamp=self._now(),
        )

    # ==========================================================================
    # Performance metrics
    # ==========================================================================

    def track_performance_metric(self, metric: PerformanceMetric) -> None:
        """Stamp and queue a metric, then send it straight away."""
        stamped = metric.model_copy(update={"timestamp": self._now(), "session_id": self.session_id})
        self._metrics.append(stamped)
        self.send_performance_metrics()

    def send_performance_metrics(self) -> asyncio.Task[bool] | None:
        """Flush the metric queue.  Never uses the beacon."""
        return self._metric_channel.send(self._build_metric_batch)

    def _build_metric_batch(self, batch: list[PerformanceMetric]) -> MetricBatch:
        return MetricBatch(
            performance_metrics=batch,
            session_id=self.session_id,
            color_identifier=self.color_identifier,
            browser_info=self.browser_info,
            timestamp=self._now(),
        )

    # ==========================================================================
    # Host signals
    # ==========================================================================

    def handle_click(self, target: dom.Element, document: dom.Document | None = None) -> ClickEvent | None:
        """Track a click whose target sits inside a trackable element."""
        if not self._listening:
            return None
        element = target.closest(self.config.selector)
        if element is None:
            return None
        item_id = element.get_attribute(self.config.data_attribute)
        if not item_id:
            return None

        document = document or self.document
        if document is None:
            log.warn("Click ignored, no document to resolve position", {"itemId": item_id})
            return None
        matches = document.query_selector_all(self.config.selector)
        position = next((i for i, match in enumerate(matches) if match is element), -1) + 1

        search_request_id = (
            element.get_attribute(self.config.search_request_id_attribute)
            or self.config.search_request_id
        )
        return self.track_click(
            ClickData(
                item_id=item_id,
                position=position,
                search_request_id=search_request_id,
                timestamp=self._now(),
            )
        )

    def handle_visibility_change(self, state: str) -> CustomEvent | None:
        if not self._listening:
            return None
        return self.track_event("visibility_change", {"state": state})

    def handle_unload(self) -> None:
        """Last-chance flush through the beacon."""
        if self._listening:
            self.send_events(force_beacon=True)

    def handle_path_change(self) -> bool:
        """Compare the environment path with the tracked one.

        Returns:
            True when the path changed.
        """
        if not self._listening:
            return False
        return self._navigation.notify(self.environment.pathname)

    def notify_navigation(self, url: str) -> bool:
        """Record a same-document navigation to *url*."""
        if not self._listening:
            return False
        self.environment.url = url
        return self.handle_path_change()

    def _on_path_change(self, previous: str, path: str) -> None:
        self.browser_info = snapshot.capture(self.environment, self._clock)
        if self.config.performance_metrics_enabled and self._started:
            self._monitor.start()
        log.debug("Context refreshed for new path", {"from": previous, "to": path})

    def _now(self) -> str:
        return clock_mod.to_iso(self._clock.now())
