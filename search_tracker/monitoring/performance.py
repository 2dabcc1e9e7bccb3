"""
Performance monitor.

Installs one subscription per metric family on a
``PerformanceSource`` and reads the navigation timing entry once per
setup, using the most recent entry so a new document reports its own
timings.  ``start()`` can be called again at any time (the navigation
tracker does so on every path change); it disconnects the previous
subscriptions before creating new ones.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from search_tracker.browser.performance import PerformanceSource, Subscription
from search_tracker.models.metrics import PerformanceMetric
from search_tracker.monitoring import extractors
from search_tracker.utils import logger

log = logger.create_logger("PerformanceMonitor")

MetricSink = Callable[[PerformanceMetric], None]


class PerformanceMonitor:
    """Feeds metrics extracted from performance entries into a sink."""

    def __init__(self, source: PerformanceSource | None, sink: MetricSink) -> None:
        self._source = source
        self._sink = sink
        self._subscriptions: list[Subscription] = []
        self.setup_count = 0

    @property
    def active(self) -> bool:
        return bool(self._subscriptions)

    def start(self) -> None:
        """(Re)install all subscriptions and report navigation timing."""
        self.stop()
        source = self._source
        if source is None or not source.supported:
            log.debug("Performance observer API unavailable, monitor disabled")
            return

        handlers: dict[str, Callable[[list[Any]], None]] = {
            "largest-contentful-paint": self._on_lcp,
            "paint": self._on_paint,
            "first-input": self._on_first_input,
            "layout-shift": self._on_layout_shift,
            "resource": self._on_resource,
        }
        for entry_type, handler in handlers.items():
            self._subscriptions.append(source.observe(entry_type, handler))
        self.setup_count += 1

        navigation_entries = source.get_entries_by_type("navigation")
        if navigation_entries:
            self._emit(extractors.navigation_metric(navigation_entries[-1]))

    def stop(self) -> None:
        """Disconnect every subscription."""
        for subscription in self._subscriptions:
            subscription.disconnect()
        self._subscriptions = []

    def _emit(self, metric: PerformanceMetric | None) -> None:
        if metric is not None:
            self._sink(metric)

    def _on_lcp(self, entries: list[Any]) -> None:
        self._emit(extractors.lcp_metric(entries))

    def _on_paint(self, entries: list[Any]) -> None:
        self._emit(extractors.fcp_metric(entries))

    def _on_first_input(self, entries: list[Any]) -> None:
        for metric in extractors.fid_metrics(entries):
            self._emit(metric)

    def _on_layout_shift(self, entries: list[Any]) -> None:
        self._emit(extractors.cls_metric(entries))

    def _on_resource(self, entries: list[Any]) -> None:
        for metric in extractors.resource_metrics(entries):
            self._emit(metric)
