"""
Extraction rules from performance entries to metrics.

Each function receives one observer callback batch and returns the
metrics it yields.  None of them touch the session or the clock.
"""

from __future__ import annotations

from collections.abc import Sequence

from search_tracker.browser.performance import (
    FirstInputEntry,
    LargestContentfulPaintEntry,
    LayoutShiftEntry,
    NavigationTimingEntry,
    PaintEntry,
    ResourceTimingEntry,
)
from search_tracker.models.metrics import (
    ClsMetric,
    FcpMetric,
    FidMetric,
    LcpMetric,
    NavigationMetric,
    ResourceMetric,
)


def lcp_metric(entries: Sequence[LargestContentfulPaintEntry]) -> LcpMetric | None:
    """Record the most recent candidate of the batch."""
    if not entries:
        return None
    last = entries[-1]
    return LcpMetric(
        value=last.start_time,
        element=last.element_tag_name or "unknown",
        size=last.size,
        url=last.url,
    )


def fcp_metric(entries: Sequence[PaintEntry]) -> FcpMetric | None:
    """Record the first entry of the batch only."""
    if not entries:
        return None
    return FcpMetric(value=entries[0].start_time)


def fid_metrics(entries: Sequence[FirstInputEntry]) -> list[FidMetric]:
    return [
        FidMetric(value=entry.processing_start - entry.start_time, name=entry.name)
        for entry in entries
    ]


def cls_metric(entries: Sequence[LayoutShiftEntry]) -> ClsMetric:
    """Sum shift values, skipping shifts that follow recent user input.

    Always yields a metric, with value 0 when nothing qualifies.
    """
    return ClsMetric(value=sum(entry.value for entry in entries if not entry.had_recent_input))


def resource_metrics(entries: Sequence[ResourceTimingEntry]) -> list[ResourceMetric]:
    return [
        ResourceMetric(
            name=entry.name,
            duration=entry.duration,
            size=entry.transfer_size,
            initiator_type=entry.initiator_type,
        )
        for entry in entries
    ]


def navigation_metric(entry: NavigationTimingEntry) -> NavigationMetric:
    return NavigationMetric(
        ttfb=entry.response_start - entry.request_start,
        dom_content_loaded=entry.dom_content_loaded_event_end - entry.start_time,
        load=entry.load_event_end - entry.start_time,
        dns=entry.domain_lookup_end - entry.domain_lookup_start,
        tcp=entry.connect_end - entry.connect_start,
        request=entry.response_end - entry.request_start,
    )
