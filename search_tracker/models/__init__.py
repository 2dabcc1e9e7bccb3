# Models package: re-export the wire models.
# Prefer importing from the specific submodule (e.g. search_tracker.models.events).

from search_tracker.models.context import (
    BrowserInfo as BrowserInfo,
    ConnectionInfo as ConnectionInfo,
    MemoryInfo as MemoryInfo,
)
from search_tracker.models.events import (
    ClickData as ClickData,
    ClickEvent as ClickEvent,
    CustomEvent as CustomEvent,
    TrackedEvent as TrackedEvent,
)
from search_tracker.models.metrics import (
    ClsMetric as ClsMetric,
    FcpMetric as FcpMetric,
    FidMetric as FidMetric,
    LcpMetric as LcpMetric,
    NavigationMetric as NavigationMetric,
    PerformanceMetric as PerformanceMetric,
    ResourceMetric as ResourceMetric,
)
from search_tracker.models.payloads import (
    EventBatch as EventBatch,
    MetricBatch as MetricBatch,
)
