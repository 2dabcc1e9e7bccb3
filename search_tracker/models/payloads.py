"""Request bodies posted to the ingestion endpoints."""

from __future__ import annotations

import pydantic

from search_tracker.models.context import BrowserInfo
from search_tracker.models.events import TrackedEvent
from search_tracker.models.metrics import PerformanceMetric
from search_tracker.utils.serialization import snake_to_camel


class EventBatch(pydantic.BaseModel):
    """Body of a request to the events endpoint."""

    model_config = pydantic.ConfigDict(
        alias_generator=snake_to_camel, populate_by_name=True
    )

    events: list[TrackedEvent]
    session_id: str
    color_identifier: str
    browser_info: BrowserInfo
    utm_params: dict[str, str] = pydantic.Field(default_factory=dict)
    timestamp: str


class MetricBatch(pydantic.BaseModel):
    """Body of a request to the performance metrics endpoint."""

    model_config = pydantic.ConfigDict(
        alias_generator=snake_to_camel, populate_by_name=True
    )

    performance_metrics: list[PerformanceMetric]
    session_id: str
    color_identifier: str
    browser_info: BrowserInfo
    timestamp: str
