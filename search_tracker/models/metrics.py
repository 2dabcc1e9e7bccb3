"""Pydantic models for performance metrics.

One variant per observation type, discriminated on ``type``.  The
``timestamp`` and ``session_id`` fields are empty until the collector
stamps the metric in ``track_performance_metric``.
"""

from __future__ import annotations

from typing import Annotated, Literal

import pydantic

from search_tracker.utils.serialization import snake_to_camel

_CAMEL = pydantic.ConfigDict(alias_generator=snake_to_camel, populate_by_name=True)


class LcpMetric(pydantic.BaseModel):
    """Largest Contentful Paint."""

    model_config = _CAMEL

    type: Literal["LCP"] = "LCP"
    value: float
    element: str = "unknown"
    size: float | None = None
    url: str | None = None
    timestamp: str | None = None
    session_id: str | None = None


class FcpMetric(pydantic.BaseModel):
    """First Contentful Paint."""

    model_config = _CAMEL

    type: Literal["FCP"] = "FCP"
    value: float
    timestamp: str | None = None
    session_id: str | None = None


class FidMetric(pydantic.BaseModel):
    """First Input Delay: processing start minus input start time."""

    model_config = _CAMEL

    type: Literal["FID"] = "FID"
    value: float
    name: str
    timestamp: str | None = None
    session_id: str | None = None


class ClsMetric(pydantic.BaseModel):
    """Cumulative Layout Shift for one observer callback."""

    model_config = _CAMEL

    type: Literal["CLS"] = "CLS"
    value: float
    timestamp: str | None = None
    session_id: str | None = None


class ResourceMetric(pydantic.BaseModel):
    """Timing of a single loaded resource."""

    model_config = _CAMEL

    type: Literal["RESOURCE"] = "RESOURCE"
    name: str
    duration: float
    size: float | None = None
    initiator_type: str
    timestamp: str | None = None
    session_id: str | None = None


class NavigationMetric(pydantic.BaseModel):
    """Deltas between marks of the document navigation entry."""

    model_config = _CAMEL

    type: Literal["NAVIGATION"] = "NAVIGATION"
    ttfb: float
    dom_content_loaded: float
    load: float
    dns: float
    tcp: float
    request: float
    timestamp: str | None = None
    session_id: str | None = None


PerformanceMetric = Annotated[
    LcpMetric | FcpMetric | FidMetric | ClsMetric | ResourceMetric | NavigationMetric,
    pydantic.Field(discriminator="type"),
]
