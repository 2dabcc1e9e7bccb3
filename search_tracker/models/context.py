"""Pydantic models for the per-navigation context snapshot."""

from __future__ import annotations

import pydantic

from search_tracker.utils.serialization import snake_to_camel


class ConnectionInfo(pydantic.BaseModel):
    """Network Information API facts, when the host exposes them."""

    model_config = pydantic.ConfigDict(
        alias_generator=snake_to_camel, populate_by_name=True
    )

    effective_type: str | None = None
    downlink: float | None = None
    rtt: float | None = None
    save_data: bool | None = None


class MemoryInfo(pydantic.BaseModel):
    """Device memory and logical core count."""

    model_config = pydantic.ConfigDict(
        alias_generator=snake_to_camel, populate_by_name=True
    )

    device_memory: float
    hardware_concurrency: int | None = None


class BrowserInfo(pydantic.BaseModel):
    """Environment facts captured once per session or navigation."""

    model_config = pydantic.ConfigDict(
        alias_generator=snake_to_camel, populate_by_name=True
    )

    user_agent: str
    language: str
    platform: str
    screen_width: int
    screen_height: int
    viewport_width: int
    viewport_height: int
    device_pixel_ratio: float
    timezone: str
    timestamp: str
    domain: str
    path: str
    connection: ConnectionInfo | None = None
    memory: MemoryInfo | None = None
    browser: str = "Unknown"
