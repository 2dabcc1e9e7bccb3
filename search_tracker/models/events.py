"""Pydantic models for queued interaction events."""

from __future__ import annotations

from typing import Annotated, Literal

import pydantic

from search_tracker.utils.serialization import snake_to_camel


class ClickData(pydantic.BaseModel):
    """A resolved click on a trackable element, before session stamping.

    The collector stamps the current time when ``timestamp`` is omitted.
    """

    model_config = pydantic.ConfigDict(
        alias_generator=snake_to_camel, populate_by_name=True
    )

    item_id: str
    position: int = pydantic.Field(ge=0)
    search_request_id: str | None = None
    timestamp: str | None = None


class ClickEvent(pydantic.BaseModel):
    """Click on a search result item."""

    model_config = pydantic.ConfigDict(
        alias_generator=snake_to_camel, populate_by_name=True
    )

    type: Literal["click"] = "click"
    item_id: str
    position: int
    search_request_id: str | None = None
    timestamp: str
    session_id: str


class CustomEvent(pydantic.BaseModel):
    """Named event with a JSON-compatible data payload."""

    model_config = pydantic.ConfigDict(
        alias_generator=snake_to_camel, populate_by_name=True
    )

    type: Literal["custom_event"] = "custom_event"
    name: str
    data: dict[str, pydantic.JsonValue] = pydantic.Field(default_factory=dict)
    session_id: str
    timestamp: str


TrackedEvent = Annotated[ClickEvent | CustomEvent, pydantic.Field(discriminator="type")]
