"""Pydantic model of the host page environment.

Holds the navigator, screen, window and location facts that the
context snapshot reads.  Hosts update ``url`` as the page navigates;
the Playwright bridge builds one from the live page.
"""

from __future__ import annotations

import pydantic

from search_tracker.models.context import ConnectionInfo
from search_tracker.utils import url as url_mod
from search_tracker.utils.serialization import snake_to_camel


class Environment(pydantic.BaseModel):
    """Environment facts of the page the collector is embedded in."""

    model_config = pydantic.ConfigDict(
        alias_generator=snake_to_camel, populate_by_name=True
    )

    url: str = "about:blank"
    user_agent: str = ""
    language: str = ""
    platform: str = ""
    user_agent_data_platform: str | None = None
    screen_width: int = 0
    screen_height: int = 0
    viewport_width: int = 0
    viewport_height: int = 0
    device_pixel_ratio: float = 1.0
    timezone: str = "UTC"
    connection: ConnectionInfo | None = None
    device_memory: float | None = None
    hardware_concurrency: int | None = None

    @property
    def hostname(self) -> str:
        return url_mod.extract_hostname(self.url)

    @property
    def pathname(self) -> str:
        return url_mod.extract_pathname(self.url)
