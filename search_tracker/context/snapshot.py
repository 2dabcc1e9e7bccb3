"""
Context snapshot capture.

Reads the host environment into a ``BrowserInfo``.  Optional
capabilities the host does not expose (network information, device
memory) come out as ``None`` rather than errors.
"""

from __future__ import annotations

from search_tracker.browser.environment import Environment
from search_tracker.models.context import BrowserInfo, MemoryInfo
from search_tracker.utils import clock as clock_mod

# Order matters: Edge and Chrome user agents both contain "Chrome",
# Chrome ones also contain "Safari".  First match wins.
_BROWSER_FAMILIES = ("Chrome", "Firefox", "Safari", "Edge")


def detect_browser(user_agent: str) -> str:
    """Classify a user agent by ordered substring match."""
    for family in _BROWSER_FAMILIES:
        if family in user_agent:
            return family
    return "Unknown"


def capture(environment: Environment, clock: clock_mod.Clock) -> BrowserInfo:
    """Capture the current environment facts."""
    memory = None
    if environment.device_memory:
        memory = MemoryInfo(
            device_memory=environment.device_memory,
            hardware_concurrency=environment.hardware_concurrency,
        )

    return BrowserInfo(
        user_agent=environment.user_agent,
        language=environment.language,
        platform=environment.user_agent_data_platform or environment.platform,
        screen_width=environment.screen_width,
        screen_height=environment.screen_height,
        viewport_width=environment.viewport_width,
        viewport_height=environment.viewport_height,
        device_pixel_ratio=environment.device_pixel_ratio,
        timezone=environment.timezone,
        timestamp=clock_mod.to_iso(clock.now()),
        domain=environment.hostname,
        path=environment.pathname,
        connection=environment.connection.model_copy() if environment.connection else None,
        memory=memory,
        browser=detect_browser(environment.user_agent),
    )
