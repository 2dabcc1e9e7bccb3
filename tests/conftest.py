"""Shared fixtures and host fakes for the test suite."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from search_tracker.browser.environment import Environment
from search_tracker.browser.performance import PerformanceTimeline
from search_tracker.browser.storage import MemoryStorage
from search_tracker.collector import SearchBehaviorCollector
from search_tracker.config import CollectorConfig
from search_tracker.utils.randomness import SeededRandomSource

# ── Host fakes ──────────────────────────────────────────────────


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


class FakeTransport:
    """Records every request instead of sending it."""

    def __init__(
        self,
        status: int = 200,
        error: Exception | None = None,
        beacon_result: bool = True,
        supports_beacon: bool = True,
    ) -> None:
        self.status = status
        self.error = error
        self.beacon_result = beacon_result
        self.supports_beacon = supports_beacon
        self.posts: list[tuple[str, bytes, dict[str, str]]] = []
        self.beacons: list[tuple[str, bytes]] = []

    async def post(self, url: str, body: bytes, headers: Mapping[str, str]) -> int:
        self.posts.append((url, body, dict(headers)))
        if self.error is not None:
            raise self.error
        return self.status

    def send_beacon(self, url: str, body: bytes) -> bool:
        self.beacons.append((url, body))
        return self.beacon_result


class FakeElement:
    """Element matching ``.class`` selectors against its class list."""

    def __init__(
        self,
        classes: Sequence[str] = (),
        attributes: dict[str, str] | None = None,
        parent: FakeElement | None = None,
    ) -> None:
        self.classes = set(classes)
        self.attributes = dict(attributes or {})
        self.parent = parent

    def matches(self, selector: str) -> bool:
        return selector.startswith(".") and selector[1:] in self.classes

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def closest(self, selector: str) -> FakeElement | None:
        node: FakeElement | None = self
        while node is not None:
            if node.matches(selector):
                return node
            node = node.parent
        return None


class FakeDocument:
    """Document holding a flat list of elements in document order."""

    def __init__(self, elements: Sequence[FakeElement] = ()) -> None:
        self.elements = list(elements)

    def query_selector_all(self, selector: str) -> list[FakeElement]:
        return [element for element in self.elements if element.matches(selector)]


def make_results(count: int, selector_class: str = "trackable-item") -> list[FakeElement]:
    """Build *count* trackable result elements with ids ``"1"`` .. ``str(count)``."""
    return [
        FakeElement([selector_class], {"data-item-id": str(index + 1)})
        for index in range(count)
    ]


# ── Fixtures ────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    """Keep ambient SEARCH_TRACKER_* variables and .env files out of tests."""
    for key in list(os.environ):
        if key.startswith("SEARCH_TRACKER_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def random_source() -> SeededRandomSource:
    return SeededRandomSource(1234)


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def environment() -> Environment:
    """A desktop Chrome page on a search results URL."""
    return Environment(
        url="https://shop.example.com/search?q=shoes&utm_source=news&utm_medium=email",
        user_agent=(
            "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        language="en-GB",
        platform="Linux x86_64",
        screen_width=1920,
        screen_height=1080,
        viewport_width=1280,
        viewport_height=720,
        device_pixel_ratio=2.0,
        timezone="Europe/London",
    )


@pytest.fixture()
def timeline() -> PerformanceTimeline:
    return PerformanceTimeline()


@pytest.fixture()
def make_collector(
    storage: MemoryStorage,
    environment: Environment,
    transport: FakeTransport,
    timeline: PerformanceTimeline,
    clock: FakeClock,
    random_source: SeededRandomSource,
) -> Callable[..., SearchBehaviorCollector]:
    """Factory building a collector wired to the shared fakes.

    Keyword arguments not naming a collector dependency are passed to
    ``CollectorConfig.from_options``.
    """

    def factory(**kwargs: Any) -> SearchBehaviorCollector:
        deps = {
            "storage": storage,
            "environment": environment,
            "transport": transport,
            "timeline": timeline,
            "clock": clock,
            "random_source": random_source,
        }
        for name in ("storage", "environment", "transport", "timeline", "clock", "random_source", "document", "error_reporter"):
            if name in kwargs:
                deps[name] = kwargs.pop(name)
        return SearchBehaviorCollector(CollectorConfig.from_options(kwargs), **deps)

    return factory
