"""Tests for search_tracker.browser.playwright_bridge with a mocked Playwright page."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import FakeTransport

from search_tracker.browser import playwright_bridge
from search_tracker.browser.performance import PerformanceTimeline
from search_tracker.collector import SearchBehaviorCollector
from search_tracker.models.events import ClickEvent

CollectorFactory = Callable[..., SearchBehaviorCollector]

_ENVIRONMENT = {
    "url": "https://shop.example.com/search?q=lamp&utm_campaign=spring",
    "userAgent": "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "language": "de-DE",
    "platform": "Linux x86_64",
    "userAgentDataPlatform": None,
    "screenWidth": 2560,
    "screenHeight": 1440,
    "viewportWidth": 1200,
    "viewportHeight": 800,
    "devicePixelRatio": 1,
    "timezone": "Europe/Berlin",
    "connection": {"effectiveType": "4g", "downlink": 9.5, "rtt": 50, "saveData": False},
    "deviceMemory": 8,
    "hardwareConcurrency": 16,
}

_NAVIGATION_ENTRY = {"entryType": "navigation", "startTime": 0, "requestStart": 20, "responseStart": 95}


def _make_page() -> MagicMock:
    async def evaluate(script: str, *args: Any) -> Any:
        if script == playwright_bridge._ENVIRONMENT_SCRIPT:
            return _ENVIRONMENT
        if script == playwright_bridge._NAVIGATION_ENTRY_SCRIPT:
            return _NAVIGATION_ENTRY
        return None

    page = MagicMock()
    page.url = _ENVIRONMENT["url"]
    page.evaluate = AsyncMock(side_effect=evaluate)
    page.expose_binding = AsyncMock()
    page.add_init_script = AsyncMock()
    page.main_frame = MagicMock(name="main_frame")
    return page


@pytest.fixture()
def page() -> MagicMock:
    return _make_page()


async def _attached(
    page: MagicMock, make_collector: CollectorFactory, timeline: PerformanceTimeline, **options: Any
) -> tuple[playwright_bridge.PageBridge, SearchBehaviorCollector]:
    bridge = playwright_bridge.PageBridge(page)
    collector = make_collector(**options)
    await bridge.attach(collector, timeline)
    return bridge, collector


class TestReadEnvironment:
    """Tests for PageBridge.read_environment()."""

    @pytest.mark.asyncio
    async def test_model_from_page(self, page: MagicMock) -> None:
        environment = await playwright_bridge.PageBridge(page).read_environment()
        assert environment.pathname == "/search"
        assert environment.timezone == "Europe/Berlin"
        assert environment.connection is not None
        assert environment.connection.effective_type == "4g"
        assert environment.device_memory == 8


class TestAttach:
    """Tests for PageBridge.attach()."""

    @pytest.mark.asyncio
    async def test_installs_binding_and_script(
        self, page: MagicMock, make_collector: CollectorFactory, timeline: PerformanceTimeline
    ) -> None:
        bridge, _ = await _attached(page, make_collector, timeline, selector=".result")
        assert bridge.attached
        page.expose_binding.assert_awaited_once_with(playwright_bridge.BINDING_NAME, bridge._on_emit)
        script = page.add_init_script.await_args.kwargs["script"]
        assert '"selector": ".result"' in script
        assert playwright_bridge.BINDING_NAME in script
        page.evaluate.assert_any_await(script)
        page.on.assert_called_once_with("framenavigated", bridge._on_frame_navigated)

    @pytest.mark.asyncio
    async def test_records_current_navigation_entry(
        self, page: MagicMock, make_collector: CollectorFactory, timeline: PerformanceTimeline
    ) -> None:
        await _attached(page, make_collector, timeline)
        entries = timeline.get_entries_by_type("navigation")
        assert len(entries) == 1
        assert entries[0].response_start == 95

    @pytest.mark.asyncio
    async def test_double_attach_rejected(
        self, page: MagicMock, make_collector: CollectorFactory, timeline: PerformanceTimeline
    ) -> None:
        bridge, collector = await _attached(page, make_collector, timeline)
        with pytest.raises(RuntimeError, match="already attached"):
            await bridge.attach(collector, timeline)


class TestSignals:
    """Tests for signals arriving through the exposed binding."""

    @pytest.mark.asyncio
    async def test_click(self, page: MagicMock, make_collector: CollectorFactory, timeline: PerformanceTimeline) -> None:
        bridge, collector = await _attached(page, make_collector, timeline, searchRequestId="sr-config")
        bridge._on_emit(
            {"page": page},
            "click",
            {"itemId": "42", "position": 3, "searchRequestId": None, "timestamp": "2026-01-01T12:00:01.000Z"},
        )
        (event,) = collector.events
        assert isinstance(event, ClickEvent)
        assert event.item_id == "42"
        assert event.position == 3
        assert event.search_request_id == "sr-config"

    @pytest.mark.asyncio
    async def test_malformed_click_ignored(
        self, page: MagicMock, make_collector: CollectorFactory, timeline: PerformanceTimeline
    ) -> None:
        bridge, collector = await _attached(page, make_collector, timeline)
        bridge._on_emit({}, "click", {"position": 1})
        bridge._on_emit({}, "click", {"itemId": "1", "position": -4})
        assert collector.events == []

    @pytest.mark.asyncio
    async def test_visibility(self, page: MagicMock, make_collector: CollectorFactory, timeline: PerformanceTimeline) -> None:
        bridge, collector = await _attached(page, make_collector, timeline)
        bridge._on_emit({}, "visibility", {"state": "hidden"})
        assert collector.events[0].data == {"state": "hidden"}

    @pytest.mark.asyncio
    async def test_unload_uses_beacon(
        self, page: MagicMock, make_collector: CollectorFactory, timeline: PerformanceTimeline, transport: FakeTransport
    ) -> None:
        bridge, collector = await _attached(page, make_collector, timeline)
        collector.track_event("a")
        bridge._on_emit({}, "unload", {})
        assert json.loads(transport.beacons[0][1])["events"][0]["name"] == "a"

    @pytest.mark.asyncio
    async def test_performance_entries_recorded(
        self, page: MagicMock, make_collector: CollectorFactory, timeline: PerformanceTimeline
    ) -> None:
        bridge, _ = await _attached(page, make_collector, timeline)
        bridge._on_emit({}, "performance", {"entryType": "resource", "entries": [{"name": "a.js", "duration": 4}]})
        assert timeline.get_entries_by_type("resource")[0].name == "a.js"

    @pytest.mark.asyncio
    async def test_unknown_signal_ignored(
        self, page: MagicMock, make_collector: CollectorFactory, timeline: PerformanceTimeline
    ) -> None:
        bridge, collector = await _attached(page, make_collector, timeline)
        bridge._on_emit({}, "scroll", {"y": 100})
        assert collector.events == []


class TestNavigation:
    """Tests for framenavigated forwarding."""

    @pytest.mark.asyncio
    async def test_main_frame_navigation(
        self, page: MagicMock, make_collector: CollectorFactory, timeline: PerformanceTimeline
    ) -> None:
        bridge, collector = await _attached(page, make_collector, timeline)
        frame = page.main_frame
        frame.url = "https://shop.example.com/product/9"
        bridge._on_frame_navigated(frame)
        assert collector.current_path == "/product/9"

    @pytest.mark.asyncio
    async def test_child_frame_ignored(
        self, page: MagicMock, make_collector: CollectorFactory, timeline: PerformanceTimeline
    ) -> None:
        bridge, collector = await _attached(page, make_collector, timeline)
        iframe = MagicMock(name="iframe")
        iframe.url = "https://ads.example.net/slot"
        bridge._on_frame_navigated(iframe)
        assert collector.current_path == "/search"


class TestDetach:
    """Tests for detaching on collector destroy."""

    @pytest.mark.asyncio
    async def test_destroy_detaches(
        self, page: MagicMock, make_collector: CollectorFactory, timeline: PerformanceTimeline
    ) -> None:
        bridge, collector = await _attached(page, make_collector, timeline)
        collector.destroy()
        assert not bridge.attached
        page.remove_listener.assert_called_once_with("framenavigated", bridge._on_frame_navigated)
        bridge._on_emit({}, "visibility", {"state": "hidden"})
        assert collector.events == []

    @pytest.mark.asyncio
    async def test_reattach_reuses_binding(
        self, page: MagicMock, make_collector: CollectorFactory, timeline: PerformanceTimeline
    ) -> None:
        bridge, collector = await _attached(page, make_collector, timeline)
        bridge.detach()
        await bridge.attach(collector, timeline)
        page.expose_binding.assert_awaited_once()
