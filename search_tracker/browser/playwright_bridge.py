"""
Playwright page bridge.

Connects a collector to a real browser page driven by Playwright.
An in-page script forwards clicks on trackable elements, visibility
changes, unload and performance observer entries to Python through an
exposed binding.  Same-document navigations are picked up from the
page's ``framenavigated`` event, so no history API is patched.

Typical use::

    bridge = PageBridge(page)
    environment = await bridge.read_environment()
    timeline = PerformanceTimeline()
    collector = SearchBehaviorCollector(config, storage=storage,
        environment=environment, timeline=timeline)
    await bridge.attach(collector, timeline)
    collector.start()

The navigation timing entry of the document that is current at
``attach()`` is read directly, so attach before ``start()`` to have
it reported.
"""

from __future__ import annotations

import json
from typing import Any

import pydantic
from playwright import async_api

from search_tracker.browser.environment import Environment
from search_tracker.browser.performance import PerformanceTimeline
from search_tracker.collector import SearchBehaviorCollector
from search_tracker.models.events import ClickData
from search_tracker.utils import errors, logger

log = logger.create_logger("PageBridge")

BINDING_NAME = "__searchTrackerEmit"

_ENVIRONMENT_SCRIPT = """() => ({
    url: location.href,
    userAgent: navigator.userAgent,
    language: navigator.language,
    platform: navigator.platform,
    userAgentDataPlatform: navigator.userAgentData ? navigator.userAgentData.platform : null,
    screenWidth: screen.width,
    screenHeight: screen.height,
    viewportWidth: window.innerWidth,
    viewportHeight: window.innerHeight,
    devicePixelRatio: window.devicePixelRatio,
    timezone: Intl.DateTimeFormat().resolvedOptions().timeZone,
    connection: navigator.connection ? {
        effectiveType: navigator.connection.effectiveType,
        downlink: navigator.connection.downlink,
        rtt: navigator.connection.rtt,
        saveData: navigator.connection.saveData,
    } : null,
    deviceMemory: navigator.deviceMemory || null,
    hardwareConcurrency: navigator.hardwareConcurrency || null,
})"""

_NAVIGATION_ENTRY_SCRIPT = """() => {
    const entry = performance.getEntriesByType('navigation')[0];
    return entry ? entry.toJSON() : null;
}"""

_SIGNAL_SCRIPT_TEMPLATE = """(() => {
    if (window.__searchTrackerInstalled) return;
    window.__searchTrackerInstalled = true;
    const cfg = %(config)s;
    const emit = (kind, payload) => {
        try { window.%(binding)s(kind, payload); } catch (e) { /* page may be closing */ }
    };

    document.addEventListener('click', (event) => {
        const target = event.target && event.target.closest ? event.target.closest(cfg.selector) : null;
        if (!target) return;
        const itemId = target.getAttribute(cfg.dataAttribute);
        if (!itemId) return;
        const position = Array.from(document.querySelectorAll(cfg.selector)).indexOf(target) + 1;
        emit('click', {
            itemId,
            position,
            searchRequestId: target.getAttribute(cfg.searchRequestIdAttribute),
            timestamp: new Date().toISOString(),
        });
    }, true);

    document.addEventListener('visibilitychange', () => emit('visibility', { state: document.visibilityState }));
    window.addEventListener('beforeunload', () => emit('unload', {}));

    if (!('PerformanceObserver' in window)) return;
    const serializers = {
        'largest-contentful-paint': (e) => ({
            startTime: e.startTime,
            elementTagName: e.element ? e.element.tagName : null,
            size: e.size,
            url: e.url,
        }),
        'paint': (e) => ({ name: e.name, startTime: e.startTime }),
        'first-input': (e) => ({ name: e.name, startTime: e.startTime, processingStart: e.processingStart }),
        'layout-shift': (e) => ({ value: e.value, hadRecentInput: e.hadRecentInput }),
        'resource': (e) => ({
            name: e.name,
            duration: e.duration,
            transferSize: e.transferSize,
            initiatorType: e.initiatorType,
        }),
    };
    Object.keys(serializers).forEach((entryType) => {
        try {
            new PerformanceObserver((list) => emit('performance', {
                entryType,
                entries: list.getEntries().map(serializers[entryType]),
            })).observe({ type: entryType, buffered: true });
        } catch (e) { /* entry type unsupported by this browser */ }
    });
    if (document.readyState !== 'complete') {
        window.addEventListener('load', () => setTimeout(() => {
            const nav = performance.getEntriesByType('navigation')[0];
            if (nav) emit('performance', { entryType: 'navigation', entries: [nav.toJSON()] });
        }, 0));
    }
})();"""


def build_signal_script(collector: SearchBehaviorCollector) -> str:
    """Render the in-page signal script for the collector's selectors."""
    page_config = {
        "selector": collector.config.selector,
        "dataAttribute": collector.config.data_attribute,
        "searchRequestIdAttribute": collector.config.search_request_id_attribute,
    }
    return _SIGNAL_SCRIPT_TEMPLATE % {"config": json.dumps(page_config), "binding": BINDING_NAME}


class PageBridge:
    """Forwards signals of a Playwright page to a collector."""

    def __init__(self, page: async_api.Page) -> None:
        self._page = page
        self._collector: SearchBehaviorCollector | None = None
        self._timeline: PerformanceTimeline | None = None
        self._binding_exposed = False

    @property
    def attached(self) -> bool:
        return self._collector is not None

    async def read_environment(self) -> Environment:
        """Read navigator, screen and location facts from the page."""
        data = await self._page.evaluate(_ENVIRONMENT_SCRIPT)
        return Environment.model_validate(data)

    async def attach(self, collector: SearchBehaviorCollector, timeline: PerformanceTimeline | None = None) -> None:
        """Start forwarding page signals to *collector*."""
        if self._collector is not None:
            raise RuntimeError("PageBridge is already attached")
        self._collector = collector
        self._timeline = timeline

        if not self._binding_exposed:
            await self._page.expose_binding(BINDING_NAME, self._on_emit)
            self._binding_exposed = True

        script = build_signal_script(collector)
        await self._page.add_init_script(script=script)
        await self._page.evaluate(script)

        if timeline is not None:
            entry = await self._page.evaluate(_NAVIGATION_ENTRY_SCRIPT)
            if entry:
                timeline.record("navigation", [entry])

        self._page.on("framenavigated", self._on_frame_navigated)
        collector.on_destroy(self.detach)
        log.info("Attached to page", {"url": self._page.url})

    def detach(self) -> None:
        """Stop forwarding.  Later binding calls from the page are ignored."""
        if self._collector is None:
            return
        self._page.remove_listener("framenavigated", self._on_frame_navigated)
        self._collector = None
        self._timeline = None
        log.debug("Detached from page")

    def _on_frame_navigated(self, frame: async_api.Frame) -> None:
        if self._collector is None or frame != self._page.main_frame:
            return
        self._collector.notify_navigation(frame.url)

    def _on_emit(self, source: dict[str, Any], kind: str, payload: dict[str, Any] | None = None) -> None:
        collector = self._collector
        if collector is None:
            return
        payload = payload or {}
        try:
            if kind == "click":
                collector.track_click(
                    ClickData(
                        item_id=payload["itemId"],
                        position=payload["position"],
                        search_request_id=payload.get("searchRequestId") or collector.config.search_request_id,
                        timestamp=payload.get("timestamp"),
                    )
                )
            elif kind == "visibility":
                collector.handle_visibility_change(str(payload.get("state", "")))
            elif kind == "unload":
                collector.handle_unload()
            elif kind == "performance":
                if self._timeline is not None:
                    self._timeline.record(payload["entryType"], payload.get("entries") or [])
            else:
                log.debug("Ignoring unknown page signal", {"kind": kind})
        except (KeyError, pydantic.ValidationError) as error:
            log.warn(
                "Malformed page signal",
                {"kind": kind, "error": errors.get_error_message(error)},
            )
