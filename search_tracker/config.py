"""
Collector configuration.

Uses ``pydantic_settings.BaseSettings`` so deployments can supply
defaults through ``SEARCH_TRACKER_*`` environment variables or a
``.env`` file, while explicit options passed by the embedding code
take precedence.

Durations are in seconds.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pydantic
import pydantic_settings

from search_tracker.utils import logger
from search_tracker.utils.serialization import camel_to_snake

log = logger.create_logger("Config")

# Interval of the session expiration sweep.
SESSION_CHECK_INTERVAL_SECONDS = 60.0


class CollectorConfig(pydantic_settings.BaseSettings):
    """Options recognized by the collector.

    Attributes:
        endpoint: Events ingestion URL, absolute or page-relative.
        metrics_endpoint: Performance metrics ingestion URL.
        selector: CSS selector of trackable result elements.
        data_attribute: Attribute carrying the item id.
        search_request_id_attribute: Attribute carrying the search
            request id of an element.
        session_timeout: Session lifetime in seconds.
        batch_size: Queue length that triggers an events flush.
        send_interval: Seconds between timer-driven events flushes.
        session_id: Externally injected session id.
        search_request_id: Fallback search request id for clicks on
            elements without their own attribute.  The only option
            that may change after construction.
        performance_metrics_enabled: Install the performance monitor.
        bearer_token: Token sent to the events endpoint only.
    """

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix="SEARCH_TRACKER_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    endpoint: str = "/api/track"
    metrics_endpoint: str = "/api/metrics"
    selector: str = ".trackable-item"
    data_attribute: str = "data-item-id"
    search_request_id_attribute: str = "data-search-request-id"
    session_timeout: float = pydantic.Field(default=30 * 60, gt=0)
    batch_size: int = pydantic.Field(default=10, gt=0)
    send_interval: float = pydantic.Field(default=10.0, gt=0)
    session_id: str | None = None
    search_request_id: str | None = None
    performance_metrics_enabled: bool = True
    bearer_token: str | None = None

    @pydantic.field_validator("session_id", "search_request_id", "bearer_token", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None = None, **overrides: Any) -> CollectorConfig:
        """Build a config from a loose option mapping.

        Keys may be camelCase (``metricsEndpoint``) or snake_case
        (``metrics_endpoint``).  Unknown keys are ignored.

        Args:
            options: Option mapping as handed over by the embedding page.
            **overrides: Additional options applied after *options*.

        Returns:
            A validated, frozen ``CollectorConfig``.
        """
        values: dict[str, Any] = {}
        for key, value in {**(options or {}), **overrides}.items():
            name = camel_to_snake(key)
            if name in cls.model_fields:
                values[name] = value
            else:
                log.debug("Ignoring unknown option", {"option": key})
        return cls(**values)

    def with_search_request_id(self, search_request_id: str | None) -> CollectorConfig:
        """Return a copy with a different fallback search request id."""
        return self.model_copy(update={"search_request_id": search_request_id})
