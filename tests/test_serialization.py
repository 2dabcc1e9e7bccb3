"""Tests for search_tracker.utils.serialization: case conversion."""

from __future__ import annotations

import pytest

from search_tracker.utils.serialization import camel_to_snake, snake_to_camel


class TestSnakeToCamel:
    """Tests for snake_to_camel()."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("session_id", "sessionId"),
            ("search_request_id", "searchRequestId"),
            ("ttfb", "ttfb"),
            ("dom_content_loaded", "domContentLoaded"),
        ],
    )
    def test_conversion(self, name: str, expected: str) -> None:
        assert snake_to_camel(name) == expected


class TestCamelToSnake:
    """Tests for camel_to_snake()."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("metricsEndpoint", "metrics_endpoint"),
            ("enablePerformanceMetrics", "enable_performance_metrics"),
            ("batch_size", "batch_size"),
            ("endpoint", "endpoint"),
        ],
    )
    def test_conversion(self, name: str, expected: str) -> None:
        assert camel_to_snake(name) == expected
