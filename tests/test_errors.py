"""Tests for search_tracker.utils.errors: delivery errors and message extraction."""

from __future__ import annotations

from search_tracker.utils.errors import DeliveryError, get_error_message


class TestGetErrorMessage:
    """Tests for get_error_message()."""

    def test_exception_with_message(self) -> None:
        assert get_error_message(ValueError("something broke")) == "something broke"

    def test_exception_without_message(self) -> None:
        assert get_error_message(ValueError()) == "ValueError"

    def test_non_exception(self) -> None:
        assert get_error_message("oops") == "Unknown error"


class TestDeliveryError:
    """Tests for DeliveryError."""

    def test_attributes(self) -> None:
        error = DeliveryError("events", "Failed to send events: HTTP 503", status=503)
        assert error.channel == "events"
        assert error.status == 503
        assert get_error_message(error) == "Failed to send events: HTTP 503"

    def test_status_optional(self) -> None:
        assert DeliveryError("events", "beacon refused").status is None
