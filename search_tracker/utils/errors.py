"""
Error types and helpers for consistent error message extraction.
"""

from __future__ import annotations


class DeliveryError(Exception):
    """A batch could not be handed to the ingestion endpoint.

    Attributes:
        channel: Name of the delivery channel (``"events"`` or
            ``"metrics"``).
        status: HTTP status code when the endpoint answered, else
            ``None``.
    """

    def __init__(self, channel: str, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.channel = channel
        self.status = status


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract an error message from an unknown error type.

    Falls back to the exception class name when the exception
    carries no message.
    """
    if isinstance(error, Exception):
        return str(error) or type(error).__name__
    return "Unknown error"
