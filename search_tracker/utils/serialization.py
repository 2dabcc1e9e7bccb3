"""Shared serialization helpers for camelCase conversion.

Provides the ``snake_to_camel`` alias generator used by the Pydantic
wire models and its inverse for reading camelCase option mappings.
"""

from __future__ import annotations

import re

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_to_camel(name: str) -> str:
    """Convert a snake_case string to camelCase.

    Args:
        name: A snake_case identifier such as
            ``"my_field_name"``.

    Returns:
        The camelCase equivalent, e.g. ``"myFieldName"``.
    """
    parts = name.split("_")
    return parts[0] + "".join(w.capitalize() for w in parts[1:])


def camel_to_snake(name: str) -> str:
    """Convert a camelCase string to snake_case.

    Already snake_case names are returned unchanged.

    Args:
        name: A camelCase identifier such as ``"metricsEndpoint"``.

    Returns:
        The snake_case equivalent, e.g. ``"metrics_endpoint"``.
    """
    return _CAMEL_BOUNDARY.sub("_", name).lower()
