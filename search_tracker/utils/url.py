"""
URL helpers for page location parsing, UTM attribution and endpoint
resolution.
"""

from __future__ import annotations

from urllib import parse

UTM_KEYS = ("source", "medium", "campaign", "term", "content")


def extract_hostname(url: str) -> str:
    """Extract the hostname from a URL string, or ``""`` when absent."""
    try:
        return parse.urlparse(url).hostname or ""
    except ValueError:
        return ""


def extract_pathname(url: str) -> str:
    """Extract the path of a URL, defaulting to ``"/"`` like ``location.pathname``."""
    try:
        path = parse.urlparse(url).path
    except ValueError:
        return "/"
    return path or "/"


def get_utm_parameters(url: str) -> dict[str, str]:
    """Collect ``utm_*`` attribution parameters from a page URL.

    Only the five standard keys are read, and empty values are
    skipped.

    Args:
        url: The full page URL, e.g.
            ``"https://shop.example/?utm_source=news"``.

    Returns:
        Mapping such as ``{"utm_source": "news"}``.
    """
    try:
        query = parse.parse_qs(parse.urlparse(url).query)
    except ValueError:
        return {}

    params: dict[str, str] = {}
    for key in UTM_KEYS:
        values = query.get(f"utm_{key}")
        if values and values[0]:
            params[f"utm_{key}"] = values[0]
    return params


def resolve_endpoint(endpoint: str, page_url: str) -> str:
    """Resolve a possibly relative endpoint against the page URL.

    Absolute endpoints are returned unchanged; relative ones such as
    ``"/api/track"`` resolve the way a browser ``fetch`` would.
    """
    if not page_url:
        return endpoint
    return parse.urljoin(page_url, endpoint)
