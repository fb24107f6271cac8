"""
Common utility functions for catalog queries.
"""
from datetime import timedelta
from typing import Optional
from urllib.parse import quote, urlparse

from consul_catalog.common.catalog_protocol import CATALOG_PREFIX


def catalog_path(*segments: Optional[str]) -> str:
    """
    Build a catalog path from its segments.

    Empty segments are dropped and surrounding slashes stripped, so the
    result never contains doubled separators.
    """
    parts = []
    for segment in segments:
        if not segment:
            continue
        segment = segment.strip("/")
        if segment:
            parts.append(quote(segment, safe="/"))
    return "/".join([CATALOG_PREFIX] + parts)


def format_wait(wait_time: float) -> str:
    """Format a wait time in seconds as truncated integer milliseconds, e.g. '1500ms'."""
    millis = timedelta(seconds=wait_time) // timedelta(milliseconds=1)
    return f"{millis}ms"


def base_url(address: str, scheme: str = "http") -> str:
    """Turn a 'host:port' address into a base URL; full URLs are kept as is."""
    address = address.strip().rstrip("/")
    if "://" in address:
        return address
    return f"{scheme}://{address}"


def validate_url(url: str) -> bool:
    """Validate URL format."""
    try:
        result = urlparse(url)
        return all([result.scheme, result.netloc])
    except ValueError:
        return False
