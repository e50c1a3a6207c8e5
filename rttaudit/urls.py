"""
Origin helpers for network request URLs.
"""

from typing import AbstractSet, Optional
from urllib.parse import urlparse

# Keys with this prefix are bookkeeping entries, never real network origins
INTERNAL_PREFIX = "__"

NETWORK_SCHEMES = frozenset({"http", "https", "ws", "wss"})


def origin_of(url: str) -> Optional[str]:
    """Return scheme://host[:port] for network URLs, None for data:, blob:, etc."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    scheme = parsed.scheme.lower()
    if scheme not in NETWORK_SCHEMES or not parsed.netloc:
        return None
    # Drop credentials, keep explicit port
    netloc = parsed.netloc.rsplit("@", 1)[-1].lower()
    return f"{scheme}://{netloc}"


def is_internal_origin(origin: str, internal: AbstractSet[str] = frozenset()) -> bool:
    """True when origin is a synthetic entry (explicitly tagged or prefixed)."""
    return origin in internal or origin.startswith(INTERNAL_PREFIX)
