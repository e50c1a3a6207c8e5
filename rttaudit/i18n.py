"""
Localized UI strings for audit titles, table headings and display values.

Bundles are built once per locale and are immutable afterwards.
"""

from __future__ import annotations

import logging
import math
import os
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, Mapping

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en-US"


class StringId(str, Enum):
    """Stable message IDs shared by every locale."""

    NETWORK_RTT_TITLE = "network_rtt.title"
    NETWORK_RTT_DESCRIPTION = "network_rtt.description"
    COLUMN_URL = "column_url"
    COLUMN_TIME_SPENT = "column_time_spent"
    MS = "ms"


_MESSAGES: Dict[str, Dict[StringId, str]] = {
    "en-US": {
        StringId.NETWORK_RTT_TITLE: "Network Round Trip Times",
        StringId.NETWORK_RTT_DESCRIPTION: (
            "Network round trip times (RTT) have a large impact on performance. "
            "If the RTT to an origin is high, it's an indication that servers closer "
            "to the user could improve performance."
        ),
        StringId.COLUMN_URL: "URL",
        StringId.COLUMN_TIME_SPENT: "Time Spent",
        StringId.MS: "{time_in_ms} ms",
    },
    "de": {
        StringId.NETWORK_RTT_TITLE: "Netzwerk-Umlaufzeiten",
        StringId.NETWORK_RTT_DESCRIPTION: (
            "Netzwerk-Umlaufzeiten (RTT) haben großen Einfluss auf die Leistung. "
            "Eine hohe RTT zu einem Ursprung deutet darauf hin, dass Server in der "
            "Nähe des Nutzers die Leistung verbessern könnten."
        ),
        StringId.COLUMN_URL: "URL",
        StringId.COLUMN_TIME_SPENT: "Benötigte Zeit",
        StringId.MS: "{time_in_ms} ms",
    },
}

_GROUP_SEPARATORS: Dict[str, str] = {"en-US": ",", "de": "."}


class StringBundle:
    """Read-only message table for one locale."""

    def __init__(self, locale: str, messages: Mapping[StringId, str], group_separator: str):
        self.locale = locale
        self._messages = MappingProxyType(dict(messages))
        self.group_separator = group_separator

    def get(self, string_id: StringId) -> str:
        return self._messages[string_id]

    def format(self, string_id: StringId, **values: Any) -> str:
        return self._messages[string_id].format(**values)

    def format_number(self, value: float) -> str:
        """Round half-up to an integer and apply the locale's digit grouping."""
        if not math.isfinite(value):
            return str(value)
        rounded = int(math.floor(value + 0.5))
        return f"{rounded:,}".replace(",", self.group_separator)

    def format_ms(self, value: float) -> str:
        return self.format(StringId.MS, time_in_ms=self.format_number(value))


def available_locales() -> tuple:
    return tuple(sorted(_MESSAGES))


def default_locale() -> str:
    return os.getenv("RTTAUDIT_LOCALE", DEFAULT_LOCALE)


def resolve_locale(locale: Any) -> str:
    """Map a requested locale onto a shipped one (region variants, then en-US)."""
    if not isinstance(locale, str):
        raise TypeError(f"locale must be a string, got {type(locale).__name__}")
    if locale in _MESSAGES:
        return locale
    # Accept region variants such as de-AT
    base = locale.split("-")[0]
    if base in _MESSAGES:
        return base
    logger.warning(f"Unknown locale {locale!r}; using {DEFAULT_LOCALE}")
    return DEFAULT_LOCALE


@lru_cache(maxsize=None)
def _bundle_for(locale: str) -> StringBundle:
    # Only called with shipped locales, so the cache holds one bundle per locale
    return StringBundle(locale, _MESSAGES[locale], _GROUP_SEPARATORS[locale])


def load_bundle(locale: str = DEFAULT_LOCALE) -> StringBundle:
    """Return the process-wide bundle for locale (falls back to en-US)."""
    return _bundle_for(resolve_locale(locale))
