"""
I/O helpers: reading log source lists, loading devtools logs, writing NDJSON.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List

import orjson
import requests

logger = logging.getLogger(__name__)


class LogLoadError(RuntimeError):
    """Raised when a devtools log cannot be read, fetched or parsed."""

    def __init__(self, source: str, msg: str):
        super().__init__(f"{source}: {msg}")
        self.source = source
        self.msg = msg


def _headers() -> Dict[str, str]:
    return {"User-Agent": "rttaudit/0.1.0", "Accept": "application/json"}


def read_sources(path: str) -> Iterable[str]:
    """Yield log paths/URLs from a file; supports newline- or comma-separated entries."""
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                for src in line.split(","):
                    src = src.strip()
                    if src:
                        yield src


def is_remote(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def _fetch(source: str) -> bytes:
    try:
        r = requests.get(source, timeout=10, headers=_headers())
    except requests.RequestException as e:
        raise LogLoadError(source, f"request failed: {e}") from e
    if r.status_code != 200:
        raise LogLoadError(source, f"HTTP {r.status_code} - {r.reason or 'error'}")
    return r.content


def parse_devtools_log(source: str, raw: bytes) -> List[Dict[str, Any]]:
    """Parse a JSON array of events (or an {"events": [...]} wrapper)."""
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise LogLoadError(source, f"invalid JSON: {e}") from e
    if isinstance(data, dict) and isinstance(data.get("events"), list):
        data = data["events"]
    if not isinstance(data, list):
        raise LogLoadError(source, "expected a JSON array of devtools events")
    return data


def load_devtools_log(source: str) -> List[Dict[str, Any]]:
    """Load a devtools log from a local path or an http(s) URL."""
    if is_remote(source):
        raw = _fetch(source)
    else:
        try:
            raw = Path(source).read_bytes()
        except OSError as e:
            raise LogLoadError(source, f"cannot read file: {e}") from e
    events = parse_devtools_log(source, raw)
    logger.debug(f"Loaded {len(events)} events from {source}")
    return events


def write_ndjson_line(d: Dict[str, Any]) -> None:
    """Write dictionary as one NDJSON line to stdout using orjson."""
    sys.stdout.write(orjson.dumps(d).decode() + "\n")
