"""
Fold devtools protocol network events into per-request records.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ..urls import origin_of

logger = logging.getLogger(__name__)


@dataclass
class NetworkRecord:
    request_id: str
    url: str
    origin: str
    protocol: str = ""
    connection_id: Optional[str] = None
    connection_reused: bool = False
    from_cache: bool = False
    status: Optional[int] = None
    timing: Optional[Dict[str, float]] = None
    finished: bool = False
    failed: bool = False
    redirects: List[str] = field(default_factory=list)


def _apply_response(record: NetworkRecord, response: Dict[str, Any]) -> None:
    record.protocol = str(response.get("protocol") or "").lower()
    conn = response.get("connectionId")
    record.connection_id = None if conn is None else str(conn)
    record.connection_reused = bool(response.get("connectionReused", False))
    record.from_cache = bool(
        response.get("fromDiskCache")
        or response.get("fromServiceWorker")
        or response.get("fromPrefetchCache")
    )
    status = response.get("status")
    finite = isinstance(status, (int, float)) and math.isfinite(status)
    record.status = int(status) if finite else None
    timing = response.get("timing")
    record.timing = dict(timing) if isinstance(timing, dict) else None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def build_network_records(devtools_log: Iterable[Dict[str, Any]]) -> List[NetworkRecord]:
    """Return records in request order; non-network URLs and malformed events are dropped."""
    by_id: Dict[str, NetworkRecord] = {}
    ordered: List[NetworkRecord] = []

    for event in devtools_log:
        if not isinstance(event, dict):
            continue
        method = event.get("method")
        params = _as_dict(event.get("params"))
        request_id = params.get("requestId")
        if request_id is None or isinstance(request_id, (dict, list)):
            continue
        request_id = str(request_id)

        if method == "Network.requestWillBeSent":
            url = _as_dict(params.get("request")).get("url")
            if not isinstance(url, str):
                url = ""
            prev = by_id.get(request_id)
            redirect_response = params.get("redirectResponse")
            if prev is not None and isinstance(redirect_response, dict) and redirect_response:
                # The earlier hop keeps its own timing and gets a distinct id
                _apply_response(prev, redirect_response)
                prev.finished = True
                prev.request_id = f"{request_id}:redirect{len(prev.redirects)}"
            origin = origin_of(url)
            if origin is None:
                by_id.pop(request_id, None)
                continue
            record = NetworkRecord(request_id=request_id, url=url, origin=origin)
            if prev is not None:
                record.redirects = prev.redirects + [prev.url]
            by_id[request_id] = record
            ordered.append(record)
        elif method == "Network.responseReceived":
            record = by_id.get(request_id)
            if record is not None:
                _apply_response(record, _as_dict(params.get("response")))
        elif method == "Network.loadingFinished":
            record = by_id.get(request_id)
            if record is not None:
                record.finished = True
        elif method == "Network.loadingFailed":
            record = by_id.get(request_id)
            if record is not None:
                record.finished = True
                record.failed = True

    logger.debug(f"Built {len(ordered)} network records from devtools log")
    return ordered
