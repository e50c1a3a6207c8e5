"""
Pytest fixtures for rttaudit tests: synthetic devtools logs.
"""

from __future__ import annotations

from typing import Any, Dict, List

import pytest

_TIMING_KEYS = (
    "dnsStart",
    "dnsEnd",
    "connectStart",
    "connectEnd",
    "sslStart",
    "sslEnd",
    "sendStart",
    "sendEnd",
    "receiveHeadersEnd",
)


def make_timing(**values: float) -> Dict[str, float]:
    """Resource timing dict with -1 for every phase not given."""
    timing = {k: -1.0 for k in _TIMING_KEYS}
    timing["requestTime"] = 1000.0
    timing.update(values)
    return timing


def make_devtools_log(entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Build requestWillBeSent/responseReceived/loadingFinished events per request."""
    events: List[Dict[str, Any]] = []
    for i, req in enumerate(entries, 1):
        rid = str(req.get("request_id", i))
        events.append(
            {
                "method": "Network.requestWillBeSent",
                "params": {"requestId": rid, "request": {"url": req["url"]}, "timestamp": i},
            }
        )
        response = {
            "url": req["url"],
            "status": req.get("status", 200),
            "protocol": req.get("protocol", "h2"),
            "connectionId": req.get("connection_id", i),
            "connectionReused": req.get("reused", False),
            "fromDiskCache": req.get("from_cache", False),
        }
        if req.get("timing") is not None:
            response["timing"] = req["timing"]
        events.append(
            {"method": "Network.responseReceived", "params": {"requestId": rid, "response": response}}
        )
        method = "Network.loadingFailed" if req.get("failed") else "Network.loadingFinished"
        events.append({"method": method, "params": {"requestId": rid}})
    return events


@pytest.fixture
def sample_log() -> List[Dict[str, Any]]:
    """
    Page load touching five network origins plus a data: URL.

    Expected RTTs: fonts.test 100 (coarse TTFB), cdn.example.net 60,
    example.com 20 (baseline); slow.test is cached and unmeasured.
    """
    return make_devtools_log(
        [
            {
                "url": "https://example.com/",
                "timing": make_timing(connectStart=0, sslStart=20, sslEnd=40, connectEnd=40),
            },
            {
                "url": "https://cdn.example.net/app.js",
                "timing": make_timing(connectStart=0, sslStart=60, sslEnd=120, connectEnd=120),
            },
            {
                "url": "https://example.com/style.css",
                "reused": True,
                "connection_id": 1,
                "timing": make_timing(sendEnd=5, receiveHeadersEnd=300),
            },
            {
                "url": "https://fonts.test/font.woff2",
                "reused": True,
                "timing": make_timing(sendEnd=10, receiveHeadersEnd=110),
            },
            {
                "url": "https://slow.test/x.js",
                "from_cache": True,
                "timing": make_timing(connectStart=0, connectEnd=500),
            },
            {"url": "data:image/png;base64,AAAA", "timing": None},
        ]
    )
