"""
Network analysis: baseline RTT and per-origin additional RTT from network records.

Estimates come from connection setup timing (TCP/TLS/QUIC handshakes). Origins
without any handshake timing fall back to a coarse time-to-first-byte estimate.
"""

from __future__ import annotations

import logging
import math
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from ..computed import artifact_key
from .records import NetworkRecord, build_network_records

logger = logging.getLogger(__name__)

SUMMARY_ORIGIN = "__SUMMARY__"


class NetworkAnalysisError(RuntimeError):
    """Raised when no RTT estimate can be derived from the log."""


@dataclass(frozen=True)
class NetworkAnalysis:
    rtt: float
    additional_rtt_by_origin: Mapping[str, Optional[float]]
    internal_origins: FrozenSet[str] = field(default_factory=frozenset)


def _valid(ms: Any) -> bool:
    return isinstance(ms, (int, float)) and math.isfinite(ms) and ms >= 0


def _phase(timing: Dict[str, Any], key: str) -> float:
    """Timing phase in ms; -1 when absent or not a number."""
    value = timing.get(key)
    return float(value) if isinstance(value, (int, float)) else -1.0


def connection_rtt_estimates(record: NetworkRecord) -> List[float]:
    """RTT estimates from a fresh connection's handshake timing."""
    timing = record.timing
    if not timing or record.from_cache or record.connection_reused:
        return []
    connect_start = _phase(timing, "connectStart")
    connect_end = _phase(timing, "connectEnd")
    ssl_start = _phase(timing, "sslStart")
    ssl_end = _phase(timing, "sslEnd")
    if connect_start < 0 or connect_end < 0:
        return []

    if record.protocol.startswith(("h3", "quic")):
        # QUIC folds transport and TLS setup into one round trip
        estimates = [connect_end - connect_start]
    elif ssl_start >= 0 and ssl_end >= 0 and ssl_start != connect_start:
        # TLS may take more than one round trip; assume false start
        estimates = [ssl_start - connect_start, connect_end - ssl_start]
    else:
        estimates = [connect_end - connect_start]
    return [float(e) for e in estimates if _valid(e)]


def ttfb_rtt_estimates(record: NetworkRecord) -> List[float]:
    """Coarse upper-bound estimate: time from request sent to headers received."""
    timing = record.timing
    if not timing or record.from_cache:
        return []
    send_end = _phase(timing, "sendEnd")
    headers_end = _phase(timing, "receiveHeadersEnd")
    if send_end < 0 or headers_end < 0:
        return []
    ttfb = headers_end - send_end
    return [float(ttfb)] if _valid(ttfb) else []


def analyze_network(records: List[NetworkRecord]) -> NetworkAnalysis:
    """Summarize estimates per origin; origins with none map to None."""
    connection: Dict[str, List[float]] = OrderedDict()
    coarse: Dict[str, List[float]] = {}
    for record in records:
        connection.setdefault(record.origin, []).extend(connection_rtt_estimates(record))
        coarse.setdefault(record.origin, []).extend(ttfb_rtt_estimates(record))

    rtt_by_origin: Dict[str, Optional[float]] = OrderedDict()
    for origin, estimates in connection.items():
        if not estimates:
            estimates = coarse.get(origin, [])
            if estimates:
                logger.debug(f"Using coarse TTFB estimate for {origin}")
        rtt_by_origin[origin] = min(estimates) if estimates else None

    measured = [v for v in rtt_by_origin.values() if v is not None]
    if not measured:
        raise NetworkAnalysisError(
            f"no RTT estimate available from {len(records)} network record(s)"
        )
    base_rtt = min(measured)

    additional: Dict[str, Optional[float]] = OrderedDict()
    for origin, rtt in rtt_by_origin.items():
        additional[origin] = None if rtt is None else rtt - base_rtt
    additional[SUMMARY_ORIGIN] = 0.0

    unmeasured = [o for o, v in rtt_by_origin.items() if v is None]
    if unmeasured:
        logger.info(f"No RTT estimate for {len(unmeasured)} origin(s): {', '.join(unmeasured)}")
    return NetworkAnalysis(
        rtt=base_rtt,
        additional_rtt_by_origin=additional,
        internal_origins=frozenset({SUMMARY_ORIGIN}),
    )


def request_network_analysis(
    devtools_log: List[Dict[str, Any]], context: Any
) -> NetworkAnalysis:
    """Analyze devtools_log once per distinct log within context.computed_cache."""

    def compute() -> NetworkAnalysis:
        return analyze_network(build_network_records(devtools_log))

    cache = getattr(context, "computed_cache", None)
    if cache is None:
        return compute()
    return cache.get_or_compute("network_analysis", artifact_key(devtools_log), compute)
