"""
Network Round Trip Times audit.

Combines the baseline RTT with each origin's additional RTT, ranks origins from
slowest to fastest and scores the worst one on a linear decay to zero at 150ms.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, AbstractSet, Dict, List, Mapping, Optional, Tuple

from ..i18n import StringId
from ..network.analysis import request_network_analysis
from ..urls import is_internal_origin
from .base import (
    Audit,
    AuditMeta,
    AuditProduct,
    ScoringMode,
    TableHeading,
    make_table_details,
)

# Max RTT at which the score reaches 0
RTT_CEILING_MS = 150.0


@dataclass(frozen=True)
class OriginRtt:
    origin: str
    rtt: float


@dataclass(frozen=True)
class RttSummary:
    score: float
    max_rtt: float
    entries: Tuple[OriginRtt, ...]


def is_measured(delta: Optional[float]) -> bool:
    """True for a usable delta; None and non-finite values mean unmeasured."""
    return delta is not None and math.isfinite(delta)


def score_max_rtt(max_rtt: float) -> float:
    return max(1 - max_rtt / RTT_CEILING_MS, 0)


def compute_rtt_summary(
    baseline_rtt: float,
    additional_rtt_by_origin: Mapping[str, Optional[float]],
    internal_origins: AbstractSet[str] = frozenset(),
) -> RttSummary:
    """Rank measured, non-internal origins by estimated RTT and score the worst."""
    max_rtt = 0.0
    results: List[OriginRtt] = []
    for origin, additional_rtt in additional_rtt_by_origin.items():
        if not is_measured(additional_rtt):
            continue
        if is_internal_origin(origin, internal_origins):
            continue

        rtt = baseline_rtt + additional_rtt
        results.append(OriginRtt(origin=origin, rtt=rtt))
        max_rtt = max(rtt, max_rtt)

    # sorted() is stable with reverse=True, so ties keep encounter order
    ranked = tuple(sorted(results, key=lambda r: r.rtt, reverse=True))
    return RttSummary(score=score_max_rtt(max_rtt), max_rtt=max_rtt, entries=ranked)


class NetworkRTT(Audit):
    """Reports the round trip time to every origin the page connected to."""

    meta = AuditMeta(
        id="network-rtt",
        scoring_mode=ScoringMode.INFORMATIVE,
        title=StringId.NETWORK_RTT_TITLE,
        description=StringId.NETWORK_RTT_DESCRIPTION,
        required_artifacts=("devtools_logs",),
    )

    @classmethod
    def audit(cls, artifacts: Dict[str, Any], context: Any) -> AuditProduct:
        devtools_log = cls.devtools_log(artifacts)
        analysis = request_network_analysis(devtools_log, context)
        summary = compute_rtt_summary(
            analysis.rtt, analysis.additional_rtt_by_origin, analysis.internal_origins
        )

        bundle = context.bundle
        headings = [
            TableHeading("origin", "text", bundle.get(StringId.COLUMN_URL)),
            TableHeading("rtt", "ms", bundle.get(StringId.COLUMN_TIME_SPENT), granularity=1),
        ]
        items = [{"origin": e.origin, "rtt": e.rtt} for e in summary.entries]

        return AuditProduct(
            score=summary.score,
            raw_value=summary.max_rtt,
            display_value=bundle.format_ms(summary.max_rtt),
            details=make_table_details(headings, items),
        )
