"""
Audit orchestration: runs registered audits against gathered artifacts and
produces JSON-ready records.

Scores are clamped to [0,1]. Latencies are tracked for observability.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type

from .audits.base import DEFAULT_PASS, Audit, timed
from .audits.network_rtt import NetworkRTT
from .computed import ComputedCache
from .i18n import StringBundle, default_locale, load_bundle

logger = logging.getLogger(__name__)

# Audits the host can run, keyed by meta id
AUDITS: Dict[str, Type[Audit]] = {NetworkRTT.meta.id: NetworkRTT}


@dataclass
class AuditContext:
    """Per-run state handed to audits: string bundle and computed-artifact cache."""

    bundle: StringBundle = field(default_factory=lambda: load_bundle(default_locale()))
    computed_cache: ComputedCache = field(default_factory=ComputedCache)

    @classmethod
    def for_locale(cls, locale: Optional[str] = None) -> "AuditContext":
        return cls(bundle=load_bundle(locale or default_locale()))


def run_audit(
    audit_cls: Type[Audit], artifacts: Dict[str, Any], context: AuditContext
) -> Dict[str, Any]:
    """Run one audit and merge its product with the localized descriptor."""
    meta = audit_cls.meta
    product, ms = timed(audit_cls.audit)(artifacts, context)
    logger.info(f"{meta.id}: score={product.score:.3f} raw={product.raw_value:.1f} in {ms}ms")

    desc = meta.describe(context.bundle)
    return {
        "id": desc["id"],
        "title": desc["title"],
        "description": desc["description"],
        "score_display_mode": desc["score_display_mode"],
        **product.as_dict(),
        "latency": ms,
    }


def audit_devtools_log(name: str, devtools_log: Any, context: AuditContext) -> Dict[str, Any]:
    """Audit a single page load's devtools log with the network RTT audit."""
    artifacts = {"devtools_logs": {DEFAULT_PASS: devtools_log}}
    record = run_audit(NetworkRTT, artifacts, context)
    return {"name": name, **record}
