"""
Audit interface, result containers and timing decorator with [0,1] clamping.
"""

from __future__ import annotations

import dataclasses
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..i18n import StringBundle, StringId

DEFAULT_PASS = "default_pass"


class ScoringMode(str, Enum):
    """How the host should present an audit's score."""

    NUMERIC = "numeric"
    BINARY = "binary"
    INFORMATIVE = "informative"  # Shown for context, never a pass/fail gate
    MANUAL = "manual"
    NOT_APPLICABLE = "not_applicable"


class MissingArtifactError(LookupError):
    """Raised when an audit's required artifact was not gathered."""

    def __init__(self, artifact: str, pass_name: Optional[str] = None):
        where = f" for pass {pass_name!r}" if pass_name else ""
        super().__init__(f"required artifact {artifact!r} missing{where}")
        self.artifact = artifact
        self.pass_name = pass_name


@dataclass(frozen=True)
class AuditMeta:
    """Static audit descriptor read by the host at registration time."""

    id: str
    scoring_mode: ScoringMode
    title: StringId
    description: StringId
    required_artifacts: Tuple[str, ...]

    def describe(self, bundle: StringBundle) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": bundle.get(self.title),
            "description": bundle.get(self.description),
            "score_display_mode": self.scoring_mode.value,
            "required_artifacts": list(self.required_artifacts),
        }


@dataclass(frozen=True)
class TableHeading:
    key: str
    item_type: str
    text: str
    granularity: Optional[float] = None

    def as_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"key": self.key, "item_type": self.item_type, "text": self.text}
        if self.granularity is not None:
            d["granularity"] = self.granularity
        return d


@dataclass(frozen=True)
class TableDetails:
    headings: Tuple[TableHeading, ...]
    items: Tuple[Dict[str, Any], ...]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": "table",
            "headings": [h.as_dict() for h in self.headings],
            "items": [dict(i) for i in self.items],
        }


def make_table_details(
    headings: Sequence[TableHeading], items: Sequence[Dict[str, Any]]
) -> TableDetails:
    """Build table details; an empty item list yields an empty table."""
    return TableDetails(headings=tuple(headings), items=tuple(items))


@dataclass(frozen=True)
class AuditProduct:
    score: float
    raw_value: float
    display_value: str
    details: TableDetails = field(default_factory=lambda: make_table_details([], []))

    def as_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "raw_value": self.raw_value,
            "display_value": self.display_value,
            "details": self.details.as_dict(),
        }


class Audit(ABC):
    """Base class for audits; subclasses set meta and implement audit()."""

    meta: AuditMeta

    @classmethod
    @abstractmethod
    def audit(cls, artifacts: Dict[str, Any], context: Any) -> AuditProduct:
        raise NotImplementedError

    @staticmethod
    def devtools_log(artifacts: Dict[str, Any], pass_name: str = DEFAULT_PASS) -> List[Any]:
        """Return the devtools log for pass_name or raise MissingArtifactError."""
        logs = artifacts.get("devtools_logs")
        if not isinstance(logs, dict) or logs.get(pass_name) is None:
            raise MissingArtifactError("devtools_logs", pass_name)
        return logs[pass_name]


def timed(fn: Callable[..., AuditProduct]) -> Callable[..., Tuple[AuditProduct, int]]:
    """Wrap fn to return (product with clamped score, elapsed ms)."""

    def wrapper(*args: Any, **kwargs: Any) -> Tuple[AuditProduct, int]:
        t0 = time.perf_counter()
        product = fn(*args, **kwargs)
        dt_ms = int((time.perf_counter() - t0) * 1000)

        # Enforce score normalization and ensure latency >= 1ms (avoid zero in fast runs)
        score = max(0.0, min(1.0, float(product.score)))
        return dataclasses.replace(product, score=score), max(1, dt_ms)

    return wrapper
