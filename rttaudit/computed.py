"""
Per-run memoization of computed artifacts shared across worker threads.
"""

from __future__ import annotations

import concurrent.futures as cf
import hashlib
import logging
import threading
from typing import Any, Callable, Dict, Tuple

import orjson

logger = logging.getLogger(__name__)


class ArtifactKeyError(ValueError):
    """Raised when an artifact cannot be serialized into a cache key."""


def artifact_key(value: Any) -> str:
    """Stable SHA-256 digest of a JSON-serializable artifact."""
    try:
        blob = orjson.dumps(value, option=orjson.OPT_SORT_KEYS)
    except orjson.JSONEncodeError as e:
        # e.g. integers beyond 64 bits, which stdlib json accepts
        raise ArtifactKeyError(f"artifact is not serializable: {e}") from e
    return hashlib.sha256(blob).hexdigest()


class ComputedCache:
    """Computes each (name, key) at most once; concurrent callers wait on the first."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[Tuple[str, str], cf.Future] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_or_compute(self, name: str, key: str, compute: Callable[[], Any]) -> Any:
        with self._lock:
            fut = self._entries.get((name, key))
            owner = fut is None
            if owner:
                fut = cf.Future()
                self._entries[(name, key)] = fut

        if owner:
            logger.debug(f"Computing {name} for {key[:12]}")
            try:
                fut.set_result(compute())
            except BaseException as e:
                # Waiters see the same failure
                fut.set_exception(e)
        return fut.result()
