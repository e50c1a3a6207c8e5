from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, abort, jsonify, request

from .computed import ArtifactKeyError
from .network.analysis import NetworkAnalysisError
from .scoring import AuditContext, audit_devtools_log


def _find_results_file(results_path: Optional[str] = None) -> Optional[Path]:
    """
    Locate stored audit results (NDJSON).

    Priority:
      1. explicit results_path
      2. RTTAUDIT_RESULTS env var
    """
    for candidate in (results_path, os.getenv("RTTAUDIT_RESULTS")):
        if candidate and Path(candidate).is_file():
            return Path(candidate)
    return None


def _load_results(path: Optional[Path]) -> Dict[str, Dict[str, Any]]:
    """Load stored records into a dict keyed by page name."""
    records: Dict[str, Dict[str, Any]] = {}
    if path is None:
        return records
    with path.open("r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            rec = json.loads(line)
            name = rec.get("name")
            if name:
                records[str(name)] = rec
    return records


def create_app(results_path: Optional[str] = None) -> Flask:
    """
    Factory for the audit HTTP service.
    """
    app = Flask(__name__)

    # Loaded once at startup
    stored = _load_results(_find_results_file(results_path))

    @app.get("/health")
    def health() -> Any:
        return "", 200

    @app.post("/audits/network-rtt")
    def network_rtt() -> Any:
        """
        Audit a devtools log posted as JSON.

        Body: either a JSON array of devtools events, or
        {"devtools_log": [...], "name": "...", "locale": "..."}
        """
        body = request.get_json(silent=True)
        name = "page"
        locale = request.args.get("locale")
        if isinstance(body, dict):
            name = str(body.get("name") or name)
            locale = body.get("locale") or locale
            body = body.get("devtools_log")
        if not isinstance(body, list):
            abort(400, description="Expected a JSON array of devtools events")
        if locale is not None and not isinstance(locale, str):
            abort(400, description="'locale' must be a string")

        # Fresh cache per request; nothing accumulates across requests
        context = AuditContext.for_locale(locale)
        try:
            record = audit_devtools_log(name, body, context)
        except ArtifactKeyError as e:
            abort(400, description=str(e))
        except NetworkAnalysisError as e:
            abort(422, description=str(e))
        return jsonify(record)

    @app.get("/results")
    def results() -> Any:
        """Return a stored audit record by page name."""
        page = request.args.get("page")
        if not page:
            abort(400, description="Missing required 'page' query parameter")
        rec = stored.get(page)
        if rec is None:
            abort(404, description=f"No stored results for page '{page}'")
        return jsonify(rec)

    return app


# Allow `python -m rttaudit.service` locally
if __name__ == "__main__":
    flask_app = create_app()
    flask_app.run(host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))
