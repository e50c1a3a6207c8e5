"""
CLI entry point for auditing network round trip times in devtools logs.
"""

from __future__ import annotations

import argparse
import concurrent.futures as cf
import json
import sys
from typing import Any, Dict, List, Tuple

from .audits.base import MissingArtifactError
from .computed import ArtifactKeyError
from .i18n import available_locales
from .io_utils import LogLoadError, load_devtools_log, read_sources, write_ndjson_line
from .logging_cfg import setup_logging
from .network.analysis import NetworkAnalysisError
from .report import capture_and_summarize_results, extract_page_name
from .scoring import AuditContext, audit_devtools_log


def parse_args() -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Audit network round trip times per origin")
    ap.add_argument(
        "source_file", nargs="?", help="File listing devtools log paths or URLs, one per line"
    )
    ap.add_argument(
        "--summary",
        action="store_true",
        help="Generate a human-readable summary report (saves files)",
    )
    ap.add_argument(
        "--output",
        "-o",
        default="rtt",
        help="Base filename for output files (default: rtt)",
    )
    ap.add_argument(
        "--fail-fast", action="store_true", help="Stop immediately on the first log failure"
    )
    ap.add_argument(
        "--error-file", default=None, help="Write failures to this NDJSON file (one JSON per line)"
    )
    ap.add_argument(
        "--locale",
        default=None,
        help=f"Locale for titles and display values ({', '.join(available_locales())})",
    )
    return ap.parse_args()


def process_source(source: str, context: AuditContext) -> Dict[str, Any]:
    # May raise LogLoadError, MissingArtifactError or NetworkAnalysisError
    devtools_log = load_devtools_log(source)
    return audit_devtools_log(extract_page_name(source), devtools_log, context)


def _write_error_line(path: str, record: Dict[str, Any]) -> None:
    with open(path, "a", encoding="utf-8") as fh:
        fh.write(json.dumps(record, ensure_ascii=False) + "\n")


def _failure_kind(e: Exception) -> str:
    if isinstance(e, LogLoadError):
        return "load"
    if isinstance(e, (NetworkAnalysisError, MissingArtifactError, ArtifactKeyError)):
        return "analysis"
    return "processing"


def main() -> None:
    args = parse_args()

    setup_logging()

    if not args.source_file:
        print(
            "ERROR: missing SOURCE_FILE. Usage: rttaudit SOURCE_FILE [--summary] "
            "[--fail-fast] [--error-file PATH] [--locale LOCALE]",
            file=sys.stderr,
        )
        raise SystemExit(1)

    try:
        sources = list(read_sources(args.source_file))
    except OSError as e:
        print(f"ERROR: failed to read {args.source_file}: {e}", file=sys.stderr)
        raise SystemExit(1)

    if not sources:
        print(f"ERROR: {args.source_file} contained no log sources", file=sys.stderr)
        raise SystemExit(1)

    # One context for the whole run so identical logs are analyzed once
    context = AuditContext.for_locale(args.locale)

    results: List[Dict[str, Any]] = []
    failures: List[Tuple[str, str]] = []  # (source, reason)

    def record_failure(src: str, e: Exception) -> None:
        kind = _failure_kind(e)
        why = f"{kind} failed: {e}"
        failures.append((src, why))
        if args.error_file:
            _write_error_line(args.error_file, {"source": src, "error": str(e), "kind": kind})

    def handle_success(rec: Dict[str, Any]) -> None:
        write_ndjson_line(rec)
        if args.summary:
            results.append(rec)

    try:
        with cf.ThreadPoolExecutor() as ex:
            future_by_src = {ex.submit(process_source, s, context): s for s in sources}
            for fut in cf.as_completed(future_by_src):
                src = future_by_src[fut]
                try:
                    handle_success(fut.result())
                except Exception as e:
                    record_failure(src, e)
                    if args.fail_fast:
                        # Best effort: cancel anything not yet started
                        for f in future_by_src:
                            f.cancel()
                        break
    except RuntimeError as e:
        # Thread pool unavailable (e.g. interpreter shutting down); run sequentially
        print(f"[warn] parallel execution unavailable: {e}", file=sys.stderr)
        for src in sources:
            try:
                handle_success(process_source(src, context))
            except Exception as e:
                record_failure(src, e)
                if args.fail_fast:
                    break

    if args.summary and results:
        ndjson_file, summary_file = capture_and_summarize_results(results, args.output)
        print(f"\nResults saved to: {ndjson_file}", flush=True)
        print(f"Summary report: {summary_file}", flush=True)
        print(f"View summary: cat {summary_file}", flush=True)

    if failures:
        print("[error] log failures:", file=sys.stderr)
        for src, why in failures:
            print(f"  - {src}: {why}", file=sys.stderr)

    raise SystemExit(1 if failures else 0)


if __name__ == "__main__":
    main()
