"""
Summary report generation for audited page loads (text output and helpers).
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


def parse_page_results(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Aggregate and rank results; compute simple stats, categories and slow origins."""
    if not results:
        return {"total_pages": 0, "pages": []}

    sorted_pages = sorted(results, key=lambda x: x.get("score", 0), reverse=True)

    scores = [page.get("score", 0) for page in results]
    max_rtts = [page.get("raw_value", 0) for page in results]
    avg_score = sum(scores) / len(scores)

    excellent = [p for p in results if p.get("score", 0) >= 0.8]
    good = [p for p in results if 0.6 <= p.get("score", 0) < 0.8]
    acceptable = [p for p in results if 0.4 <= p.get("score", 0) < 0.6]
    poor = [p for p in results if p.get("score", 0) < 0.4]

    # Slowest origins across every page, one row per (page, origin)
    origin_rows = []
    for page in results:
        for item in page.get("details", {}).get("items", []):
            origin_rows.append(
                {"page": page.get("name", ""), "origin": item["origin"], "rtt": item["rtt"]}
            )
    origin_rows.sort(key=lambda r: r["rtt"], reverse=True)

    return {
        "total_pages": len(results),
        "pages": sorted_pages,
        "statistics": {
            "average_score": avg_score,
            "highest_score": max(scores),
            "lowest_score": min(scores),
            "worst_rtt": max(max_rtts),
        },
        "categories": {
            "excellent": len(excellent),
            "good": len(good),
            "acceptable": len(acceptable),
            "poor": len(poor),
        },
        "slowest_origins": origin_rows[:10],
        "worst_pages": sorted_pages[::-1][:5],
    }


def extract_page_name(source: str) -> str:
    """Short page name from a log path or URL."""
    clean = source.rstrip("/")
    name = clean.replace("\\", "/").split("/")[-1]
    for suffix in (".devtoolslog.json", ".json"):
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name or source


def format_score(score: float) -> str:
    """Format score as percentage with a simple label."""
    percentage = score * 100
    if percentage >= 80:
        return f"{percentage:.1f}% (Excellent)"
    elif percentage >= 60:
        return f"{percentage:.1f}% (Good)"
    elif percentage >= 40:
        return f"{percentage:.1f}% (Acceptable)"
    else:
        return f"{percentage:.1f}% (Poor)"


def generate_summary_report(
    results: List[Dict[str, Any]], output_file: str = "rtt_summary.txt"
) -> str:
    """Create a human-readable summary report and write it to a file."""
    analysis = parse_page_results(results)
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    report_lines = [
        "=" * 80,
        "NETWORK ROUND TRIP TIMES SUMMARY REPORT",
        "=" * 80,
        f"Generated: {timestamp}",
        f"Total Pages Audited: {analysis['total_pages']}",
        "",
    ]

    if analysis["total_pages"] > 0:
        stats = analysis["statistics"]
        report_lines.extend(
            [
                "SUMMARY",
                "-" * 40,
                f"Average Score: {format_score(stats['average_score'])}",
                f"Highest Score: {format_score(stats['highest_score'])}",
                f"Lowest Score: {format_score(stats['lowest_score'])}",
                f"Worst Max RTT: {stats['worst_rtt']:.0f} ms",
                "",
                "SCORE DISTRIBUTION:",
                f"  Excellent (>=80%):    {analysis['categories']['excellent']} pages",
                f"  Good (60-79%):        {analysis['categories']['good']} pages",
                f"  Acceptable (40-59%):  {analysis['categories']['acceptable']} pages",
                f"  Poor (<40%):          {analysis['categories']['poor']} pages",
                "",
            ]
        )

        if analysis["worst_pages"]:
            report_lines.extend(["WORST PAGES", "-" * 40])
            for i, page in enumerate(analysis["worst_pages"], 1):
                report_lines.extend(
                    [
                        f"{i}. {page.get('name', '')}",
                        f"   Score: {format_score(page.get('score', 0))}",
                        f"   Max RTT: {page.get('display_value', '')}",
                        "",
                    ]
                )

        if analysis["slowest_origins"]:
            report_lines.extend(["SLOWEST ORIGINS", "-" * 40])
            for row in analysis["slowest_origins"]:
                report_lines.append(f"  {row['rtt']:>8.0f} ms  {row['origin']}  ({row['page']})")
            report_lines.append("")

        report_lines.extend(["RECOMMENDATIONS", "-" * 40])
        if stats["worst_rtt"] >= 150:
            report_lines.append(
                "Some origins take 150 ms or more per round trip. "
                "Consider serving them from locations closer to users."
            )
        elif analysis["categories"]["poor"] or analysis["categories"]["acceptable"]:
            report_lines.append("Some origins are noticeably slower than the primary connection.")
        else:
            report_lines.append("Round trip times are low for all audited origins.")
        report_lines.append("")
    else:
        report_lines.extend(
            [
                "No pages were successfully audited.",
                "Please check the devtools log sources.",
                "",
            ]
        )

    report_lines.extend(
        [
            "=" * 80,
            "For detailed JSON data, see the NDJSON output file.",
            "=" * 80,
        ]
    )

    report_content = "\n".join(report_lines)
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(report_content)

    return output_file


def load_ndjson_results(file_path: str) -> List[Dict[str, Any]]:
    """Load results from an NDJSON file into a list of dicts."""
    results = []
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    results.append(json.loads(line))
    except FileNotFoundError:
        print(f"Error: File {file_path} not found")
    except json.JSONDecodeError as e:
        print(f"Error parsing JSON: {e}")

    return results


def generate_summary_from_file(ndjson_file: str, summary_file: Optional[str] = None) -> str:
    """Generate a summary from an existing NDJSON file."""
    if summary_file is None:
        base_name = Path(ndjson_file).stem
        summary_file = f"{base_name}_summary.txt"

    results = load_ndjson_results(ndjson_file)
    return generate_summary_report(results, summary_file)


def capture_and_summarize_results(
    results: List[Dict[str, Any]], base_filename: str = "rtt"
) -> tuple[str, str]:
    """Write NDJSON and summary files; return their paths."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    ndjson_file = f"{base_filename}_{timestamp}.jsonl"
    with open(ndjson_file, "w", encoding="utf-8") as f:
        for result in results:
            f.write(json.dumps(result) + "\n")

    summary_file = f"{base_filename}_{timestamp}_summary.txt"
    generate_summary_report(results, summary_file)

    return ndjson_file, summary_file
