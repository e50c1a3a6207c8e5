"""Tests for report generation functionality."""

import json

from rttaudit.report import (
    capture_and_summarize_results,
    extract_page_name,
    format_score,
    generate_summary_from_file,
    generate_summary_report,
    load_ndjson_results,
    parse_page_results,
)


def _page(name, score, max_rtt, items):
    return {
        "name": name,
        "score": score,
        "raw_value": max_rtt,
        "display_value": f"{max_rtt:.0f} ms",
        "details": {"type": "table", "headings": [], "items": items},
    }


PAGES = [
    _page("home", 0.9, 15, [{"origin": "https://a.test", "rtt": 15}]),
    _page(
        "shop",
        0.0,
        210,
        [{"origin": "https://far.test", "rtt": 210}, {"origin": "https://a.test", "rtt": 20}],
    ),
    _page("blog", 0.5, 75, [{"origin": "https://b.test", "rtt": 75}]),
]


def test_extract_page_name():
    """Test page name extraction from log paths and URLs."""
    assert extract_page_name("logs/home.devtoolslog.json") == "home"
    assert extract_page_name("https://logs.test/shop.json") == "shop"
    assert extract_page_name("C:\\logs\\blog.json") == "blog"
    assert extract_page_name("plain") == "plain"


def test_format_score():
    """Test score formatting with ratings."""
    assert format_score(0.95) == "95.0% (Excellent)"
    assert format_score(0.75) == "75.0% (Good)"
    assert format_score(0.45) == "45.0% (Acceptable)"
    assert format_score(0.0) == "0.0% (Poor)"


def test_parse_page_results_empty():
    result = parse_page_results([])
    assert result["total_pages"] == 0
    assert result["pages"] == []


def test_parse_page_results_ranks_and_buckets():
    result = parse_page_results(PAGES)
    assert [p["name"] for p in result["pages"]] == ["home", "blog", "shop"]
    assert result["worst_pages"][0]["name"] == "shop"
    assert result["statistics"]["worst_rtt"] == 210
    assert result["categories"] == {"excellent": 1, "good": 0, "acceptable": 1, "poor": 1}
    assert result["slowest_origins"][0] == {"page": "shop", "origin": "https://far.test", "rtt": 210}
    assert len(result["slowest_origins"]) == 4


def test_generate_summary_report(tmp_path):
    out = tmp_path / "summary.txt"
    path = generate_summary_report(PAGES, str(out))
    text = out.read_text(encoding="utf-8")
    assert path == str(out)
    assert "Total Pages Audited: 3" in text
    assert "https://far.test" in text
    assert "150 ms or more" in text


def test_generate_summary_report_no_results(tmp_path):
    out = tmp_path / "empty.txt"
    generate_summary_report([], str(out))
    assert "No pages were successfully audited." in out.read_text(encoding="utf-8")


def test_ndjson_round_trip_and_summary_from_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    ndjson_file, summary_file = capture_and_summarize_results(PAGES, "run")
    assert ndjson_file.startswith("run_") and ndjson_file.endswith(".jsonl")
    assert load_ndjson_results(ndjson_file) == PAGES

    out = generate_summary_from_file(ndjson_file)
    assert out.endswith("_summary.txt")
    assert (tmp_path / out).exists()


def test_load_ndjson_results_errors(tmp_path, capsys):
    assert load_ndjson_results(str(tmp_path / "nope.jsonl")) == []
    assert "not found" in capsys.readouterr().out

    bad = tmp_path / "bad.jsonl"
    bad.write_text(json.dumps({"name": "ok"}) + "\n{oops\n")
    assert load_ndjson_results(str(bad)) == [{"name": "ok"}]
