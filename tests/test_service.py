"""
HTTP Service Tests

Validates the Flask app factory: health check, on-demand auditing of posted
devtools logs and lookup of stored NDJSON results.
"""

import json

import pytest

from rttaudit.service import create_app


@pytest.fixture
def stored_results(tmp_path):
    path = tmp_path / "results.jsonl"
    path.write_text(json.dumps({"name": "home", "score": 0.5, "raw_value": 75}) + "\n")
    return path


@pytest.fixture
def client(stored_results, monkeypatch):
    monkeypatch.delenv("RTTAUDIT_RESULTS", raising=False)
    app = create_app(str(stored_results))
    app.config["TESTING"] = True
    return app.test_client()


def test_health(client):
    assert client.get("/health").status_code == 200


def test_post_bare_event_array(client, sample_log):
    """A bare array of events is audited with default name and locale."""
    resp = client.post("/audits/network-rtt", json=sample_log)
    assert resp.status_code == 200
    rec = resp.get_json()
    assert rec["name"] == "page"
    assert rec["raw_value"] == 100
    assert [i["origin"] for i in rec["details"]["items"]] == [
        "https://fonts.test",
        "https://cdn.example.net",
        "https://example.com",
    ]


def test_post_wrapped_body_with_locale(client, sample_log):
    body = {"devtools_log": sample_log, "name": "home", "locale": "de"}
    resp = client.post("/audits/network-rtt", json=body)
    assert resp.status_code == 200
    rec = resp.get_json()
    assert rec["name"] == "home"
    assert rec["title"] == "Netzwerk-Umlaufzeiten"


def test_post_malformed_body(client, sample_log):
    """
    Well-formed JSON of the wrong shape is rejected as a client error, never a 500.

    Covers non-array logs, events with non-object params, non-string locales and
    integers too large to key the analysis cache.
    """
    assert client.post("/audits/network-rtt", json={"devtools_log": "nope"}).status_code == 400
    assert client.post("/audits/network-rtt", data="not json").status_code == 400
    for locale in (5, ["de"], {"lang": "de"}):
        body = {"devtools_log": sample_log, "locale": locale}
        assert client.post("/audits/network-rtt", json=body).status_code == 400

    huge = [dict(e) for e in sample_log]
    huge[1] = {"method": huge[1]["method"], "params": {**huge[1]["params"], "extra": 2**70}}
    assert client.post("/audits/network-rtt", json=huge).status_code == 400

    # Malformed events are skipped; with nothing measurable the analysis fails cleanly
    bad_params = [{"method": "Network.requestWillBeSent", "params": ["x"]}]
    assert client.post("/audits/network-rtt", json=bad_params).status_code == 422


def test_post_malformed_events_alongside_valid_ones(client, sample_log):
    """Junk events mixed into a real log do not change the audit result."""
    junk = [
        {"method": "Network.requestWillBeSent", "params": ["x"]},
        {
            "method": "Network.requestWillBeSent",
            "params": {"requestId": "z", "request": {"url": None}},
        },
        {"method": "Network.responseReceived", "params": {"requestId": "1", "response": "oops"}},
        "not-an-event",
    ]
    resp = client.post("/audits/network-rtt", json=junk + sample_log)
    assert resp.status_code == 200
    assert resp.get_json()["raw_value"] == 100


def test_locale_requests_do_not_grow_bundle_cache(client, sample_log):
    """Arbitrary locale strings resolve to shipped bundles; the cache stays bounded."""
    from rttaudit.i18n import _bundle_for, available_locales

    for i in range(50):
        body = {"devtools_log": sample_log, "locale": f"xx-{i}"}
        assert client.post("/audits/network-rtt", json=body).status_code == 200
    assert _bundle_for.cache_info().currsize <= len(available_locales())


def test_post_log_without_estimates(client):
    """Upstream analysis failures surface as 422."""
    assert client.post("/audits/network-rtt", json=[]).status_code == 422


def test_stored_results_lookup(client):
    resp = client.get("/results?page=home")
    assert resp.status_code == 200
    assert resp.get_json()["raw_value"] == 75
    assert client.get("/results?page=other").status_code == 404
    assert client.get("/results").status_code == 400


def test_no_results_file(monkeypatch, tmp_path):
    monkeypatch.setenv("RTTAUDIT_RESULTS", str(tmp_path / "absent.jsonl"))
    client = create_app().test_client()
    assert client.get("/results?page=home").status_code == 404
