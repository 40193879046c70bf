from matching import repository as patterns_repository
from opportunities import repository
from scanning import service as scanning_service

OPPORTUNITY = {
    "id": 12,
    "title": "Cloud Security Analyst",
    "company": "Acme",
    "source": "Remotive",
    "location": "Madrid",
    "job_url": "https://jobs.example.com/12",
    "fit_score": 42,
}


def _fake_get(row):
    async def fake_get(opportunity_id, *, user_id):
        return row

    return fake_get


def test_bad_match_learns_blocks_and_deletes(client, monkeypatch):
    calls = {}

    async def fake_upsert(user_id, patterns):
        calls["patterns"] = patterns

    async def fake_block(user_id, *, job_url, title, company):
        calls["blocked"] = job_url

    async def fake_delete(opportunity_id, *, user_id):
        calls["deleted"] = opportunity_id

    monkeypatch.setattr(repository, "get_opportunity", _fake_get(OPPORTUNITY))
    monkeypatch.setattr(patterns_repository, "upsert_patterns", fake_upsert)
    monkeypatch.setattr(repository, "block_job", fake_block)
    monkeypatch.setattr(repository, "delete_opportunity", fake_delete)

    resp = client.post("/opportunities/12/feedback", json={"feedback": "BAD_MATCH"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["blocked"] is True
    assert body["patterns_learned"] == len(calls["patterns"])
    assert ("REJECTED_COMPANY", "Acme") in calls["patterns"]
    assert calls["blocked"] == "https://jobs.example.com/12"
    assert calls["deleted"] == 12


def test_good_match_only_stores_feedback(client, monkeypatch):
    stored = []

    async def fake_set(opportunity_id, *, user_id, feedback):
        stored.append(feedback)
        return {"id": opportunity_id}

    async def fail_delete(opportunity_id, *, user_id):
        raise AssertionError("good matches are kept")

    monkeypatch.setattr(repository, "get_opportunity", _fake_get(OPPORTUNITY))
    monkeypatch.setattr(repository, "set_feedback", fake_set)
    monkeypatch.setattr(repository, "delete_opportunity", fail_delete)

    resp = client.post("/opportunities/12/feedback", json={"feedback": "GOOD_MATCH"})

    assert resp.status_code == 200
    assert stored == ["GOOD_MATCH"]


def test_feedback_on_missing_opportunity_is_404(client, monkeypatch):
    monkeypatch.setattr(repository, "get_opportunity", _fake_get(None))

    resp = client.post("/opportunities/12/feedback", json={"feedback": "BAD_MATCH"})
    assert resp.status_code == 404


def test_unknown_feedback_value_is_422(client):
    resp = client.post("/opportunities/12/feedback", json={"feedback": "MAYBE"})
    assert resp.status_code == 422


def test_archive_missing_is_404(client, monkeypatch):
    async def fake_archive(opportunity_id, *, user_id):
        return None

    monkeypatch.setattr(repository, "archive_opportunity", fake_archive)

    assert client.delete("/opportunities/3").status_code == 404


def test_scan_runs_in_background(client, monkeypatch):
    scanned = []

    async def fake_scan(user_id):
        scanned.append(user_id)

    monkeypatch.setattr(scanning_service, "scan_user_background", fake_scan)

    resp = client.post("/opportunities/scan")

    assert resp.status_code == 202
    assert resp.json() == {"ok": True, "scan_started": True}
    # TestClient runs background tasks before returning.
    assert scanned == [1]


def test_rejection_stats(client, monkeypatch):
    async def fake_list(user_id):
        return [
            {"pattern_type": "REJECTED_TITLE_KEYWORD", "pattern_value": "security", "frequency": 4},
            {"pattern_type": "REJECTED_COMPANY", "pattern_value": "Acme", "frequency": 2},
            {"pattern_type": "REJECTED_SOURCE", "pattern_value": "Remotive", "frequency": 1},
        ]

    monkeypatch.setattr(patterns_repository, "list_patterns", fake_list)

    body = client.get("/opportunities/rejection-stats").json()

    assert body["total_patterns"] == 3
    assert body["top_rejected_keywords"] == [{"keyword": "security", "count": 4}]
    assert body["top_rejected_companies"] == [{"company": "Acme", "count": 2}]
