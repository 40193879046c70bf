from datetime import datetime, timezone

from applications import repository
from applications.service import build_opportunity_notes, interview_follow_ups, resolve_applied_date
from coverletters import repository as coverletters_repository
from resumes import repository as resumes_repository

NOW = datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)


def test_resolve_applied_date_stamps_active_statuses():
    assert resolve_applied_date("APPLIED", None, now=NOW) == NOW
    assert resolve_applied_date("INTERVIEWING", None, now=NOW) == NOW
    assert resolve_applied_date("DRAFT", None, now=NOW) is None
    assert resolve_applied_date("OFFER", None, now=NOW) is None


def test_resolve_applied_date_prefers_request_then_existing():
    requested = datetime(2026, 9, 1, tzinfo=timezone.utc)
    existing = datetime(2026, 8, 1, tzinfo=timezone.utc)
    assert resolve_applied_date("APPLIED", requested, existing=existing, now=NOW) == requested
    assert resolve_applied_date("APPLIED", None, existing=existing, now=NOW) == existing
    assert resolve_applied_date("REJECTED", None, existing=existing, now=NOW) == existing


def test_build_opportunity_notes():
    opportunity = {
        "source": "Remotive",
        "fit_score": 72,
        "description": "Build APIs.",
        "requirements": "Python",
        "location": "Remote",
        "salary": "50k",
        "job_url": "https://jobs.example.com/1",
        "posted_date": datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc),
    }

    notes = build_opportunity_notes(opportunity, status="APPLIED").splitlines()

    assert notes[0] == "Applied via Job Tracker"
    assert "Source: Remotive" in notes
    assert "Fit Score: 72%" in notes
    assert notes[notes.index("JOB DESCRIPTION:") + 1] == "Build APIs."
    assert notes[notes.index("REQUIREMENTS:") + 1] == "Python"
    assert notes[-4:] == [
        "Location: Remote",
        "Salary: 50k",
        "Job URL: https://jobs.example.com/1",
        "Posted: 2026-10-01",
    ]


def test_build_opportunity_notes_for_draft_skips_missing_fields():
    notes = build_opportunity_notes({"job_url": "https://x"}, status="DRAFT")
    assert notes.startswith("Draft from Job Tracker\nSource: Unknown")
    assert "JOB DESCRIPTION:" not in notes
    assert "Fit Score" not in notes


def test_interview_follow_ups_bracket_the_interview():
    interview = datetime(2026, 10, 20, 15, 0, tzinfo=timezone.utc)
    prepare, thank_you = interview_follow_ups({"company": "Acme", "role": "SRE"}, interview)

    assert prepare["title"] == "Prepare for Acme interview"
    assert prepare["due_date"] == datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)
    assert prepare["notify_before"] == 4
    assert thank_you["due_date"] == datetime(2026, 10, 21, 15, 0, tzinfo=timezone.utc)
    assert thank_you["priority"] == "high"


def test_create_application_defaults(client, monkeypatch):
    captured = {}

    async def fake_insert(**kwargs):
        captured.update(kwargs)
        return {"id": 10, **kwargs}

    monkeypatch.setattr(repository, "insert_application", fake_insert)

    resp = client.post("/applications", json={"company": " Acme ", "role": "SRE"})

    assert resp.status_code == 201
    assert captured["status"] == "APPLIED"
    assert captured["company"] == "Acme"
    assert captured["applied_date"] is not None


def test_create_draft_has_no_applied_date(client, monkeypatch):
    captured = {}

    async def fake_insert(**kwargs):
        captured.update(kwargs)
        return {"id": 11, **kwargs}

    monkeypatch.setattr(repository, "insert_application", fake_insert)

    resp = client.post("/applications", json={"company": "Acme", "role": "SRE", "status": "DRAFT"})

    assert resp.status_code == 201
    assert captured["applied_date"] is None


def test_get_unknown_application_is_404(client, monkeypatch):
    async def fake_get(application_id, *, user_id):
        return None

    monkeypatch.setattr(repository, "get_application", fake_get)

    assert client.get("/applications/99").status_code == 404


def test_invalid_status_is_rejected(client):
    resp = client.post("/applications", json={"company": "Acme", "role": "SRE", "status": "PENDING"})
    assert resp.status_code == 422


def test_requests_without_token_are_401(anon_client):
    assert anon_client.get("/applications").status_code == 401


def _owned_by_caller(owned_ids):
    async def fake_get(row_id, *, user_id):
        return {"id": row_id, "user_id": user_id} if row_id in owned_ids else None

    return fake_get


def test_create_with_foreign_resume_is_404(client, monkeypatch):
    async def fail_insert(**kwargs):
        raise AssertionError("must not link a foreign resume")

    monkeypatch.setattr(resumes_repository, "get_resume", _owned_by_caller(set()))
    monkeypatch.setattr(repository, "insert_application", fail_insert)

    resp = client.post("/applications", json={"company": "A", "role": "B", "resume_id": 77})
    assert resp.status_code == 404


def test_create_with_foreign_cover_letter_is_404(client, monkeypatch):
    async def fail_insert(**kwargs):
        raise AssertionError("must not link a foreign cover letter")

    monkeypatch.setattr(coverletters_repository, "get_cover_letter", _owned_by_caller(set()))
    monkeypatch.setattr(repository, "insert_application", fail_insert)

    resp = client.post("/applications", json={"company": "A", "role": "B", "cover_letter_id": 12})
    assert resp.status_code == 404


def test_create_with_own_documents(client, monkeypatch):
    async def fake_insert(**kwargs):
        return {"id": 10, **kwargs}

    monkeypatch.setattr(resumes_repository, "get_resume", _owned_by_caller({3}))
    monkeypatch.setattr(coverletters_repository, "get_cover_letter", _owned_by_caller({4}))
    monkeypatch.setattr(repository, "insert_application", fake_insert)

    resp = client.post("/applications", json={"company": "A", "role": "B", "resume_id": 3, "cover_letter_id": 4})

    assert resp.status_code == 201
    assert resp.json()["application"]["resume_id"] == 3


def test_update_with_foreign_documents_is_404(client, monkeypatch):
    async def fake_get(application_id, *, user_id):
        return {"id": application_id, "status": "APPLIED", "applied_date": NOW}

    async def fail_update(application_id, *, user_id, fields):
        raise AssertionError("must not link foreign documents")

    monkeypatch.setattr(repository, "get_application", fake_get)
    monkeypatch.setattr(repository, "update_application", fail_update)
    monkeypatch.setattr(resumes_repository, "get_resume", _owned_by_caller(set()))
    monkeypatch.setattr(coverletters_repository, "get_cover_letter", _owned_by_caller(set()))

    assert client.put("/applications/8", json={"resume_id": 77}).status_code == 404
    assert client.put("/applications/8", json={"cover_letter_id": 12}).status_code == 404
