from applications import repository as applications_repository
from core import llm
from interviews import repository
from interviews.service import build_analysis_prompt, follow_up_steps_from


def _interview(**extra):
    return {
        "id": 4,
        "user_id": 1,
        "application_id": 9,
        "application_company": "Acme",
        "application_role": "SRE",
        "interview_type": "video",
        "round": 2,
        "transcript": "",
        **extra,
    }


def test_follow_up_steps_from():
    assert follow_up_steps_from({"followUpSteps": ["Email Jane"]}) == ["Email Jane"]
    assert follow_up_steps_from({"follow_up_steps": " Send portfolio "}) == ["Send portfolio"]
    assert follow_up_steps_from({}) == []


def test_analysis_prompt_includes_context():
    prompt = build_analysis_prompt(
        _interview(transcript="Q: Tell me about yourself", preparation_notes="Read the SRE book"),
        [{"name": "Jane", "title": "CTO"}, {"name": "Raj"}],
    )
    assert "Company: Acme" in prompt
    assert "Round: 2" in prompt
    assert "Interviewers: Jane (CTO), Raj" in prompt
    assert "Preparation notes: Read the SRE book" in prompt
    assert "Q: Tell me about yourself" in prompt


def test_short_transcript_is_400(client, monkeypatch):
    async def fake_get(interview_id, *, user_id):
        return _interview(transcript="too short")

    monkeypatch.setattr(repository, "get_interview", fake_get)

    assert client.post("/interviews/4/analyze").status_code == 400


def test_analysis_without_llm_is_502(client, monkeypatch):
    async def fake_get(interview_id, *, user_id):
        return _interview(transcript="x" * 80)

    monkeypatch.setattr(repository, "get_interview", fake_get)
    monkeypatch.setattr(llm, "is_configured", lambda: False)

    assert client.post("/interviews/4/analyze").status_code == 502


def test_create_for_unknown_application_is_404(client, monkeypatch):
    async def fake_get(application_id, *, user_id):
        return None

    monkeypatch.setattr(applications_repository, "get_application", fake_get)

    resp = client.post("/interviews", json={"application_id": 9, "scheduled_date": "2026-10-20T15:00:00Z"})
    assert resp.status_code == 404


def test_create_moves_application_to_interviewing(client, monkeypatch):
    calls = {}

    async def fake_get_application(application_id, *, user_id):
        return {"id": application_id, "user_id": user_id}

    async def fake_insert(**kwargs):
        return {"id": 4, **kwargs}

    async def fake_replace(interview_id, people):
        return [{"id": 1, "interview_id": interview_id, **person} for person in people]

    async def fake_set_status(application_id, *, user_id, status):
        calls["status"] = (application_id, status)

    monkeypatch.setattr(applications_repository, "get_application", fake_get_application)
    monkeypatch.setattr(applications_repository, "set_status", fake_set_status)
    monkeypatch.setattr(repository, "insert_interview", fake_insert)
    monkeypatch.setattr(repository, "replace_interviewers", fake_replace)

    resp = client.post(
        "/interviews",
        json={
            "application_id": 9,
            "scheduled_date": "2026-10-20T15:00:00Z",
            "interviewers": [{"name": "Jane", "title": "CTO"}],
        },
    )

    assert resp.status_code == 201
    interview = resp.json()["interview"]
    assert interview["interview_type"] == "video"
    assert [person["name"] for person in interview["interviewers"]] == ["Jane"]
    assert calls["status"] == (9, "INTERVIEWING")
