from datetime import datetime, timezone

from contacts import repository as contacts_repository
from followups import repository
from followups.router import completion_changes

NOW = datetime(2026, 10, 17, tzinfo=timezone.utc)


def test_first_completion_stamps_completed_at():
    changes = completion_changes({"completed": False}, {"completed": True}, now=NOW)
    assert changes == {"completed": True, "completed_at": NOW}


def test_completing_again_keeps_original_timestamp():
    changes = completion_changes({"completed": True}, {"completed": True}, now=NOW)
    assert "completed_at" not in changes


def test_reopening_clears_completed_at():
    changes = completion_changes({"completed": True}, {"completed": False}, now=NOW)
    assert changes["completed_at"] is None


def test_other_changes_pass_through():
    assert completion_changes({}, {"title": "Call back"}, now=NOW) == {"title": "Call back"}


def _fake_contact(owned_ids):
    async def fake_get(contact_id, *, user_id):
        return {"id": contact_id, "user_id": user_id} if contact_id in owned_ids else None

    return fake_get


def test_create_with_foreign_contact_is_404(client, monkeypatch):
    inserted = []

    async def fake_insert(**kwargs):
        inserted.append(kwargs)
        return {"id": 1, **kwargs}

    monkeypatch.setattr(contacts_repository, "get_contact", _fake_contact({5}))
    monkeypatch.setattr(repository, "insert_follow_up", fake_insert)

    resp = client.post("/follow-ups", json={"title": "Ping", "due_date": NOW.isoformat(), "contact_id": 999})

    assert resp.status_code == 404
    assert inserted == []


def test_create_with_own_contact(client, monkeypatch):
    async def fake_insert(**kwargs):
        return {"id": 1, **kwargs}

    monkeypatch.setattr(contacts_repository, "get_contact", _fake_contact({5}))
    monkeypatch.setattr(repository, "insert_follow_up", fake_insert)

    resp = client.post("/follow-ups", json={"title": "Ping", "due_date": NOW.isoformat(), "contact_id": 5})

    assert resp.status_code == 201
    assert resp.json()["follow_up"]["contact_id"] == 5


def test_update_with_foreign_contact_is_404(client, monkeypatch):
    async def fake_get(follow_up_id, *, user_id):
        return {"id": follow_up_id, "completed": False}

    async def fail_update(follow_up_id, *, user_id, fields):
        raise AssertionError("must not store a foreign contact")

    monkeypatch.setattr(repository, "get_follow_up", fake_get)
    monkeypatch.setattr(repository, "update_follow_up", fail_update)
    monkeypatch.setattr(contacts_repository, "get_contact", _fake_contact(set()))

    assert client.put("/follow-ups/3", json={"contact_id": 999}).status_code == 404
