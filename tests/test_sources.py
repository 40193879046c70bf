from sources import repository
from sources.service import BUILT_IN_SOURCES, public_source


def test_public_source_hides_api_key():
    row = {"id": 1, "name": "Partner", "api_key": "secret"}
    shown = public_source(row)
    assert "api_key" not in shown
    assert shown["has_api_key"] is True
    assert public_source({"id": 2, "api_key": None})["has_api_key"] is False


def test_builtin_catalogue():
    assert len(BUILT_IN_SOURCES) == 4
    assert {source["source_type"] for source in BUILT_IN_SOURCES} <= {"rss", "json_feed"}


def test_builtin_source_cannot_be_deleted(client, monkeypatch):
    async def fake_get(source_id, *, user_id):
        return {"id": source_id, "user_id": user_id, "is_built_in": True}

    async def fail_delete(*args, **kwargs):
        raise AssertionError("built-in source must not be deleted")

    monkeypatch.setattr(repository, "get_source", fake_get)
    monkeypatch.setattr(repository, "delete_source", fail_delete)

    assert client.delete("/sources/5").status_code == 403


def test_custom_source_requires_http_url(client):
    resp = client.post(
        "/sources",
        json={"name": "Mine", "source_type": "rss", "feed_url": "ftp://example.com/feed"},
    )
    assert resp.status_code == 400
