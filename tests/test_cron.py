import asyncio

from applications import repository as applications_repository
from applications import service as applications_service
from core import config
from scanning import service as scanning_service
from scanning.service import ScanResult
from settings import repository as settings_repository


def test_missing_or_wrong_secret_is_401(anon_client, monkeypatch):
    monkeypatch.setattr(config, "cron_secret", lambda: "s3cret")

    assert anon_client.post("/cron/scan-jobs").status_code == 401
    assert anon_client.post("/cron/archive-applications", headers={"X-Cron-Secret": "nope"}).status_code == 401


def test_scan_continues_after_a_user_fails(anon_client, monkeypatch):
    monkeypatch.setattr(config, "cron_secret", lambda: "s3cret")

    async def fake_users():
        return [{"id": 1, "email": "a@example.com"}, {"id": 2, "email": "b@example.com"}, {"id": 3, "email": "c@example.com"}]

    async def fake_scan(user_id):
        if user_id == 2:
            raise RuntimeError("feed exploded")
        return ScanResult(user_id=user_id, added=user_id * 2)

    monkeypatch.setattr(settings_repository, "list_auto_scan_users", fake_users)
    monkeypatch.setattr(scanning_service, "scan_user", fake_scan)

    resp = anon_client.post("/cron/scan-jobs", headers={"X-Cron-Secret": "s3cret"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["users_scanned"] == 3
    assert body["total_jobs_found"] == 8
    failed = [r for r in body["results"] if not r["success"]]
    assert failed == [
        {"user_id": 2, "email": "b@example.com", "jobs_found": 0, "success": False, "error": "feed exploded"}
    ]


def _fake_archive_repository(monkeypatch, calls):
    async def fake_old(*, older_than_days):
        calls["old"] = older_than_days
        return 3

    async def fake_rejected(*, older_than_days):
        calls["rejected"] = older_than_days
        return 2

    async def fake_drafts(*, older_than_days):
        calls["drafts"] = older_than_days
        return 1

    async def fake_counts():
        return {"total": 20, "archived": 9}

    monkeypatch.setattr(applications_repository, "archive_old_applications", fake_old)
    monkeypatch.setattr(applications_repository, "archive_stale_rejected", fake_rejected)
    monkeypatch.setattr(applications_repository, "archive_stale_drafts", fake_drafts)
    monkeypatch.setattr(applications_repository, "count_by_archive_state", fake_counts)


def test_archive_sweep_merges_counts(monkeypatch):
    calls = {}
    _fake_archive_repository(monkeypatch, calls)
    monkeypatch.setenv("ARCHIVE_AFTER_DAYS", "60")
    monkeypatch.delenv("STALE_AFTER_DAYS", raising=False)

    result = asyncio.run(applications_service.run_archive_sweep())

    assert result == {"archived_old": 3, "archived_rejected": 2, "archived_drafts": 1, "total": 20, "archived": 9}
    assert calls == {"old": 60, "rejected": 30, "drafts": 30}


def test_archive_endpoint_behind_secret(anon_client, monkeypatch):
    calls = {}
    _fake_archive_repository(monkeypatch, calls)
    monkeypatch.setattr(config, "cron_secret", lambda: "s3cret")

    assert anon_client.post("/cron/archive-applications").status_code == 401
    assert calls == {}

    resp = anon_client.post("/cron/archive-applications", headers={"X-Cron-Secret": "s3cret"})

    assert resp.status_code == 200
    assert resp.json()["archived_old"] == 3
