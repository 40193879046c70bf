import csv
import io
from datetime import date, datetime, timezone

from stats import repository
from stats.service import applications_by_date, applications_csv, daily_applied_counts

TODAY = date(2026, 10, 17)


def _at(day, hour=12):
    return datetime(2026, 10, day, hour, tzinfo=timezone.utc)


def test_daily_applied_counts_with_goal():
    applications = [
        {"status": "APPLIED", "applied_date": _at(17)},
        {"status": "APPLIED", "applied_date": _at(17, 8)},
        {"status": "APPLIED", "applied_date": None, "updated_at": _at(16)},
        {"status": "DRAFT", "applied_date": None, "updated_at": _at(17)},
        {"status": "APPLIED", "applied_date": _at(1)},
    ]

    days = daily_applied_counts(applications, today=TODAY, goal=2)

    assert len(days) == 7
    assert days[0]["date"] == "2026-10-11"
    assert days[-1] == {"date": "2026-10-17", "count": 2, "goal_met": True, "day_label": "Sat, Oct 17"}
    assert days[-2]["count"] == 1
    assert days[-2]["goal_met"] is False


def test_applications_by_date_buckets_added_and_applied():
    applications = [
        {"status": "APPLIED", "created_at": _at(10), "applied_date": _at(12)},
        {"status": "INTERVIEWING", "created_at": _at(12), "applied_date": None},
        {"status": "DRAFT", "created_at": _at(12), "applied_date": None},
    ]

    result = applications_by_date(applications, today=TODAY)

    assert result["all_time"] == [
        {"date": "2026-10-10", "added": 1, "applied": 0, "formatted_date": "Oct 10"},
        {"date": "2026-10-12", "added": 2, "applied": 2, "formatted_date": "Oct 12"},
    ]
    assert result["total"] == 3
    assert result["total_applied"] == 2


def test_applications_csv_has_days_since_applied():
    rows = [
        {"id": 1, "company": "Acme, Inc", "role": "SRE", "status": "APPLIED", "applied_date": _at(7), "fit_score": 80},
        {"id": 2, "company": "Beta", "role": "Dev", "status": "DRAFT", "applied_date": None},
    ]

    body = applications_csv(rows, now=_at(17))
    records = list(csv.DictReader(io.StringIO(body)))

    assert records[0]["company"] == "Acme, Inc"
    assert records[0]["days_since_applied"] == "10"
    assert records[0]["applied_date"] == "2026-10-07"
    assert records[1]["days_since_applied"] == ""


def test_export_endpoint_returns_csv(client, monkeypatch):
    async def fake_rows(user_id, *, since=None):
        return [{"id": 1, "company": "Acme", "role": "SRE", "status": "APPLIED"}]

    monkeypatch.setattr(repository, "list_for_export", fake_rows)

    resp = client.get("/stats/export")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "attachment" in resp.headers["content-disposition"]
    assert resp.text.splitlines()[1].startswith("1,Acme,SRE,APPLIED")
