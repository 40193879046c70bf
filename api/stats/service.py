"""
Application statistics.

Day buckets are UTC calendar dates.
"""

from __future__ import annotations

import csv
import io
from collections import Counter
from datetime import date, datetime, timedelta, timezone

from . import repository

DEFAULT_DAILY_GOAL = 6
EXPORT_PERIODS = {"all": None, "30days": 30, "90days": 90, "year": 365}

EXPORT_COLUMNS = (
    "id",
    "company",
    "role",
    "status",
    "created_at",
    "applied_date",
    "updated_at",
    "days_since_applied",
    "job_url",
    "fit_score",
    "interview_date",
    "interview_type",
    "interview_round",
    "resume_name",
    "cover_letter_name",
)


def _day(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


def applied_day(application: dict) -> date | None:
    """
    Day an application counts as submitted: applied_date, else created_at for
    APPLIED / INTERVIEWING rows without one.
    """
    if application.get("applied_date"):
        return _day(application["applied_date"])
    if application.get("status") in ("APPLIED", "INTERVIEWING"):
        return _day(application["created_at"])
    return None


def daily_applied_counts(applications: list[dict], *, today: date, goal: int, days: int = 7) -> list[dict]:
    """
    APPLIED applications per day for the last `days` days, oldest first.

    Rows without an applied_date fall back to updated_at.
    """
    counts: Counter[date] = Counter()
    for application in applications:
        if application.get("status") != "APPLIED":
            continue
        stamp = application.get("applied_date") or application.get("updated_at")
        if stamp is not None:
            counts[_day(stamp)] += 1

    out = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        count = counts.get(day, 0)
        out.append(
            {
                "date": day.isoformat(),
                "count": count,
                "goal_met": count >= goal,
                "day_label": day.strftime("%a, %b %d"),
            }
        )
    return out


def applications_by_date(applications: list[dict], *, today: date, recent_days: int = 30) -> dict:
    added: Counter[date] = Counter()
    applied: Counter[date] = Counter()
    for application in applications:
        added[_day(application["created_at"])] += 1
        day = applied_day(application)
        if day is not None:
            applied[day] += 1

    series = [
        {
            "date": day.isoformat(),
            "added": added.get(day, 0),
            "applied": applied.get(day, 0),
            "formatted_date": day.strftime("%b %d"),
        }
        for day in sorted(set(added) | set(applied))
    ]
    cutoff = (today - timedelta(days=recent_days)).isoformat()
    return {
        "all_time": series,
        "last_30_days": [item for item in series if item["date"] >= cutoff],
        "total": len(applications),
        "total_applied": sum(1 for application in applications if applied_day(application) is not None),
    }


def _csv_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return _day(value).isoformat()
    return str(value)


def applications_csv(rows: list[dict], *, now: datetime) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(EXPORT_COLUMNS)
    for row in rows:
        applied = row.get("applied_date")
        record = dict(row)
        record["days_since_applied"] = (_day(now) - _day(applied)).days if applied else None
        writer.writerow([_csv_value(record.get(column)) for column in EXPORT_COLUMNS])
    return buf.getvalue()


async def overview(user_id: int, *, now: datetime | None = None) -> dict:
    now = now or datetime.now(timezone.utc)
    applications = await repository.list_application_dates(user_id)
    goal = await repository.daily_goal(user_id) or DEFAULT_DAILY_GOAL
    return {
        "total": len(applications),
        "by_status": await repository.count_by_status(user_id),
        "daily_goal": goal,
        "daily_stats": daily_applied_counts(applications, today=_day(now), goal=goal),
    }


async def by_date(user_id: int, *, now: datetime | None = None) -> dict:
    now = now or datetime.now(timezone.utc)
    applications = await repository.list_application_dates(user_id)
    return applications_by_date(applications, today=_day(now))


async def export_csv(user_id: int, *, period: str = "all", now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    days = EXPORT_PERIODS.get(period)
    since = now - timedelta(days=days) if days else None
    rows = await repository.list_for_export(user_id, since=since)
    return applications_csv(rows, now=now)
