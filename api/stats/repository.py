"""
Read-only queries behind the statistics endpoints.
"""

from __future__ import annotations

from datetime import datetime

from core import db


async def list_application_dates(user_id: int) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, status, created_at, applied_date, updated_at
        FROM applications
        WHERE user_id = $1
        ORDER BY created_at ASC
        """,
        user_id,
    )


async def count_by_status(user_id: int) -> dict[str, int]:
    rows = await db.fetch_all(
        "SELECT status, count(*) AS count FROM applications WHERE user_id = $1 GROUP BY status",
        user_id,
    )
    return {row["status"]: row["count"] for row in rows}


async def daily_goal(user_id: int) -> int | None:
    return await db.fetch_value("SELECT daily_application_goal FROM users WHERE id = $1", user_id)


async def list_for_export(user_id: int, *, since: datetime | None = None) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT a.id, a.company, a.role, a.status, a.created_at, a.applied_date, a.updated_at,
               a.job_url, a.fit_score, a.interview_date, a.interview_type, a.interview_round,
               r.name AS resume_name, cl.name AS cover_letter_name
        FROM applications a
        LEFT JOIN resumes r ON r.id = a.resume_id
        LEFT JOIN cover_letters cl ON cl.id = a.cover_letter_id
        WHERE a.user_id = $1
          AND ($2::timestamptz IS NULL OR a.created_at >= $2)
        ORDER BY a.created_at ASC
        """,
        user_id,
        since,
    )
