"""
SQL for in-app alerts.
"""

from __future__ import annotations

from core import db


async def insert_alert(
    *,
    user_id: int,
    message: str,
    alert_type: str = "NEW_JOB",
    opportunity_id: int | None = None,
) -> dict | None:
    return await db.fetch_one(
        """
        INSERT INTO alerts (user_id, message, type, opportunity_id)
        VALUES ($1, $2, $3, $4)
        RETURNING id, message, type, opportunity_id, is_read, created_at
        """,
        user_id,
        message,
        alert_type,
        opportunity_id,
    )


async def list_unread(user_id: int, *, limit: int = 100) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT a.id, a.message, a.type, a.is_read, a.created_at, a.opportunity_id,
               o.title AS opportunity_title,
               o.company AS opportunity_company,
               o.job_url AS opportunity_job_url,
               o.fit_score AS opportunity_fit_score
        FROM alerts a
        LEFT JOIN job_opportunities o ON o.id = a.opportunity_id
        WHERE a.user_id = $1
          AND NOT a.is_read
        ORDER BY a.created_at DESC
        LIMIT $2
        """,
        user_id,
        limit,
    )


async def mark_read(alert_id: int, *, user_id: int) -> dict | None:
    return await db.fetch_one(
        """
        UPDATE alerts
        SET is_read = TRUE
        WHERE id = $1 AND user_id = $2
        RETURNING id, is_read
        """,
        alert_id,
        user_id,
    )


async def delete_alert(alert_id: int, *, user_id: int) -> bool:
    status_tag = await db.execute(
        "DELETE FROM alerts WHERE id = $1 AND user_id = $2",
        alert_id,
        user_id,
    )
    return db.affected_rows(status_tag) > 0


async def delete_all(user_id: int) -> int:
    status_tag = await db.execute("DELETE FROM alerts WHERE user_id = $1", user_id)
    return db.affected_rows(status_tag)
