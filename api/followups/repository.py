"""
SQL for follow-up reminders.
"""

from __future__ import annotations

from datetime import datetime

from core import db

_COLUMNS = """
    f.id, f.user_id, f.application_id, f.contact_id, f.title, f.description,
    f.due_date, f.completed, f.completed_at, f.priority, f.type, f.notify_before,
    f.created_at, f.updated_at
"""

UPDATABLE_COLUMNS = (
    "title",
    "description",
    "due_date",
    "completed",
    "completed_at",
    "priority",
    "type",
    "notify_before",
    "application_id",
    "contact_id",
)


async def list_follow_ups(
    user_id: int,
    *,
    completed: bool | None = None,
    application_id: int | None = None,
) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS},
               a.company AS application_company,
               a.role AS application_role,
               c.name AS contact_name
        FROM follow_ups f
        LEFT JOIN applications a ON a.id = f.application_id
        LEFT JOIN contacts c ON c.id = f.contact_id
        WHERE f.user_id = $1
          AND ($2::boolean IS NULL OR f.completed = $2)
          AND ($3::bigint IS NULL OR f.application_id = $3)
        ORDER BY f.completed ASC, f.due_date ASC
        """,
        user_id,
        completed,
        application_id,
    )


async def get_follow_up(follow_up_id: int, *, user_id: int) -> dict | None:
    return await db.fetch_one(
        f"SELECT {_COLUMNS} FROM follow_ups f WHERE f.id = $1 AND f.user_id = $2",
        follow_up_id,
        user_id,
    )


async def insert_follow_up(
    *,
    user_id: int,
    title: str,
    due_date: datetime,
    description: str | None = None,
    priority: str = "medium",
    follow_up_type: str = "general",
    notify_before: int = 24,
    application_id: int | None = None,
    contact_id: int | None = None,
) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO follow_ups
            (user_id, title, description, due_date, priority, type, notify_before,
             application_id, contact_id)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
        RETURNING id, user_id, application_id, contact_id, title, description, due_date,
                  completed, completed_at, priority, type, notify_before, created_at, updated_at
        """,
        user_id,
        title,
        description,
        due_date,
        priority,
        follow_up_type,
        notify_before,
        application_id,
        contact_id,
    )
    if row is None:
        raise RuntimeError("Failed to create follow-up.")
    return row


async def update_follow_up(follow_up_id: int, *, user_id: int, fields: dict) -> dict | None:
    fields = {key: value for key, value in fields.items() if key in UPDATABLE_COLUMNS}
    if not fields:
        return await get_follow_up(follow_up_id, user_id=user_id)

    assignments = []
    args: list = [follow_up_id, user_id]
    for column, value in fields.items():
        args.append(value)
        assignments.append(f"{column} = ${len(args)}")

    return await db.fetch_one(
        f"""
        UPDATE follow_ups
        SET {", ".join(assignments)}, updated_at = now()
        WHERE id = $1 AND user_id = $2
        RETURNING id, user_id, application_id, contact_id, title, description, due_date,
                  completed, completed_at, priority, type, notify_before, created_at, updated_at
        """,
        *args,
    )


async def delete_follow_up(follow_up_id: int, *, user_id: int) -> bool:
    status_tag = await db.execute(
        "DELETE FROM follow_ups WHERE id = $1 AND user_id = $2",
        follow_up_id,
        user_id,
    )
    return db.affected_rows(status_tag) > 0
