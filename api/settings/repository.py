"""
SQL for per-user scan settings (columns on `users`).
"""

from __future__ import annotations

from core import db

SETTINGS_COLUMNS = (
    "min_fit_score",
    "max_job_age_days",
    "auto_scan",
    "scan_frequency",
    "daily_application_goal",
)

_SELECT = ", ".join(SETTINGS_COLUMNS)


async def get_settings(user_id: int) -> dict | None:
    return await db.fetch_one(f"SELECT {_SELECT} FROM users WHERE id = $1", user_id)


async def update_settings(user_id: int, fields: dict) -> dict | None:
    fields = {key: value for key, value in fields.items() if key in SETTINGS_COLUMNS}
    if not fields:
        return await get_settings(user_id)

    assignments = []
    args: list = [user_id]
    for column, value in fields.items():
        args.append(value)
        assignments.append(f"{column} = ${len(args)}")

    return await db.fetch_one(
        f"""
        UPDATE users
        SET {", ".join(assignments)}, updated_at = now()
        WHERE id = $1
        RETURNING {_SELECT}
        """,
        *args,
    )


async def list_auto_scan_users() -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, email
        FROM users
        WHERE auto_scan AND is_active
        ORDER BY id ASC
        """
    )
