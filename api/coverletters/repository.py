"""
SQL for saved cover letters.
"""

from __future__ import annotations

from core import db

_COLUMNS = "id, user_id, name, description, content, created_at, updated_at"


async def list_cover_letters(user_id: int) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT cl.id, cl.user_id, cl.name, cl.description, cl.content, cl.created_at, cl.updated_at,
               a.id AS application_id, a.company, a.role
        FROM cover_letters cl
        LEFT JOIN LATERAL (
            SELECT id, company, role FROM applications
            WHERE cover_letter_id = cl.id AND user_id = cl.user_id
            ORDER BY updated_at DESC
            LIMIT 1
        ) a ON TRUE
        WHERE cl.user_id = $1
        ORDER BY cl.created_at DESC
        """,
        user_id,
    )


async def get_cover_letter(cover_letter_id: int, *, user_id: int) -> dict | None:
    return await db.fetch_one(
        f"SELECT {_COLUMNS} FROM cover_letters WHERE id = $1 AND user_id = $2",
        cover_letter_id,
        user_id,
    )


async def insert_cover_letter(
    *,
    user_id: int,
    name: str,
    content: str,
    description: str | None = None,
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO cover_letters (user_id, name, description, content)
        VALUES ($1, $2, $3, $4)
        RETURNING {_COLUMNS}
        """,
        user_id,
        name,
        description,
        content,
    )
    if row is None:
        raise RuntimeError("Failed to save cover letter.")
    return row


async def delete_cover_letter(cover_letter_id: int, *, user_id: int) -> bool:
    # applications.cover_letter_id is ON DELETE SET NULL
    status_tag = await db.execute(
        "DELETE FROM cover_letters WHERE id = $1 AND user_id = $2",
        cover_letter_id,
        user_id,
    )
    return db.affected_rows(status_tag) > 0
