"""
SQL for contacts.
"""

from __future__ import annotations

from core import db

_COLUMNS = "id, user_id, application_id, name, title, email, phone, notes, created_at"


async def list_contacts(user_id: int, *, application_id: int | None = None) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}
        FROM contacts
        WHERE user_id = $1
          AND ($2::bigint IS NULL OR application_id = $2)
        ORDER BY created_at DESC
        """,
        user_id,
        application_id,
    )


async def get_contact(contact_id: int, *, user_id: int) -> dict | None:
    return await db.fetch_one(
        f"SELECT {_COLUMNS} FROM contacts WHERE id = $1 AND user_id = $2",
        contact_id,
        user_id,
    )


async def insert_contact(
    *,
    user_id: int,
    name: str,
    title: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    notes: str | None = None,
    application_id: int | None = None,
) -> dict | None:
    return await db.fetch_one(
        f"""
        INSERT INTO contacts (user_id, application_id, name, title, email, phone, notes)
        VALUES ($1, $2, $3, $4, $5, $6, $7)
        RETURNING {_COLUMNS}
        """,
        user_id,
        application_id,
        name,
        title,
        email,
        phone,
        notes,
    )


async def delete_contact(contact_id: int, *, user_id: int) -> bool:
    status_tag = await db.execute(
        "DELETE FROM contacts WHERE id = $1 AND user_id = $2",
        contact_id,
        user_id,
    )
    return db.affected_rows(status_tag) > 0
