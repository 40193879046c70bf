"""
SQL for stored résumés.

A partial unique index on (user_id) WHERE is_primary keeps one primary per
user; writes that set a new primary clear the old one in the same transaction.
"""

from __future__ import annotations

from core import db

_COLUMNS = "id, user_id, name, file_name, file_type, file_size, description, is_primary, created_at, updated_at"

UPDATABLE_COLUMNS = ("name", "description", "is_primary")


async def list_resumes(user_id: int) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}
        FROM resumes
        WHERE user_id = $1
        ORDER BY is_primary DESC, created_at DESC
        """,
        user_id,
    )


async def get_resume(resume_id: int, *, user_id: int) -> dict | None:
    return await db.fetch_one(
        f"SELECT {_COLUMNS} FROM resumes WHERE id = $1 AND user_id = $2",
        resume_id,
        user_id,
    )


async def get_resume_content(resume_id: int, *, user_id: int) -> dict | None:
    return await db.fetch_one(
        f"SELECT {_COLUMNS}, content FROM resumes WHERE id = $1 AND user_id = $2",
        resume_id,
        user_id,
    )


async def get_primary_resume(user_id: int) -> dict | None:
    return await db.fetch_one(
        f"SELECT {_COLUMNS}, content FROM resumes WHERE user_id = $1 AND is_primary",
        user_id,
    )


async def insert_resume(
    *,
    user_id: int,
    name: str,
    file_name: str,
    file_type: str,
    file_size: int,
    content: str,
    description: str | None = None,
    is_primary: bool = False,
) -> dict:
    async with db.transaction() as conn:
        if is_primary:
            await conn.execute(
                "UPDATE resumes SET is_primary = FALSE, updated_at = now() WHERE user_id = $1 AND is_primary",
                user_id,
            )
        record = await conn.fetchrow(
            f"""
            INSERT INTO resumes
                (user_id, name, file_name, file_type, file_size, description, content, is_primary)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING {_COLUMNS}
            """,
            user_id,
            name,
            file_name,
            file_type,
            file_size,
            description,
            content,
            is_primary,
        )
    return dict(record)


async def update_resume(resume_id: int, *, user_id: int, fields: dict) -> dict | None:
    fields = {key: value for key, value in fields.items() if key in UPDATABLE_COLUMNS}
    if not fields:
        return await get_resume(resume_id, user_id=user_id)

    assignments = []
    args: list = [resume_id, user_id]
    for column, value in fields.items():
        args.append(value)
        assignments.append(f"{column} = ${len(args)}")

    async with db.transaction() as conn:
        if fields.get("is_primary"):
            await conn.execute(
                """
                UPDATE resumes SET is_primary = FALSE, updated_at = now()
                WHERE user_id = $1 AND is_primary AND id <> $2
                """,
                user_id,
                resume_id,
            )
        record = await conn.fetchrow(
            f"""
            UPDATE resumes
            SET {", ".join(assignments)}, updated_at = now()
            WHERE id = $1 AND user_id = $2
            RETURNING {_COLUMNS}
            """,
            *args,
        )
    return dict(record) if record is not None else None


async def delete_resume(resume_id: int, *, user_id: int) -> bool:
    status_tag = await db.execute(
        "DELETE FROM resumes WHERE id = $1 AND user_id = $2",
        resume_id,
        user_id,
    )
    return db.affected_rows(status_tag) > 0
