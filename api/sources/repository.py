"""
SQL for per-user job sources.
"""

from __future__ import annotations

from core import db

_COLUMNS = """
    id, user_id, name, description, source_type, feed_url, api_endpoint,
    api_key, enabled, is_built_in, last_fetched_at, last_error, created_at, updated_at
"""


async def list_sources(user_id: int, *, enabled_only: bool = False) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}
        FROM user_job_sources
        WHERE user_id = $1
          AND ($2::boolean IS FALSE OR enabled)
        ORDER BY is_built_in DESC, name ASC
        """,
        user_id,
        enabled_only,
    )


async def get_source(source_id: int, *, user_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_COLUMNS}
        FROM user_job_sources
        WHERE id = $1 AND user_id = $2
        """,
        source_id,
        user_id,
    )


async def insert_source(
    *,
    user_id: int,
    name: str,
    source_type: str,
    description: str | None = None,
    feed_url: str | None = None,
    api_endpoint: str | None = None,
    api_key: str | None = None,
    enabled: bool = True,
    is_built_in: bool = False,
) -> dict | None:
    """
    Insert a source; returns None when the user already has one with that name.
    """
    return await db.fetch_one(
        f"""
        INSERT INTO user_job_sources
            (user_id, name, description, source_type, feed_url, api_endpoint,
             api_key, enabled, is_built_in)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
        ON CONFLICT (user_id, name) DO NOTHING
        RETURNING {_COLUMNS}
        """,
        user_id,
        name,
        description,
        source_type,
        feed_url,
        api_endpoint,
        api_key,
        enabled,
        is_built_in,
    )


async def update_source(source_id: int, *, user_id: int, fields: dict) -> dict | None:
    if not fields:
        return await get_source(source_id, user_id=user_id)

    assignments = []
    args: list = [source_id, user_id]
    for column, value in fields.items():
        args.append(value)
        assignments.append(f"{column} = ${len(args)}")

    return await db.fetch_one(
        f"""
        UPDATE user_job_sources
        SET {", ".join(assignments)}, updated_at = now()
        WHERE id = $1 AND user_id = $2
        RETURNING {_COLUMNS}
        """,
        *args,
    )


async def delete_source(source_id: int, *, user_id: int) -> bool:
    status_tag = await db.execute(
        "DELETE FROM user_job_sources WHERE id = $1 AND user_id = $2",
        source_id,
        user_id,
    )
    return db.affected_rows(status_tag) > 0


async def record_fetch(source_id: int, *, error: str | None) -> None:
    await db.execute(
        """
        UPDATE user_job_sources
        SET last_fetched_at = now(), last_error = $2
        WHERE id = $1
        """,
        source_id,
        error,
    )
