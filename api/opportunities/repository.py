"""
SQL for discovered job opportunities and the per-user block list.
"""

from __future__ import annotations

from datetime import datetime

from core import db

_COLUMNS = """
    id, user_id, title, company, description, requirements, location, salary,
    job_url, source, posted_date, fit_score, fit_details, user_feedback,
    is_archived, created_at, updated_at
"""


async def list_active(user_id: int, *, min_fit_score: int | None = None, limit: int = 200) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}
        FROM job_opportunities
        WHERE user_id = $1
          AND NOT is_archived
          AND deleted_at IS NULL
          AND ($2::int IS NULL OR fit_score >= $2)
        ORDER BY created_at DESC
        LIMIT $3
        """,
        user_id,
        min_fit_score,
        limit,
    )


async def get_opportunity(opportunity_id: int, *, user_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_COLUMNS}
        FROM job_opportunities
        WHERE id = $1 AND user_id = $2 AND deleted_at IS NULL
        """,
        opportunity_id,
        user_id,
    )


async def archive_opportunity(opportunity_id: int, *, user_id: int) -> dict | None:
    return await db.fetch_one(
        """
        UPDATE job_opportunities
        SET is_archived = TRUE, updated_at = now()
        WHERE id = $1 AND user_id = $2 AND deleted_at IS NULL
        RETURNING id, is_archived
        """,
        opportunity_id,
        user_id,
    )


async def delete_opportunity(opportunity_id: int, *, user_id: int) -> None:
    await db.execute(
        "DELETE FROM job_opportunities WHERE id = $1 AND user_id = $2",
        opportunity_id,
        user_id,
    )


async def set_feedback(opportunity_id: int, *, user_id: int, feedback: str) -> dict | None:
    return await db.fetch_one(
        """
        UPDATE job_opportunities
        SET user_feedback = $3, updated_at = now()
        WHERE id = $1 AND user_id = $2
        RETURNING id, user_feedback
        """,
        opportunity_id,
        user_id,
        feedback,
    )


async def find_existing(user_id: int, *, job_url: str, title: str, company: str) -> dict | None:
    """
    Any earlier opportunity (archived included) with the same URL or title+company.
    """
    return await db.fetch_one(
        """
        SELECT id, is_archived
        FROM job_opportunities
        WHERE user_id = $1
          AND (job_url = $2 OR (title = $3 AND company = $4))
        LIMIT 1
        """,
        user_id,
        job_url,
        title,
        company,
    )


async def insert_opportunity(
    *,
    user_id: int,
    title: str,
    company: str,
    description: str,
    requirements: str | None,
    location: str | None,
    salary: str | None,
    job_url: str,
    source: str | None,
    posted_date: datetime | None,
    fit_score: int,
    fit_details: dict | None,
) -> dict | None:
    return await db.fetch_one(
        f"""
        INSERT INTO job_opportunities
            (user_id, title, company, description, requirements, location, salary,
             job_url, source, posted_date, fit_score, fit_details)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
        ON CONFLICT (user_id, job_url) DO NOTHING
        RETURNING {_COLUMNS}
        """,
        user_id,
        title,
        company,
        description,
        requirements,
        location,
        salary,
        job_url,
        source,
        posted_date,
        fit_score,
        fit_details,
    )


async def list_blocked_urls(user_id: int) -> set[str]:
    rows = await db.fetch_all("SELECT job_url FROM blocked_jobs WHERE user_id = $1", user_id)
    return {str(row["job_url"]) for row in rows}


async def block_job(user_id: int, *, job_url: str, title: str | None, company: str | None) -> None:
    await db.execute(
        """
        INSERT INTO blocked_jobs (user_id, job_url, title, company)
        VALUES ($1, $2, $3, $4)
        ON CONFLICT (user_id, job_url) DO NOTHING
        """,
        user_id,
        job_url,
        title,
        company,
    )
