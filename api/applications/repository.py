"""
SQL for job applications.
"""

from __future__ import annotations

from datetime import datetime

from core import db

_COLUMNS = """
    id, user_id, company, role, status, notes, job_url, applied_date, fit_score,
    interview_date, interview_time, interview_type, interview_round, interview_notes,
    resume_id, cover_letter_id, created_at, updated_at
"""

UPDATABLE_COLUMNS = (
    "company",
    "role",
    "status",
    "notes",
    "job_url",
    "applied_date",
    "fit_score",
    "interview_date",
    "interview_time",
    "interview_type",
    "interview_round",
    "interview_notes",
    "resume_id",
    "cover_letter_id",
    "created_at",
)


async def list_applications(user_id: int, *, status: str | None = None) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}
        FROM applications
        WHERE user_id = $1
          AND ($2::text IS NULL OR status = $2)
        ORDER BY created_at DESC
        """,
        user_id,
        status,
    )


async def get_application(application_id: int, *, user_id: int) -> dict | None:
    return await db.fetch_one(
        f"SELECT {_COLUMNS} FROM applications WHERE id = $1 AND user_id = $2",
        application_id,
        user_id,
    )


async def find_by_job_url(user_id: int, job_url: str) -> dict | None:
    return await db.fetch_one(
        f"SELECT {_COLUMNS} FROM applications WHERE user_id = $1 AND job_url = $2 LIMIT 1",
        user_id,
        job_url,
    )


async def insert_application(
    *,
    user_id: int,
    company: str,
    role: str,
    status: str,
    notes: str | None = None,
    job_url: str | None = None,
    applied_date: datetime | None = None,
    fit_score: int | None = None,
    resume_id: int | None = None,
    cover_letter_id: int | None = None,
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO applications
            (user_id, company, role, status, notes, job_url, applied_date, fit_score,
             resume_id, cover_letter_id)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
        RETURNING {_COLUMNS}
        """,
        user_id,
        company,
        role,
        status,
        notes,
        job_url,
        applied_date,
        fit_score,
        resume_id,
        cover_letter_id,
    )
    if row is None:
        raise RuntimeError("Failed to create application.")
    return row


async def update_application(application_id: int, *, user_id: int, fields: dict) -> dict | None:
    fields = {key: value for key, value in fields.items() if key in UPDATABLE_COLUMNS}
    if not fields:
        return await get_application(application_id, user_id=user_id)

    assignments = []
    args: list = [application_id, user_id]
    for column, value in fields.items():
        args.append(value)
        assignments.append(f"{column} = ${len(args)}")

    return await db.fetch_one(
        f"""
        UPDATE applications
        SET {", ".join(assignments)}, updated_at = now()
        WHERE id = $1 AND user_id = $2
        RETURNING {_COLUMNS}
        """,
        *args,
    )


async def delete_application(application_id: int, *, user_id: int) -> bool:
    status_tag = await db.execute(
        "DELETE FROM applications WHERE id = $1 AND user_id = $2",
        application_id,
        user_id,
    )
    return db.affected_rows(status_tag) > 0


async def set_status(application_id: int, *, user_id: int, status: str) -> None:
    await db.execute(
        """
        UPDATE applications
        SET status = $3,
            applied_date = COALESCE(applied_date, now()),
            updated_at = now()
        WHERE id = $1 AND user_id = $2
        """,
        application_id,
        user_id,
        status,
    )


async def archive_old_applications(*, older_than_days: int) -> int:
    """
    Archive anything applied (or, lacking an applied date, created) too long ago.
    """
    status_tag = await db.execute(
        """
        UPDATE applications
        SET status = 'ARCHIVED', updated_at = now()
        WHERE status <> 'ARCHIVED'
          AND COALESCE(applied_date, created_at) <= now() - make_interval(days => $1)
        """,
        older_than_days,
    )
    return db.affected_rows(status_tag)


async def archive_stale_rejected(*, older_than_days: int) -> int:
    status_tag = await db.execute(
        """
        UPDATE applications
        SET status = 'ARCHIVED', updated_at = now()
        WHERE status = 'REJECTED'
          AND updated_at < now() - make_interval(days => $1)
        """,
        older_than_days,
    )
    return db.affected_rows(status_tag)


async def archive_stale_drafts(*, older_than_days: int) -> int:
    status_tag = await db.execute(
        """
        UPDATE applications
        SET status = 'ARCHIVED', updated_at = now()
        WHERE status = 'DRAFT'
          AND created_at < now() - make_interval(days => $1)
        """,
        older_than_days,
    )
    return db.affected_rows(status_tag)


async def count_by_archive_state() -> dict:
    row = await db.fetch_one(
        """
        SELECT count(*) AS total,
               count(*) FILTER (WHERE status = 'ARCHIVED') AS archived
        FROM applications
        """
    )
    total = int(row["total"]) if row else 0
    archived = int(row["archived"]) if row else 0
    return {"total": total, "archived": archived, "active": total - archived}
