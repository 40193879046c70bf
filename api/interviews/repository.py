"""
SQL for interviews and their interviewers.
"""

from __future__ import annotations

from datetime import datetime

from core import db

_COLUMNS = """
    i.id, i.user_id, i.application_id, i.scheduled_date, i.duration_minutes,
    i.interview_type, i.round, i.status, i.location, i.meeting_link,
    i.preparation_notes, i.notes, i.feedback, i.outcome, i.transcript,
    i.analysis, i.follow_up_steps, i.analyzed_at, i.created_at, i.updated_at
"""

_RETURNING = _COLUMNS.replace("i.", "")

_INTERVIEWER_COLUMNS = (
    "id, interview_id, name, title, department, email, linkedin_url, notes, impression, topics, created_at"
)

UPDATABLE_COLUMNS = (
    "scheduled_date",
    "duration_minutes",
    "interview_type",
    "round",
    "status",
    "location",
    "meeting_link",
    "preparation_notes",
    "notes",
    "feedback",
    "outcome",
    "transcript",
)


async def list_interviews(
    user_id: int,
    *,
    application_id: int | None = None,
    status: str | None = None,
    upcoming: bool = False,
) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS},
               a.company AS application_company,
               a.role AS application_role,
               a.status AS application_status,
               COALESCE(
                   (SELECT json_agg(json_build_object('id', iv.id, 'name', iv.name, 'title', iv.title)
                                    ORDER BY iv.id)
                    FROM interviewers iv WHERE iv.interview_id = i.id),
                   '[]'::json
               ) AS interviewers
        FROM interviews i
        JOIN applications a ON a.id = i.application_id
        WHERE i.user_id = $1
          AND ($2::bigint IS NULL OR i.application_id = $2)
          AND ($3::text IS NULL OR i.status = $3)
          AND (NOT $4::boolean OR (i.scheduled_date >= now()
                                   AND i.status IN ('scheduled', 'rescheduled')))
        ORDER BY i.scheduled_date DESC
        """,
        user_id,
        application_id,
        status,
        upcoming,
    )


async def get_interview(interview_id: int, *, user_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_COLUMNS},
               a.company AS application_company,
               a.role AS application_role
        FROM interviews i
        JOIN applications a ON a.id = i.application_id
        WHERE i.id = $1 AND i.user_id = $2
        """,
        interview_id,
        user_id,
    )


async def insert_interview(
    *,
    user_id: int,
    application_id: int,
    scheduled_date: datetime,
    interview_type: str = "video",
    round: int = 1,
    status: str = "scheduled",
    duration_minutes: int | None = None,
    location: str | None = None,
    meeting_link: str | None = None,
    preparation_notes: str | None = None,
    notes: str | None = None,
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO interviews
            (user_id, application_id, scheduled_date, interview_type, round, status,
             duration_minutes, location, meeting_link, preparation_notes, notes)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
        RETURNING {_RETURNING}
        """,
        user_id,
        application_id,
        scheduled_date,
        interview_type,
        round,
        status,
        duration_minutes,
        location,
        meeting_link,
        preparation_notes,
        notes,
    )
    if row is None:
        raise RuntimeError("Failed to create interview.")
    return row


async def update_interview(interview_id: int, *, user_id: int, fields: dict) -> dict | None:
    fields = {key: value for key, value in fields.items() if key in UPDATABLE_COLUMNS}
    if not fields:
        return await get_interview(interview_id, user_id=user_id)

    assignments = []
    args: list = [interview_id, user_id]
    for column, value in fields.items():
        args.append(value)
        assignments.append(f"{column} = ${len(args)}")

    return await db.fetch_one(
        f"""
        UPDATE interviews
        SET {", ".join(assignments)}, updated_at = now()
        WHERE id = $1 AND user_id = $2
        RETURNING {_RETURNING}
        """,
        *args,
    )


async def save_analysis(interview_id: int, *, analysis: dict, follow_up_steps: list) -> dict | None:
    return await db.fetch_one(
        f"""
        UPDATE interviews
        SET analysis = $2, follow_up_steps = $3, analyzed_at = now(), updated_at = now()
        WHERE id = $1
        RETURNING {_RETURNING}
        """,
        interview_id,
        analysis,
        follow_up_steps,
    )


async def delete_interview(interview_id: int, *, user_id: int) -> bool:
    # interviewers rows go with it (ON DELETE CASCADE)
    status_tag = await db.execute(
        "DELETE FROM interviews WHERE id = $1 AND user_id = $2",
        interview_id,
        user_id,
    )
    return db.affected_rows(status_tag) > 0


async def list_interviewers(interview_id: int) -> list[dict]:
    return await db.fetch_all(
        f"SELECT {_INTERVIEWER_COLUMNS} FROM interviewers WHERE interview_id = $1 ORDER BY id",
        interview_id,
    )


def _interviewer_args(interview_id: int, person: dict) -> tuple:
    return (
        interview_id,
        person["name"],
        person.get("title"),
        person.get("department"),
        person.get("email"),
        person.get("linkedin_url"),
        person.get("notes"),
        person.get("impression"),
        list(person.get("topics") or []),
    )


_INSERT_INTERVIEWER = f"""
    INSERT INTO interviewers
        (interview_id, name, title, department, email, linkedin_url, notes, impression, topics)
    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
    RETURNING {_INTERVIEWER_COLUMNS}
"""


async def insert_interviewer(interview_id: int, person: dict) -> dict | None:
    return await db.fetch_one(_INSERT_INTERVIEWER, *_interviewer_args(interview_id, person))


async def replace_interviewers(interview_id: int, people: list[dict]) -> list[dict]:
    async with db.transaction() as conn:
        await conn.execute("DELETE FROM interviewers WHERE interview_id = $1", interview_id)
        rows = []
        for person in people:
            record = await conn.fetchrow(_INSERT_INTERVIEWER, *_interviewer_args(interview_id, person))
            rows.append(dict(record))
    return rows


async def list_application_interviews(
    user_id: int,
    *,
    start: datetime,
    end: datetime,
) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, company, role, status, interview_date, interview_time,
               interview_type, interview_round, interview_notes
        FROM applications
        WHERE user_id = $1
          AND interview_date >= $2
          AND interview_date <= $3
        ORDER BY interview_date ASC
        """,
        user_id,
        start,
        end,
    )


async def list_interviews_needing_follow_up(user_id: int, *, before: datetime, limit: int = 10) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, company, role, status, interview_date, interview_type, interview_round
        FROM applications
        WHERE user_id = $1
          AND interview_date < $2
          AND status = 'INTERVIEWING'
        ORDER BY interview_date DESC
        LIMIT $3
        """,
        user_id,
        before,
        limit,
    )
