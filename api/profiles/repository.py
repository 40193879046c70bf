"""
SQL for the candidate profile stored on `users`.
"""

from __future__ import annotations

from core import db

PROFILE_COLUMNS = (
    "name",
    "location",
    "summary",
    "primary_skills",
    "secondary_skills",
    "learning_skills",
    "years_of_experience",
    "seniority_level",
    "work_history",
    "education",
    "job_titles",
    "industries",
    "salary_expectation",
    "work_preference",
    "availability",
)

_SELECT = ", ".join(("id", "email", *PROFILE_COLUMNS, "last_extracted_at", "updated_at"))


async def get_profile(user_id: int) -> dict | None:
    return await db.fetch_one(
        f"SELECT {_SELECT} FROM users WHERE id = $1",
        user_id,
    )


async def update_profile(user_id: int, fields: dict) -> dict | None:
    fields = {key: value for key, value in fields.items() if key in PROFILE_COLUMNS}
    if not fields:
        return await get_profile(user_id)

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


async def set_resume_text(user_id: int, text: str) -> None:
    await db.execute(
        "UPDATE users SET resume_text = $2, updated_at = now() WHERE id = $1",
        user_id,
        text,
    )


async def get_resume_text(user_id: int) -> str | None:
    return await db.fetch_value("SELECT resume_text FROM users WHERE id = $1", user_id)


async def save_extracted_profile(user_id: int, *, fields: dict, extracted: dict) -> dict | None:
    row = await update_profile(user_id, fields)
    await db.execute(
        """
        UPDATE users
        SET extracted_profile = $2, last_extracted_at = now()
        WHERE id = $1
        """,
        user_id,
        extracted,
    )
    return row
