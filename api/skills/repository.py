"""
SQL for the shared skill catalogue (`skills`) and per-job sightings
(`job_skills`).
"""

from __future__ import annotations

from core import db

_COLUMNS = "s.id, s.name, s.normalized_name, s.category, s.subcategory, s.aliases, s.frequency, s.demand_trend, s.last_seen_at"

_JOB_COUNT = "(SELECT count(*) FROM job_skills js WHERE js.skill_id = s.id) AS job_count"


async def list_skills(*, limit: int = 50) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}, {_JOB_COUNT}
        FROM skills s
        ORDER BY s.frequency DESC, s.name ASC
        LIMIT $1
        """,
        limit,
    )


async def search_skills(query: str, *, category: str | None = None, limit: int = 50) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}, {_JOB_COUNT}
        FROM skills s
        WHERE ($1 = '' OR s.name ILIKE '%' || $1 || '%'
               OR s.normalized_name LIKE '%' || lower($1) || '%'
               OR lower($1) = ANY(s.aliases))
          AND ($2::text IS NULL OR s.category = $2)
        ORDER BY s.frequency DESC
        LIMIT $3
        """,
        query,
        category,
        limit,
    )


async def skill_stats() -> dict:
    total_skills = await db.fetch_value("SELECT count(*) FROM skills")
    total_job_skills = await db.fetch_value("SELECT count(*) FROM job_skills")
    top_skills = await db.fetch_all(
        """
        SELECT id, name, category, frequency, demand_trend, last_seen_at
        FROM skills ORDER BY frequency DESC LIMIT 20
        """
    )
    categories = await db.fetch_all(
        """
        SELECT category, count(*) AS count, COALESCE(sum(frequency), 0) AS total_frequency
        FROM skills GROUP BY category ORDER BY total_frequency DESC
        """
    )
    recent_skills = await db.fetch_all(
        """
        SELECT id, name, category, frequency, last_seen_at
        FROM skills ORDER BY last_seen_at DESC LIMIT 10
        """
    )
    return {
        "total_skills": total_skills,
        "total_job_skills": total_job_skills,
        "top_skills": top_skills,
        "category_breakdown": categories,
        "recent_skills": recent_skills,
    }


async def category_counts() -> dict[str, int]:
    rows = await db.fetch_all("SELECT category, count(*) AS count FROM skills GROUP BY category")
    return {row["category"]: row["count"] for row in rows}


async def matching_skills(normalized: list[str]) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}, {_JOB_COUNT}
        FROM skills s
        WHERE s.normalized_name = ANY($1::text[]) OR s.aliases && $1::text[]
        ORDER BY s.frequency DESC
        """,
        normalized,
    )


async def recommended_skills(normalized: list[str], *, min_frequency: int = 5, limit: int = 10) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}
        FROM skills s
        WHERE NOT (s.normalized_name = ANY($1::text[]) OR s.aliases && $1::text[])
          AND s.frequency >= $2
        ORDER BY s.frequency DESC
        LIMIT $3
        """,
        normalized,
        min_frequency,
        limit,
    )


async def trending_skills(*, limit: int = 20) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}
        FROM skills s
        WHERE s.demand_trend = 'rising'
        ORDER BY s.frequency DESC
        LIMIT $1
        """,
        limit,
    )


async def save_sightings(
    skills: list[dict],
    *,
    job_title: str,
    company: str | None = None,
    opportunity_id: int | None = None,
) -> tuple[int, int]:
    """
    Upsert each skill by normalized name and append a job_skills row.

    Returns (inserted, updated).
    """
    inserted = 0
    updated = 0
    async with db.transaction() as conn:
        for skill in skills:
            record = await conn.fetchrow(
                """
                INSERT INTO skills (name, normalized_name, category, subcategory, aliases, frequency)
                VALUES ($1, $2, $3, $4, $5, 1)
                ON CONFLICT (normalized_name) DO UPDATE
                SET frequency = skills.frequency + 1,
                    last_seen_at = now(),
                    aliases = ARRAY(SELECT DISTINCT unnest(skills.aliases || EXCLUDED.aliases))
                RETURNING id, (xmax = 0) AS inserted
                """,
                skill["name"],
                skill["normalized_name"],
                skill["category"],
                skill.get("subcategory"),
                skill.get("aliases") or [],
            )
            await conn.execute(
                """
                INSERT INTO job_skills
                    (skill_id, opportunity_id, job_title, company, is_required, proficiency_level, years_required)
                VALUES ($1, $2, $3, $4, $5, $6, $7)
                """,
                record["id"],
                opportunity_id,
                job_title,
                company,
                skill.get("is_required", True),
                skill.get("proficiency_level"),
                skill.get("years_required"),
            )
            if record["inserted"]:
                inserted += 1
            else:
                updated += 1
    return inserted, updated


async def sighting_counts() -> list[dict]:
    """
    Per skill: sightings in the last 30 days and in the 30 days before that.
    """
    return await db.fetch_all(
        """
        SELECT s.id,
               count(js.id) FILTER (WHERE js.created_at > now() - interval '30 days') AS recent,
               count(js.id) FILTER (WHERE js.created_at > now() - interval '60 days'
                                      AND js.created_at <= now() - interval '30 days') AS previous
        FROM skills s
        LEFT JOIN job_skills js ON js.skill_id = s.id
        GROUP BY s.id
        """
    )


async def set_trends(trends: list[tuple[int, str]]) -> None:
    if not trends:
        return None
    async with db.transaction() as conn:
        await conn.executemany(
            "UPDATE skills SET demand_trend = $2 WHERE id = $1",
            trends,
        )


async def list_opportunities_for_extraction(user_id: int, *, limit: int = 100) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, title, company, description, requirements
        FROM job_opportunities
        WHERE user_id = $1 AND deleted_at IS NULL
        ORDER BY created_at DESC
        LIMIT $2
        """,
        user_id,
        limit,
    )
