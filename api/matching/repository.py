"""
SQL for learned rejection patterns.
"""

from __future__ import annotations

from core import db


async def upsert_patterns(user_id: int, patterns: list[tuple[str, str]]) -> None:
    if not patterns:
        return None
    async with db.transaction() as conn:
        await conn.executemany(
            """
            INSERT INTO rejection_patterns (user_id, pattern_type, pattern_value, frequency, last_seen_at)
            VALUES ($1, $2, $3, 1, now())
            ON CONFLICT (user_id, pattern_type, pattern_value)
            DO UPDATE SET frequency = rejection_patterns.frequency + 1,
                          last_seen_at = now()
            """,
            [(user_id, pattern_type, value) for pattern_type, value in patterns],
        )


async def list_frequent_patterns(user_id: int, *, min_frequency: int = 2, limit: int = 50) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT pattern_type, pattern_value, frequency
        FROM rejection_patterns
        WHERE user_id = $1
          AND frequency >= $2
        ORDER BY frequency DESC
        LIMIT $3
        """,
        user_id,
        min_frequency,
        limit,
    )


async def list_patterns(user_id: int) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT pattern_type, pattern_value, frequency, last_seen_at
        FROM rejection_patterns
        WHERE user_id = $1
        ORDER BY frequency DESC, pattern_value ASC
        """,
        user_id,
    )
