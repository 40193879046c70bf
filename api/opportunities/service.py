"""
Opportunity business logic: archive and match feedback.
"""

from __future__ import annotations

from fastapi import HTTPException

from core.logger import get_logger
from matching import patterns

from . import repository

logger = get_logger(__name__)

GOOD_MATCH = "GOOD_MATCH"
BAD_MATCH = "BAD_MATCH"


async def archive(user_id: int, opportunity_id: int) -> dict:
    row = await repository.archive_opportunity(opportunity_id, user_id=user_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Opportunity not found.")
    return {"ok": True, "opportunity_id": int(row["id"]), "is_archived": True}


async def record_feedback(user_id: int, opportunity_id: int, feedback: str) -> dict:
    opportunity = await repository.get_opportunity(opportunity_id, user_id=user_id)
    if opportunity is None:
        raise HTTPException(status_code=404, detail="Opportunity not found.")

    if feedback == GOOD_MATCH:
        await repository.set_feedback(opportunity_id, user_id=user_id, feedback=GOOD_MATCH)
        return {"ok": True, "opportunity_id": opportunity_id, "feedback": GOOD_MATCH}

    learned = await patterns.learn_from_rejection(user_id, opportunity)
    await repository.block_job(
        user_id,
        job_url=str(opportunity["job_url"]),
        title=opportunity.get("title"),
        company=opportunity.get("company"),
    )
    await repository.delete_opportunity(opportunity_id, user_id=user_id)
    logger.info(
        "User %s rejected opportunity %s (%d patterns learned, URL blocked)",
        user_id,
        opportunity_id,
        learned,
    )
    return {
        "ok": True,
        "opportunity_id": opportunity_id,
        "feedback": BAD_MATCH,
        "patterns_learned": learned,
        "blocked": True,
    }
