"""
FastAPI router for discovered job opportunities.
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from pydantic import BaseModel

from auth import dependencies as auth_dependencies
from matching import patterns
from scanning import service as scanning_service

from . import repository, service

router = APIRouter(prefix="/opportunities")


class FeedbackRequest(BaseModel):
    feedback: Literal["GOOD_MATCH", "BAD_MATCH"]


@router.get("")
async def list_opportunities(
    user_id: int = Depends(auth_dependencies.get_current_user_id),
    min_fit_score: int | None = Query(default=None, ge=0, le=100),
    limit: int = Query(200, ge=1, le=500),
) -> dict:
    rows = await repository.list_active(user_id, min_fit_score=min_fit_score, limit=limit)
    return {"opportunities": rows, "count": len(rows)}


@router.post("/scan", status_code=status.HTTP_202_ACCEPTED)
async def start_scan(
    background_tasks: BackgroundTasks,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    # Response goes out first; results show up as alerts.
    background_tasks.add_task(scanning_service.scan_user_background, user_id)
    return {"ok": True, "scan_started": True}


@router.get("/rejection-stats")
async def rejection_stats(user_id: int = Depends(auth_dependencies.get_current_user_id)) -> dict:
    return await patterns.rejection_stats(user_id)


@router.delete("/{opportunity_id}")
async def archive_opportunity(
    opportunity_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return await service.archive(user_id, opportunity_id)


@router.post("/{opportunity_id}/feedback")
async def opportunity_feedback(
    opportunity_id: int,
    payload: FeedbackRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return await service.record_feedback(user_id, opportunity_id, payload.feedback)
