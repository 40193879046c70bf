"""
FastAPI router for application statistics.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response

from auth import dependencies as auth_dependencies

from . import service

router = APIRouter(prefix="/stats")


@router.get("")
async def get_stats(user_id: int = Depends(auth_dependencies.get_current_user_id)) -> dict:
    return await service.overview(user_id)


@router.get("/applications-by-date")
async def applications_by_date(user_id: int = Depends(auth_dependencies.get_current_user_id)) -> dict:
    return await service.by_date(user_id)


@router.get("/export")
async def export_applications(
    user_id: int = Depends(auth_dependencies.get_current_user_id),
    period: Literal["all", "30days", "90days", "year"] = Query(default="all"),
) -> Response:
    now = datetime.now(timezone.utc)
    body = await service.export_csv(user_id, period=period, now=now)
    filename = f"applications-{period}-{now.date().isoformat()}.csv"
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
