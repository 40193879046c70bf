"""
FastAPI router for scan settings.
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from auth import dependencies as auth_dependencies

from . import repository

router = APIRouter(prefix="/settings")


class UpdateSettingsRequest(BaseModel):
    min_fit_score: int | None = Field(default=None, ge=0, le=100)
    max_job_age_days: int | None = Field(default=None, ge=1, le=90)
    auto_scan: bool | None = None
    scan_frequency: Literal["hourly", "daily", "weekly"] | None = None
    daily_application_goal: int | None = Field(default=None, ge=1, le=100)


@router.get("")
async def get_settings(user_id: int = Depends(auth_dependencies.get_current_user_id)) -> dict:
    row = await repository.get_settings(user_id)
    if row is None:
        raise HTTPException(status_code=404, detail="User not found.")
    return {"settings": row}


@router.put("")
async def update_settings(
    payload: UpdateSettingsRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    # Every settings column is NOT NULL; explicit nulls mean "leave as is".
    changes = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    row = await repository.update_settings(user_id, changes)
    if row is None:
        raise HTTPException(status_code=404, detail="User not found.")
    return {"settings": row}
