"""
FastAPI router for the browser bookmarklet.

These routes are served with open CORS (see `main.py`) because the bookmarklet
runs on arbitrary job-board origins.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from auth import dependencies as auth_dependencies

from . import service

router = APIRouter(prefix="/bookmarklet")


class ScrapedJobRequest(BaseModel):
    company: str = Field(..., min_length=1, max_length=300)
    role: str = Field(..., min_length=1, max_length=300)
    url: str | None = Field(default=None, max_length=2000)
    location: str | None = Field(default=None, max_length=300)
    description: str | None = Field(default=None, max_length=100_000)
    requirements: str | None = Field(default=None, max_length=50_000)
    salary: str | None = Field(default=None, max_length=200)
    source: str | None = Field(default=None, max_length=100)


@router.post("/jobs", status_code=status.HTTP_201_CREATED)
async def add_scraped_job(
    payload: ScrapedJobRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    result = await service.save_scraped_job(user_id, payload.model_dump())
    return {"ok": True, **result}
