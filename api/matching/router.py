"""
FastAPI router for ad-hoc fit analysis and job-page parsing.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from auth import dependencies as auth_dependencies
from core import llm
from profiles import repository as profiles_repository

from . import fit, patterns, service

router = APIRouter(prefix="/ai")


class AnalyzeJobRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    company: str = Field(default="", max_length=300)
    description: str = Field(..., min_length=1, max_length=50_000)
    requirements: str = Field(default="", max_length=20_000)
    location: str | None = Field(default=None, max_length=300)
    salary: str | None = Field(default=None, max_length=200)
    source: str | None = Field(default=None, max_length=200)


@router.post("/analyze")
async def analyze_job(
    payload: AnalyzeJobRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    profile = await profiles_repository.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found.")

    job = payload.model_dump()
    score = await fit.analyze_fit(profile, job)
    penalty = await patterns.rejection_penalty(user_id, job)
    return {
        "fit": score.to_dict(),
        "rejection_penalty": penalty,
        "adjusted_score": max(0, score.overall - penalty),
    }


class ParseJobUrlRequest(BaseModel):
    url: str | None = Field(default=None, max_length=2000)


@router.post("/parse-job-url")
async def parse_job_url(
    payload: ParseJobUrlRequest,
    _: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return {"success": True, "data": await service.parse_job_url(payload.url)}


@router.get("/health")
async def ai_health(_: dict = Depends(auth_dependencies.get_current_user)) -> dict:
    return {
        "provider": llm.provider(),
        "model": llm.model_name(),
        "configured": llm.is_configured(),
    }
