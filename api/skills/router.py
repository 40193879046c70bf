"""
FastAPI router for the skill catalogue.

Both verbs dispatch on `action`, matching the catalogue UI's single endpoint.
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from auth import dependencies as auth_dependencies

from . import repository, service

router = APIRouter(prefix="/skills")

GetAction = Literal["list", "search", "stats", "categories", "match", "trending"]


class SkillsActionRequest(BaseModel):
    action: Literal["extract", "build-from-opportunities", "update-trends"]
    job_description: str | None = Field(default=None, max_length=50_000)
    job_title: str | None = Field(default=None, max_length=300)
    company: str | None = Field(default=None, max_length=300)
    requirements: str | None = Field(default=None, max_length=20_000)
    limit: int = Field(default=100, ge=1, le=500)


@router.get("")
async def get_skills(
    user_id: int = Depends(auth_dependencies.get_current_user_id),
    action: GetAction = Query(default="list"),
    q: str = Query(default="", max_length=200),
    category: str | None = Query(default=None, max_length=100),
    limit: int = Query(default=50, ge=1, le=500),
) -> dict:
    if action == "stats":
        data = await repository.skill_stats()
    elif action == "search":
        data = await repository.search_skills(q.strip(), category=category, limit=limit)
    elif action == "categories":
        data = await service.categories()
    elif action == "match":
        data = await service.match_user_skills(user_id)
    elif action == "trending":
        data = await repository.trending_skills()
    else:
        data = await repository.list_skills(limit=limit)
    return {"action": action, "data": data}


@router.post("")
async def skills_action(
    payload: SkillsActionRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    if payload.action == "extract":
        if not (payload.job_description or "").strip() or not (payload.job_title or "").strip():
            raise HTTPException(status_code=400, detail="job_description and job_title are required.")
        data = await service.extract_and_save(
            description=payload.job_description,
            title=payload.job_title.strip(),
            company=payload.company,
            requirements=payload.requirements,
        )
    elif payload.action == "build-from-opportunities":
        data = await service.build_from_opportunities(user_id, limit=payload.limit)
    else:
        data = await service.update_trends()
    return {"action": payload.action, "data": data}
