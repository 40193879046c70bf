"""
FastAPI router for job applications.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from auth import dependencies as auth_dependencies

from . import repository, service

router = APIRouter(prefix="/applications")

Status = Literal["DRAFT", "APPLIED", "INTERVIEWING", "OFFER", "REJECTED", "ACCEPTED", "WITHDRAWN", "ARCHIVED"]


class CreateApplicationRequest(BaseModel):
    company: str = Field(..., min_length=1, max_length=300)
    role: str = Field(..., min_length=1, max_length=300)
    status: Status = "APPLIED"
    notes: str | None = Field(default=None, max_length=50_000)
    job_url: str | None = Field(default=None, max_length=2000)
    applied_date: datetime | None = None
    fit_score: int | None = Field(default=None, ge=0, le=100)
    resume_id: int | None = None
    cover_letter_id: int | None = None


class UpdateApplicationRequest(BaseModel):
    company: str | None = Field(default=None, min_length=1, max_length=300)
    role: str | None = Field(default=None, min_length=1, max_length=300)
    status: Status | None = None
    notes: str | None = Field(default=None, max_length=50_000)
    job_url: str | None = Field(default=None, max_length=2000)
    applied_date: datetime | None = None
    created_at: datetime | None = None
    fit_score: int | None = Field(default=None, ge=0, le=100)
    resume_id: int | None = None
    cover_letter_id: int | None = None


class FromOpportunityRequest(BaseModel):
    opportunity_id: int
    status: Literal["APPLIED", "DRAFT"] = "APPLIED"


class ScheduleInterviewRequest(BaseModel):
    interview_date: datetime | None = None
    interview_time: str | None = Field(default=None, max_length=20)
    interview_type: str | None = Field(default=None, max_length=50)
    interview_round: int | None = Field(default=None, ge=1, le=20)
    interview_notes: str | None = Field(default=None, max_length=10_000)


_NOT_NULL = {"company", "role", "status", "created_at"}


@router.get("")
async def list_applications(
    user_id: int = Depends(auth_dependencies.get_current_user_id),
    status_filter: Status | None = Query(default=None, alias="status"),
) -> dict:
    rows = await repository.list_applications(user_id, status=status_filter)
    return {"applications": rows, "count": len(rows)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_application(
    payload: CreateApplicationRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return {"application": await service.create_application(user_id, payload.model_dump())}


@router.post("/from-opportunity", status_code=status.HTTP_201_CREATED)
async def create_from_opportunity(
    payload: FromOpportunityRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    row = await service.create_from_opportunity(user_id, payload.opportunity_id, status=payload.status)
    return {"application": row}


@router.get("/{application_id}")
async def get_application(
    application_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return {"application": await service.get_owned(user_id, application_id)}


@router.put("/{application_id}")
async def update_application(
    application_id: int,
    payload: UpdateApplicationRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if not (value is None and key in _NOT_NULL)
    }
    return {"application": await service.update_application(user_id, application_id, changes)}


@router.delete("/{application_id}")
async def delete_application(
    application_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    await service.delete_application(user_id, application_id)
    return {"ok": True, "application_id": application_id}


@router.patch("/{application_id}/interview")
async def schedule_interview(
    application_id: int,
    payload: ScheduleInterviewRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return await service.schedule_interview(user_id, application_id, payload.model_dump())
