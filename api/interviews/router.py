"""
FastAPI router for interviews.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from auth import dependencies as auth_dependencies

from . import repository, service

router = APIRouter(prefix="/interviews")

InterviewStatus = Literal["scheduled", "rescheduled", "completed", "cancelled", "no_show"]


class InterviewerRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    title: str | None = Field(default=None, max_length=200)
    department: str | None = Field(default=None, max_length=200)
    email: str | None = Field(default=None, max_length=320)
    linkedin_url: str | None = Field(default=None, max_length=2000)
    notes: str | None = Field(default=None, max_length=5000)
    impression: str | None = Field(default=None, max_length=2000)
    topics: list[str] = Field(default_factory=list)


class CreateInterviewRequest(BaseModel):
    application_id: int
    scheduled_date: datetime
    duration_minutes: int | None = Field(default=None, ge=1, le=24 * 60)
    interview_type: str = Field(default="video", min_length=1, max_length=50)
    round: int = Field(default=1, ge=1, le=20)
    status: InterviewStatus = "scheduled"
    location: str | None = Field(default=None, max_length=500)
    meeting_link: str | None = Field(default=None, max_length=2000)
    preparation_notes: str | None = Field(default=None, max_length=20_000)
    notes: str | None = Field(default=None, max_length=20_000)
    interviewers: list[InterviewerRequest] = Field(default_factory=list)


class UpdateInterviewRequest(BaseModel):
    scheduled_date: datetime | None = None
    duration_minutes: int | None = Field(default=None, ge=1, le=24 * 60)
    interview_type: str | None = Field(default=None, min_length=1, max_length=50)
    round: int | None = Field(default=None, ge=1, le=20)
    status: InterviewStatus | None = None
    location: str | None = Field(default=None, max_length=500)
    meeting_link: str | None = Field(default=None, max_length=2000)
    preparation_notes: str | None = Field(default=None, max_length=20_000)
    notes: str | None = Field(default=None, max_length=20_000)
    feedback: str | None = Field(default=None, max_length=20_000)
    outcome: str | None = Field(default=None, max_length=100)
    transcript: str | None = Field(default=None, max_length=200_000)


class ReplaceInterviewersRequest(BaseModel):
    interviewers: list[InterviewerRequest]


class AnalyzeRequest(BaseModel):
    transcript: str | None = Field(default=None, max_length=200_000)


_NOT_NULL = {"scheduled_date", "interview_type", "round", "status"}


@router.get("")
async def list_interviews(
    user_id: int = Depends(auth_dependencies.get_current_user_id),
    application_id: int | None = Query(default=None),
    status_filter: InterviewStatus | None = Query(default=None, alias="status"),
    upcoming: bool = Query(default=False),
) -> dict:
    rows = await repository.list_interviews(
        user_id,
        application_id=application_id,
        status=status_filter,
        upcoming=upcoming,
    )
    return {"interviews": rows, "count": len(rows)}


@router.get("/upcoming")
async def upcoming_interviews(
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return await service.upcoming_overview(user_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_interview(
    payload: CreateInterviewRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return {"interview": await service.create_interview(user_id, payload.model_dump())}


@router.get("/{interview_id}")
async def get_interview(
    interview_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return {"interview": await service.get_with_interviewers(user_id, interview_id)}


@router.patch("/{interview_id}")
async def update_interview(
    interview_id: int,
    payload: UpdateInterviewRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if not (value is None and key in _NOT_NULL)
    }
    return {"interview": await service.update_interview(user_id, interview_id, changes)}


@router.delete("/{interview_id}")
async def delete_interview(
    interview_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    await service.delete_interview(user_id, interview_id)
    return {"ok": True, "interview_id": interview_id}


@router.post("/{interview_id}/interviewers", status_code=status.HTTP_201_CREATED)
async def add_interviewer(
    interview_id: int,
    payload: InterviewerRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return {"interviewer": await service.add_interviewer(user_id, interview_id, payload.model_dump())}


@router.put("/{interview_id}/interviewers")
async def replace_interviewers(
    interview_id: int,
    payload: ReplaceInterviewersRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    people = [person.model_dump() for person in payload.interviewers]
    rows = await service.replace_interviewers(user_id, interview_id, people)
    return {"interviewers": rows, "count": len(rows)}


@router.post("/{interview_id}/analyze")
async def analyze_interview(
    interview_id: int,
    payload: AnalyzeRequest | None = None,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    transcript = payload.transcript if payload is not None else None
    return await service.analyze_interview(user_id, interview_id, transcript=transcript)
