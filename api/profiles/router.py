"""
FastAPI router for the candidate profile.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel, Field

from auth import dependencies as auth_dependencies

from . import service

router = APIRouter(prefix="/profile")


class WorkHistoryItem(BaseModel):
    company: str = Field(default="", max_length=300)
    role: str = Field(default="", max_length=300)
    duration: str = Field(default="", max_length=100)
    start_date: str | None = None
    end_date: str | None = None
    achievements: list[str] = Field(default_factory=list)


class EducationItem(BaseModel):
    degree: str = Field(default="", max_length=300)
    institution: str = Field(default="", max_length=300)
    year: str | None = None


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    location: str | None = Field(default=None, max_length=200)
    summary: str | None = Field(default=None, max_length=5000)
    primary_skills: list[str] | None = None
    secondary_skills: list[str] | None = None
    learning_skills: list[str] | None = None
    years_of_experience: int | None = Field(default=None, ge=0, le=70)
    seniority_level: str | None = Field(default=None, max_length=50)
    work_history: list[WorkHistoryItem] | None = None
    education: list[EducationItem] | None = None
    job_titles: list[str] | None = None
    industries: list[str] | None = None
    salary_expectation: str | None = Field(default=None, max_length=200)
    work_preference: str | None = Field(default=None, max_length=50)
    availability: str | None = Field(default=None, max_length=200)


class ExtractProfileRequest(BaseModel):
    resume_text: str | None = Field(default=None, max_length=100_000)


_NOT_NULL_LISTS = {
    "primary_skills",
    "secondary_skills",
    "learning_skills",
    "work_history",
    "education",
    "job_titles",
    "industries",
}


@router.get("")
async def get_profile(user_id: int = Depends(auth_dependencies.get_current_user_id)) -> dict:
    return {"profile": await service.get_profile(user_id)}


@router.put("")
async def update_profile(
    payload: UpdateProfileRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    changes = payload.model_dump(exclude_unset=True)
    for key in _NOT_NULL_LISTS:
        if key in changes and changes[key] is None:
            changes[key] = []
    return {"profile": await service.update_profile(user_id, changes)}


@router.post("/upload-cv")
async def upload_cv(
    file: UploadFile = File(...),
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return await service.upload_cv(user_id, file)


@router.post("/extract")
async def extract_profile(
    payload: ExtractProfileRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return await service.extract_profile(user_id, payload.resume_text)
