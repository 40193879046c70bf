"""
FastAPI router for résumés.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from pydantic import BaseModel, Field

from auth import dependencies as auth_dependencies
from core import documents

from . import repository, service

router = APIRouter(prefix="/resumes")


class UpdateResumeRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=2000)
    is_primary: bool | None = None


class TailorResumeRequest(BaseModel):
    resume_content: str = Field(..., min_length=1, max_length=100_000)
    job_title: str = Field(..., min_length=1, max_length=300)
    job_description: str = Field(..., min_length=1, max_length=50_000)
    company: str | None = Field(default=None, max_length=300)
    requirements: str | list[str] | None = None
    responsibilities: str | list[str] | None = None
    instructions: str | None = Field(default=None, max_length=5000)


class SaveTailoredRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=100_000)
    name: str = Field(..., min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=2000)
    application_id: int | None = None


@router.get("")
async def list_resumes(user_id: int = Depends(auth_dependencies.get_current_user_id)) -> dict:
    rows = await repository.list_resumes(user_id)
    return {"resumes": rows, "count": len(rows)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def upload_resume(
    file: UploadFile = File(...),
    name: str | None = Form(default=None),
    description: str | None = Form(default=None),
    is_primary: bool = Form(default=False),
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    row = await service.upload_resume(
        user_id,
        file,
        name=name,
        description=description,
        is_primary=is_primary,
    )
    return {"resume": row}


@router.post("/tailor")
async def tailor_resume(
    payload: TailorResumeRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return await service.tailor_resume(payload.model_dump())


@router.post("/tailored", status_code=status.HTTP_201_CREATED)
async def save_tailored(
    payload: SaveTailoredRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    row = await service.save_tailored(user_id, **payload.model_dump())
    return {"resume": row}


@router.patch("/{resume_id}")
async def update_resume(
    resume_id: int,
    payload: UpdateResumeRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    changes = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    return {"resume": await service.update_resume(user_id, resume_id, changes)}


@router.delete("/{resume_id}")
async def delete_resume(
    resume_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    await service.delete_resume(user_id, resume_id)
    return {"ok": True, "resume_id": resume_id}


@router.get("/{resume_id}/content")
async def get_resume_content(
    resume_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    row = await service.get_owned(user_id, resume_id, with_content=True)
    return {"resume_id": resume_id, "name": row["name"], "content": row["content"]}


@router.get("/{resume_id}/download")
async def download_resume(
    resume_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> Response:
    filename, data = await service.download_resume(user_id, resume_id)
    return Response(
        content=data,
        media_type=documents.DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
