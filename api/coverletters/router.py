"""
FastAPI router for cover letters.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from auth import dependencies as auth_dependencies
from core import documents

from . import repository, service

router = APIRouter(prefix="/cover-letters")


class GenerateCoverLetterRequest(BaseModel):
    application_id: int
    job_description: str | None = Field(default=None, max_length=50_000)


class SaveCoverLetterRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=50_000)
    company: str = Field(..., min_length=1, max_length=300)
    role: str = Field(..., min_length=1, max_length=300)
    application_id: int | None = None
    description: str | None = Field(default=None, max_length=2000)


@router.get("")
async def list_cover_letters(user_id: int = Depends(auth_dependencies.get_current_user_id)) -> dict:
    rows = await repository.list_cover_letters(user_id)
    return {"cover_letters": rows, "count": len(rows)}


@router.post("/generate")
async def generate_cover_letter(
    payload: GenerateCoverLetterRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return await service.generate_cover_letter(
        user_id,
        payload.application_id,
        job_description=payload.job_description,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def save_cover_letter(
    payload: SaveCoverLetterRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return {"cover_letter": await service.save_cover_letter(user_id, **payload.model_dump())}


@router.get("/{cover_letter_id}")
async def get_cover_letter(
    cover_letter_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return {"cover_letter": await service.get_owned(user_id, cover_letter_id)}


@router.get("/{cover_letter_id}/download")
async def download_cover_letter(
    cover_letter_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> Response:
    row = await service.get_owned(user_id, cover_letter_id)
    data = documents.render_docx(title="", body=row["content"])
    filename = documents.safe_filename(row["name"], ext=".docx")
    return Response(
        content=data,
        media_type=documents.DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/{cover_letter_id}")
async def delete_cover_letter(
    cover_letter_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    if not await repository.delete_cover_letter(cover_letter_id, user_id=user_id):
        raise HTTPException(status_code=404, detail="Cover letter not found.")
    return {"ok": True, "cover_letter_id": cover_letter_id}
