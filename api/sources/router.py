"""
FastAPI router for job source endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from auth import dependencies as auth_dependencies

from . import service

router = APIRouter(prefix="/sources")


class CreateSourceRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    source_type: str = Field(..., min_length=1, max_length=20)
    description: str | None = Field(default=None, max_length=1000)
    feed_url: str | None = Field(default=None, max_length=2000)
    api_endpoint: str | None = Field(default=None, max_length=2000)
    api_key: str | None = Field(default=None, max_length=500)
    enabled: bool = True


class UpdateSourceRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    feed_url: str | None = Field(default=None, max_length=2000)
    api_endpoint: str | None = Field(default=None, max_length=2000)
    api_key: str | None = Field(default=None, max_length=500)
    enabled: bool | None = None


@router.get("")
async def list_sources(user_id: int = Depends(auth_dependencies.get_current_user_id)) -> dict:
    sources = await service.list_sources(user_id)
    return {"sources": sources, "count": len(sources)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_source(
    payload: CreateSourceRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    source = await service.create_source(user_id, **payload.model_dump())
    return {"source": source}


@router.patch("/{source_id}")
async def update_source(
    source_id: int,
    payload: UpdateSourceRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    source = await service.update_source(user_id, source_id, payload.model_dump(exclude_unset=True))
    return {"source": source}


@router.delete("/{source_id}")
async def delete_source(
    source_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    await service.delete_source(user_id, source_id)
    return {"ok": True, "source_id": source_id}


@router.post("/{source_id}/test")
async def test_source(
    source_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    return await service.test_source(user_id, source_id)
