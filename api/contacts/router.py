"""
FastAPI router for recruiter / hiring-team contacts.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from applications import repository as applications_repository
from auth import dependencies as auth_dependencies

from . import repository

router = APIRouter(prefix="/contacts")


class CreateContactRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    title: str | None = Field(default=None, max_length=200)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=5000)
    application_id: int | None = None


@router.get("")
async def list_contacts(
    user_id: int = Depends(auth_dependencies.get_current_user_id),
    application_id: int | None = Query(default=None),
) -> dict:
    rows = await repository.list_contacts(user_id, application_id=application_id)
    return {"contacts": rows, "count": len(rows)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_contact(
    payload: CreateContactRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    if payload.application_id is not None:
        application = await applications_repository.get_application(payload.application_id, user_id=user_id)
        if application is None:
            raise HTTPException(status_code=404, detail="Application not found.")

    data = payload.model_dump()
    data["name"] = data["name"].strip()
    return {"contact": await repository.insert_contact(user_id=user_id, **data)}


@router.delete("/{contact_id}")
async def delete_contact(
    contact_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    if not await repository.delete_contact(contact_id, user_id=user_id):
        raise HTTPException(status_code=404, detail="Contact not found.")
    return {"ok": True, "contact_id": contact_id}
