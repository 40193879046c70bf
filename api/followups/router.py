"""
FastAPI router for follow-up reminders.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from applications import repository as applications_repository
from auth import dependencies as auth_dependencies
from contacts import repository as contacts_repository

from . import repository

router = APIRouter(prefix="/follow-ups")

Priority = Literal["low", "medium", "high"]


class CreateFollowUpRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    due_date: datetime
    description: str | None = Field(default=None, max_length=5000)
    priority: Priority = "medium"
    type: str = Field(default="general", min_length=1, max_length=50)
    notify_before: int = Field(default=24, ge=0, le=24 * 14)
    application_id: int | None = None
    contact_id: int | None = None


class UpdateFollowUpRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    due_date: datetime | None = None
    description: str | None = Field(default=None, max_length=5000)
    priority: Priority | None = None
    type: str | None = Field(default=None, min_length=1, max_length=50)
    notify_before: int | None = Field(default=None, ge=0, le=24 * 14)
    completed: bool | None = None
    application_id: int | None = None
    contact_id: int | None = None


_NOT_NULL = {"title", "due_date", "priority", "type", "notify_before", "completed"}


def completion_changes(existing: dict, changes: dict, *, now: datetime | None = None) -> dict:
    """
    Stamp completed_at on the first transition to done; clear it on re-open.
    """
    out = dict(changes)
    if "completed" not in out:
        return out
    if out["completed"] and not existing.get("completed"):
        out["completed_at"] = now or datetime.now(timezone.utc)
    elif not out["completed"]:
        out["completed_at"] = None
    return out


async def _ensure_application(user_id: int, application_id: int | None) -> None:
    if application_id is None:
        return
    if await applications_repository.get_application(application_id, user_id=user_id) is None:
        raise HTTPException(status_code=404, detail="Application not found.")


async def _ensure_contact(user_id: int, contact_id: int | None) -> None:
    if contact_id is None:
        return
    if await contacts_repository.get_contact(contact_id, user_id=user_id) is None:
        raise HTTPException(status_code=404, detail="Contact not found.")


@router.get("")
async def list_follow_ups(
    user_id: int = Depends(auth_dependencies.get_current_user_id),
    completed: bool | None = Query(default=None),
    application_id: int | None = Query(default=None),
) -> dict:
    rows = await repository.list_follow_ups(user_id, completed=completed, application_id=application_id)
    return {"follow_ups": rows, "count": len(rows)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_follow_up(
    payload: CreateFollowUpRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    await _ensure_application(user_id, payload.application_id)
    await _ensure_contact(user_id, payload.contact_id)
    row = await repository.insert_follow_up(
        user_id=user_id,
        title=payload.title.strip(),
        due_date=payload.due_date,
        description=payload.description,
        priority=payload.priority,
        follow_up_type=payload.type,
        notify_before=payload.notify_before,
        application_id=payload.application_id,
        contact_id=payload.contact_id,
    )
    return {"follow_up": row}


@router.get("/{follow_up_id}")
async def get_follow_up(
    follow_up_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    row = await repository.get_follow_up(follow_up_id, user_id=user_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Follow-up not found.")
    return {"follow_up": row}


@router.put("/{follow_up_id}")
async def update_follow_up(
    follow_up_id: int,
    payload: UpdateFollowUpRequest,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    existing = await repository.get_follow_up(follow_up_id, user_id=user_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Follow-up not found.")

    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if not (value is None and key in _NOT_NULL)
    }
    await _ensure_application(user_id, changes.get("application_id"))
    await _ensure_contact(user_id, changes.get("contact_id"))
    row = await repository.update_follow_up(
        follow_up_id,
        user_id=user_id,
        fields=completion_changes(existing, changes),
    )
    return {"follow_up": row}


@router.delete("/{follow_up_id}")
async def delete_follow_up(
    follow_up_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    if not await repository.delete_follow_up(follow_up_id, user_id=user_id):
        raise HTTPException(status_code=404, detail="Follow-up not found.")
    return {"ok": True, "follow_up_id": follow_up_id}
