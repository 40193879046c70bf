"""
FastAPI router for alerts.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from auth import dependencies as auth_dependencies

from . import repository

router = APIRouter(prefix="/alerts")


@router.get("")
async def list_alerts(
    user_id: int = Depends(auth_dependencies.get_current_user_id),
    limit: int = Query(100, ge=1, le=500),
) -> dict:
    alerts = await repository.list_unread(user_id, limit=limit)
    return {"alerts": alerts, "count": len(alerts)}


@router.post("/{alert_id}/read")
async def mark_alert_read(
    alert_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    row = await repository.mark_read(alert_id, user_id=user_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Alert not found.")
    return {"ok": True, "alert_id": int(row["id"])}


@router.delete("/{alert_id}")
async def delete_alert(
    alert_id: int,
    user_id: int = Depends(auth_dependencies.get_current_user_id),
) -> dict:
    if not await repository.delete_alert(alert_id, user_id=user_id):
        raise HTTPException(status_code=404, detail="Alert not found.")
    return {"ok": True, "alert_id": alert_id}


@router.delete("")
async def delete_all_alerts(user_id: int = Depends(auth_dependencies.get_current_user_id)) -> dict:
    deleted = await repository.delete_all(user_id)
    return {"ok": True, "deleted": deleted}
