"""
Scheduled jobs, triggered by an external scheduler with the X-Cron-Secret
header.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from applications import service as applications_service
from auth import dependencies as auth_dependencies
from core.logger import get_logger
from scanning import service as scanning_service
from settings import repository as settings_repository

logger = get_logger(__name__)

router = APIRouter(
    prefix="/cron",
    dependencies=[Depends(auth_dependencies.require_cron_secret)],
)


async def scan_all_users() -> dict:
    """
    Scan every auto-scan user in turn; one user's failure does not stop the rest.
    """
    users = await settings_repository.list_auto_scan_users()
    logger.info("Cron scan starting for %d users", len(users))

    results = []
    total_jobs_found = 0
    for user in users:
        try:
            outcome = await scanning_service.scan_user(user["id"])
        except Exception as exc:
            logger.exception("Cron scan failed for user %s", user["id"])
            results.append(
                {
                    "user_id": user["id"],
                    "email": user["email"],
                    "jobs_found": 0,
                    "success": False,
                    "error": str(exc),
                }
            )
            continue

        total_jobs_found += outcome.added
        results.append(
            {
                "user_id": user["id"],
                "email": user["email"],
                "jobs_found": outcome.added,
                "success": True,
                "error": None,
            }
        )

    logger.info("Cron scan finished: %d new jobs across %d users", total_jobs_found, len(users))
    return {
        "users_scanned": len(users),
        "total_jobs_found": total_jobs_found,
        "results": results,
    }


@router.post("/scan-jobs")
async def scan_jobs() -> dict:
    return await scan_all_users()


@router.post("/archive-applications")
async def archive_applications() -> dict:
    return await applications_service.run_archive_sweep()
