"""
Application business logic.

Applied-date rule: an application that is APPLIED or INTERVIEWING always has
an applied date. Create/update stamp "now" when none was supplied and none is
stored yet.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi import HTTPException

from core import config
from core.logger import get_logger
from coverletters import repository as coverletters_repository
from followups import repository as followups_repository
from opportunities import repository as opportunities_repository
from resumes import repository as resumes_repository

from . import repository

logger = get_logger(__name__)

STATUSES = ("DRAFT", "APPLIED", "INTERVIEWING", "OFFER", "REJECTED", "ACCEPTED", "WITHDRAWN", "ARCHIVED")
ACTIVE_APPLIED_STATUSES = {"APPLIED", "INTERVIEWING"}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_applied_date(
    status: str,
    requested: datetime | None,
    *,
    existing: datetime | None = None,
    now: datetime | None = None,
) -> datetime | None:
    applied = requested or existing
    if applied is None and status in ACTIVE_APPLIED_STATUSES:
        applied = now or _utc_now()
    return applied


def build_opportunity_notes(opportunity: dict, *, status: str) -> str:
    lines = ["Applied via Job Tracker" if status == "APPLIED" else "Draft from Job Tracker"]
    lines.append(f"Source: {opportunity.get('source') or 'Unknown'}")
    if opportunity.get("fit_score"):
        lines.append(f"Fit Score: {opportunity['fit_score']}%")
    lines.append("")

    if opportunity.get("description"):
        lines.extend(["JOB DESCRIPTION:", str(opportunity["description"]), ""])
    if opportunity.get("requirements"):
        lines.extend(["REQUIREMENTS:", str(opportunity["requirements"]), ""])

    if opportunity.get("location"):
        lines.append(f"Location: {opportunity['location']}")
    if opportunity.get("salary"):
        lines.append(f"Salary: {opportunity['salary']}")
    if opportunity.get("job_url"):
        lines.append(f"Job URL: {opportunity['job_url']}")
    posted = opportunity.get("posted_date")
    if isinstance(posted, datetime):
        lines.append(f"Posted: {posted.date().isoformat()}")
    return "\n".join(lines)


def interview_follow_ups(application: dict, interview_date: datetime) -> list[dict]:
    company = application["company"]
    return [
        {
            "title": f"Prepare for {company} interview",
            "description": f"Review company info and practice answers for {application['role']} position",
            "due_date": interview_date - timedelta(days=1),
            "priority": "high",
            "follow_up_type": "interview",
            "notify_before": 4,
        },
        {
            "title": f"Follow up after {company} interview",
            "description": "Send thank you email and check on interview status",
            "due_date": interview_date + timedelta(days=1),
            "priority": "high",
            "follow_up_type": "interview",
            "notify_before": 2,
        },
    ]


async def get_owned(user_id: int, application_id: int) -> dict:
    row = await repository.get_application(application_id, user_id=user_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Application not found.")
    return row


async def ensure_linked_documents(user_id: int, data: dict) -> None:
    """
    Resume and cover-letter links must point at the caller's own rows.
    """
    resume_id = data.get("resume_id")
    if resume_id is not None and await resumes_repository.get_resume(resume_id, user_id=user_id) is None:
        raise HTTPException(status_code=404, detail="Resume not found.")

    cover_letter_id = data.get("cover_letter_id")
    if cover_letter_id is not None:
        if await coverletters_repository.get_cover_letter(cover_letter_id, user_id=user_id) is None:
            raise HTTPException(status_code=404, detail="Cover letter not found.")


async def create_application(user_id: int, data: dict) -> dict:
    await ensure_linked_documents(user_id, data)
    status = data.get("status") or "APPLIED"
    return await repository.insert_application(
        user_id=user_id,
        company=data["company"].strip(),
        role=data["role"].strip(),
        status=status,
        notes=data.get("notes"),
        job_url=data.get("job_url"),
        applied_date=resolve_applied_date(status, data.get("applied_date")),
        fit_score=data.get("fit_score"),
        resume_id=data.get("resume_id"),
        cover_letter_id=data.get("cover_letter_id"),
    )


async def update_application(user_id: int, application_id: int, changes: dict) -> dict:
    existing = await get_owned(user_id, application_id)
    await ensure_linked_documents(user_id, changes)

    status = changes.get("status") or existing["status"]
    applied_date = resolve_applied_date(
        status,
        changes.get("applied_date"),
        existing=existing.get("applied_date"),
    )
    if applied_date != existing.get("applied_date"):
        changes["applied_date"] = applied_date
    elif "applied_date" in changes and changes["applied_date"] is None:
        # Keep the stored date.
        changes.pop("applied_date")

    row = await repository.update_application(application_id, user_id=user_id, fields=changes)
    if row is None:
        raise HTTPException(status_code=404, detail="Application not found.")
    return row


async def delete_application(user_id: int, application_id: int) -> None:
    if not await repository.delete_application(application_id, user_id=user_id):
        raise HTTPException(status_code=404, detail="Application not found.")


async def create_from_opportunity(user_id: int, opportunity_id: int, *, status: str = "APPLIED") -> dict:
    opportunity = await opportunities_repository.get_opportunity(opportunity_id, user_id=user_id)
    if opportunity is None:
        raise HTTPException(status_code=404, detail="Job opportunity not found.")

    existing = await repository.find_by_job_url(user_id, str(opportunity["job_url"]))
    if existing is not None:
        raise HTTPException(status_code=409, detail="Application already exists for this job.")

    row = await repository.insert_application(
        user_id=user_id,
        company=str(opportunity["company"]),
        role=str(opportunity["title"]),
        status=status,
        notes=build_opportunity_notes(opportunity, status=status),
        job_url=str(opportunity["job_url"]),
        applied_date=_utc_now() if status == "APPLIED" else None,
        fit_score=opportunity.get("fit_score"),
    )
    logger.info("Created %s application for %s at %s", status, row["role"], row["company"])
    return row


async def schedule_interview(user_id: int, application_id: int, data: dict) -> dict:
    existing = await get_owned(user_id, application_id)
    interview_date: datetime | None = data.get("interview_date")

    fields = {
        "interview_date": interview_date,
        "interview_time": data.get("interview_time"),
        "interview_type": data.get("interview_type"),
        "interview_round": data.get("interview_round"),
        "interview_notes": data.get("interview_notes"),
    }
    if interview_date is not None:
        fields["status"] = "INTERVIEWING"
        if existing.get("applied_date") is None:
            fields["applied_date"] = _utc_now()

    row = await repository.update_application(application_id, user_id=user_id, fields=fields)
    if row is None:
        raise HTTPException(status_code=404, detail="Application not found.")

    follow_ups = []
    if interview_date is not None:
        for item in interview_follow_ups(row, interview_date):
            follow_ups.append(
                await followups_repository.insert_follow_up(
                    user_id=user_id,
                    application_id=application_id,
                    **item,
                )
            )
    return {"application": row, "follow_ups": follow_ups}


async def run_archive_sweep() -> dict:
    archived_old = await repository.archive_old_applications(older_than_days=config.archive_after_days())
    archived_rejected = await repository.archive_stale_rejected(older_than_days=config.stale_after_days())
    archived_drafts = await repository.archive_stale_drafts(older_than_days=config.stale_after_days())
    counts = await repository.count_by_archive_state()
    logger.info(
        "Archive sweep: %d old, %d rejected, %d drafts archived",
        archived_old,
        archived_rejected,
        archived_drafts,
    )
    return {
        "archived_old": archived_old,
        "archived_rejected": archived_rejected,
        "archived_drafts": archived_drafts,
        **counts,
    }
