"""
Turn job data scraped by the browser bookmarklet into a DRAFT application.
"""

from __future__ import annotations

from fastapi import HTTPException

from applications import repository as applications_repository
from core.logger import get_logger
from matching import fit
from profiles import repository as profiles_repository

logger = get_logger(__name__)

DESCRIPTION_LIMIT = 1500
REQUIREMENTS_LIMIT = 1000


def build_notes(
    *,
    description: str | None = None,
    requirements: str | None = None,
    salary: str | None = None,
    location: str | None = None,
    url: str | None = None,
) -> str:
    lines: list[str] = []
    if description:
        lines.extend(["Job Description:", description[:DESCRIPTION_LIMIT], ""])
    if requirements:
        lines.extend(["Requirements:", requirements[:REQUIREMENTS_LIMIT], ""])
    if salary:
        lines.extend([f"Salary: {salary}", ""])
    if location:
        lines.append(f"Location: {location}")
    if url:
        lines.append(f"Job URL: {url}")
    return "\n".join(lines)


async def score_job(user_id: int, job: dict) -> int | None:
    """
    Fit score for the scraped job, or None when there is nothing to score.
    """
    if not job.get("description"):
        return None
    profile = await profiles_repository.get_profile(user_id)
    if profile is None or not fit.profile_skills(profile):
        return None
    score = await fit.analyze_fit(profile, job)
    return score.overall


async def save_scraped_job(user_id: int, data: dict) -> dict:
    company = data["company"].strip()
    role = data["role"].strip()
    if not company or not role:
        raise HTTPException(status_code=400, detail="Company and role are required.")
    job = {
        "title": role,
        "company": company,
        "description": data.get("description") or "",
        "requirements": data.get("requirements") or "",
        "location": data.get("location"),
    }
    fit_score = await score_job(user_id, job)

    application = await applications_repository.insert_application(
        user_id=user_id,
        company=company,
        role=role,
        status="DRAFT",
        notes=build_notes(
            description=data.get("description"),
            requirements=data.get("requirements"),
            salary=data.get("salary"),
            location=data.get("location"),
            url=data.get("url"),
        ),
        job_url=data.get("url"),
        applied_date=None,
        fit_score=fit_score,
    )
    logger.info(
        "Bookmarklet (%s) added %s at %s as application %s",
        data.get("source") or "unknown",
        role,
        company,
        application["id"],
    )
    return {"application": application, "fit_score": fit_score}
