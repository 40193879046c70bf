"""
Cover-letter generation.

Job description, first match wins:
1) `job_description` in the request
2) the application's notes
3) the job page at the application's URL, reduced to text
4) a one-line "Position: <role> at <company>" stub
"""

from __future__ import annotations

import httpx
from bs4 import BeautifulSoup
from fastapi import HTTPException

from applications import repository as applications_repository
from core import config, documents, llm
from core.logger import get_logger
from profiles import repository as profiles_repository
from resumes import repository as resumes_repository

from . import repository

logger = get_logger(__name__)

DESCRIPTION_SELECTORS = (
    ".job-description",
    "#job-description",
    "[class*='description']",
    "[id*='description']",
    "article",
    "main",
    ".content",
    "body",
)
MIN_PAGE_TEXT_CHARS = 100
MAX_DESCRIPTION_CHARS = 5000

USER_AGENT = "Mozilla/5.0 (compatible; job-tracker/1.0)"


def extract_job_description(html: str) -> str | None:
    """
    Pick the first selector whose text looks like a real description.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    for selector in DESCRIPTION_SELECTORS:
        node = soup.select_one(selector)
        if node is None:
            continue
        text = documents.collapse_whitespace(node.get_text(" "))
        if len(text) > MIN_PAGE_TEXT_CHARS:
            return text[:MAX_DESCRIPTION_CHARS]
    return None


async def fetch_job_description(url: str) -> str | None:
    try:
        async with httpx.AsyncClient(
            timeout=config.scan_http_timeout_s(),
            follow_redirects=True,
        ) as client:
            resp = await client.get(url, headers={"User-Agent": USER_AGENT})
    except httpx.HTTPError as exc:
        logger.warning("Could not fetch job page %s: %s", url, exc)
        return None

    if resp.status_code != 200:
        logger.warning("Job page %s returned %s", url, resp.status_code)
        return None
    return extract_job_description(resp.text)


async def resolve_job_description(application: dict, requested: str | None = None) -> str:
    if requested and requested.strip():
        return requested.strip()
    if application.get("notes") and str(application["notes"]).strip():
        return str(application["notes"]).strip()
    if application.get("job_url"):
        fetched = await fetch_job_description(str(application["job_url"]))
        if fetched:
            return fetched
    return f"Position: {application['role']} at {application['company']}"


def format_work_history(work_history: list | None) -> str:
    lines = []
    for item in work_history or []:
        if not isinstance(item, dict):
            continue
        head = " at ".join(part for part in (item.get("role"), item.get("company")) if part)
        if item.get("duration"):
            head = f"{head} ({item['duration']})"
        lines.append(head)
        lines.extend(f"- {achievement}" for achievement in item.get("achievements") or [])
    return "\n".join(line for line in lines if line)


def build_cover_letter_prompt(
    *,
    job_title: str,
    company: str,
    job_description: str,
    profile: dict,
    resume_text: str,
) -> str:
    skills = ", ".join(profile.get("primary_skills") or []) or "not listed"
    return f"""Write a professional, personalized cover letter for this job application.

Job:
- Position: {job_title}
- Company: {company}
- Description: {job_description}

Candidate:
- Name: {profile.get("name") or ""}
- Email: {profile.get("email") or ""}
- Years of experience: {profile.get("years_of_experience") or 0}
- Key skills: {skills}

Resume / experience:
{resume_text or "not provided"}

Guidelines: address the hiring manager (generic greeting if no name is known),
open strongly, tie the candidate's experience to the job, show interest in the
company, keep it 250-350 words in business letter format, and sign with the
candidate's contact details.

Return only the letter text."""


async def _resume_text(user_id: int, application: dict, profile: dict) -> str:
    resume_id = application.get("resume_id")
    if resume_id is not None:
        resume = await resumes_repository.get_resume_content(resume_id, user_id=user_id)
        if resume is not None and (resume.get("content") or "").strip():
            return str(resume["content"])
    primary = await resumes_repository.get_primary_resume(user_id)
    if primary is not None and (primary.get("content") or "").strip():
        return str(primary["content"])
    return format_work_history(profile.get("work_history"))


async def generate_cover_letter(user_id: int, application_id: int, *, job_description: str | None = None) -> dict:
    application = await applications_repository.get_application(application_id, user_id=user_id)
    if application is None:
        raise HTTPException(status_code=404, detail="Application not found.")
    if not application.get("company") or not application.get("role"):
        raise HTTPException(status_code=400, detail="Application must have company and role.")

    if not llm.is_configured():
        raise HTTPException(status_code=502, detail="Cover letter generation requires a configured LLM provider.")

    profile = await profiles_repository.get_profile(user_id) or {}
    description = await resolve_job_description(application, job_description)

    try:
        content = await llm.complete_text(
            prompt=build_cover_letter_prompt(
                job_title=str(application["role"]),
                company=str(application["company"]),
                job_description=description,
                profile=profile,
                resume_text=await _resume_text(user_id, application, profile),
            ),
            max_tokens=2000,
            temperature=0.7,
        )
    except llm.LLMError as exc:
        logger.warning("Cover letter generation failed for application %s: %s", application_id, exc)
        raise HTTPException(status_code=502, detail=f"Failed to generate cover letter: {exc}") from exc

    return {
        "cover_letter": content.strip(),
        "application_id": application_id,
        "company": application["company"],
        "role": application["role"],
    }


async def save_cover_letter(
    user_id: int,
    *,
    content: str,
    company: str,
    role: str,
    application_id: int | None = None,
    description: str | None = None,
) -> dict:
    if application_id is not None:
        application = await applications_repository.get_application(application_id, user_id=user_id)
        if application is None:
            raise HTTPException(status_code=404, detail="Application not found.")

    row = await repository.insert_cover_letter(
        user_id=user_id,
        name=f"Cover Letter for {role.strip()} at {company.strip()}",
        description=description,
        content=content,
    )
    if application_id is not None:
        await applications_repository.update_application(
            application_id,
            user_id=user_id,
            fields={"cover_letter_id": row["id"]},
        )
    return row


async def get_owned(user_id: int, cover_letter_id: int) -> dict:
    row = await repository.get_cover_letter(cover_letter_id, user_id=user_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Cover letter not found.")
    return row
