"""
Turn a job posting URL into structured application fields.
"""

from __future__ import annotations

from urllib.parse import urlparse

from fastapi import HTTPException

from bookmarklet.service import build_notes
from core import llm
from core.logger import get_logger
from coverletters.service import fetch_job_description

logger = get_logger(__name__)

JOB_FIELDS = ("company", "role", "location", "salary", "description", "requirements", "benefits")


def validate_job_url(url: str | None) -> str:
    url = (url or "").strip()
    if not url:
        raise HTTPException(status_code=400, detail="Job URL is required.")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise HTTPException(status_code=400, detail="Invalid URL format.")
    return url


def build_parse_prompt(page_text: str) -> str:
    return f"""You are a job posting parser. Extract structured information from this job page.

Page text:
{page_text}

Return ONLY a JSON object with these fields:
{{
  "company": "Company name",
  "role": "Job title",
  "location": "Job location, if stated",
  "salary": "Salary range, if stated",
  "description": "Brief job description (2-3 sentences)",
  "requirements": "Key requirements as one string of bullet points",
  "benefits": "Benefits mentioned, if any"
}}

Use null for anything the page does not say."""


def _clean(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


async def parse_job_url(url: str | None) -> dict:
    url = validate_job_url(url)
    if not llm.is_configured():
        raise HTTPException(status_code=502, detail="Job parsing requires a configured LLM provider.")

    page_text = await fetch_job_description(url)
    if not page_text:
        raise HTTPException(
            status_code=502,
            detail="Failed to fetch job page. The site may block automated requests; enter the details manually.",
        )

    try:
        data = await llm.complete_json(prompt=build_parse_prompt(page_text), max_tokens=2000)
    except llm.LLMError as exc:
        logger.warning("Job URL parsing failed for %s: %s", url, exc)
        raise HTTPException(status_code=502, detail=f"Failed to parse job page: {exc}") from exc

    job = {field: _clean(data.get(field)) for field in JOB_FIELDS}
    notes = build_notes(
        description=job["description"],
        requirements=job["requirements"],
        salary=job["salary"],
        location=job["location"],
    )
    if job["benefits"]:
        notes = f"{notes}\nBenefits: {job['benefits']}".lstrip("\n")

    return {
        **job,
        "company": job["company"] or "",
        "role": job["role"] or "",
        "job_url": url,
        "notes": notes,
        "status": "DRAFT",
    }
