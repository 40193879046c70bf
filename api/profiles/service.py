"""
Profile business logic: CV upload and LLM-driven profile extraction.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, UploadFile

from core import documents, llm
from core.logger import get_logger

from . import repository

logger = get_logger(__name__)

SENIORITY_LEVELS = ("Junior", "Mid-level", "Senior", "Lead", "Principal", "Executive")

_EXTRACTION_PROMPT = """Parse the resume below into a structured candidate profile.

Resume:
{resume}

Reply with JSON only, using null or [] for anything missing:
{{
  "name": str, "email": str, "phone": str, "location": str,
  "summary": "2-3 sentences on expertise and focus",
  "primarySkills": [core expertise], "secondarySkills": [proficient], "learningSkills": [familiar],
  "yearsOfExperience": int (sum of work history),
  "seniorityLevel": one of {levels},
  "workHistory": [{{"company": str, "role": str, "duration": str, "startDate": str, "endDate": str,
                   "achievements": [str]}}],
  "education": [{{"degree": str, "institution": str, "year": str}}],
  "jobTitles": [titles this person should target], "industries": [str],
  "salaryExpectation": str, "workPreference": "Remote/Hybrid/On-site", "availability": str
}}"""


async def get_profile(user_id: int) -> dict:
    row = await repository.get_profile(user_id)
    if row is None:
        raise HTTPException(status_code=404, detail="User not found.")
    return row


async def update_profile(user_id: int, changes: dict) -> dict:
    row = await repository.update_profile(user_id, changes)
    if row is None:
        raise HTTPException(status_code=404, detail="User not found.")
    return row


async def upload_cv(user_id: int, file: UploadFile) -> dict:
    uploaded = await documents.read_upload_text(file)
    await repository.set_resume_text(user_id, uploaded.text)
    return {
        "filename": uploaded.filename,
        "file_ext": uploaded.file_ext,
        "size_bytes": uploaded.size_bytes,
        "text": uploaded.text,
        "text_length": len(uploaded.text),
    }


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _str_list(value: Any) -> list[str]:
    return [str(item).strip() for item in _list(value) if str(item or "").strip()]


def _optional_str(value: Any) -> str | None:
    text = str(value).strip() if value is not None else ""
    return text or None


def _optional_int(value: Any) -> int | None:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return None


def normalize_extracted_profile(data: dict) -> dict:
    """
    Turn the model's camelCase reply into profile column values.
    """
    work_history = [
        {
            "company": str(item.get("company") or ""),
            "role": str(item.get("role") or ""),
            "duration": str(item.get("duration") or ""),
            "start_date": _optional_str(item.get("startDate")),
            "end_date": _optional_str(item.get("endDate")),
            "achievements": _str_list(item.get("achievements")),
        }
        for item in _list(data.get("workHistory"))
        if isinstance(item, dict)
    ]
    education = [
        {
            "degree": str(item.get("degree") or ""),
            "institution": str(item.get("institution") or ""),
            "year": _optional_str(item.get("year")),
        }
        for item in _list(data.get("education"))
        if isinstance(item, dict)
    ]

    seniority = _optional_str(data.get("seniorityLevel"))
    if seniority is not None:
        seniority = next((level for level in SENIORITY_LEVELS if level.lower() == seniority.lower()), seniority)

    return {
        "name": _optional_str(data.get("name")),
        "location": _optional_str(data.get("location")),
        "summary": _optional_str(data.get("summary")),
        "primary_skills": _str_list(data.get("primarySkills")),
        "secondary_skills": _str_list(data.get("secondarySkills")),
        "learning_skills": _str_list(data.get("learningSkills")),
        "years_of_experience": _optional_int(data.get("yearsOfExperience")),
        "seniority_level": seniority,
        "work_history": work_history,
        "education": education,
        "job_titles": _str_list(data.get("jobTitles")),
        "industries": _str_list(data.get("industries")),
        "salary_expectation": _optional_str(data.get("salaryExpectation")),
        "work_preference": _optional_str(data.get("workPreference")),
        "availability": _optional_str(data.get("availability")),
    }


async def extract_profile(user_id: int, resume_text: str | None = None) -> dict:
    text = (resume_text or "").strip() or (await repository.get_resume_text(user_id) or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="No resume text provided or uploaded.")

    if not llm.is_configured():
        raise HTTPException(status_code=502, detail="Profile extraction requires a configured LLM provider.")

    try:
        data = await llm.complete_json(
            prompt=_EXTRACTION_PROMPT.format(resume=text[:20_000], levels="/".join(SENIORITY_LEVELS)),
            max_tokens=4096,
            temperature=0.2,
        )
    except llm.LLMError as exc:
        logger.warning("Profile extraction failed for user %s: %s", user_id, exc)
        raise HTTPException(status_code=502, detail=f"Profile extraction failed: {exc}") from exc

    fields = normalize_extracted_profile(data)
    # Keep existing values where the model found nothing.
    fields = {key: value for key, value in fields.items() if value not in (None, [], "")}

    if resume_text:
        await repository.set_resume_text(user_id, text)
    profile = await repository.save_extracted_profile(user_id, fields=fields, extracted=data)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found.")
    return {"profile": profile, "extracted": data}
