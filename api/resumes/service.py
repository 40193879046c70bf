"""
Résumé business logic: uploads, primary selection, DOCX downloads and
LLM tailoring for a target job.
"""

from __future__ import annotations

from fastapi import HTTPException, UploadFile

from applications import repository as applications_repository
from core import documents, llm
from core.logger import get_logger

from . import repository

logger = get_logger(__name__)

TAILOR_SYSTEM_PROMPT = (
    "You are an expert resume writer. Rewrite the candidate's resume so it targets the given job: "
    "use the job's own keywords, lead with the most relevant experience, and keep every claim "
    "grounded in the original resume. Return only the resume text."
)


async def get_owned(user_id: int, resume_id: int, *, with_content: bool = False) -> dict:
    if with_content:
        row = await repository.get_resume_content(resume_id, user_id=user_id)
    else:
        row = await repository.get_resume(resume_id, user_id=user_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Resume not found.")
    return row


async def upload_resume(
    user_id: int,
    file: UploadFile,
    *,
    name: str | None = None,
    description: str | None = None,
    is_primary: bool = False,
) -> dict:
    uploaded = await documents.read_upload_text(file)

    if not is_primary and not await repository.list_resumes(user_id):
        # First résumé becomes primary.
        is_primary = True

    row = await repository.insert_resume(
        user_id=user_id,
        name=(name or "").strip() or uploaded.filename,
        file_name=uploaded.filename,
        file_type=uploaded.file_ext.lstrip("."),
        file_size=uploaded.size_bytes,
        content=uploaded.text,
        description=description,
        is_primary=is_primary,
    )
    logger.info("Stored resume %s for user %s (%d chars)", row["id"], user_id, len(uploaded.text))
    return row


async def update_resume(user_id: int, resume_id: int, changes: dict) -> dict:
    await get_owned(user_id, resume_id)
    row = await repository.update_resume(resume_id, user_id=user_id, fields=changes)
    if row is None:
        raise HTTPException(status_code=404, detail="Resume not found.")
    return row


async def delete_resume(user_id: int, resume_id: int) -> None:
    await get_owned(user_id, resume_id)
    if not await repository.delete_resume(resume_id, user_id=user_id):
        raise HTTPException(status_code=404, detail="Resume not found.")


async def download_resume(user_id: int, resume_id: int) -> tuple[str, bytes]:
    row = await get_owned(user_id, resume_id, with_content=True)
    data = documents.render_resume_docx(title="", body=row["content"] or "")
    return documents.safe_filename(row["name"], ext=".docx"), data


def _as_text(value: str | list[str] | None) -> str:
    if isinstance(value, list):
        return "\n".join(str(item) for item in value)
    return (value or "").strip()


def build_tailor_prompt(
    *,
    resume_content: str,
    job_title: str,
    company: str | None,
    job_description: str,
    requirements: str | list[str] | None = None,
    responsibilities: str | list[str] | None = None,
    instructions: str | None = None,
) -> str:
    target = f"{job_title} at {company}" if company else job_title
    parts = [f"Target position: {target}", "", "Job description:", job_description.strip()]

    requirements_text = _as_text(requirements)
    if requirements_text:
        parts.extend(["", "Requirements:", requirements_text])
    responsibilities_text = _as_text(responsibilities)
    if responsibilities_text:
        parts.extend(["", "Responsibilities:", responsibilities_text])
    if instructions and instructions.strip():
        parts.extend(["", "Extra instructions:", instructions.strip()])

    parts.extend(["", "Current resume:", resume_content.strip()])
    return "\n".join(parts)


async def tailor_resume(data: dict) -> dict:
    resume_content = data["resume_content"]
    if not llm.is_configured():
        return {"tailored_content": resume_content, "tailored": False, "success": True}

    try:
        tailored = await llm.complete_text(
            prompt=build_tailor_prompt(
                resume_content=resume_content,
                job_title=data["job_title"],
                company=data.get("company"),
                job_description=data["job_description"],
                requirements=data.get("requirements"),
                responsibilities=data.get("responsibilities"),
                instructions=data.get("instructions"),
            ),
            system_prompt=TAILOR_SYSTEM_PROMPT,
            max_tokens=4000,
            temperature=0.7,
        )
    except llm.LLMError as e:
        logger.warning("Resume tailoring failed: %s", e)
        return {
            "tailored_content": resume_content,
            "tailored": False,
            "success": False,
            "error": "AI enhancement temporarily unavailable",
        }

    return {"tailored_content": tailored.strip() or resume_content, "tailored": True, "success": True}


async def save_tailored(
    user_id: int,
    *,
    content: str,
    name: str,
    description: str | None = None,
    application_id: int | None = None,
) -> dict:
    if application_id is not None:
        application = await applications_repository.get_application(application_id, user_id=user_id)
        if application is None:
            raise HTTPException(status_code=404, detail="Application not found.")

    row = await repository.insert_resume(
        user_id=user_id,
        name=name.strip(),
        file_name=documents.safe_filename(name, ext=".docx"),
        file_type="docx",
        file_size=len(content.encode("utf-8")),
        content=content,
        description=description,
    )

    if application_id is not None:
        await applications_repository.update_application(
            application_id,
            user_id=user_id,
            fields={"resume_id": row["id"]},
        )
    return row
