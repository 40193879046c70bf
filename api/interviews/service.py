"""
Interview business logic: ownership checks, interviewer management and
transcript analysis.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi import HTTPException

from applications import repository as applications_repository
from core import llm
from core.logger import get_logger

from . import repository

logger = get_logger(__name__)

MIN_TRANSCRIPT_CHARS = 50
UPCOMING_WINDOW_DAYS = 30

ANALYSIS_SYSTEM_PROMPT = (
    "You are an interview coach. Analyze interview transcripts and return only a JSON object."
)


async def get_owned(user_id: int, interview_id: int) -> dict:
    row = await repository.get_interview(interview_id, user_id=user_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Interview not found.")
    return row


async def get_with_interviewers(user_id: int, interview_id: int) -> dict:
    row = await get_owned(user_id, interview_id)
    row["interviewers"] = await repository.list_interviewers(interview_id)
    return row


async def create_interview(user_id: int, data: dict) -> dict:
    application_id = data["application_id"]
    application = await applications_repository.get_application(application_id, user_id=user_id)
    if application is None:
        raise HTTPException(status_code=404, detail="Application not found.")

    people = data.pop("interviewers", None) or []
    row = await repository.insert_interview(
        user_id=user_id,
        application_id=application_id,
        scheduled_date=data["scheduled_date"],
        interview_type=data.get("interview_type") or "video",
        round=data.get("round") or 1,
        status=data.get("status") or "scheduled",
        duration_minutes=data.get("duration_minutes"),
        location=data.get("location"),
        meeting_link=data.get("meeting_link"),
        preparation_notes=data.get("preparation_notes"),
        notes=data.get("notes"),
    )

    row["interviewers"] = await repository.replace_interviewers(row["id"], people) if people else []
    await applications_repository.set_status(application_id, user_id=user_id, status="INTERVIEWING")
    logger.info("Scheduled interview %s for application %s", row["id"], application_id)
    return row


async def update_interview(user_id: int, interview_id: int, changes: dict) -> dict:
    row = await repository.update_interview(interview_id, user_id=user_id, fields=changes)
    if row is None:
        raise HTTPException(status_code=404, detail="Interview not found.")
    return row


async def delete_interview(user_id: int, interview_id: int) -> None:
    if not await repository.delete_interview(interview_id, user_id=user_id):
        raise HTTPException(status_code=404, detail="Interview not found.")


async def add_interviewer(user_id: int, interview_id: int, person: dict) -> dict:
    await get_owned(user_id, interview_id)
    row = await repository.insert_interviewer(interview_id, person)
    if row is None:
        raise HTTPException(status_code=500, detail="Failed to add interviewer.")
    return row


async def replace_interviewers(user_id: int, interview_id: int, people: list[dict]) -> list[dict]:
    await get_owned(user_id, interview_id)
    return await repository.replace_interviewers(interview_id, people)


async def upcoming_overview(user_id: int, *, now: datetime | None = None) -> dict:
    now = now or datetime.now(timezone.utc)
    upcoming = await repository.list_application_interviews(
        user_id,
        start=now,
        end=now + timedelta(days=UPCOMING_WINDOW_DAYS),
    )
    needs_follow_up = await repository.list_interviews_needing_follow_up(user_id, before=now)
    return {
        "upcoming": upcoming,
        "needs_follow_up": needs_follow_up,
        "upcoming_count": len(upcoming),
        "needs_follow_up_count": len(needs_follow_up),
    }


def build_analysis_prompt(interview: dict, interviewers: list[dict]) -> str:
    names = ", ".join(
        f"{person['name']} ({person['title']})" if person.get("title") else person["name"]
        for person in interviewers
    )
    context = [
        f"Company: {interview.get('application_company') or 'Unknown'}",
        f"Role: {interview.get('application_role') or 'Unknown'}",
        f"Interview type: {interview.get('interview_type') or 'video'}",
        f"Round: {interview.get('round') or 1}",
    ]
    if names:
        context.append(f"Interviewers: {names}")
    if interview.get("preparation_notes"):
        context.append(f"Preparation notes: {interview['preparation_notes']}")

    return (
        "Analyze this job interview transcript.\n\n"
        + "\n".join(context)
        + "\n\nTRANSCRIPT:\n"
        + str(interview.get("transcript") or "")
        + "\n\nReturn a JSON object with these keys:\n"
        '  "overallAssessment": short summary of how the interview went,\n'
        '  "keyMoments": list of notable moments,\n'
        '  "questionsAsked": list of questions the interviewers asked,\n'
        '  "interviewerSentiment": how the interviewers seemed to feel,\n'
        '  "followUpSteps": list of concrete next actions for the candidate,\n'
        '  "thankyouEmailPoints": points to mention in a thank-you email,\n'
        '  "nextRoundPreparation": what to prepare for the next round.'
    )


def follow_up_steps_from(analysis: dict) -> list:
    steps = analysis.get("followUpSteps", analysis.get("follow_up_steps"))
    if isinstance(steps, list):
        return steps
    if isinstance(steps, str) and steps.strip():
        return [steps.strip()]
    return []


async def analyze_interview(user_id: int, interview_id: int, *, transcript: str | None = None) -> dict:
    interview = await get_owned(user_id, interview_id)

    if transcript is not None:
        interview = {**interview, **(await update_interview(user_id, interview_id, {"transcript": transcript}))}

    text = (interview.get("transcript") or "").strip()
    if len(text) < MIN_TRANSCRIPT_CHARS:
        raise HTTPException(
            status_code=400,
            detail=f"Transcript must be at least {MIN_TRANSCRIPT_CHARS} characters.",
        )
    if not llm.is_configured():
        raise HTTPException(status_code=502, detail="AI provider is not configured.")

    interviewers = await repository.list_interviewers(interview_id)
    try:
        analysis = await llm.complete_json(
            prompt=build_analysis_prompt(interview, interviewers),
            system_prompt=ANALYSIS_SYSTEM_PROMPT,
            max_tokens=3000,
        )
    except llm.LLMError as e:
        logger.warning("Interview analysis failed for %s: %s", interview_id, e)
        raise HTTPException(status_code=502, detail=f"Interview analysis failed: {e}") from e

    row = await repository.save_analysis(
        interview_id,
        analysis=analysis,
        follow_up_steps=follow_up_steps_from(analysis),
    )
    return {"interview": row, "analysis": analysis}
