"""
Candidate-to-job fit scoring.

`analyze_fit` asks the configured LLM for a structured assessment and falls
back to `rule_based_fit` when no provider is configured or the call fails.
Every sub-score is an integer in [0, 100].
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from core import llm
from core.logger import get_logger

logger = get_logger(__name__)

GENERIC_TITLE_WORDS = {
    "engineer",
    "specialist",
    "analyst",
    "manager",
    "developer",
    "consultant",
    "senior",
    "junior",
    "lead",
    "principal",
}

DIFFERENT_ROLE_TERMS = (
    "data engineer",
    "software engineer",
    "devops",
    "qa",
    "legal",
    "sales",
    "marketing",
    "hr",
    "product manager",
)

SENIOR_JOB_TERMS = ("senior", "lead", "principal")
SENIOR_LEVELS = {"senior", "lead", "principal"}

_SCORE_FIELDS = (
    "overall",
    "skill_match",
    "experience_match",
    "seniority_match",
    "title_match",
    "industry_match",
    "location_match",
)


@dataclass
class FitScore:
    overall: int
    skill_match: int
    experience_match: int
    seniority_match: int
    title_match: int
    industry_match: int
    location_match: int
    reasoning: str = ""
    matched_skills: list[str] = field(default_factory=list)
    missing_skills: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    concerns: list[str] = field(default_factory=list)
    source: str = "rules"

    def to_dict(self) -> dict:
        return asdict(self)


def clamp_score(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number:  # NaN
        return 0
    return int(round(min(100.0, max(0.0, number))))


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


def profile_skills(profile: dict) -> list[str]:
    skills: list[str] = []
    for key in ("primary_skills", "secondary_skills", "learning_skills"):
        skills.extend(_str_list(profile.get(key)))
    return skills


def job_text(job: dict) -> str:
    return " ".join(
        str(job.get(key) or "") for key in ("title", "description", "requirements")
    ).lower()


def title_match_score(preferred_titles: list[str], job_title: str) -> int:
    if not preferred_titles:
        return 50

    job_title_lower = (job_title or "").lower()
    score = 10
    for preferred in preferred_titles:
        preferred_lower = preferred.lower()
        if preferred_lower in job_title_lower or job_title_lower in preferred_lower:
            return 100

        words = [
            word for word in preferred_lower.split(" ")
            if len(word) > 3 and word not in GENERIC_TITLE_WORDS
        ]
        matched = [word for word in words if word in job_title_lower]

        if matched and len(matched) >= len(words) * 0.8:
            score = max(score, 85)
        elif matched and len(matched) >= len(words) * 0.5:
            score = max(score, 50)
        elif any(term in job_title_lower for term in DIFFERENT_ROLE_TERMS):
            score = min(score, 15)
    return score


def rule_based_fit(profile: dict, job: dict) -> FitScore:
    text = job_text(job)

    skills = profile_skills(profile)
    matched = [skill for skill in skills if skill.lower() in text]
    skill_match = round(len(matched) / len(skills) * 100) if skills else 0

    years = profile.get("years_of_experience") or 0
    experience_match = min(100, int(years) * 10) if years else 50

    seniority_match = 50
    seniority_level = str(profile.get("seniority_level") or "").strip()
    if seniority_level:
        senior_role = any(term in text for term in SENIOR_JOB_TERMS)
        senior_candidate = seniority_level.lower() in SENIOR_LEVELS
        seniority_match = 100 if senior_role == senior_candidate else 60

    title_match = title_match_score(_str_list(profile.get("job_titles")), str(job.get("title") or ""))

    # industry and location are neutral (50) in the weighting
    overall = round(
        skill_match * 0.30
        + experience_match * 0.20
        + seniority_match * 0.10
        + title_match * 0.30
        + 50 * 0.05
        + 50 * 0.05
    )

    return FitScore(
        overall=min(100, overall),
        skill_match=skill_match,
        experience_match=experience_match,
        seniority_match=seniority_match,
        title_match=title_match,
        industry_match=70,
        location_match=70,
        reasoning=f"Match based on {len(matched)} matching skills and {years or 0} years of experience.",
        matched_skills=matched,
        recommendations=[
            "Review the job requirements carefully",
            "Highlight your matching skills in your application",
        ],
        strengths=matched[:3],
        source="rules",
    )


def fit_from_llm_payload(data: dict) -> FitScore:
    """
    Map the model's camelCase/snake_case JSON onto a clamped FitScore.
    """
    def pick(snake: str) -> Any:
        parts = snake.split("_")
        camel = parts[0] + "".join(part.title() for part in parts[1:])
        return data.get(snake, data.get(camel))

    scores = {name: clamp_score(pick(name)) for name in _SCORE_FIELDS}
    return FitScore(
        **scores,
        reasoning=str(pick("reasoning") or "Match analysis completed"),
        matched_skills=_str_list(pick("matched_skills")),
        missing_skills=_str_list(pick("missing_skills")),
        recommendations=_str_list(pick("recommendations")),
        strengths=_str_list(pick("strengths")),
        concerns=_str_list(pick("concerns")),
        source="llm",
    )


def _format_list(values: list[str]) -> str:
    return ", ".join(values) if values else "Not specified"


def build_fit_prompt(profile: dict, job: dict) -> str:
    history_lines = []
    for item in profile.get("work_history") or []:
        if isinstance(item, dict):
            history_lines.append(
                f"- {item.get('role', '')} at {item.get('company', '')} ({item.get('duration', '')})"
            )

    return f"""Assess how well this candidate fits the job posting.

Candidate
- Primary skills: {_format_list(_str_list(profile.get("primary_skills")))}
- Secondary skills: {_format_list(_str_list(profile.get("secondary_skills")))}
- Learning: {_format_list(_str_list(profile.get("learning_skills")))}
- Years of experience: {profile.get("years_of_experience") or "Not specified"}
- Seniority: {profile.get("seniority_level") or "Not specified"}
- Target titles: {_format_list(_str_list(profile.get("job_titles")))}
- Industries: {_format_list(_str_list(profile.get("industries")))}
- Work preference: {profile.get("work_preference") or "Not specified"}
- Location: {profile.get("location") or "Not specified"}
- Summary: {profile.get("summary") or "Not provided"}
Work history:
{chr(10).join(history_lines) or "- Not provided"}

Job
- Title: {job.get("title") or ""}
- Company: {job.get("company") or ""}
- Location: {job.get("location") or "Not specified"}
- Salary: {job.get("salary") or "Not specified"}
Description:
{str(job.get("description") or "")[:4000]}
Requirements:
{str(job.get("requirements") or "")[:2000]}

Weighting: skills 40, experience 15, title 20, seniority 10, location 10, industry 5.
Credit transferable skills; remote roles score high on location.

Reply with JSON only:
{{"overall": 0-100, "skillMatch": 0-100, "experienceMatch": 0-100, "seniorityMatch": 0-100,
"titleMatch": 0-100, "industryMatch": 0-100, "locationMatch": 0-100, "reasoning": "...",
"matchedSkills": [], "missingSkills": [], "recommendations": [], "strengths": [], "concerns": []}}"""


async def analyze_fit(profile: dict, job: dict) -> FitScore:
    if not llm.is_configured():
        return rule_based_fit(profile, job)

    try:
        data = await llm.complete_json(
            prompt=build_fit_prompt(profile, job),
            max_tokens=2048,
            temperature=0.3,
        )
    except llm.LLMError as exc:
        logger.warning("LLM fit scoring failed, using rules: %s", exc)
        return rule_based_fit(profile, job)
    return fit_from_llm_payload(data)
