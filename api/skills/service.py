"""
Skill extraction and the shared skill catalogue.

Extraction uses the configured LLM; without one (or when it fails) a keyword
scan over SKILL_CATEGORIES is used instead.
"""

from __future__ import annotations

import re
from typing import Any

from fastapi import HTTPException

from core import llm
from core.logger import get_logger
from profiles import repository as profiles_repository

from . import repository

logger = get_logger(__name__)

SKILL_CATEGORIES: dict[str, list[str]] = {
    "Programming Language": [
        "JavaScript", "TypeScript", "Python", "Java", "Go", "Rust", "C++", "C#",
        "Ruby", "PHP", "Swift", "Kotlin", "Scala", "R", "MATLAB",
    ],
    "Frontend Framework": ["React", "Vue", "Angular", "Svelte", "Next.js", "Nuxt", "Remix", "Astro", "SolidJS"],
    "Backend Framework": [
        "Node.js", "Express", "NestJS", "Django", "Flask", "FastAPI", "Spring Boot", "Rails", "Laravel", "ASP.NET",
    ],
    "Database": [
        "PostgreSQL", "MySQL", "MongoDB", "Redis", "Elasticsearch", "DynamoDB", "Cassandra", "SQLite",
        "Oracle", "SQL Server",
    ],
    "Cloud Platform": ["AWS", "Azure", "GCP", "Google Cloud", "DigitalOcean", "Heroku", "Vercel", "Cloudflare"],
    "DevOps": [
        "Docker", "Kubernetes", "Terraform", "Ansible", "Jenkins", "GitLab CI", "GitHub Actions", "CircleCI", "ArgoCD",
    ],
    "Security": [
        "OWASP", "Penetration Testing", "SIEM", "SOC", "IAM", "Zero Trust", "Encryption", "Compliance", "DLP", "SASE",
    ],
    "Data & ML": [
        "Machine Learning", "Deep Learning", "TensorFlow", "PyTorch", "Pandas", "NumPy", "Spark", "Hadoop",
        "Data Engineering",
    ],
    "Soft Skill": [
        "Communication", "Leadership", "Problem Solving", "Teamwork", "Time Management", "Agile", "Scrum",
        "Project Management",
    ],
}

EXTRA_CATEGORIES = ("Tool", "Methodology", "Domain Knowledge", "Other")

RISING_RATIO = 1.2
DECLINING_RATIO = 0.8
RISING_WITHOUT_HISTORY = 5

_EXTRACTION_PROMPT = """Extract every technical and soft skill mentioned or clearly implied by this job posting.

Job title: {title}
Company: {company}

Description:
{description}
{requirements}
Reply with JSON only:
{{"skills": [{{"name": "canonical capitalization, e.g. JavaScript",
              "category": one of {categories},
              "subcategory": str or null,
              "isRequired": true for must-have, false for nice-to-have,
              "proficiencyLevel": "Beginner/Intermediate/Advanced/Expert" or null,
              "yearsRequired": int or null,
              "aliases": ["other names, e.g. JS"]}}]}}

Normalize names (k8s -> Kubernetes), include methodologies and domains, skip job titles, no duplicates."""


def normalize_name(name: str) -> str:
    return " ".join((name or "").lower().split())


def _word_re(term: str) -> re.Pattern:
    return re.compile(r"(?<![\w+#.])" + re.escape(term) + r"(?![\w+#])")


def keyword_skills(text: str) -> list[dict]:
    """
    Catalogue entries that occur as whole words in `text`, case-insensitively.
    """
    haystack = (text or "").lower()
    found: list[dict] = []
    seen: set[str] = set()
    for category, names in SKILL_CATEGORIES.items():
        for name in names:
            key = name.lower()
            if key not in seen and _word_re(key).search(haystack):
                seen.add(key)
                found.append({"name": name, "category": category, "is_required": True})
    return found


def _optional_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_skill(item: dict) -> dict | None:
    name = str(item.get("name") or "").strip()
    if not name:
        return None
    required = item.get("isRequired", item.get("is_required", True))
    return {
        "name": name,
        "normalized_name": normalize_name(name),
        "category": str(item.get("category") or "Other").strip() or "Other",
        "subcategory": (str(item["subcategory"]).strip() or None) if item.get("subcategory") else None,
        "is_required": bool(required),
        "proficiency_level": item.get("proficiencyLevel") or item.get("proficiency_level"),
        "years_required": _optional_int(item.get("yearsRequired", item.get("years_required"))),
        "aliases": sorted({normalize_name(str(alias)) for alias in item.get("aliases") or [] if str(alias).strip()}),
    }


def dedupe_skills(skills: list[dict]) -> list[dict]:
    out: dict[str, dict] = {}
    for item in skills:
        skill = normalize_skill(item)
        if skill is not None and skill["normalized_name"] not in out:
            out[skill["normalized_name"]] = skill
    return list(out.values())


def classify_trend(recent: int, previous: int) -> str:
    if previous > 0:
        ratio = recent / previous
        if ratio > RISING_RATIO:
            return "rising"
        if ratio < DECLINING_RATIO:
            return "declining"
        return "stable"
    if recent > RISING_WITHOUT_HISTORY:
        return "rising"
    return "stable"


async def extract_skills(
    *,
    description: str,
    title: str,
    company: str | None = None,
    requirements: str | None = None,
) -> tuple[list[dict], str]:
    """
    Returns (skills, method) where method is "ai" or "keyword".
    """
    if llm.is_configured():
        categories = "/".join((*SKILL_CATEGORIES, *EXTRA_CATEGORIES))
        prompt = _EXTRACTION_PROMPT.format(
            title=title,
            company=company or "Not specified",
            description=description,
            requirements=f"\nRequirements:\n{requirements}\n" if requirements else "",
            categories=categories,
        )
        try:
            data = await llm.complete_json(prompt=prompt, max_tokens=4096, temperature=0.2)
            items = [item for item in data.get("skills") or [] if isinstance(item, dict)]
            return dedupe_skills(items), "ai"
        except llm.LLMError as exc:
            logger.warning("AI skill extraction failed for %r, using keywords: %s", title, exc)

    return dedupe_skills(keyword_skills(f"{description} {requirements or ''}")), "keyword"


async def extract_and_save(
    *,
    description: str,
    title: str,
    company: str | None = None,
    requirements: str | None = None,
    opportunity_id: int | None = None,
) -> dict:
    skills, method = await extract_skills(
        description=description,
        title=title,
        company=company,
        requirements=requirements,
    )
    saved, updated = await repository.save_sightings(
        skills,
        job_title=title,
        company=company,
        opportunity_id=opportunity_id,
    )
    return {"skills": skills, "method": method, "saved_count": saved, "updated_count": updated}


async def build_from_opportunities(user_id: int, *, limit: int = 100) -> dict:
    opportunities = await repository.list_opportunities_for_extraction(user_id, limit=limit)
    processed = 0
    total_saved = 0
    total_updated = 0
    errors = 0
    for opportunity in opportunities:
        try:
            result = await extract_and_save(
                description=opportunity.get("description") or "",
                title=opportunity["title"],
                company=opportunity.get("company"),
                requirements=opportunity.get("requirements"),
                opportunity_id=opportunity["id"],
            )
        except Exception:
            logger.exception("Skill extraction failed for opportunity %s", opportunity["id"])
            errors += 1
            continue
        processed += 1
        total_saved += result["saved_count"]
        total_updated += result["updated_count"]

    return {"processed": processed, "total_saved": total_saved, "total_updated": total_updated, "errors": errors}


async def update_trends() -> dict:
    rows = await repository.sighting_counts()
    trends = [(row["id"], classify_trend(row["recent"], row["previous"])) for row in rows]
    await repository.set_trends(trends)

    summary = {"rising": 0, "stable": 0, "declining": 0}
    for _, trend in trends:
        summary[trend] += 1
    logger.info("Updated demand trends for %d skills", len(trends))
    return {"updated": len(trends), **summary}


async def categories() -> list[dict]:
    counts = await repository.category_counts()
    names = [*SKILL_CATEGORIES, *EXTRA_CATEGORIES]
    return [
        {
            "name": name,
            "sort_order": index,
            "examples": SKILL_CATEGORIES.get(name, []),
            "skill_count": counts.get(name, 0),
        }
        for index, name in enumerate(names)
    ]


async def match_user_skills(user_id: int) -> dict:
    profile = await profiles_repository.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found.")

    user_skills = [
        *(profile.get("primary_skills") or []),
        *(profile.get("secondary_skills") or []),
    ]
    normalized = sorted({normalize_name(skill) for skill in user_skills if skill.strip()})
    return {
        "matched": await repository.matching_skills(normalized),
        "recommended": await repository.recommended_skills(normalized),
    }
