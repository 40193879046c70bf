"""
Learning from "bad match" feedback.

A rejected opportunity records patterns (title keywords, company, source,
location, low-score bucket). Patterns seen at least twice reduce the fit score
of future postings that share them.
"""

from __future__ import annotations

import re

from . import repository

TITLE_KEYWORD = "REJECTED_TITLE_KEYWORD"
COMPANY = "REJECTED_COMPANY"
SOURCE = "REJECTED_SOURCE"
LOCATION = "REJECTED_LOCATION"
LOW_SCORE = "REJECTED_LOW_SCORE"

PENALTY_POINTS = {
    TITLE_KEYWORD: 15,
    COMPANY: 20,
    SOURCE: 10,
    LOCATION: 12,
}
MAX_PENALTY = 50

_STOP_WORDS = {
    "engineer", "specialist", "analyst", "manager", "developer",
    "consultant", "senior", "junior", "lead", "principal", "staff",
    "the", "a", "an", "and", "or", "for", "in", "at", "to",
}


def title_keywords(title: str) -> list[str]:
    words = re.sub(r"[^a-z0-9\s]", " ", (title or "").lower()).split()
    keywords: list[str] = []
    for word in words:
        if len(word) > 3 and word not in _STOP_WORDS and word not in keywords:
            keywords.append(word)
    return keywords


def extract_patterns(opportunity: dict) -> list[tuple[str, str]]:
    patterns = [(TITLE_KEYWORD, keyword) for keyword in title_keywords(str(opportunity.get("title") or ""))]

    if opportunity.get("company"):
        patterns.append((COMPANY, str(opportunity["company"])))
    if opportunity.get("source"):
        patterns.append((SOURCE, str(opportunity["source"])))
    if opportunity.get("location"):
        patterns.append((LOCATION, str(opportunity["location"])))

    fit_score = opportunity.get("fit_score")
    if fit_score is not None and int(fit_score) < 50:
        patterns.append((LOW_SCORE, str(int(fit_score) // 10 * 10)))
    return patterns


def penalty_for(patterns: list[dict], job: dict) -> int:
    title = str(job.get("title") or "").lower()
    location = str(job.get("location") or "").lower()
    company = job.get("company")
    source = job.get("source")

    total = 0.0
    for pattern in patterns:
        pattern_type = pattern["pattern_type"]
        value = str(pattern["pattern_value"])
        weight = min(int(pattern["frequency"]) / 10, 1.0)

        if pattern_type == TITLE_KEYWORD:
            hit = value.lower() in title
        elif pattern_type == COMPANY:
            hit = company == value
        elif pattern_type == SOURCE:
            hit = source == value
        elif pattern_type == LOCATION:
            hit = bool(location) and value.lower() in location
        else:
            hit = False

        if hit:
            total += PENALTY_POINTS[pattern_type] * weight
    return int(round(min(total, MAX_PENALTY)))


async def learn_from_rejection(user_id: int, opportunity: dict) -> int:
    patterns = extract_patterns(opportunity)
    await repository.upsert_patterns(user_id, patterns)
    return len(patterns)


async def rejection_penalty(user_id: int, job: dict, *, patterns: list[dict] | None = None) -> int:
    if patterns is None:
        patterns = await repository.list_frequent_patterns(user_id)
    if not patterns:
        return 0
    return penalty_for(patterns, job)


async def rejection_stats(user_id: int) -> dict:
    rows = await repository.list_patterns(user_id)
    keywords = [r for r in rows if r["pattern_type"] == TITLE_KEYWORD][:10]
    companies = [r for r in rows if r["pattern_type"] == COMPANY][:10]
    return {
        "total_patterns": len(rows),
        "top_rejected_keywords": [{"keyword": r["pattern_value"], "count": r["frequency"]} for r in keywords],
        "top_rejected_companies": [{"company": r["pattern_value"], "count": r["frequency"]} for r in companies],
    }
