"""
Job-scanning sweep.

Flow for one user:
1) Load profile + scan settings
2) Fetch every enabled source (a failing source contributes nothing)
3) Keep postings that mention at least one profile skill
4) De-duplicate by job URL
5) Skip blocked, already-seen and stale postings
6) Score fit, subtract the learned rejection penalty, persist + alert when
   the adjusted score reaches the user's threshold
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

from alerts import repository as alerts_repository
from core.logger import get_logger
from matching import fit, patterns
from matching import repository as patterns_repository
from opportunities import repository as opportunities_repository
from profiles import repository as profiles_repository
from settings import repository as settings_repository
from sources import repository as sources_repository

from . import feeds

logger = get_logger(__name__)

DEFAULT_MIN_FIT_SCORE = 40
DEFAULT_MAX_JOB_AGE_DAYS = 7


@dataclass
class ScanResult:
    user_id: int
    sources_scanned: int = 0
    sources_failed: int = 0
    fetched: int = 0
    matched_skills: int = 0
    unique: int = 0
    added: int = 0
    skipped_blocked: int = 0
    skipped_duplicate: int = 0
    skipped_stale: int = 0
    below_threshold: int = 0
    errors: int = 0
    added_ids: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def filter_by_skills(postings: list[feeds.JobPosting], skills: list[str]) -> list[feeds.JobPosting]:
    needles = [skill.lower() for skill in skills if skill and skill.strip()]
    if not needles:
        return list(postings)
    return [posting for posting in postings if any(needle in posting.search_text() for needle in needles)]


def dedupe_by_url(postings: list[feeds.JobPosting]) -> list[feeds.JobPosting]:
    # Last occurrence wins; first-seen order is kept.
    by_url: dict[str, feeds.JobPosting] = {}
    for posting in postings:
        by_url[posting.job_url] = posting
    return list(by_url.values())


def is_stale(posting: feeds.JobPosting, *, max_age_days: int, now: datetime | None = None) -> bool:
    if posting.posted_date is None:
        return False
    # Whole days elapsed, so a posting is stale from day max_age_days + 1.
    age = (now or _utc_now()) - posting.posted_date
    return age.days > max_age_days


async def fetch_all_sources(user_id: int, result: ScanResult) -> list[feeds.JobPosting]:
    sources = await sources_repository.list_sources(user_id, enabled_only=True)
    logger.info("Scanning %d enabled sources for user %s", len(sources), user_id)

    postings: list[feeds.JobPosting] = []
    for source in sources:
        result.sources_scanned += 1
        try:
            fetched = await feeds.fetch_source(source)
        except feeds.FeedError as exc:
            result.sources_failed += 1
            logger.warning("[%s] fetch failed: %s", source["name"], exc)
            await sources_repository.record_fetch(int(source["id"]), error=str(exc)[:500])
            continue
        logger.info("[%s] fetched %d postings", source["name"], len(fetched))
        await sources_repository.record_fetch(int(source["id"]), error=None)
        postings.extend(fetched)
    return postings


async def _process_posting(
    *,
    user_id: int,
    profile: dict,
    posting: feeds.JobPosting,
    min_fit_score: int,
    learned_patterns: list[dict],
    result: ScanResult,
) -> None:
    existing = await opportunities_repository.find_existing(
        user_id,
        job_url=posting.job_url,
        title=posting.title,
        company=posting.company,
    )
    if existing is not None:
        result.skipped_duplicate += 1
        return

    job = posting.to_dict()
    score = await fit.analyze_fit(profile, job)
    penalty = patterns.penalty_for(learned_patterns, job) if learned_patterns else 0
    adjusted = max(0, score.overall - penalty)

    logger.info(
        "%s at %s: %d%% fit (title %d, skill %d, exp %d)%s",
        posting.title,
        posting.company,
        score.overall,
        score.title_match,
        score.skill_match,
        score.experience_match,
        f" - penalty {penalty} = {adjusted}" if penalty else "",
    )
    if adjusted < min_fit_score:
        result.below_threshold += 1
        return

    row = await opportunities_repository.insert_opportunity(
        user_id=user_id,
        title=posting.title,
        company=posting.company,
        description=posting.description,
        requirements=posting.requirements or None,
        location=posting.location,
        salary=posting.salary,
        job_url=posting.job_url,
        source=posting.source or "Unknown",
        posted_date=posting.posted_date,
        fit_score=adjusted,
        fit_details={**score.to_dict(), "rejection_penalty": penalty},
    )
    if row is None:
        # Lost a race with a concurrent scan for the same URL.
        result.skipped_duplicate += 1
        return

    await alerts_repository.insert_alert(
        user_id=user_id,
        message=f"New job match: {posting.title} at {posting.company} ({score.overall}% fit)",
        alert_type="NEW_JOB",
        opportunity_id=int(row["id"]),
    )
    result.added += 1
    result.added_ids.append(int(row["id"]))


async def scan_user(user_id: int) -> ScanResult:
    profile = await profiles_repository.get_profile(user_id)
    settings = await settings_repository.get_settings(user_id)
    if profile is None or settings is None:
        raise LookupError(f"User {user_id} not found.")

    min_fit_score = settings.get("min_fit_score")
    min_fit_score = DEFAULT_MIN_FIT_SCORE if min_fit_score is None else int(min_fit_score)
    max_age_days = int(settings.get("max_job_age_days") or DEFAULT_MAX_JOB_AGE_DAYS)
    result = ScanResult(user_id=user_id)

    postings = await fetch_all_sources(user_id, result)
    result.fetched = len(postings)

    skills = list(profile.get("primary_skills") or []) or fit.profile_skills(profile)
    postings = filter_by_skills(postings, skills)
    result.matched_skills = len(postings)

    postings = dedupe_by_url(postings)
    result.unique = len(postings)
    logger.info(
        "User %s: %d fetched, %d match skills, %d unique (min fit %d, max age %d days)",
        user_id,
        result.fetched,
        result.matched_skills,
        result.unique,
        min_fit_score,
        max_age_days,
    )

    blocked = await opportunities_repository.list_blocked_urls(user_id)
    learned_patterns = await patterns_repository.list_frequent_patterns(user_id)
    now = _utc_now()

    for posting in postings:
        if posting.job_url in blocked:
            result.skipped_blocked += 1
            continue
        if is_stale(posting, max_age_days=max_age_days, now=now):
            result.skipped_stale += 1
            continue
        try:
            await _process_posting(
                user_id=user_id,
                profile=profile,
                posting=posting,
                min_fit_score=min_fit_score,
                learned_patterns=learned_patterns,
                result=result,
            )
        except Exception:
            result.errors += 1
            logger.exception("Failed to process posting %s", posting.job_url)

    logger.info("Scan complete for user %s: added %d", user_id, result.added)
    return result


async def scan_user_background(user_id: int) -> None:
    """
    Entry point for FastAPI BackgroundTasks (nobody awaits the result).
    """
    try:
        await scan_user(user_id)
    except Exception:
        logger.exception("Background scan failed for user %s", user_id)
