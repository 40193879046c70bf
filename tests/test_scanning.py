import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from alerts import repository as alerts_repository
from matching import fit, patterns
from matching import repository as patterns_repository
from opportunities import repository as opportunities_repository
from profiles import repository as profiles_repository
from scanning import feeds
from scanning.service import dedupe_by_url, filter_by_skills, is_stale, scan_user
from settings import repository as settings_repository
from sources import repository as sources_repository

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def _posting(url, title="Engineer", description="", posted_date=None, company="Acme"):
    return feeds.JobPosting(
        title=title,
        company=company,
        description=description,
        job_url=url,
        posted_date=posted_date,
    )


def test_filter_by_skills_is_case_insensitive_substring():
    postings = [
        _posting("a", title="Python Developer"),
        _posting("b", description="We love KUBERNETES"),
        _posting("c", title="Accountant"),
    ]
    kept = filter_by_skills(postings, ["python", "Kubernetes"])
    assert [p.job_url for p in kept] == ["a", "b"]


def test_filter_without_skills_keeps_everything():
    postings = [_posting("a"), _posting("b")]
    assert filter_by_skills(postings, []) == postings
    assert filter_by_skills(postings, ["  "]) == postings


def test_dedupe_by_url_keeps_last_occurrence():
    first = _posting("a", title="Old")
    second = _posting("b")
    third = _posting("a", title="New")

    deduped = dedupe_by_url([first, second, third])

    assert [p.job_url for p in deduped] == ["a", "b"]
    assert deduped[0].title == "New"


def test_is_stale():
    assert not is_stale(_posting("a"), max_age_days=7, now=NOW)
    assert not is_stale(_posting("a", posted_date=NOW - timedelta(days=7, hours=23)), max_age_days=7, now=NOW)
    assert is_stale(_posting("a", posted_date=NOW - timedelta(days=8)), max_age_days=7, now=NOW)


SCORES = {
    "Strong Match": 80,
    "Weak Match": 30,
    "Penalized": 55,
    "Penalized Strong": 70,
    "Race": 90,
    "After Failure": 70,
}


def _fit(score):
    return fit.FitScore(
        overall=score,
        skill_match=score,
        experience_match=score,
        seniority_match=score,
        title_match=score,
        industry_match=score,
        location_match=score,
    )


@pytest.fixture
def sweep(monkeypatch):
    """
    Fake every repository and outbound call the scan touches; the returned
    dict holds the feed contents and records every write.
    """
    state = {
        "profile": {"id": 1, "primary_skills": []},
        "settings": {"min_fit_score": 40, "max_job_age_days": 7},
        "postings": [],
        "blocked": set(),
        "existing_urls": set(),
        "patterns": [],
        "fetch_log": [],
        "inserted": [],
        "alerts": [],
    }

    async def fake_profile(user_id):
        return state["profile"]

    async def fake_settings(user_id):
        return state["settings"]

    async def fake_sources(user_id, *, enabled_only=False):
        return [{"id": 1, "name": "Good Board"}, {"id": 2, "name": "Broken Board"}]

    async def fake_fetch(source):
        if source["id"] == 2:
            raise feeds.FeedError("HTTP 500")
        return list(state["postings"])

    async def fake_record_fetch(source_id, *, error):
        state["fetch_log"].append((source_id, error))

    async def fake_blocked(user_id):
        return set(state["blocked"])

    async def fake_patterns(user_id):
        return state["patterns"]

    async def fake_existing(user_id, *, job_url, title, company):
        return {"id": 99} if job_url in state["existing_urls"] else None

    async def fake_analyze(profile, job):
        if job["title"] == "Explodes":
            raise RuntimeError("scoring crashed")
        return _fit(SCORES[job["title"]])

    async def fake_insert(**kwargs):
        if kwargs["job_url"] == "race":
            return None
        state["inserted"].append(kwargs)
        return {"id": len(state["inserted"])}

    async def fake_alert(**kwargs):
        state["alerts"].append(kwargs)
        return {"id": len(state["alerts"])}

    monkeypatch.setattr(profiles_repository, "get_profile", fake_profile)
    monkeypatch.setattr(settings_repository, "get_settings", fake_settings)
    monkeypatch.setattr(sources_repository, "list_sources", fake_sources)
    monkeypatch.setattr(sources_repository, "record_fetch", fake_record_fetch)
    monkeypatch.setattr(feeds, "fetch_source", fake_fetch)
    monkeypatch.setattr(opportunities_repository, "list_blocked_urls", fake_blocked)
    monkeypatch.setattr(opportunities_repository, "find_existing", fake_existing)
    monkeypatch.setattr(opportunities_repository, "insert_opportunity", fake_insert)
    monkeypatch.setattr(patterns_repository, "list_frequent_patterns", fake_patterns)
    monkeypatch.setattr(alerts_repository, "insert_alert", fake_alert)
    monkeypatch.setattr(fit, "analyze_fit", fake_analyze)
    return state


def test_scan_user_filters_scores_and_persists(sweep):
    now = datetime.now(timezone.utc)
    sweep["postings"] = [
        _posting("blocked", title="Strong Match"),
        _posting("existing", title="Strong Match"),
        _posting("stale", title="Strong Match", posted_date=now - timedelta(days=30)),
        _posting("weak", title="Weak Match"),
        _posting("penalized", title="Penalized", company="Shady Corp"),
        _posting("penalized-strong", title="Penalized Strong", company="Shady Corp"),
        _posting("strong", title="Strong Match", posted_date=now - timedelta(days=1)),
        _posting("race", title="Race"),
        _posting("explodes", title="Explodes"),
        _posting("after", title="After Failure"),
    ]
    sweep["blocked"] = {"blocked"}
    sweep["existing_urls"] = {"existing"}
    # Shady Corp rejected 10 times: full 20 point company penalty.
    sweep["patterns"] = [{"pattern_type": patterns.COMPANY, "pattern_value": "Shady Corp", "frequency": 10}]

    result = asyncio.run(scan_user(1))

    assert result.sources_scanned == 2
    assert result.sources_failed == 1
    assert result.fetched == 10
    assert result.unique == 10
    assert result.skipped_blocked == 1
    assert result.skipped_stale == 1
    assert result.skipped_duplicate == 2
    assert result.below_threshold == 2
    assert result.errors == 1
    assert result.added == 3
    assert result.added_ids == [1, 2, 3]

    assert sweep["fetch_log"] == [(1, None), (2, "HTTP 500")]
    assert [row["job_url"] for row in sweep["inserted"]] == ["penalized-strong", "strong", "after"]
    assert [row["fit_score"] for row in sweep["inserted"]] == [50, 80, 70]
    assert sweep["inserted"][0]["fit_details"]["rejection_penalty"] == 20
    assert sweep["inserted"][1]["fit_details"]["rejection_penalty"] == 0
    assert [alert["alert_type"] for alert in sweep["alerts"]] == ["NEW_JOB"] * 3
    assert sweep["alerts"][0] == {
        "user_id": 1,
        "message": "New job match: Penalized Strong at Shady Corp (70% fit)",
        "alert_type": "NEW_JOB",
        "opportunity_id": 1,
    }


def test_scan_user_inserts_at_threshold_without_penalty(sweep):
    sweep["postings"] = [
        _posting("penalized", title="Penalized"),
        _posting("after", title="After Failure"),
        _posting("explodes", title="Explodes"),
        _posting("strong", title="Strong Match"),
    ]
    sweep["settings"] = {"min_fit_score": 55, "max_job_age_days": 7}

    result = asyncio.run(scan_user(1))

    assert [row["job_url"] for row in sweep["inserted"]] == ["penalized", "after", "strong"]
    assert [row["fit_score"] for row in sweep["inserted"]] == [55, 70, 80]
    assert result.errors == 1
    assert result.added == 3
    assert [alert["opportunity_id"] for alert in sweep["alerts"]] == [1, 2, 3]


def test_failing_source_contributes_nothing(sweep):
    result = asyncio.run(scan_user(1))

    assert result.sources_failed == 1
    assert result.fetched == 0
    assert result.added == 0
    assert sweep["inserted"] == []


def test_scan_user_skill_filter_uses_profile(sweep):
    sweep["profile"] = {"id": 1, "primary_skills": ["kubernetes"]}
    sweep["postings"] = [
        _posting("k8s", title="Strong Match", description="Run Kubernetes"),
        _posting("other", title="Strong Match", description="Spreadsheets"),
    ]

    result = asyncio.run(scan_user(1))

    assert result.matched_skills == 1
    assert [row["job_url"] for row in sweep["inserted"]] == ["k8s"]


def test_scan_unknown_user_raises(sweep):
    sweep["profile"] = None

    with pytest.raises(LookupError):
        asyncio.run(scan_user(404))
