import asyncio

from core import llm
from skills import repository, service


def test_classify_trend():
    assert service.classify_trend(13, 10) == "rising"
    assert service.classify_trend(7, 10) == "declining"
    assert service.classify_trend(10, 10) == "stable"
    assert service.classify_trend(6, 0) == "rising"
    assert service.classify_trend(5, 0) == "stable"


def test_keyword_skills_match_whole_words():
    found = service.keyword_skills("We use PostgreSQL, Docker and React. Javascripting is not a skill.")
    names = [skill["name"] for skill in found]

    assert "PostgreSQL" in names
    assert "Docker" in names
    assert "React" in names
    assert "JavaScript" not in names
    assert next(s for s in found if s["name"] == "Docker")["category"] == "DevOps"


def test_normalize_skill_merges_aliases_and_defaults():
    skill = service.normalize_skill({"name": " Kubernetes ", "aliases": ["K8s", "k8s ", ""], "isRequired": False})

    assert skill["normalized_name"] == "kubernetes"
    assert skill["aliases"] == ["k8s"]
    assert skill["category"] == "Other"
    assert skill["is_required"] is False
    assert service.normalize_skill({"name": "  "}) is None


def test_dedupe_keeps_first_occurrence():
    skills = service.dedupe_skills(
        [
            {"name": "Python", "category": "Programming Language"},
            {"name": "python", "category": "Other"},
        ]
    )
    assert len(skills) == 1
    assert skills[0]["category"] == "Programming Language"


def test_extraction_falls_back_to_keywords_when_llm_fails(monkeypatch):
    async def failing_complete(**kwargs):
        raise llm.LLMError("rate limited")

    monkeypatch.setattr(llm, "is_configured", lambda: True)
    monkeypatch.setattr(llm, "complete_json", failing_complete)

    skills, method = asyncio.run(service.extract_skills(description="Terraform on AWS", title="SRE"))

    assert method == "keyword"
    assert {skill["name"] for skill in skills} == {"Terraform", "AWS"}


def test_update_trends_summarizes(monkeypatch):
    stored = []

    async def fake_counts():
        return [
            {"id": 1, "recent": 12, "previous": 4},
            {"id": 2, "recent": 2, "previous": 4},
            {"id": 3, "recent": 1, "previous": 0},
        ]

    async def fake_set(trends):
        stored.extend(trends)

    monkeypatch.setattr(repository, "sighting_counts", fake_counts)
    monkeypatch.setattr(repository, "set_trends", fake_set)

    summary = asyncio.run(service.update_trends())

    assert summary == {"updated": 3, "rising": 1, "stable": 1, "declining": 1}
    assert stored == [(1, "rising"), (2, "declining"), (3, "stable")]


def test_extract_action_requires_description(client):
    resp = client.post("/skills", json={"action": "extract", "job_title": "SRE"})
    assert resp.status_code == 400
