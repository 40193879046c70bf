from matching import fit


def test_rule_based_fit_weights():
    profile = {"primary_skills": ["Python", "AWS"], "years_of_experience": 3}
    job = {"title": "Backend Engineer", "description": "We use python and docker"}

    score = fit.rule_based_fit(profile, job)

    assert score.skill_match == 50
    assert score.experience_match == 30
    assert score.seniority_match == 50
    assert score.title_match == 50
    # 0.3*50 + 0.2*30 + 0.1*50 + 0.3*50 + 2.5 + 2.5
    assert score.overall == 46
    assert score.matched_skills == ["Python"]
    assert score.source == "rules"


def test_rule_based_fit_without_skills_or_years():
    score = fit.rule_based_fit({}, {"title": "Anything", "description": ""})
    assert score.skill_match == 0
    assert score.experience_match == 50


def test_seniority_mismatch_scores_60():
    profile = {"seniority_level": "Junior"}
    score = fit.rule_based_fit(profile, {"title": "Senior Data Engineer"})
    assert score.seniority_match == 60

    score = fit.rule_based_fit({"seniority_level": "Senior"}, {"title": "Senior Data Engineer"})
    assert score.seniority_match == 100


def test_title_match_score():
    assert fit.title_match_score([], "Whatever") == 50
    assert fit.title_match_score(["Security Engineer"], "Senior Security Engineer") == 100
    assert fit.title_match_score(["Cloud Security Architect"], "Marketing Coordinator") == 10
    assert fit.title_match_score(["Cloud Security Architect"], "Security Architect, Cloud") == 85


def test_clamp_score():
    assert fit.clamp_score(140) == 100
    assert fit.clamp_score(-3) == 0
    assert fit.clamp_score("72.6") == 73
    assert fit.clamp_score(None) == 0
    assert fit.clamp_score(float("nan")) == 0


def test_fit_from_llm_payload_accepts_camel_case_and_clamps():
    score = fit.fit_from_llm_payload(
        {
            "overall": 120,
            "skillMatch": 80,
            "experienceMatch": "65",
            "titleMatch": -5,
            "matchedSkills": ["Go", " ", "SQL"],
            "reasoning": "Strong backend overlap",
        }
    )
    assert score.overall == 100
    assert score.skill_match == 80
    assert score.experience_match == 65
    assert score.title_match == 0
    assert score.seniority_match == 0
    assert score.matched_skills == ["Go", "SQL"]
    assert score.source == "llm"
