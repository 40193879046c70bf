from matching import patterns


def test_extract_patterns():
    opportunity = {
        "title": "Senior Security Analyst - Cloud",
        "company": "Acme",
        "source": "Remotive",
        "location": "Madrid",
        "fit_score": 35,
    }
    found = patterns.extract_patterns(opportunity)

    assert (patterns.TITLE_KEYWORD, "security") in found
    assert (patterns.TITLE_KEYWORD, "cloud") in found
    assert (patterns.TITLE_KEYWORD, "senior") not in found
    assert (patterns.COMPANY, "Acme") in found
    assert (patterns.SOURCE, "Remotive") in found
    assert (patterns.LOCATION, "Madrid") in found
    assert (patterns.LOW_SCORE, "30") in found


def test_no_low_score_pattern_at_50_or_above():
    found = patterns.extract_patterns({"title": "Engineer", "fit_score": 50})
    assert all(kind != patterns.LOW_SCORE for kind, _ in found)


def _pattern(kind, value, frequency):
    return {"pattern_type": kind, "pattern_value": value, "frequency": frequency}


def test_penalty_weights_by_frequency():
    learned = [
        _pattern(patterns.TITLE_KEYWORD, "security", 10),
        _pattern(patterns.COMPANY, "Acme", 5),
        _pattern(patterns.SOURCE, "Other Board", 10),
    ]
    job = {"title": "Security Engineer", "company": "Acme", "source": "Remotive"}
    # 15 * 1.0 + 20 * 0.5
    assert patterns.penalty_for(learned, job) == 25


def test_penalty_is_capped():
    learned = [
        _pattern(patterns.TITLE_KEYWORD, "security", 20),
        _pattern(patterns.TITLE_KEYWORD, "cloud", 20),
        _pattern(patterns.COMPANY, "Acme", 20),
        _pattern(patterns.LOCATION, "madrid", 20),
    ]
    job = {"title": "Cloud Security Engineer", "company": "Acme", "location": "Madrid, Spain"}
    assert patterns.penalty_for(learned, job) == patterns.MAX_PENALTY


def test_low_score_patterns_never_penalize():
    learned = [_pattern(patterns.LOW_SCORE, "30", 10)]
    assert patterns.penalty_for(learned, {"title": "Anything"}) == 0
