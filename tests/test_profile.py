from core import llm
from profiles import repository
from profiles.service import normalize_extracted_profile


def test_normalize_extracted_profile():
    data = {
        "name": " Ada Lovelace ",
        "primarySkills": ["Python", "", "AWS"],
        "yearsOfExperience": "8",
        "seniorityLevel": "senior",
        "workHistory": [
            {"company": "Acme", "role": "SRE", "duration": "3y", "achievements": ["Cut costs"]},
            "not a dict",
        ],
        "education": [{"degree": "BSc", "institution": "UCL", "year": 2015}],
        "workPreference": "",
    }

    profile = normalize_extracted_profile(data)

    assert profile["name"] == "Ada Lovelace"
    assert profile["primary_skills"] == ["Python", "AWS"]
    assert profile["secondary_skills"] == []
    assert profile["years_of_experience"] == 8
    assert profile["seniority_level"] == "Senior"
    assert profile["work_history"] == [
        {
            "company": "Acme",
            "role": "SRE",
            "duration": "3y",
            "start_date": None,
            "end_date": None,
            "achievements": ["Cut costs"],
        }
    ]
    assert profile["education"][0]["year"] == "2015"
    assert profile["work_preference"] is None


def test_upload_cv_stores_text(client, monkeypatch):
    stored = {}

    async def fake_set(user_id, text):
        stored[user_id] = text

    monkeypatch.setattr(repository, "set_resume_text", fake_set)

    resp = client.post(
        "/profile/upload-cv",
        files={"file": ("cv.txt", b"Ada Lovelace\nPython, AWS", "text/plain")},
    )

    assert resp.status_code == 200
    assert resp.json()["text_length"] == len("Ada Lovelace\nPython, AWS")
    assert stored == {1: "Ada Lovelace\nPython, AWS"}


def test_upload_cv_rejects_other_types(client):
    resp = client.post("/profile/upload-cv", files={"file": ("cv.rtf", b"{\\rtf1}", "application/rtf")})
    assert resp.status_code == 400


def test_upload_cv_size_limit(client, monkeypatch):
    monkeypatch.setenv("MAX_UPLOAD_BYTES", "10")

    resp = client.post("/profile/upload-cv", files={"file": ("cv.txt", b"x" * 11, "text/plain")})
    assert resp.status_code == 413


def test_extract_without_text_is_400(client, monkeypatch):
    async def fake_text(user_id):
        return None

    monkeypatch.setattr(repository, "get_resume_text", fake_text)

    assert client.post("/profile/extract", json={}).status_code == 400


def test_extract_saves_non_empty_fields(client, monkeypatch):
    saved = {}

    async def fake_complete(**kwargs):
        return {"name": "Ada", "primarySkills": ["Python"], "summary": None, "jobTitles": []}

    async def fake_set(user_id, text):
        saved["text"] = text

    async def fake_save(user_id, *, fields, extracted):
        saved["fields"] = fields
        return {"id": user_id, **fields}

    monkeypatch.setattr(llm, "is_configured", lambda: True)
    monkeypatch.setattr(llm, "complete_json", fake_complete)
    monkeypatch.setattr(repository, "set_resume_text", fake_set)
    monkeypatch.setattr(repository, "save_extracted_profile", fake_save)

    resp = client.post("/profile/extract", json={"resume_text": "Ada, Python developer"})

    assert resp.status_code == 200
    assert saved["fields"] == {"name": "Ada", "primary_skills": ["Python"]}
    assert saved["text"] == "Ada, Python developer"
