import asyncio

from applications import repository as applications_repository
from core import llm
from coverletters import repository, service

JOB_PAGE = """
<html><head><script>var tracking = 1;</script></head>
<body>
  <nav>Jobs | About</nav>
  <div class="job-description">
    We are hiring a platform engineer to run Kubernetes clusters, build internal tooling
    in Python and own the on-call rotation for our payment APIs.
  </div>
</body></html>
"""


def test_extract_job_description_prefers_description_block():
    text = service.extract_job_description(JOB_PAGE)

    assert text.startswith("We are hiring a platform engineer")
    assert "tracking" not in text
    assert "About" not in text


def test_extract_job_description_ignores_short_pages():
    assert service.extract_job_description("<html><body><p>Apply now</p></body></html>") is None


def test_resolve_job_description_order(monkeypatch):
    fetched = []

    async def fake_fetch(url):
        fetched.append(url)
        return None

    monkeypatch.setattr(service, "fetch_job_description", fake_fetch)
    application = {"company": "Acme", "role": "SRE", "notes": "", "job_url": "https://acme.example/jobs/1"}

    assert asyncio.run(service.resolve_job_description(application, " Given ")) == "Given"
    assert asyncio.run(service.resolve_job_description({**application, "notes": "From notes"})) == "From notes"
    assert asyncio.run(service.resolve_job_description(application)) == "Position: SRE at Acme"
    assert fetched == ["https://acme.example/jobs/1"]


def test_format_work_history():
    text = service.format_work_history(
        [{"role": "SRE", "company": "Acme", "duration": "2 years", "achievements": ["Cut costs 30%"]}]
    )
    assert text == "SRE at Acme (2 years)\n- Cut costs 30%"


def test_generate_without_llm_is_502(client, monkeypatch):
    async def fake_get(application_id, *, user_id):
        return {"id": application_id, "company": "Acme", "role": "SRE", "notes": "Run things"}

    async def fake_profile(user_id):
        return {"name": "Ada"}

    monkeypatch.setattr(applications_repository, "get_application", fake_get)
    monkeypatch.setattr(service.profiles_repository, "get_profile", fake_profile)
    monkeypatch.setattr(llm, "is_configured", lambda: False)

    resp = client.post("/cover-letters/generate", json={"application_id": 5})

    assert resp.status_code == 502


def test_generate_without_llm_does_not_fetch_job_page(client, monkeypatch):
    fetched = []

    async def fake_get(application_id, *, user_id):
        return {"id": application_id, "company": "Acme", "role": "SRE", "job_url": "https://acme.example/jobs/1"}

    async def fake_fetch(url):
        fetched.append(url)
        return "A long job description"

    monkeypatch.setattr(applications_repository, "get_application", fake_get)
    monkeypatch.setattr(service, "fetch_job_description", fake_fetch)
    monkeypatch.setattr(llm, "is_configured", lambda: False)

    resp = client.post("/cover-letters/generate", json={"application_id": 5})

    assert resp.status_code == 502
    assert fetched == []


def test_save_links_application(client, monkeypatch):
    updates = []

    async def fake_get(application_id, *, user_id):
        return {"id": application_id}

    async def fake_insert(**kwargs):
        return {"id": 9, **kwargs}

    async def fake_update(application_id, *, user_id, fields):
        updates.append((application_id, fields))
        return {"id": application_id}

    monkeypatch.setattr(applications_repository, "get_application", fake_get)
    monkeypatch.setattr(applications_repository, "update_application", fake_update)
    monkeypatch.setattr(repository, "insert_cover_letter", fake_insert)

    resp = client.post(
        "/cover-letters",
        json={"content": "Dear team", "company": "Acme", "role": "SRE", "application_id": 5},
    )

    assert resp.status_code == 201
    assert resp.json()["cover_letter"]["name"] == "Cover Letter for SRE at Acme"
    assert updates == [(5, {"cover_letter_id": 9})]


def test_download_unknown_cover_letter_is_404(client, monkeypatch):
    async def fake_get(cover_letter_id, *, user_id):
        return None

    monkeypatch.setattr(repository, "get_cover_letter", fake_get)

    assert client.get("/cover-letters/4/download").status_code == 404
