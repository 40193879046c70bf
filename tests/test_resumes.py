import asyncio
from contextlib import asynccontextmanager

from core import db, llm
from resumes import repository


def _resume(user_id, **extra):
    return {"id": 3, "user_id": user_id, "name": "CV", "content": "EXPERIENCE\n- Built things", **extra}


def test_other_users_resume_is_404(client, monkeypatch):
    stored = {3: _resume(user_id=2)}

    async def fake_get(resume_id, *, user_id):
        row = stored.get(resume_id)
        return row if row is not None and row["user_id"] == user_id else None

    monkeypatch.setattr(repository, "get_resume_content", fake_get)

    assert client.get("/resumes/3/content").status_code == 404


def test_missing_resume_is_404(client, monkeypatch):
    async def fake_get(resume_id, *, user_id):
        return None

    monkeypatch.setattr(repository, "get_resume", fake_get)

    assert client.patch("/resumes/3", json={"name": "New"}).status_code == 404


def test_download_renders_docx(client, monkeypatch):
    async def fake_get(resume_id, *, user_id):
        return _resume(user_id=1)

    monkeypatch.setattr(repository, "get_resume_content", fake_get)

    resp = client.get("/resumes/3/download")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/vnd.openxmlformats")
    assert 'filename="CV.docx"' in resp.headers["content-disposition"]
    assert resp.content[:2] == b"PK"


def test_tailor_without_llm_returns_original(client, monkeypatch):
    monkeypatch.setattr(llm, "is_configured", lambda: False)

    resp = client.post(
        "/resumes/tailor",
        json={"resume_content": "My resume", "job_title": "SRE", "job_description": "Run things"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"tailored_content": "My resume", "tailored": False, "success": True}


def test_tailor_llm_failure_keeps_original(client, monkeypatch):
    async def failing_complete(**kwargs):
        raise llm.LLMError("boom")

    monkeypatch.setattr(llm, "is_configured", lambda: True)
    monkeypatch.setattr(llm, "complete_text", failing_complete)

    resp = client.post(
        "/resumes/tailor",
        json={"resume_content": "My resume", "job_title": "SRE", "job_description": "Run things"},
    )

    body = resp.json()
    assert body["tailored_content"] == "My resume"
    assert body["success"] is False


class _FakeConn:
    def __init__(self, record):
        self.record = record
        self.statements = []

    async def execute(self, sql, *args):
        self.statements.append((" ".join(sql.split()), args))
        return "UPDATE 1"

    async def fetchrow(self, sql, *args):
        self.statements.append((" ".join(sql.split()), args))
        return self.record


def _fake_transaction(conn):
    @asynccontextmanager
    async def transaction():
        yield conn

    return transaction


def test_first_upload_becomes_primary(client, monkeypatch):
    inserted = {}

    async def fake_list(user_id):
        return []

    async def fake_insert(**kwargs):
        inserted.update(kwargs)
        return {"id": 1, **kwargs}

    monkeypatch.setattr(repository, "list_resumes", fake_list)
    monkeypatch.setattr(repository, "insert_resume", fake_insert)

    resp = client.post("/resumes", files={"file": ("cv.txt", b"Ada Lovelace", "text/plain")})

    assert resp.status_code == 201
    assert inserted["is_primary"] is True
    assert inserted["content"] == "Ada Lovelace"


def test_later_upload_is_not_primary_by_default(client, monkeypatch):
    inserted = {}

    async def fake_list(user_id):
        return [_resume(user_id=1, is_primary=True)]

    async def fake_insert(**kwargs):
        inserted.update(kwargs)
        return {"id": 2, **kwargs}

    monkeypatch.setattr(repository, "list_resumes", fake_list)
    monkeypatch.setattr(repository, "insert_resume", fake_insert)

    client.post("/resumes", files={"file": ("cv.txt", b"Second", "text/plain")})

    assert inserted["is_primary"] is False


def test_primary_insert_clears_previous_primary(monkeypatch):
    conn = _FakeConn({"id": 5, "is_primary": True})
    monkeypatch.setattr(db, "transaction", _fake_transaction(conn))

    row = asyncio.run(
        repository.insert_resume(
            user_id=1, name="CV", file_name="cv.txt", file_type="txt", file_size=2, content="hi", is_primary=True
        )
    )

    assert row == {"id": 5, "is_primary": True}
    clear_sql, clear_args = conn.statements[0]
    assert clear_sql.startswith("UPDATE resumes SET is_primary = FALSE")
    assert clear_args == (1,)
    assert conn.statements[1][0].startswith("INSERT INTO resumes")


def test_non_primary_insert_leaves_primary_alone(monkeypatch):
    conn = _FakeConn({"id": 6, "is_primary": False})
    monkeypatch.setattr(db, "transaction", _fake_transaction(conn))

    asyncio.run(
        repository.insert_resume(user_id=1, name="CV", file_name="cv.txt", file_type="txt", file_size=2, content="hi")
    )

    assert len(conn.statements) == 1
    assert conn.statements[0][0].startswith("INSERT INTO resumes")


def test_setting_primary_clears_the_others(monkeypatch):
    conn = _FakeConn({"id": 7, "is_primary": True})
    monkeypatch.setattr(db, "transaction", _fake_transaction(conn))

    asyncio.run(repository.update_resume(7, user_id=1, fields={"is_primary": True}))

    clear_sql, clear_args = conn.statements[0]
    assert "is_primary = FALSE" in clear_sql
    assert "id <> $2" in clear_sql
    assert clear_args == (1, 7)
    assert conn.statements[1][0].startswith("UPDATE resumes SET is_primary = $3")
