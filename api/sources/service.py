"""
Job source management.

Every user gets a copy of the built-in feeds at registration; they can toggle
them but not delete them. Custom sources are RSS/Atom feeds, JSON Feeds or
JSON APIs returning a job list.
"""

from __future__ import annotations

from urllib.parse import urlsplit

from fastapi import HTTPException

from core.logger import get_logger
from scanning import feeds

from . import repository

logger = get_logger(__name__)

SOURCE_TYPES = {"rss", "json_feed", "api"}

BUILT_IN_SOURCES: list[dict] = [
    {
        "name": "Foorilla Tech Jobs Spain",
        "description": "Technology and engineering jobs in Spain and Europe",
        "source_type": "rss",
        "feed_url": "https://foorilla.com/account/feed/0SqKXfDIRw65VD0/rss/",
    },
    {
        "name": "Barcelona Tech Jobs",
        "description": "Technology jobs in Barcelona via RSS.app",
        "source_type": "json_feed",
        "feed_url": "https://rss.app/feeds/v1.1/C5zHjN9WFy1WI1sN.json",
    },
    {
        "name": "WeWorkRemotely All Jobs",
        "description": "Remote jobs worldwide - all categories",
        "source_type": "rss",
        "feed_url": "https://weworkremotely.com/remote-jobs.rss",
    },
    {
        "name": "Remotive All Remote Jobs",
        "description": "All remote tech positions across Europe",
        "source_type": "rss",
        "feed_url": "https://remotive.com/remote-jobs/rss-feed",
    },
]

_UPDATABLE_FIELDS = ("name", "description", "feed_url", "api_endpoint", "api_key", "enabled")


def _validate_url(value: str | None, *, field: str) -> str:
    url = (value or "").strip()
    parts = urlsplit(url)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise HTTPException(status_code=400, detail=f"{field} must be an http(s) URL.")
    return url


def public_source(row: dict) -> dict:
    # Never echo stored API keys back to the browser.
    out = dict(row)
    out["has_api_key"] = bool(out.pop("api_key", None))
    return out


async def seed_builtin_sources(user_id: int) -> int:
    created = 0
    for source in BUILT_IN_SOURCES:
        row = await repository.insert_source(user_id=user_id, is_built_in=True, **source)
        if row is not None:
            created += 1
    return created


async def list_sources(user_id: int) -> list[dict]:
    rows = await repository.list_sources(user_id)
    return [public_source(row) for row in rows]


async def create_source(
    user_id: int,
    *,
    name: str,
    source_type: str,
    description: str | None = None,
    feed_url: str | None = None,
    api_endpoint: str | None = None,
    api_key: str | None = None,
    enabled: bool = True,
) -> dict:
    source_type = (source_type or "").strip().lower()
    if source_type not in SOURCE_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported source_type '{source_type}'. Allowed: {sorted(SOURCE_TYPES)}",
        )

    if source_type == "api":
        api_endpoint = _validate_url(api_endpoint, field="api_endpoint")
        feed_url = None
    else:
        feed_url = _validate_url(feed_url, field="feed_url")
        api_endpoint = None

    row = await repository.insert_source(
        user_id=user_id,
        name=name.strip(),
        description=(description or "").strip() or None,
        source_type=source_type,
        feed_url=feed_url,
        api_endpoint=api_endpoint,
        api_key=(api_key or "").strip() or None,
        enabled=enabled,
    )
    if row is None:
        raise HTTPException(status_code=409, detail="A source with this name already exists.")
    return public_source(row)


async def update_source(user_id: int, source_id: int, changes: dict) -> dict:
    existing = await repository.get_source(source_id, user_id=user_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Source not found.")

    fields = {
        key: value
        for key, value in changes.items()
        if key in _UPDATABLE_FIELDS and not (value is None and key in {"name", "enabled"})
    }
    if existing["is_built_in"]:
        # Built-ins can only be toggled.
        fields = {key: value for key, value in fields.items() if key == "enabled"}
    if "feed_url" in fields:
        fields["feed_url"] = _validate_url(fields["feed_url"], field="feed_url")
    if "api_endpoint" in fields:
        fields["api_endpoint"] = _validate_url(fields["api_endpoint"], field="api_endpoint")

    row = await repository.update_source(source_id, user_id=user_id, fields=fields)
    if row is None:
        raise HTTPException(status_code=404, detail="Source not found.")
    return public_source(row)


async def delete_source(user_id: int, source_id: int) -> None:
    existing = await repository.get_source(source_id, user_id=user_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Source not found.")
    if existing["is_built_in"]:
        raise HTTPException(status_code=403, detail="Cannot delete built-in sources.")
    await repository.delete_source(source_id, user_id=user_id)


async def test_source(user_id: int, source_id: int) -> dict:
    source = await repository.get_source(source_id, user_id=user_id)
    if source is None:
        raise HTTPException(status_code=404, detail="Source not found.")

    try:
        postings = await feeds.fetch_source(source)
    except feeds.FeedError as exc:
        logger.warning("Source test failed for %s: %s", source["name"], exc)
        await repository.record_fetch(source_id, error=str(exc)[:500])
        return {"ok": False, "source_id": source_id, "error": str(exc)}

    await repository.record_fetch(source_id, error=None)
    return {
        "ok": True,
        "source_id": source_id,
        "count": len(postings),
        "sample": [{"title": p.title, "company": p.company, "job_url": p.job_url} for p in postings[:5]],
    }
