"""
Job feed fetching and parsing.

Supported source types:
- rss:       RSS/Atom XML (parsed with feedparser); a JSON body is detected by
             content type and handled as a JSON Feed
- json_feed: JSON Feed 1.x (e.g. RSS.app) -> {"items": [...]}
- api:       JSON API returning {"jobs": [...]} or a bare list
"""

from __future__ import annotations

import calendar
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import feedparser
import httpx

from core import config
from core.documents import collapse_whitespace, html_to_text

UNKNOWN_COMPANY = "Unknown Company"
DESCRIPTION_LIMIT = 2000
REQUIREMENTS_LIMIT = 500

USER_AGENT = "job-tracker/1.0"


class FeedError(RuntimeError):
    pass


@dataclass
class JobPosting:
    title: str
    company: str
    description: str
    job_url: str
    requirements: str = ""
    location: str | None = None
    salary: str | None = None
    posted_date: datetime | None = None
    source: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    def search_text(self) -> str:
        return f"{self.title} {self.description} {self.requirements}".lower()


def split_title_company(raw_title: str) -> tuple[str, str]:
    """
    "Security Engineer at Acme at Night" -> ("Security Engineer", "Acme at Night")
    """
    title = collapse_whitespace(raw_title) or "Untitled"
    head, sep, tail = title.partition(" at ")
    if sep and head.strip() and tail.strip():
        return head.strip(), tail.strip()
    return title, UNKNOWN_COMPANY


def parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        # Epoch seconds (some APIs) or milliseconds.
        seconds = value / 1000 if value > 10**11 else value
        return datetime.fromtimestamp(seconds, tz=timezone.utc)

    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        # RFC 822 dates (RSS pubDate style).
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError):
            return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _clip(text: str, limit: int) -> str:
    return (text or "")[:limit]


def parse_json_feed(data: Any, source_name: str) -> list[JobPosting]:
    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        return []

    postings: list[JobPosting] = []
    for item in data["items"]:
        if not isinstance(item, dict):
            continue
        url = str(item.get("url") or item.get("external_url") or "").strip()
        if not url:
            continue

        title, company = split_title_company(str(item.get("title") or ""))
        if item.get("content_html"):
            description = html_to_text(str(item["content_html"]))
        else:
            description = collapse_whitespace(str(item.get("content_text") or item.get("summary") or ""))

        postings.append(
            JobPosting(
                title=title,
                company=company,
                description=_clip(description, DESCRIPTION_LIMIT),
                requirements=_clip(description, REQUIREMENTS_LIMIT),
                location=(str(item["location"]).strip() or None) if item.get("location") else None,
                job_url=url,
                posted_date=parse_datetime(item.get("date_published") or item.get("date_modified")),
                source=source_name,
            )
        )
    return postings


def parse_xml_feed(xml_text: str, source_name: str) -> list[JobPosting]:
    feed = feedparser.parse(xml_text)

    postings: list[JobPosting] = []
    for entry in feed.entries:
        link = str(entry.get("link") or "").strip()
        raw_title = str(entry.get("title") or "").strip()
        if not link or not raw_title:
            continue

        author = collapse_whitespace(str(entry.get("author") or ""))
        if author:
            title, company = collapse_whitespace(raw_title), author
        else:
            title, company = split_title_company(raw_title)

        description = html_to_text(str(entry.get("summary") or entry.get("description") or ""))
        published = entry.get("published_parsed") or entry.get("updated_parsed")
        posted_date = (
            datetime.fromtimestamp(calendar.timegm(published), tz=timezone.utc) if published else None
        )

        postings.append(
            JobPosting(
                title=title,
                company=company,
                description=_clip(description, DESCRIPTION_LIMIT),
                requirements=_clip(description, REQUIREMENTS_LIMIT),
                job_url=link,
                posted_date=posted_date,
                source=source_name,
            )
        )
    return postings


def parse_api_payload(data: Any, source_name: str) -> list[JobPosting]:
    if isinstance(data, list):
        items = data
    elif isinstance(data, dict) and isinstance(data.get("jobs"), list):
        items = data["jobs"]
    else:
        items = []

    postings: list[JobPosting] = []
    for job in items:
        if not isinstance(job, dict):
            continue
        url = str(job.get("url") or job.get("link") or job.get("job_url") or "").strip()
        if not url:
            continue
        postings.append(
            JobPosting(
                title=str(job.get("title") or job.get("name") or "Untitled").strip(),
                company=str(job.get("company") or job.get("company_name") or UNKNOWN_COMPANY).strip(),
                description=str(job.get("description") or ""),
                requirements=str(job.get("requirements") or ""),
                location=job.get("location") or None,
                salary=job.get("salary") or None,
                job_url=url,
                posted_date=parse_datetime(job.get("posted_date") or job.get("postedDate")),
                source=source_name,
            )
        )
    return postings


async def _get(url: str, *, headers: dict | None = None) -> httpx.Response:
    request_headers = {"User-Agent": USER_AGENT}
    request_headers.update(headers or {})
    try:
        async with httpx.AsyncClient(
            timeout=config.scan_http_timeout_s(),
            follow_redirects=True,
        ) as client:
            resp = await client.get(url, headers=request_headers)
    except httpx.HTTPError as exc:
        raise FeedError(f"Request to {url} failed: {exc}") from exc

    if resp.status_code != 200:
        raise FeedError(f"Request to {url} failed: {resp.status_code} {resp.text[:200]}")
    return resp


def _json_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError as exc:
        raise FeedError("Response body is not valid JSON.") from exc


async def fetch_source(source: dict) -> list[JobPosting]:
    """
    Fetch and parse one `user_job_sources` row.
    """
    name = str(source.get("name") or "source")
    source_type = str(source.get("source_type") or "").lower()

    if source_type in {"rss", "json_feed"}:
        feed_url = (source.get("feed_url") or "").strip()
        if not feed_url:
            raise FeedError(f"Source '{name}' has no feed_url.")
        resp = await _get(feed_url)
        if source_type == "json_feed" or "json" in resp.headers.get("content-type", ""):
            return parse_json_feed(_json_body(resp), name)
        return parse_xml_feed(resp.text, name)

    if source_type == "api":
        endpoint = (source.get("api_endpoint") or "").strip()
        if not endpoint:
            raise FeedError(f"Source '{name}' has no api_endpoint.")
        headers = {"Accept": "application/json"}
        if source.get("api_key"):
            headers["Authorization"] = f"Bearer {source['api_key']}"
        resp = await _get(endpoint, headers=headers)
        return parse_api_payload(_json_body(resp), name)

    raise FeedError(f"Unsupported source type: {source_type}")
