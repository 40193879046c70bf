"""
Document helpers shared by résumé, profile and cover-letter features.

- Validate and read uploads with a size limit
- Extract text from .pdf / .docx / .txt
- Reduce HTML to plain text
- Render plain text as a .docx download
"""

from __future__ import annotations

import io
import re
from dataclasses import dataclass
from pathlib import Path

from bs4 import BeautifulSoup
from docx import Document
from docx.shared import Pt
from fastapi import HTTPException, UploadFile
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from core import config

ALLOWED_EXTENSIONS = {".txt", ".pdf", ".docx"}

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class UploadedText:
    filename: str
    content_type: str | None
    size_bytes: int
    file_ext: str
    text: str


def _file_ext(filename: str) -> str:
    return Path(filename).suffix.lower()


def validate_upload(file: UploadFile) -> str:
    """
    Return the normalized file extension if this upload is acceptable.

    Validation is by extension because browsers send unreliable content types.
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="Missing filename.")

    ext = _file_ext(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type '{ext}'. Allowed: {sorted(ALLOWED_EXTENSIONS)}",
        )
    return ext


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    chunk_size = 1024 * 1024
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Max is {max_bytes} bytes.",
            )

    return bytes(buf)


async def read_upload_text(file: UploadFile) -> UploadedText:
    ext = validate_upload(file)
    data = await read_upload_bytes(file, max_bytes=config.max_upload_bytes())
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")

    return UploadedText(
        filename=file.filename or "",
        content_type=file.content_type,
        size_bytes=len(data),
        file_ext=ext,
        text=extract_text(ext, data),
    )


def extract_text(ext: str, data: bytes) -> str:
    if ext == ".txt":
        return data.decode("utf-8", errors="replace").strip()
    if ext == ".pdf":
        return _extract_pdf_text(data)
    if ext == ".docx":
        return _extract_docx_text(data)
    raise HTTPException(status_code=400, detail=f"Unsupported extension: {ext}")


def _extract_pdf_text(data: bytes) -> str:
    """
    Embedded-text extraction only; scanned PDFs need OCR.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
    except (PdfReadError, ValueError, OSError) as e:
        raise HTTPException(
            status_code=422,
            detail="Could not read PDF (file may be corrupted or unsupported).",
        ) from e

    if reader.is_encrypted:
        try:
            decrypted = reader.decrypt("")
        except (PdfReadError, NotImplementedError):
            decrypted = 0
        if not decrypted:
            raise HTTPException(status_code=422, detail="Encrypted PDF is not supported.")

    parts: list[str] = []
    for page in reader.pages:
        try:
            parts.append(page.extract_text() or "")
        except (PdfReadError, KeyError, ValueError):
            # A single bad page shouldn't fail the whole résumé.
            parts.append("")

    text = "\n".join(parts).strip()
    if not text:
        raise HTTPException(
            status_code=422,
            detail="No extractable text found in PDF (scanned PDFs need OCR).",
        )
    return text


def _extract_docx_text(data: bytes) -> str:
    try:
        document = Document(io.BytesIO(data))
    except (ValueError, KeyError, OSError) as e:
        raise HTTPException(status_code=422, detail="Could not read DOCX file.") from e

    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append(" | ".join(cell.text.strip() for cell in row.cells))

    text = "\n".join(line for line in lines if line.strip()).strip()
    if not text:
        raise HTTPException(status_code=422, detail="No extractable text found in DOCX.")
    return text


def html_to_text(html: str) -> str:
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    return collapse_whitespace(soup.get_text(" "))


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def render_docx(*, title: str, body: str) -> bytes:
    """
    Render plain text (blank-line separated paragraphs) into a .docx file.
    """
    document = Document()
    style = document.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    if title.strip():
        document.add_heading(title.strip(), level=1)

    for block in re.split(r"\n\s*\n", body or ""):
        block = block.strip()
        if not block:
            continue
        paragraph = document.add_paragraph()
        lines = block.splitlines()
        for index, line in enumerate(lines):
            run = paragraph.add_run(line.rstrip())
            if index < len(lines) - 1:
                run.add_break()

    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


def safe_filename(name: str, *, ext: str) -> str:
    stem = re.sub(r"[^A-Za-z0-9._-]+", "_", (name or "").strip()).strip("._") or "document"
    return f"{stem[:80]}{ext}"


_SECTION_RE = re.compile(
    r"^(PROFESSIONAL SUMMARY|EXPERIENCE|EDUCATION|SKILLS|CERTIFICATIONS|PROJECTS|CONTACT|SUMMARY)\b",
    re.IGNORECASE,
)
_BULLET_RE = re.compile(r"^[•\-*]\s*")


def render_resume_docx(*, title: str, body: str) -> bytes:
    """
    Like render_docx, but line by line: all-caps or known section names become
    headings and lines starting with a bullet marker become list items.
    """
    document = Document()
    style = document.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    if title.strip():
        document.add_heading(title.strip(), level=1)

    for line in (body or "").splitlines():
        line = line.strip()
        if not line:
            continue
        if _BULLET_RE.match(line):
            document.add_paragraph(_BULLET_RE.sub("", line), style="List Bullet")
        elif _is_heading(line):
            document.add_heading(line.rstrip(":"), level=2)
        else:
            document.add_paragraph(line)

    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


def _is_heading(line: str) -> bool:
    if len(line) > 60:
        return False
    if line.rstrip(":").isupper() and len(line.rstrip(":").strip()) >= 3:
        return True
    return bool(_SECTION_RE.match(line)) and line.count(" ") <= 3
