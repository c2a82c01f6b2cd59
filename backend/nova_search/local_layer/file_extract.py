from __future__ import annotations

import base64
import io
import logging
from pathlib import PurePath

import pandas as pd

from ..errors import AttachmentTooLargeError
from ..schemas.dtos import Attachment

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 50 * 1024 * 1024
MAX_TEXT_CHARS = 100_000
MAX_DATA_URL_CHARS = 10_000_000

TEXT_EXTENSIONS = {
    ".txt", ".md", ".json", ".csv", ".py", ".js", ".ts", ".tsx", ".jsx", ".java",
    ".cpp", ".c", ".html", ".css", ".xml", ".yaml", ".yml",
}


def _is_text(name: str, mime: str) -> bool:
    return mime.startswith("text/") or PurePath(name.lower()).suffix in TEXT_EXTENSIONS


def extract_attachment(name: str, mime: str, data: bytes) -> Attachment:
    """
    Turn an uploaded file into an attachment payload for /search.

    Text-like files are decoded, images become data URIs and documents
    (pdf, docx, xlsx) are converted to text. Anything else keeps only its
    name and type.
    """
    name = (name or "upload")[:255]
    mime = (mime or "application/octet-stream")[:100]
    if len(data) > MAX_UPLOAD_BYTES:
        raise AttachmentTooLargeError(f"{name} exceeds {MAX_UPLOAD_BYTES // (1024 * 1024)}MB limit")

    ext = PurePath(name.lower()).suffix

    if _is_text(name, mime):
        txt = data.decode("utf-8", errors="ignore")
        return Attachment(name=name, type=mime, contentText=txt[:MAX_TEXT_CHARS])

    if mime.startswith("image/"):
        data_url = f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
        if len(data_url) > MAX_DATA_URL_CHARS:
            raise AttachmentTooLargeError(f"{name} is too large to attach as an image")
        return Attachment(name=name, type=mime, dataUrl=data_url)

    if ext == ".pdf" or "pdf" in mime:
        # Prefer pdfminer.six, fallback to PyPDF2
        txt = _extract_pdf_pdfminer(data)
        if not txt.strip():
            txt = _extract_pdf_pypdf2(data)
        if not txt.strip():
            txt = f"[PDF Document: {name} - {len(data) / 1024:.2f} KB]"
        return Attachment(name=name, type=mime, contentText=txt[:MAX_TEXT_CHARS])

    if ext == ".docx":
        return Attachment(name=name, type=mime, contentText=_extract_docx(data)[:MAX_TEXT_CHARS])

    if ext in (".xlsx", ".xls"):
        return Attachment(name=name, type=mime, contentText=_extract_sheets(data)[:MAX_TEXT_CHARS])

    return Attachment(name=name, type=mime)


def _extract_sheets(data: bytes) -> str:
    # Read as tables, convert to text rows
    try:
        xls = pd.ExcelFile(io.BytesIO(data))
        chunks = []
        for sheet in xls.sheet_names[:5]:
            df = xls.parse(sheet_name=sheet, nrows=200)
            chunks.append(f"--- Sheet: {sheet} ---\n{df.to_string(index=False)}")
        return "\n\n".join(chunks)
    except Exception:
        logger.warning("Spreadsheet extraction failed", exc_info=True)
        return ""


def _extract_pdf_pdfminer(data: bytes) -> str:
    try:
        from pdfminer.high_level import extract_text
        return extract_text(io.BytesIO(data)) or ""
    except Exception:
        logger.warning("pdfminer extraction failed", exc_info=True)
        return ""


def _extract_pdf_pypdf2(data: bytes) -> str:
    try:
        from PyPDF2 import PdfReader
        reader = PdfReader(io.BytesIO(data))
        out = []
        for page in reader.pages[:20]:
            out.append(page.extract_text() or "")
        return "\n".join(out)
    except Exception:
        logger.warning("PyPDF2 extraction failed", exc_info=True)
        return ""


def _extract_docx(data: bytes) -> str:
    try:
        from docx import Document  # python-docx
        doc = Document(io.BytesIO(data))
        parts = [para.text for para in doc.paragraphs if para.text and para.text.strip()]
        return "\n".join(parts)
    except Exception:
        logger.warning("docx extraction failed", exc_info=True)
        return ""
