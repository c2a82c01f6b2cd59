from __future__ import annotations

import base64
import io

import pandas as pd
import pytest

from nova_search.errors import AttachmentTooLargeError
from nova_search.local_layer import file_extract
from nova_search.local_layer.file_extract import extract_attachment


def test_text_by_mime():
    att = extract_attachment("data.bin", "text/plain", "héllo".encode("utf-8"))
    assert att.contentText == "héllo"
    assert att.dataUrl is None


def test_text_by_extension_is_truncated():
    att = extract_attachment("main.py", "application/octet-stream", b"x" * 150_000)
    assert len(att.contentText) == 100_000


def test_image_becomes_data_url():
    att = extract_attachment("dot.png", "image/png", b"\x89PNG")
    assert att.dataUrl == "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode("ascii")
    assert att.contentText is None


def test_oversized_image_is_rejected(monkeypatch):
    monkeypatch.setattr(file_extract, "MAX_DATA_URL_CHARS", 40)
    with pytest.raises(AttachmentTooLargeError):
        extract_attachment("big.png", "image/png", b"\x00" * 64)


def test_oversized_upload_is_rejected(monkeypatch):
    monkeypatch.setattr(file_extract, "MAX_UPLOAD_BYTES", 10)
    with pytest.raises(AttachmentTooLargeError) as excinfo:
        extract_attachment("notes.txt", "text/plain", b"0123456789ab")
    assert excinfo.value.status_code == 413


def test_unreadable_pdf_gets_placeholder():
    att = extract_attachment("paper.pdf", "application/pdf", b"not really a pdf")
    assert att.contentText.startswith("[PDF Document: paper.pdf")


def test_spreadsheet_rows_become_text():
    buf = io.BytesIO()
    pd.DataFrame({"city": ["Oslo", "Lima"], "temp": [3, 19]}).to_excel(buf, index=False, sheet_name="weather")

    att = extract_attachment(
        "weather.xlsx",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        buf.getvalue(),
    )

    assert "--- Sheet: weather ---" in att.contentText
    assert "Oslo" in att.contentText


def test_unsupported_type_keeps_only_metadata():
    att = extract_attachment("song.mp3", "audio/mpeg", b"ID3")
    assert att.model_dump(exclude_none=True) == {"name": "song.mp3", "type": "audio/mpeg"}
