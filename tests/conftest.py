from __future__ import annotations

import os
import tempfile

# Keep import-time directory creation out of the working tree.
os.environ.setdefault("ADDRESS_FIXER_UPLOAD_DIR", tempfile.mkdtemp(prefix="address-fixer-uploads-"))
os.environ.setdefault("ADDRESS_FIXER_PREFERENCES_DIR", tempfile.mkdtemp(prefix="address-fixer-prefs-"))

import pymupdf  # noqa: E402
import pytest  # noqa: E402

PAGE_WIDTH = 612
PAGE_HEIGHT = 792


def make_pdf(pages: list[list[tuple[float, float, str]]], fontsize: float = 12) -> bytes:
    """Build a PDF in memory.

    Each page is a list of ``(x, y, text)`` where ``(x, y)`` is the text
    baseline origin in page space (bottom-left origin).
    """
    doc = pymupdf.open()
    for items in pages:
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        for x, y, text in items:
            page.insert_text((x, PAGE_HEIGHT - y), text, fontsize=fontsize)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def address_pdf() -> bytes:
    return make_pdf([[(50, 700, "123 Old Street")]])


@pytest.fixture
def storage(tmp_path, monkeypatch):
    """Point uploads and saved preferences at a per-test directory."""
    uploads = tmp_path / "uploads"
    prefs = tmp_path / "preferences"
    uploads.mkdir()
    monkeypatch.setattr("address_fixer.document.UPLOAD_DIR", uploads)
    monkeypatch.setattr("address_fixer.preferences.PREFERENCES_DIR", prefs)
    return tmp_path


@pytest.fixture
def pdf_factory():
    return make_pdf
