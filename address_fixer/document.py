"""Document lifecycle: open, upload, render, and download PDFs."""

import hashlib
import logging
import re
import uuid
from pathlib import PurePath

import pymupdf

from .config import DEFAULT_RENDER_SCALE, MAX_UPLOAD_SIZE, OUTPUT_PREFIX, UPLOAD_DIR
from .errors import DocumentIOError

logger = logging.getLogger(__name__)

UPLOAD_DIR.mkdir(parents=True, exist_ok=True)

_DOC_ID_RE = re.compile(r"^[0-9a-f]{16}$")


def _validate_doc_id(doc_id: str) -> None:
    """Reject any doc_id that isn't exactly 16 hex chars (path traversal guard)."""
    if not _DOC_ID_RE.match(doc_id):
        raise ValueError(f"Invalid document id: {doc_id}")


def open_pdf(pdf_bytes: bytes) -> pymupdf.Document:
    """Open PDF bytes, raising ``DocumentIOError`` for anything unreadable.

    PyMuPDF copies nothing back into *pdf_bytes*; callers may reuse the
    buffer after the document is closed.
    """
    if not pdf_bytes:
        raise DocumentIOError("Empty document")
    try:
        doc = pymupdf.open(stream=pdf_bytes, filetype="pdf")
    except Exception as e:
        raise DocumentIOError(f"Cannot open PDF: {e}") from e
    if doc.needs_pass:
        doc.close()
        raise DocumentIOError("PDF is password protected")
    return doc


def count_pages(pdf_bytes: bytes) -> int:
    doc = open_pdf(pdf_bytes)
    try:
        return len(doc)
    finally:
        doc.close()


def output_filename(original_name: str) -> str:
    """Download name for a processed document: ``updated_<original>``."""
    name = PurePath(original_name or "document.pdf").name
    return f"{OUTPUT_PREFIX}{name}"


def save_upload(content: bytes, filename: str) -> tuple[str, int]:
    """Save uploaded PDF, return (doc_id, page_count)."""
    if len(content) > MAX_UPLOAD_SIZE:
        raise ValueError(f"File too large ({len(content)} bytes, max {MAX_UPLOAD_SIZE})")
    page_count = count_pages(content)
    # Hash + random suffix so two sessions on the same PDF stay independent
    content_hash = hashlib.sha256(content).hexdigest()[:12]
    doc_id = content_hash + uuid.uuid4().hex[:4]
    (UPLOAD_DIR / f"{doc_id}.pdf").write_bytes(content)
    logger.info("Stored upload %s as %s (%d pages)", filename, doc_id, page_count)
    return doc_id, page_count


def has_document(doc_id: str) -> bool:
    _validate_doc_id(doc_id)
    return (UPLOAD_DIR / f"{doc_id}.pdf").exists()


def get_pdf_bytes(doc_id: str) -> bytes:
    """Return the stored (original) PDF bytes for a document."""
    _validate_doc_id(doc_id)
    path = UPLOAD_DIR / f"{doc_id}.pdf"
    if not path.exists():
        raise FileNotFoundError(f"Document {doc_id} not found")
    return path.read_bytes()


def render_page(doc_id: str, page_num: int, scale: float = DEFAULT_RENDER_SCALE) -> bytes:
    """Render a page as PNG bytes."""
    doc = open_pdf(get_pdf_bytes(doc_id))
    try:
        if page_num < 0 or page_num >= len(doc):
            raise IndexError(f"Page {page_num} out of range")
        page = doc[page_num]
        mat = pymupdf.Matrix(scale, scale)
        pix = page.get_pixmap(matrix=mat)
        return pix.tobytes("png")
    finally:
        doc.close()
