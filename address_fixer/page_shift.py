"""Re-embed every page of a document, translated by a fixed offset."""

import logging

import pymupdf

from .document import open_pdf
from .errors import CompositionError

logger = logging.getLogger(__name__)


def shift(pdf_bytes: bytes, dx: float, dy: float) -> bytes:
    """Move all page content by ``(dx, dy)`` page units; positive ``dy`` is up.

    Each original page becomes a single embedded object on a fresh page of
    the same size; annotations, links and per-page structure do not carry over.
    Zero offsets return *pdf_bytes* unchanged.
    """
    if dx == 0 and dy == 0:
        return pdf_bytes

    src = open_pdf(pdf_bytes)
    page_count = len(src)
    out = pymupdf.open()
    try:
        for page_index, page in enumerate(src):
            width, height = page.rect.width, page.rect.height
            new_page = out.new_page(width=width, height=height)
            # Top-left coordinates: moving up means a smaller y.
            target = pymupdf.Rect(dx, -dy, width + dx, height - dy)
            if page.get_contents():  # blank pages have nothing to embed
                new_page.show_pdf_page(target, src, page_index)
        output = out.tobytes(garbage=3, deflate=True)
    except Exception as e:
        logger.exception("Page shift failed")
        raise CompositionError(f"Failed to shift pages: {e}") from e
    finally:
        out.close()
        src.close()

    logger.info("Shifted %d page(s) by (%.1f, %.1f)", page_count, dx, dy)
    return output
