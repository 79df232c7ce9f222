"""Cover matched regions and draw replacement text centered in each box."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import pymupdf

from .config import (
    BASELINE_CENTER_DIVISOR,
    BLOCK_HEIGHT_THRESHOLD,
    COVER_COLOR,
    COVER_EXTRA_HEIGHT,
    COVER_EXTRA_WIDTH,
    COVER_INSET,
    DEFAULT_FONT_SIZE,
    LINE_SPACING,
    MIN_LINE_FONT_SIZE,
    REPLACEMENT_FONT,
    TEXT_COLOR,
)
from .document import open_pdf
from .errors import CompositionError, InputValidationError
from .models import Match

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacedLine:
    """One line of replacement text; ``y`` is its baseline in page space."""

    text: str
    x: float
    y: float
    font_size: float


def is_block(match: Match) -> bool:
    """Tall boxes are freeform selections; short ones are a single text line."""
    return match.height > BLOCK_HEIGHT_THRESHOLD


def font_size_for(match: Match) -> float:
    if is_block(match):
        return DEFAULT_FONT_SIZE
    # An auto-detected line box is about as tall as its font.
    return match.height if match.height > MIN_LINE_FONT_SIZE else DEFAULT_FONT_SIZE


def cover_rect(match: Match) -> tuple[float, float, float, float]:
    """Page-space ``(x, y, width, height)`` of the opaque cover for *match*."""
    return (
        match.x - COVER_INSET,
        match.y - COVER_INSET,
        match.width + COVER_EXTRA_WIDTH,
        match.height + COVER_EXTRA_HEIGHT,
    )


def plan_layout(match: Match, replacement_text: str) -> list[PlacedLine]:
    """Position every line of *replacement_text* inside *match*.

    Line boxes put the first baseline on the box's bottom edge. Block boxes
    center the group of lines on the box's vertical midpoint, shifted down by
    a quarter of the font size to approximate the baseline-to-center offset.
    Each line is centered horizontally on its own rendered width.
    """
    font_size = font_size_for(match)
    line_height = font_size * LINE_SPACING
    lines = replacement_text.split("\n")

    if is_block(match):
        box_center_y = match.y + match.height / 2
        half_block = (len(lines) - 1) * line_height / 2
        start_y = box_center_y + half_block - font_size / BASELINE_CENTER_DIVISOR
    else:
        start_y = match.y

    placed = []
    for index, line in enumerate(lines):
        text_width = pymupdf.get_text_length(line, fontname=REPLACEMENT_FONT, fontsize=font_size)
        placed.append(
            PlacedLine(
                text=line,
                x=match.x + match.width / 2 - text_width / 2,
                y=start_y - index * line_height,
                font_size=font_size,
            )
        )
    return placed


def _validate_pages(matches: Sequence[Match], page_count: int) -> None:
    for match in matches:
        if not 0 <= match.page_index < page_count:
            raise InputValidationError(
                f"Match page {match.page_index} out of range for a {page_count}-page document"
            )


def _draw_match(page: pymupdf.Page, match: Match, replacement_text: str) -> None:
    # PyMuPDF draws top-left; flip each page-space y against the page height.
    page_height = page.rect.height
    x, y, width, height = cover_rect(match)
    page.draw_rect(
        pymupdf.Rect(x, page_height - (y + height), x + width, page_height - y),
        color=None,
        fill=COVER_COLOR,
        overlay=True,
    )
    for line in plan_layout(match, replacement_text):
        if not line.text:
            continue
        page.insert_text(
            (line.x, page_height - line.y),
            line.text,
            fontname=REPLACEMENT_FONT,
            fontsize=line.font_size,
            color=TEXT_COLOR,
        )


def compose(pdf_bytes: bytes, matches: Sequence[Match], replacement_text: str) -> bytes:
    """Return a new PDF with every match covered and *replacement_text* drawn in.

    Matches are applied in order; a later box on the same page paints over an
    earlier one where they overlap. The input bytes are never modified.

    Raises:
        DocumentIOError: If the PDF cannot be opened.
        InputValidationError: If any match points past the last page. Checked
            before anything is drawn.
        CompositionError: If drawing or saving fails.
    """
    doc = open_pdf(pdf_bytes)
    try:
        _validate_pages(matches, len(doc))
        try:
            for match in matches:
                _draw_match(doc[match.page_index], match, replacement_text)
            output = doc.tobytes(garbage=3, deflate=True)
        except Exception as e:
            logger.exception("Overlay composition failed")
            raise CompositionError(f"Failed to generate PDF: {e}") from e
    finally:
        doc.close()

    logger.info("Composed %d replacement(s), %d bytes", len(matches), len(output))
    return output
