"""Positioned text fragments and the per-character index built over them."""

from __future__ import annotations

from dataclasses import dataclass, field

import pymupdf

from .document import open_pdf
from .normalizer import normalize


@dataclass(frozen=True)
class TextFragment:
    """One extracted run of glyphs, placed in page space (bottom-left origin).

    ``transform`` is ``(a, b, c, d, e, f)``: ``e``/``f`` are the origin and
    ``d`` is the vertical scale, which doubles as the font size for
    unrotated text.
    """

    text: str
    transform: tuple[float, float, float, float, float, float]
    width: float
    height: float | None = None

    @property
    def x(self) -> float:
        return self.transform[4]

    @property
    def y(self) -> float:
        return self.transform[5]


@dataclass
class NormalizedStream:
    """Canonical text plus, per canonical character, the fragment it came from."""

    text: str = ""
    backrefs: list[int] = field(default_factory=list)


def build_index(fragments: list[TextFragment]) -> NormalizedStream:
    """Normalize *fragments* character by character, keeping back-references.

    Whitespace normalizes to nothing and so leaves no trace in the stream,
    which is what lets ``"Block C - 13"`` match ``"Block C-13"`` even when
    the pieces sit in separate fragments.
    """
    parts: list[str] = []
    backrefs: list[int] = []
    for index, fragment in enumerate(fragments):
        for char in fragment.text:
            canonical = normalize(char)
            if not canonical:
                continue
            parts.append(canonical)
            # lower() can expand a character; every output char gets a backref.
            backrefs.extend([index] * len(canonical))
    return NormalizedStream(text="".join(parts), backrefs=backrefs)


def extract_fragments(page: pymupdf.Page) -> list[TextFragment]:
    """Convert a page's text spans into page-space fragments, in content order."""
    page_height = page.rect.height
    data = page.get_text("dict", flags=pymupdf.TEXT_PRESERVE_WHITESPACE)

    fragments: list[TextFragment] = []
    for block in data["blocks"]:
        if block["type"] != 0:  # text blocks only
            continue
        for line in block["lines"]:
            cos, sin = line.get("dir", (1.0, 0.0))
            for span in line["spans"]:
                size = span["size"]
                origin_x, origin_y = span["origin"]
                x0, _y0, x1, _y1 = span["bbox"]
                fragments.append(
                    TextFragment(
                        text=span["text"],
                        transform=(
                            size * cos,
                            size * sin,
                            -size * sin,
                            size * cos,
                            origin_x,
                            page_height - origin_y,  # baseline, flipped to bottom-left
                        ),
                        width=x1 - x0,
                        height=size,
                    )
                )
    return fragments


def document_fragments(pdf_bytes: bytes) -> list[list[TextFragment]]:
    """Extract fragments for every page of a PDF, page by page."""
    doc = open_pdf(pdf_bytes)
    try:
        return [extract_fragments(page) for page in doc]
    finally:
        doc.close()


def page_text_dump(pdf_bytes: bytes) -> str:
    """Raw per-page text, fragments joined by single spaces, for troubleshooting."""
    chunks = []
    for page_number, fragments in enumerate(document_fragments(pdf_bytes), start=1):
        page_text = " ".join(fragment.text for fragment in fragments)
        chunks.append(f"--- Page {page_number} ---\n{page_text}\n\n")
    return "".join(chunks)
