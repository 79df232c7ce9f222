"""Locate a query string in page text and turn each hit into a page-space box."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from .errors import InputValidationError
from .fragments import TextFragment, build_index, document_fragments
from .models import Match
from .normalizer import normalize

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """Outcome of a document search. Zero matches is a normal result."""

    query: str
    matches: list[Match] = field(default_factory=list)
    pages_scanned: int = 0

    @property
    def found(self) -> bool:
        return bool(self.matches)

    @property
    def message(self) -> str:
        count = len(self.matches)
        if not count:
            return "No matches found."
        return f"Found {count} occurrence{'' if count == 1 else 's'}."


def find_offsets(haystack: str, needle: str) -> Iterator[int]:
    """Yield the start of every occurrence of *needle*, overlapping ones included.

    The scan resumes one character after each hit's start, so ``"aa"`` in
    ``"aaa"`` yields 0 and 1.
    """
    if not needle:
        return
    start = 0
    while True:
        found = haystack.find(needle, start)
        if found == -1:
            return
        yield found
        start = found + 1


def _span_bounds(fragments: Sequence[TextFragment], first: int, last: int) -> tuple[float, float]:
    """Horizontal envelope of fragments ``first..last`` inclusive.

    Fragments inside the range that produced no canonical characters
    (whitespace runs) still count, so the box has no gaps.
    """
    min_x, max_x = math.inf, -math.inf
    for fragment in fragments[first : last + 1]:
        min_x = min(min_x, fragment.x, fragment.x + fragment.width)
        max_x = max(max_x, fragment.x, fragment.x + fragment.width)
    if not math.isfinite(min_x) or not math.isfinite(max_x):
        start = fragments[first]
        min_x, max_x = start.x, start.x + start.width
    return min_x, max_x


def _fragment_height(fragment: TextFragment) -> float:
    return fragment.height or abs(fragment.transform[3])


def find_page_matches(
    fragments: Sequence[TextFragment], query: str, page_index: int
) -> list[Match]:
    """Find every occurrence of *query* on one page."""
    needle = normalize(query)
    if not needle:
        return []
    stream = build_index(list(fragments))

    matches = []
    for offset in find_offsets(stream.text, needle):
        first = stream.backrefs[offset]
        last = stream.backrefs[offset + len(needle) - 1]
        min_x, max_x = _span_bounds(fragments, first, last)
        # Vertical extent comes from the first fragment only; a hit that
        # wraps onto a second line is sized from its first line.
        start = fragments[first]
        match = Match(
            page_index=page_index,
            x=min_x,
            y=start.y,
            width=max_x - min_x,
            height=_fragment_height(start),
            text=query,
        )
        logger.debug(
            "Page %d offset %d -> fragments %d..%d, box (%.1f, %.1f, %.1f x %.1f)",
            page_index, offset, first, last, match.x, match.y, match.width, match.height,
        )
        matches.append(match)
    return matches


def find_matches(fragments_by_page: Sequence[Sequence[TextFragment]], query: str) -> list[Match]:
    """Find *query* on every page, pages processed in order."""
    if not normalize(query):
        return []
    matches: list[Match] = []
    for page_index, fragments in enumerate(fragments_by_page):
        matches.extend(find_page_matches(fragments, query, page_index))
    return matches


def search_document(pdf_bytes: bytes, query: str) -> SearchResult:
    """Search a whole PDF for *query*.

    Raises:
        InputValidationError: If the query is empty once normalized.
        DocumentIOError: If the PDF cannot be opened.
    """
    if not normalize(query or ""):
        raise InputValidationError("Please enter text to search for.")

    pages = document_fragments(pdf_bytes)
    result = SearchResult(query=query, matches=find_matches(pages, query), pages_scanned=len(pages))
    if result.found:
        logger.info("Found %d match(es) for %r across %d pages", len(result.matches), query, len(pages))
    else:
        logger.warning("No matches for %r across %d pages", query, len(pages))
    return result
