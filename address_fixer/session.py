"""Per-document interactive state: mode, current matches, processing gate."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Literal

from .config import MAX_SESSIONS
from .document import has_document
from .errors import BusyError
from .models import Match
from .preferences import load_config

logger = logging.getLogger(__name__)

Mode = Literal["auto", "manual"]


@dataclass
class Session:
    doc_id: str
    filename: str
    mode: Mode = "auto"
    search_text: str = ""
    matches: list[Match] = field(default_factory=list)
    manual_selection: Match | None = None
    processing: bool = False

    def active_matches(self, mode: Mode | None = None) -> list[Match]:
        """Matches the next process step would use for *mode*."""
        mode = mode or self.mode
        if mode == "manual":
            return [self.manual_selection] if self.manual_selection else []
        return list(self.matches)

    @contextmanager
    def processing_gate(self) -> Iterator[None]:
        """Hold the session's single processing slot for the duration of the block."""
        if self.processing:
            raise BusyError(f"Document {self.doc_id} is already being processed")
        self.processing = True
        try:
            yield
        finally:
            self.processing = False


# Sessions live in memory, one per uploaded document, oldest first
_sessions: dict[str, Session] = {}


def _evict_stale() -> None:
    """Drop sessions whose upload is gone, then the oldest idle ones over the cap."""
    for doc_id in [d for d in _sessions if not has_document(d)]:
        del _sessions[doc_id]
    idle = [d for d, s in _sessions.items() if not s.processing]
    while len(_sessions) >= MAX_SESSIONS and idle:
        del _sessions[idle.pop(0)]


def _restore_saved(session: Session, page_count: int) -> None:
    """Seed a new session from the last saved configuration, if any."""
    config = load_config()
    if config is None:
        return
    session.mode = config.mode
    session.search_text = config.search_text
    selection = config.manual_selection
    if selection is not None and selection.page_index < page_count:
        session.manual_selection = selection
    elif selection is not None:
        logger.warning(
            "Saved selection on page %d does not fit %s (%d pages)",
            selection.page_index, session.doc_id, page_count,
        )


def open_session(doc_id: str, filename: str, page_count: int | None = None) -> Session:
    """Start a session for an upload; with *page_count*, restore the saved config."""
    _evict_stale()
    session = Session(doc_id=doc_id, filename=filename)
    if page_count is not None:
        _restore_saved(session, page_count)
    _sessions[doc_id] = session
    return session


def get_session(doc_id: str) -> Session:
    """Return the session for *doc_id*, recreating it for a stored upload."""
    session = _sessions.get(doc_id)
    if session is not None:
        return session
    if not has_document(doc_id):
        raise FileNotFoundError(f"Document {doc_id} not found")
    return open_session(doc_id, f"{doc_id}.pdf")
