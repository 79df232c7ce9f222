from __future__ import annotations

import pytest

from address_fixer.errors import BusyError
from address_fixer.models import Match, SavedConfig
from address_fixer.preferences import save_config
from address_fixer import session as session_module
from address_fixer.session import Session, get_session, open_session


def match(x: float = 0) -> Match:
    return Match(page_index=0, x=x, y=0, width=10, height=10)


def test_active_matches_follow_mode() -> None:
    session = Session(doc_id="0123456789abcdef", filename="a.pdf")
    session.matches = [match(1), match(2)]
    session.manual_selection = match(3)

    assert session.active_matches("auto") == [match(1), match(2)]
    assert session.active_matches("manual") == [match(3)]


def test_manual_mode_without_selection_has_nothing() -> None:
    session = Session(doc_id="0123456789abcdef", filename="a.pdf", mode="manual")

    assert session.active_matches() == []


def test_processing_gate_rejects_reentry() -> None:
    session = Session(doc_id="0123456789abcdef", filename="a.pdf")

    with session.processing_gate():
        assert session.processing
        with pytest.raises(BusyError):
            with session.processing_gate():
                pass

    assert not session.processing


def test_processing_gate_released_on_error() -> None:
    session = Session(doc_id="0123456789abcdef", filename="a.pdf")

    with pytest.raises(RuntimeError):
        with session.processing_gate():
            raise RuntimeError("boom")

    assert not session.processing


def test_get_session_returns_opened_session(storage) -> None:
    opened = open_session("00000000000000aa", "lease.pdf")

    assert get_session("00000000000000aa") is opened


def test_get_session_for_stored_upload(storage) -> None:
    (storage / "uploads" / "00000000000000bb.pdf").write_bytes(b"%PDF-1.4\n")

    session = get_session("00000000000000bb")

    assert session.filename == "00000000000000bb.pdf"


def test_get_session_unknown_document(storage) -> None:
    with pytest.raises(FileNotFoundError):
        get_session("00000000000000cc")


def test_get_session_rejects_bad_id(storage) -> None:
    with pytest.raises(ValueError):
        get_session("../etc/passwd")


def _store_upload(storage, doc_id: str) -> None:
    (storage / "uploads" / f"{doc_id}.pdf").write_bytes(b"%PDF-1.4\n")


def test_open_session_restores_saved_config(storage) -> None:
    save_config(SavedConfig(mode="manual", search_text="Old Street", manual_selection=match(3)))

    session = open_session("00000000000000dd", "lease.pdf", page_count=1)

    assert session.mode == "manual"
    assert session.search_text == "Old Street"
    assert session.active_matches() == [match(3)]


def test_open_session_drops_selection_beyond_page_count(storage) -> None:
    selection = Match(page_index=2, x=0, y=0, width=10, height=10)
    save_config(SavedConfig(mode="manual", manual_selection=selection))

    session = open_session("00000000000000dd", "lease.pdf", page_count=2)

    assert session.manual_selection is None


def test_open_session_without_page_count_starts_empty(storage) -> None:
    save_config(SavedConfig(mode="manual", manual_selection=match(3)))

    session = open_session("00000000000000dd", "lease.pdf")

    assert session.mode == "auto"
    assert session.manual_selection is None


def test_sessions_for_removed_uploads_are_dropped(storage) -> None:
    _store_upload(storage, "00000000000000e1")
    open_session("00000000000000e1", "a.pdf")
    (storage / "uploads" / "00000000000000e1.pdf").unlink()

    open_session("00000000000000e2", "b.pdf")

    assert "00000000000000e1" not in session_module._sessions
    with pytest.raises(FileNotFoundError):
        get_session("00000000000000e1")


def test_oldest_idle_sessions_evicted_over_cap(storage, monkeypatch) -> None:
    monkeypatch.setattr("address_fixer.session.MAX_SESSIONS", 2)
    monkeypatch.setattr("address_fixer.session._sessions", {})
    ids = [f"00000000000000f{n}" for n in range(4)]
    for doc_id in ids:
        _store_upload(storage, doc_id)
    open_session(ids[0], "a.pdf").processing = True
    open_session(ids[1], "b.pdf")
    open_session(ids[2], "c.pdf")
    open_session(ids[3], "d.pdf")

    assert list(session_module._sessions) == [ids[0], ids[3]]
