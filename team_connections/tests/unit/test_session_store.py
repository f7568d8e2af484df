"""Tests for the session registry and idle reclamation."""

import pytest

from team_connections.config.models import DEFAULT_CODE_ALPHABET, SessionConfig
from team_connections.models.session import Participant, Stage
from team_connections.services.session_store import SessionStore


class TestSessionCodes:
    def test_generated_code_uses_unambiguous_alphabet(self, store):
        for _ in range(50):
            code = store.generate_code()
            assert len(code) == 6
            assert set(code) <= set(DEFAULT_CODE_ALPHABET)
            assert not set(code) & set("IO01")

    def test_generate_code_redraws_on_collision(self, clock, monkeypatch):
        store = SessionStore(SessionConfig(code_length=2, code_alphabet="AB"), clock=clock)
        store.get_or_create("AA")
        draws = iter("AAAB")
        monkeypatch.setattr("team_connections.services.session_store.secrets.choice", lambda _alphabet: next(draws))

        assert store.generate_code() == "AB"

    def test_create_session_registers_fresh_session(self, store, clock):
        session = store.create_session()

        assert session.id in store
        assert session.created_at == clock.now
        assert session.current_page is Stage.REGISTRATION
        assert session.participants == []
        assert session.admin_id is None


class TestGetOrCreate:
    def test_creates_zero_state_session(self, store):
        session = store.get_or_create("ABC123")

        assert session.id == "ABC123"
        assert len(store) == 1

    def test_returns_existing_session_unchanged(self, store):
        first = store.get_or_create("ABC123")
        first.participants.append(Participant(id="c1", name="Alice", is_admin=True))

        again = store.get_or_create("ABC123")

        assert again is first
        assert len(again.participants) == 1

    def test_get_unknown_returns_none(self, store):
        assert store.get("NOPE22") is None


class TestSweepIdle:
    def test_empty_session_kept_within_retention(self, store, clock):
        store.get_or_create("ABC123")
        clock.advance(3600)

        assert store.sweep_idle() == []
        assert "ABC123" in store

    def test_empty_session_removed_after_retention(self, store, clock):
        store.get_or_create("ABC123")
        clock.advance(3601)

        assert store.sweep_idle() == ["ABC123"]
        assert "ABC123" not in store

    def test_session_with_participants_never_removed(self, store, clock):
        session = store.get_or_create("ABC123")
        session.participants.append(Participant(id="c1", name="Alice"))
        clock.advance(10 * 24 * 3600)

        assert store.sweep_idle() == []
        assert "ABC123" in store

    def test_sweep_accepts_explicit_reference_time(self, store, clock):
        store.get_or_create("ABC123")

        assert store.sweep_idle(now=clock.now + 7200) == ["ABC123"]


def test_sessions_for_connection_includes_admin_only_registrants(store):
    session = store.get_or_create("ABC123")
    session.registered_sockets.add("admin-only")
    session.admin_id = "admin-only"
    store.get_or_create("XYZ789")

    assert [s.id for s in store.sessions_for_connection("admin-only")] == ["ABC123"]
    assert store.sessions_for_connection("stranger") == []


def test_clear_drops_everything(store):
    store.get_or_create("ABC123")
    store.get_or_create("XYZ789")

    store.clear()

    assert len(store) == 0
    assert store.codes() == []


@pytest.mark.parametrize("alphabet", ["ABCDI", "AAB", "ABC0"])
def test_session_config_rejects_bad_alphabets(alphabet):
    with pytest.raises(ValueError):
        SessionConfig(code_alphabet=alphabet)
