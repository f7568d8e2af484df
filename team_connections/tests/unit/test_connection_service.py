"""Tests for connection toggling through the service layer."""

import pytest

from team_connections.exceptions import InvalidConnectionTargetError, MissingSessionIdError, SessionNotFoundError

CODE = "ABC123"


@pytest.fixture
def session(session_service):
    session = session_service.join_session(CODE)
    session_service.register(CODE, "alice", "Alice")
    session_service.register(CODE, "bob", "Bob")
    return session


def test_toggle_returns_symmetric_snapshot(connection_service, session):
    snapshot = connection_service.toggle(CODE, "alice", "bob")

    assert snapshot == {"alice": ["bob"], "bob": ["alice"]}
    assert session.connections.is_symmetric()


def test_toggle_twice_disconnects(connection_service, session):
    connection_service.toggle(CODE, "alice", "bob")

    snapshot = connection_service.toggle(CODE, "bob", "alice")

    assert snapshot == {"alice": [], "bob": []}


def test_snapshot_is_detached_from_session_state(connection_service, session):
    snapshot = connection_service.toggle(CODE, "alice", "bob")
    snapshot["alice"].append("mallory")

    assert session.connections.neighbours("alice") == ["bob"]


def test_self_target_rejected_without_mutation(connection_service, session):
    with pytest.raises(InvalidConnectionTargetError):
        connection_service.toggle(CODE, "alice", "alice")

    assert session.connections.to_dict() == {"alice": [], "bob": []}


def test_unknown_target_gets_empty_entry_first(connection_service, session):
    snapshot = connection_service.toggle(CODE, "alice", "ghost")

    assert snapshot["ghost"] == ["alice"]


def test_unknown_session_raises(connection_service):
    with pytest.raises(SessionNotFoundError):
        connection_service.toggle("NOPE22", "alice", "bob")


def test_missing_code_raises(connection_service):
    with pytest.raises(MissingSessionIdError):
        connection_service.toggle(None, "alice", "bob")
