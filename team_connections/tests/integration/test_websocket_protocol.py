"""End-to-end tests of the WebSocket session protocol."""


def receive_until(websocket, event_type: str, limit: int = 10) -> dict:
    """Read frames until one of ``event_type`` arrives."""
    for _ in range(limit):
        frame = websocket.receive_json()
        if frame.get("event_type") == event_type:
            return frame
    raise AssertionError(f"no {event_type} frame within {limit} frames")


def send(websocket, message_type, **data):
    websocket.send_json({"type": message_type, "data": data})


def connect(websocket) -> str:
    """Consume the greeting frame and return the assigned connection id."""
    frame = websocket.receive_json()
    assert frame["event_type"] == "connected"
    return frame["data"]["connectionId"]


def join(websocket, code: str) -> dict:
    """Join ``code`` and return the appState snapshot the join produced."""
    send(websocket, "joinSession", sessionId=code)
    state = websocket.receive_json()
    assert state["event_type"] == "appState"
    assert websocket.receive_json()["event_type"] == "firstUserStatus"
    assert websocket.receive_json()["event_type"] == "sessionJoined"
    return state


def test_connected_frame_has_envelope_fields(client):
    with client.websocket_connect("/ws") as ws:
        frame = ws.receive_json()

    assert frame["event_type"] == "connected"
    assert frame["data"]["connectionId"]
    assert frame["timestamp"].endswith("Z")
    assert isinstance(frame["sequence_number"], int)


def test_create_session_returns_code(client):
    with client.websocket_connect("/ws") as ws:
        connect(ws)
        send(ws, "createSession")
        frame = ws.receive_json()

    assert frame["event_type"] == "sessionCreated"
    assert len(frame["data"]["sessionId"]) == 6
    assert frame["session_id"] == frame["data"]["sessionId"]


def test_join_unknown_code_creates_session(client):
    with client.websocket_connect("/ws") as ws:
        connect(ws)
        send(ws, "joinSession", sessionId="team42")

        state = ws.receive_json()
        first_user = ws.receive_json()
        joined = ws.receive_json()

    assert state["event_type"] == "appState"
    assert state["data"] == {
        "id": "TEAM42",
        "participants": [],
        "connections": {},
        "currentPage": "registration",
        "adminId": None,
    }
    assert first_user["event_type"] == "firstUserStatus"
    assert first_user["data"] == {"status": True}
    assert joined["data"] == {"sessionId": "TEAM42"}


def test_join_without_session_id_reports_session_error(client):
    with client.websocket_connect("/ws") as ws:
        connect(ws)
        send(ws, "joinSession")
        frame = ws.receive_json()

    assert frame["event_type"] == "sessionError"
    assert frame["data"]["message"]


def test_full_workshop_flow(client):
    with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
        alice_id = connect(alice)
        bob_id = connect(bob)

        join(alice, "TEAM42")
        send(alice, "registerParticipant", sessionId="TEAM42", name="Alice")
        state = alice.receive_json()
        assert state["event_type"] == "appState"
        assert state["data"]["adminId"] == alice_id
        assert alice.receive_json()["event_type"] == "adminStatus"
        assert alice.receive_json()["event_type"] == "registrationSuccess"

        bob_state = join(bob, "TEAM42")
        assert [p["name"] for p in bob_state["data"]["participants"]] == ["Alice"]
        send(bob, "registerParticipant", sessionId="TEAM42", name="Bob")
        assert bob.receive_json()["event_type"] == "appState"
        assert bob.receive_json()["event_type"] == "registrationSuccess"
        roster = alice.receive_json()
        assert [p["name"] for p in roster["data"]["participants"]] == ["Alice", "Bob"]

        send(alice, "advancePage", sessionId="TEAM42")
        for ws in (alice, bob):
            frame = ws.receive_json()
            assert frame["event_type"] == "appState"
            assert frame["data"]["currentPage"] == "connections"

        send(bob, "toggleConnection", sessionId="TEAM42", targetParticipantId=alice_id)
        for ws in (alice, bob):
            frame = ws.receive_json()
            assert frame["event_type"] == "connectionsUpdate"
            assert frame["data"]["connections"] == {alice_id: [bob_id], bob_id: [alice_id]}

        stats = client.get("/api/sessions/TEAM42/statistics").json()
        assert stats["actualConnections"] == 1
        assert stats["teamIntegrationRate"] == 100.0


def test_non_admin_commands_are_ignored(client):
    with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
        connect(alice)
        connect(bob)
        join(alice, "TEAM42")
        send(alice, "registerParticipant", sessionId="TEAM42", name="Alice")
        receive_until(alice, "registrationSuccess")
        join(bob, "TEAM42")
        send(bob, "registerParticipant", sessionId="TEAM42", name="Bob")
        receive_until(bob, "registrationSuccess")

        send(bob, "advancePage", sessionId="TEAM42")
        send(bob, "resetAll", sessionId="TEAM42")
        send(bob, "ping")

        assert bob.receive_json()["event_type"] == "pong"

        snapshot = client.get("/api/sessions/TEAM42").json()
        assert snapshot["currentPage"] == "registration"
        assert [p["name"] for p in snapshot["participants"]] == ["Alice", "Bob"]


def test_duplicate_name_rejected_with_registration_error(client):
    with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as impostor:
        connect(alice)
        connect(impostor)
        join(alice, "TEAM42")
        send(alice, "registerParticipant", sessionId="TEAM42", name="Alice")
        receive_until(alice, "registrationSuccess")

        join(impostor, "TEAM42")
        send(impostor, "registerParticipant", sessionId="TEAM42", name="Alice")
        frame = impostor.receive_json()

    assert frame["event_type"] == "registrationError"
    assert frame["data"]["message"]


def test_toggle_self_reports_connection_error(client):
    with client.websocket_connect("/ws") as ws:
        own_id = connect(ws)
        join(ws, "TEAM42")
        send(ws, "registerParticipant", sessionId="TEAM42", name="Alice")
        receive_until(ws, "registrationSuccess")

        send(ws, "toggleConnection", sessionId="TEAM42", targetParticipantId=own_id)
        frame = ws.receive_json()

    assert frame["event_type"] == "connectionError"


def test_reset_broadcasts_fresh_state(client):
    with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
        connect(alice)
        connect(bob)
        join(alice, "TEAM42")
        send(alice, "registerParticipant", sessionId="TEAM42", name="Alice")
        receive_until(alice, "registrationSuccess")
        join(bob, "TEAM42")

        send(alice, "resetAll", sessionId="TEAM42")
        for ws in (alice, bob):
            state = receive_until(ws, "appState")
            assert state["data"]["participants"] == []
            assert state["data"]["adminId"] is None
            assert ws.receive_json()["event_type"] == "resetComplete"
            first_user = ws.receive_json()
            assert first_user["event_type"] == "firstUserStatus"
            assert first_user["data"]["status"] is True


def test_admin_disconnect_promotes_next_participant(client):
    with client.websocket_connect("/ws") as bob:
        bob_id = connect(bob)
        with client.websocket_connect("/ws") as alice:
            connect(alice)
            join(alice, "TEAM42")
            send(alice, "registerParticipant", sessionId="TEAM42", name="Alice")
            receive_until(alice, "registrationSuccess")
            join(bob, "TEAM42")
            send(bob, "registerParticipant", sessionId="TEAM42", name="Bob")
            receive_until(bob, "registrationSuccess")

        state = receive_until(bob, "appState")
        assert state["data"]["adminId"] == bob_id
        assert [p["name"] for p in state["data"]["participants"]] == ["Bob"]
        assert bob.receive_json()["event_type"] == "adminStatus"


def test_unknown_command_reports_error(client):
    with client.websocket_connect("/ws") as ws:
        connect(ws)
        send(ws, "launchRockets")
        frame = ws.receive_json()

    assert frame["event_type"] == "error"
    assert frame["error_type"] == "invalid_command"


def test_malformed_json_reports_error_and_keeps_connection(client):
    with client.websocket_connect("/ws") as ws:
        connect(ws)
        ws.send_text("{not json")
        frame = ws.receive_json()
        send(ws, "ping")
        pong = ws.receive_json()

    assert frame["event_type"] == "error"
    assert frame["error_type"] == "invalid_format"
    assert pong["event_type"] == "pong"
