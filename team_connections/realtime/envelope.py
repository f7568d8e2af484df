"""
Event envelope for outbound WebSocket frames.

Every frame sent to a client has the same schema:
- event_type: str
- timestamp: ISO 8601 UTC with 'Z'
- sequence_number: int (monotonic per process, or per connection manager)
- session_id: optional session code
- data: dict payload
"""

from __future__ import annotations

import itertools
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel

# Fallback counter when no connection manager supplies sequence numbers
_global_sequence = itertools.count(1)


def utc_now_z() -> str:
    """Return current UTC time in ISO 8601 format with 'Z' suffix."""
    return datetime.now(UTC).isoformat(timespec="seconds").replace("+00:00", "Z")


def build_event(
    event_type: str,
    data: dict[str, Any] | BaseModel | None = None,
    *,
    session_id: str | None = None,
    sequence_number: int | None = None,
    connection_manager=None,
) -> dict[str, Any]:
    """
    Create a normalized event envelope.

    Args:
        event_type: Type of event, e.g. ``appState``
        data: Event payload; pydantic models are dumped in JSON mode
        session_id: Optional session code for session-scoped events
        sequence_number: Optional explicit sequence number
        connection_manager: Optional manager whose counter numbers the event
    """
    if sequence_number is not None:
        seq = sequence_number
    elif connection_manager is not None:
        seq = connection_manager.next_sequence()
    else:
        seq = next(_global_sequence)

    if isinstance(data, BaseModel):
        payload = data.model_dump(mode="json")
    else:
        payload = data or {}

    event: dict[str, Any] = {
        "event_type": event_type,
        "timestamp": utc_now_z(),
        "sequence_number": seq,
        "data": payload,
    }
    if session_id is not None:
        event["session_id"] = session_id
    return event
