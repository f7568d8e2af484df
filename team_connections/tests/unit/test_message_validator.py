"""Tests for inbound WebSocket frame validation."""

import json

import pytest

from team_connections.realtime.message_validator import MessageValidationError, WebSocketMessageValidator


@pytest.fixture
def validator():
    return WebSocketMessageValidator(max_message_size=256)


def test_valid_frame_parsed(validator):
    message = validator.parse_and_validate(json.dumps({"type": "joinSession", "data": {"sessionId": "abc123"}}), "c1")

    assert message.type == "joinSession"
    assert message.data == {"sessionId": "abc123"}


def test_missing_data_defaults_to_empty(validator):
    message = validator.parse_and_validate('{"type": "createSession", "data": null}', "c1")

    assert message.data == {}


def test_oversized_frame_rejected(validator):
    with pytest.raises(MessageValidationError) as exc_info:
        validator.parse_and_validate(json.dumps({"type": "ping", "data": {"pad": "x" * 300}}), "c1")

    assert exc_info.value.error_type == "size_limit_exceeded"


def test_invalid_json_rejected(validator):
    with pytest.raises(MessageValidationError) as exc_info:
        validator.parse_and_validate("{not json", "c1")

    assert exc_info.value.error_type == "json_parse_error"


@pytest.mark.parametrize("raw", ["[1, 2]", '"ping"', "42"])
def test_non_object_rejected(validator, raw):
    with pytest.raises(MessageValidationError) as exc_info:
        validator.parse_and_validate(raw, "c1")

    assert exc_info.value.error_type == "invalid_type"


def test_missing_type_rejected(validator):
    with pytest.raises(MessageValidationError) as exc_info:
        validator.parse_and_validate('{"data": {}}', "c1")

    assert exc_info.value.error_type == "schema_validation_failed"


def test_deeply_nested_frame_rejected(validator):
    nested = {"type": "ping", "data": {"a": {"b": {"c": {"d": {"e": {"f": 1}}}}}}}

    with pytest.raises(MessageValidationError) as exc_info:
        validator.parse_and_validate(json.dumps(nested), "c1")

    assert exc_info.value.error_type == "depth_limit_exceeded"
