"""
WebSocket message validation.

Checks raw frames for size, JSON well-formedness, nesting depth and the outer
``{"type": ..., "data": {...}}`` shape before anything reaches the handlers.
"""

import json
from typing import Any

from pydantic import ValidationError

from ..schemas.realtime import InboundMessage
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


class MessageValidationError(Exception):
    """Raised when message validation fails."""

    def __init__(self, message: str, error_type: str = "validation_error"):
        self.message = message
        self.error_type = error_type
        super().__init__(self.message)


class WebSocketMessageValidator:
    """Validates inbound WebSocket frames."""

    MAX_MESSAGE_SIZE = 10 * 1024
    MAX_JSON_DEPTH = 6

    def __init__(self, max_message_size: int | None = None, max_json_depth: int | None = None):
        self.max_message_size = max_message_size or self.MAX_MESSAGE_SIZE
        self.max_json_depth = max_json_depth or self.MAX_JSON_DEPTH

    def validate_size(self, data: str) -> None:
        """
        Raises:
            MessageValidationError: If the frame exceeds the size limit
        """
        size = len(data.encode("utf-8"))
        if size > self.max_message_size:
            logger.warning("Message size exceeds limit", size=size, max_size=self.max_message_size)
            raise MessageValidationError(
                f"Message size {size} bytes exceeds maximum {self.max_message_size} bytes",
                error_type="size_limit_exceeded",
            )

    def _calculate_depth(self, obj: Any, current_depth: int = 0) -> int:
        if current_depth > self.max_json_depth:
            return current_depth
        if isinstance(obj, dict) and obj:
            return max(self._calculate_depth(v, current_depth + 1) for v in obj.values())
        if isinstance(obj, list) and obj:
            return max(self._calculate_depth(item, current_depth + 1) for item in obj)
        return current_depth

    def validate_depth(self, message: Any) -> None:
        depth = self._calculate_depth(message)
        if depth > self.max_json_depth:
            logger.warning("JSON depth exceeds limit", depth=depth, max_depth=self.max_json_depth)
            raise MessageValidationError(
                f"JSON depth {depth} exceeds maximum {self.max_json_depth}",
                error_type="depth_limit_exceeded",
            )

    def parse_and_validate(self, data: str, connection_id: str) -> InboundMessage:
        """
        Parse and validate a complete WebSocket frame.

        Args:
            data: Raw frame text
            connection_id: Sender, for log context

        Returns:
            InboundMessage: The validated outer frame

        Raises:
            MessageValidationError: If validation fails at any stage
        """
        self.validate_size(data)

        try:
            message = json.loads(data)
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON in message", connection_id=connection_id, error=str(e))
            raise MessageValidationError(f"Invalid JSON: {e}", error_type="json_parse_error") from e

        if not isinstance(message, dict):
            raise MessageValidationError("Message must be a JSON object", error_type="invalid_type")

        self.validate_depth(message)

        try:
            inbound = InboundMessage.model_validate(message)
        except ValidationError as e:
            logger.warning("Schema validation failed", errors=str(e), message_keys=list(message.keys()))
            raise MessageValidationError(
                f"Schema validation failed: {e}",
                error_type="schema_validation_failed",
            ) from e

        logger.debug("Message validation successful", connection_id=connection_id, message_type=inbound.type)
        return inbound
