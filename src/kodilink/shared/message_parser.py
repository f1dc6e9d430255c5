"""JSON-RPC frame handling for the player connection.

Decodes raw text frames into payload dicts and tells replies apart from
pushed notifications. Typed parsing of notification payloads lives with the
protocol models.
"""

import json
from typing import Any

from kodilink.protocol.base import REQUEST_ID


def parse_json_message(raw: str | bytes) -> dict[str, Any] | None:
    """Parse a raw frame as a JSON message.

    Args:
        raw: Text or binary frame received from the player

    Returns:
        Parsed message dict, or None if invalid/should be ignored
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None

    raw = raw.strip()
    if not raw:
        return None

    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(message, dict):
        return None
    return message


def serialize_message(message: dict[str, Any]) -> str:
    """Serialize message to a JSON text frame.

    Raises:
        ValueError: If the message can't be represented as JSON
    """
    try:
        return json.dumps(message, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Failed to serialize message to JSON: {e}") from e


class MessageParser:
    """Classifies decoded payloads coming from the player."""

    def is_valid_response(self, payload: dict[str, Any]) -> bool:
        """Check if payload is a JSON-RPC reply with a result or an error."""
        has_valid_id = payload.get("id") is not None and isinstance(
            payload.get("id"), int | str
        )
        has_result = "result" in payload
        has_error = "error" in payload
        return has_valid_id and (has_result ^ has_error)

    def is_reply_to_request(self, payload: dict[str, Any]) -> bool:
        """Check if payload is a successful reply to one of our requests."""
        return (
            self.is_valid_response(payload)
            and payload["id"] == REQUEST_ID
            and "result" in payload
        )

    def is_valid_notification(self, payload: dict[str, Any]) -> bool:
        """Check if payload is a JSON-RPC notification."""
        return isinstance(payload.get("method"), str) and "id" not in payload
