"""
Debug Adapter Protocol message parsing and construction.

``ProtocolHandler`` turns inbound JSON text into validated message dicts.
``ProtocolFactory`` builds the outbound shapes the session needs: response
shells correlated to a request, events and error messages. Sequence numbers
are not assigned here; the transport stamps ``seq`` when a message is sent.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import cast

from dapsession.errors import ErrorDestination
from dapsession.errors import ProtocolError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dapsession.protocol.messages import ErrorMessage
    from dapsession.protocol.messages import Event
    from dapsession.protocol.messages import ProtocolMessage
    from dapsession.protocol.messages import Request
    from dapsession.protocol.messages import Response

logger = logging.getLogger(__name__)


class ProtocolFactory:
    """Builds outbound Debug Adapter Protocol messages."""

    @staticmethod
    def create_response(request: Request) -> Response:
        """Create a success response shell for ``request``.

        The shell copies the request's sequence number and command; handlers
        fill in ``body`` (or flip ``success``) before sending it.
        """
        return {
            "type": "response",
            "request_seq": request["seq"],
            "success": True,
            "command": request["command"],
        }

    @staticmethod
    def create_event(event_type: str, body: dict[str, Any] | None = None) -> Event:
        event: Event = {"type": "event", "event": event_type}
        if body is not None:
            event["body"] = body
        return event

    @staticmethod
    def create_error_message(
        error_id: int,
        format: str,  # noqa: A002
        variables: Mapping[str, str] | None = None,
        destination: ErrorDestination = ErrorDestination.USER,
    ) -> ErrorMessage:
        message: ErrorMessage = {"id": error_id, "format": format}
        if variables:
            message["variables"] = dict(variables)
        if ErrorDestination.USER in destination:
            message["showUser"] = True
        if ErrorDestination.TELEMETRY in destination:
            message["sendTelemetry"] = True
        return message


class ProtocolHandler:
    """
    Parses and validates inbound Debug Adapter Protocol messages.

    Only the envelope is checked; argument schemas belong to the handlers.
    """

    def parse_message(self, message_json: str | bytes) -> ProtocolMessage:
        """
        Parse a JSON message into a protocol message dict.

        Args:
            message_json: JSON text containing the protocol message

        Returns:
            The validated message

        Raises:
            ProtocolError: If the message is invalid or cannot be parsed
        """
        try:
            message = json.loads(message_json)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            msg = f"Failed to parse message as JSON: {e}"
            raise ProtocolError(msg, cause=e) from e

        if not isinstance(message, dict):
            raise ProtocolError("Message is not a JSON object")

        if "seq" not in message:
            raise ProtocolError("Message missing 'seq' field")

        if "type" not in message:
            raise ProtocolError("Message missing 'type' field", sequence=message["seq"])

        msg_type = message["type"]

        if msg_type == "request":
            return self._validate_request(message)

        if msg_type == "response":
            return self._validate_response(message)

        if msg_type == "event":
            return self._validate_event(message)

        raise ProtocolError(f"Invalid message type: {msg_type}", sequence=message["seq"])  # noqa: EM102

    def encode_message(self, message: Mapping[str, Any]) -> bytes:
        """Serialize an outbound message to UTF-8 JSON."""
        return json.dumps(message, separators=(",", ":")).encode("utf-8")

    def _validate_request(self, message: dict[str, Any]) -> ProtocolMessage:
        if not isinstance(message.get("command"), str):
            msg = "Request message missing 'command' field"
            raise ProtocolError(msg, sequence=message["seq"])

        # Unknown commands are accepted; routing decides what to do with them.
        return cast("ProtocolMessage", message)

    def _validate_response(self, message: dict[str, Any]) -> ProtocolMessage:
        for key in ("request_seq", "success", "command"):
            if key not in message:
                msg = f"Response message missing '{key}' field"
                raise ProtocolError(msg, sequence=message["seq"])

        return cast("ProtocolMessage", message)

    def _validate_event(self, message: dict[str, Any]) -> ProtocolMessage:
        if "event" not in message:
            msg = "Event message missing 'event' field"
            raise ProtocolError(msg, sequence=message["seq"])

        return cast("ProtocolMessage", message)
