"""Telemetry sinks for error messages.

Error responses carry the full, un-redacted ErrorMessage for the client.
Messages flagged ``sendTelemetry`` are also handed to a sink, which must
render them through :func:`format_pii` with redaction before they leave the
process.
"""

from __future__ import annotations

import logging
from abc import ABC
from abc import abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dapsession.errors import format_pii

if TYPE_CHECKING:
    from dapsession.protocol.messages import ErrorMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TelemetryRecord:
    command: str
    error_id: int
    text: str


def render_for_telemetry(message: ErrorMessage) -> str:
    """Render ``message`` with every non-``_`` placeholder left unsubstituted."""
    return format_pii(message["format"], True, message.get("variables"))


class TelemetrySink(ABC):
    """Receives error messages destined for telemetry."""

    @abstractmethod
    def report_error(self, command: str, message: ErrorMessage) -> None:
        """Render ``message`` with redaction and record it."""


class LoggingTelemetrySink(TelemetrySink):
    """Writes redacted error renderings to the ``dapsession.telemetry`` logger."""

    def __init__(self, telemetry_logger: logging.Logger | None = None) -> None:
        self.logger = telemetry_logger or logger

    def report_error(self, command: str, message: ErrorMessage) -> None:
        self.logger.info(
            "error %s in %s: %s", message["id"], command, render_for_telemetry(message)
        )


class RecordingTelemetrySink(TelemetrySink):
    """Keeps redacted error renderings in memory."""

    def __init__(self) -> None:
        self.records: list[TelemetryRecord] = []

    def report_error(self, command: str, message: ErrorMessage) -> None:
        self.records.append(
            TelemetryRecord(command, message["id"], render_for_telemetry(message))
        )
