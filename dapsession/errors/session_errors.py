"""Exception hierarchy for the debug session layer.

Handlers fail a request by raising :class:`RequestError`; the dispatcher turns
it into an error response. Any other exception that reaches the dispatcher is
reported as an internal error (see :func:`describe_exception`).
"""

from __future__ import annotations

import logging
import traceback
from typing import Any

from dapsession.errors.formatting import ErrorDestination

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Base exception for all session-layer errors.

    ``details`` holds structured context for log records; ``cause`` is the
    lower-level exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause!s})"
        return self.message


class ConfigurationError(SessionError):
    """Raised when the session configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details=details, **kwargs)
        self.config_key = config_key


class ProtocolError(SessionError):
    """Raised when an inbound message violates the protocol envelope."""

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        sequence: int | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if command:
            details["command"] = command
        if sequence is not None:
            details["sequence"] = sequence
        super().__init__(message, details=details, **kwargs)
        self.command = command
        self.sequence = sequence


class TransportError(SessionError):
    """Raised when the underlying stream cannot be read or written."""


class RequestError(SessionError):
    """Typed failure result raised by a request handler.

    Carries everything needed to build the error message of the response:
    the numeric id, the ``{placeholder}`` template, its variables and the
    destination flags.
    """

    def __init__(
        self,
        message: str,
        *,
        error_id: int,
        format: str | None = None,  # noqa: A002
        variables: dict[str, str] | None = None,
        destination: ErrorDestination = ErrorDestination.USER,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        details["error_id"] = error_id
        super().__init__(message, details=details, **kwargs)
        self.error_id = error_id
        self.format = format if format is not None else message
        self.variables = variables
        self.destination = destination


def describe_exception(error: BaseException) -> dict[str, str]:
    """Return telemetry-safe variables describing ``error``.

    Both keys start with ``_`` so they survive PII redaction.
    """
    stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    return {"_exception": str(error), "_stack": stack}
