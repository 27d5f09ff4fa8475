"""Core protocol message types.

This module contains the Request/Response/Event TypedDicts exchanged with the
client, the ErrorMessage carried in error responses, and the shapes of the
``initialize`` handshake.
"""

from __future__ import annotations

from typing import Any
from typing import Literal
from typing import TypedDict

from typing_extensions import NotRequired

# Type for the top-level 'type' field in protocol messages.
MessageType = Literal["request", "response", "event"]


class ProtocolMessage(TypedDict):
    """Base class of requests, responses, and events."""

    seq: NotRequired[int]
    type: MessageType


class Request(TypedDict):
    """A client initiated request."""

    seq: int
    type: Literal["request"]
    command: str
    arguments: NotRequired[Any]


class Response(TypedDict):
    """Response for a request.

    ``seq`` is absent until the transport stamps the message on send.
    """

    seq: NotRequired[int]
    type: Literal["response"]
    request_seq: int
    success: bool
    command: str
    message: NotRequired[str]
    body: NotRequired[Any]


class Event(TypedDict):
    """A debug adapter initiated event."""

    seq: NotRequired[int]
    type: Literal["event"]
    event: str
    body: NotRequired[Any]


class ErrorMessage(TypedDict):
    """A structured message object used to return errors from requests."""

    id: int  # Unique identifier for the message
    format: str  # Template with {name} placeholders; names starting with '_' are not PII
    variables: NotRequired[dict[str, str]]
    showUser: NotRequired[bool]
    sendTelemetry: NotRequired[bool]


class InitializeRequestArguments(TypedDict, total=False):
    """Arguments for the 'initialize' request."""

    clientID: str
    clientName: str
    adapterID: str
    locale: str
    linesStartAt1: bool
    columnsStartAt1: bool
    pathFormat: str  # 'path' or 'uri'
    supportsVariableType: bool
    supportsVariablePaging: bool
    supportsRunInTerminalRequest: bool


class Capabilities(TypedDict, total=False):
    """Capabilities advertised in the 'initialize' response body."""

    supportsConfigurationDoneRequest: bool
    supportsFunctionBreakpoints: bool
    supportsConditionalBreakpoints: bool
    supportsEvaluateForHovers: bool
    supportsStepBack: bool
    supportsSetVariable: bool
