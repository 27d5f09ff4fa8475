"""
Debug session: request dispatch, error responses and coordinate translation.

``DebugSession`` is the base class a concrete debug adapter subclasses. Every
request the protocol defines is routed to an overridable ``*_request``
method; the defaults answer with an empty success response so a minimal
adapter only overrides what it supports. Commands outside the known set go to
:meth:`DebugSession.custom_request`.

Handlers answer by calling :meth:`DebugSession.send_response` or
:meth:`DebugSession.send_error_response` exactly once. A handler may be a
coroutine function; the dispatcher schedules it and returns immediately, so
several requests can be in flight and their responses may go out in any
order.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import Union

from dapsession import coordinates
from dapsession.config import SessionConfig
from dapsession.errors import ErrorDestination
from dapsession.errors import RequestError
from dapsession.errors import describe_exception
from dapsession.errors import format_pii
from dapsession.protocol.protocol import ProtocolFactory
from dapsession.telemetry import LoggingTelemetrySink
from dapsession.transport.protocol_server import ProtocolServer
from dapsession.utils.events import Signal

if TYPE_CHECKING:
    from collections.abc import Awaitable
    from collections.abc import Sequence

    from dapsession.protocol.messages import Capabilities
    from dapsession.protocol.messages import ErrorMessage
    from dapsession.protocol.messages import Event
    from dapsession.protocol.messages import InitializeRequestArguments
    from dapsession.protocol.messages import Request
    from dapsession.protocol.messages import Response
    from dapsession.telemetry import TelemetrySink

    HandlerResult = Union[None, Awaitable[None]]

__all__ = [
    "ERROR_EXCEPTION_IN_DISPATCH",
    "ERROR_UNRECOGNIZED_REQUEST",
    "ERROR_UNSUPPORTED_PATH_FORMAT",
    "REQUEST_HANDLERS",
    "DebugSession",
]

logger = logging.getLogger(__name__)

ERROR_UNRECOGNIZED_REQUEST = 1014
ERROR_EXCEPTION_IN_DISPATCH = 1104
ERROR_UNSUPPORTED_PATH_FORMAT = 2018

# Command name -> handler method. Anything else goes to custom_request.
REQUEST_HANDLERS: dict[str, str] = {
    "initialize": "initialize_request",
    "launch": "launch_request",
    "attach": "attach_request",
    "disconnect": "disconnect_request",
    "setBreakpoints": "set_breakpoints_request",
    "setFunctionBreakpoints": "set_function_breakpoints_request",
    "setExceptionBreakpoints": "set_exception_breakpoints_request",
    "configurationDone": "configuration_done_request",
    "continue": "continue_request",
    "next": "next_request",
    "stepIn": "step_in_request",
    "stepOut": "step_out_request",
    "stepBack": "step_back_request",
    "pause": "pause_request",
    "stackTrace": "stack_trace_request",
    "scopes": "scopes_request",
    "variables": "variables_request",
    "setVariable": "set_variable_request",
    "source": "source_request",
    "threads": "threads_request",
    "evaluate": "evaluate_request",
}


class DebugSession(ProtocolServer):
    """Session layer between a DAP client and a concrete debugger."""

    def __init__(
        self,
        debugger_lines_and_columns_start_at_1: bool | None = None,
        is_server: bool | None = None,
        *,
        config: SessionConfig | None = None,
        telemetry: TelemetrySink | None = None,
    ) -> None:
        super().__init__()
        self.config = config or SessionConfig()
        if debugger_lines_and_columns_start_at_1 is not None:
            self.config.debugger.lines_start_at_1 = debugger_lines_and_columns_start_at_1
            self.config.debugger.columns_start_at_1 = debugger_lines_and_columns_start_at_1
        if is_server is not None:
            self.config.run_as_server = is_server

        self.telemetry: TelemetrySink = telemetry or LoggingTelemetrySink()

        # Fired with the grace delay (seconds) when the process should exit.
        self.on_terminate = Signal("terminate", one_shot=True)

        self._handshake_done = False
        # request seq -> number of dispatched requests still owed a response
        self._in_flight: dict[int, int] = {}
        self._handler_tasks: set[asyncio.Future[Any]] = set()

        self.on_close.add_listener(self.shutdown)
        self.on_error.add_listener(lambda error: self.shutdown())

    @classmethod
    def run(cls, argv: Sequence[str] | None = None) -> int:
        """Start this session class in stdio or server mode (see :mod:`dapsession.runner`)."""
        from dapsession.runner import run  # noqa: PLC0415

        return run(cls, argv)

    # ---- Configuration -----------------------------------------------------

    def _conventions_locked(self, setting: str) -> bool:
        if self._handshake_done:
            logger.warning("Ignoring %s after the initialize request", setting)
            return True
        return False

    def set_debugger_path_format(self, path_format: str) -> None:
        if not self._conventions_locked("debugger path format"):
            self.config.debugger.paths_are_uris = path_format != "path"

    def set_debugger_lines_start_at_1(self, enable: bool) -> None:
        if not self._conventions_locked("debugger line base"):
            self.config.debugger.lines_start_at_1 = enable

    def set_debugger_columns_start_at_1(self, enable: bool) -> None:
        if not self._conventions_locked("debugger column base"):
            self.config.debugger.columns_start_at_1 = enable

    def set_run_as_server(self, enable: bool) -> None:
        self.config.run_as_server = enable

    # ---- Lifecycle ---------------------------------------------------------

    def shutdown(self) -> None:
        """End the session.

        In server mode the host process keeps serving other connections, so
        nothing happens. Otherwise ``on_terminate`` asks the process to exit
        after the grace delay, giving the last response time to flush.
        """
        if self.config.run_as_server:
            logger.info("process exit ignored in server mode")
            return
        self.on_terminate.emit(self.config.shutdown_grace_seconds)

    # ---- Sending -----------------------------------------------------------

    def send_response(self, response: Response) -> None:
        """Send the one response for a dispatched request."""
        request_seq = response["request_seq"]
        if request_seq not in self._in_flight:
            logger.warning(
                "Dropping response to request %s (%s): already answered or unknown",
                request_seq,
                response["command"],
            )
            return
        self._release(request_seq)
        logger.debug(
            "Sending response to %s (request_seq: %s, success: %s)",
            response["command"],
            request_seq,
            response["success"],
        )
        self.send_message(response)  # type: ignore[arg-type]

    def send_event(self, event: Event) -> None:
        self.send_message(event)  # type: ignore[arg-type]

    def send_error_response(
        self,
        response: Response,
        code_or_message: int | ErrorMessage,
        format: str | None = None,  # noqa: A002
        variables: dict[str, str] | None = None,
        destination: ErrorDestination = ErrorDestination.USER,
    ) -> None:
        """Fail ``response`` with an ErrorMessage and send it.

        A numeric code is combined with ``format``, ``variables`` and
        ``destination`` into a new ErrorMessage; a prebuilt ErrorMessage is
        used as is and the other arguments are ignored. ``response.message``
        gets the user rendering (no redaction) and ``body.error`` the full
        ErrorMessage. Telemetry-flagged messages also go to the telemetry
        sink, which renders them with redaction.
        """
        if isinstance(code_or_message, int):
            message = ProtocolFactory.create_error_message(
                code_or_message, format or "", variables, destination
            )
        else:
            message = code_or_message

        response["success"] = False
        response["message"] = format_pii(message["format"], False, message.get("variables"))
        if not response.get("body"):
            response["body"] = {}
        response["body"]["error"] = message

        if message.get("sendTelemetry"):
            try:
                self.telemetry.report_error(response["command"], message)
            except Exception:
                logger.exception("Telemetry sink failed")

        self.send_response(response)

    # ---- Dispatch ----------------------------------------------------------

    def _claim(self, request_seq: int, command: str) -> None:
        pending = self._in_flight.get(request_seq, 0)
        if pending:
            logger.warning(
                "Request %s (%s) reuses the seq of a request still in flight",
                request_seq,
                command,
            )
        self._in_flight[request_seq] = pending + 1

    def _release(self, request_seq: int) -> None:
        pending = self._in_flight.pop(request_seq) - 1
        if pending:
            self._in_flight[request_seq] = pending

    def dispatch_request(self, request: Request) -> None:
        """Route ``request`` to its handler.

        Never raises: handler failures become error responses.
        """
        response = ProtocolFactory.create_response(request)
        self._claim(request["seq"], request["command"])
        command = request["command"]

        try:
            result = self._route(command, response, request.get("arguments"))
            if inspect.isawaitable(result):
                self._track_handler(response, result)
        except Exception as e:
            self._fail_dispatch(response, e)

    def _route(self, command: str, response: Response, arguments: Any) -> HandlerResult:
        if command == "initialize":
            return self._dispatch_initialize(response, arguments or {})

        method_name = REQUEST_HANDLERS.get(command)
        if method_name is None:
            return self.custom_request(command, response, arguments)

        handler = getattr(self, method_name)
        if command == "threads":
            return handler(response)
        return handler(response, arguments or {})

    def _dispatch_initialize(
        self, response: Response, args: InitializeRequestArguments
    ) -> HandlerResult:
        if args.get("pathFormat") != "path":
            self.send_error_response(
                response,
                ERROR_UNSUPPORTED_PATH_FORMAT,
                "debug adapter only supports native paths",
                None,
                ErrorDestination.TELEMETRY,
            )
            return None

        self.config.client.update_from_initialize(args)
        self._handshake_done = True
        response["body"] = {}
        return self.initialize_request(response, args)

    def _track_handler(self, response: Response, awaitable: Awaitable[None]) -> None:
        task = asyncio.ensure_future(awaitable)
        self._handler_tasks.add(task)
        task.add_done_callback(functools.partial(self._handler_done, response))

    def _handler_done(self, response: Response, task: asyncio.Future[Any]) -> None:
        self._handler_tasks.discard(task)
        if task.cancelled():
            logger.debug("Handler for %s was cancelled", response["command"])
            return
        error = task.exception()
        if error is not None:
            self._fail_dispatch(response, error)

    def _fail_dispatch(self, response: Response, error: BaseException) -> None:
        command = response["command"]
        if response["request_seq"] not in self._in_flight:
            logger.error(
                "Handler for %s failed after responding", command, exc_info=error
            )
            return

        if isinstance(error, RequestError):
            logger.info("Request %s failed: %s", command, error)
            self.send_error_response(
                response, error.error_id, error.format, error.variables, error.destination
            )
            return

        logger.error("Error handling request %s", command, exc_info=error)
        self.send_error_response(
            response,
            ERROR_EXCEPTION_IN_DISPATCH,
            "{_stack}",
            describe_exception(error),
            ErrorDestination.TELEMETRY,
        )

    # ---- Request handlers --------------------------------------------------

    def initialize_request(
        self, response: Response, args: InitializeRequestArguments
    ) -> HandlerResult:
        """Advertise the capabilities of this (do-nothing) adapter."""
        capabilities: Capabilities = {
            "supportsConditionalBreakpoints": False,
            "supportsFunctionBreakpoints": False,
            "supportsConfigurationDoneRequest": True,
            "supportsEvaluateForHovers": False,
            "supportsStepBack": False,
            "supportsSetVariable": False,
        }
        response["body"].update(capabilities)
        self.send_response(response)

    def disconnect_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)
        self.shutdown()

    def launch_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def attach_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def set_breakpoints_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def set_function_breakpoints_request(
        self, response: Response, args: dict[str, Any]
    ) -> HandlerResult:
        self.send_response(response)

    def set_exception_breakpoints_request(
        self, response: Response, args: dict[str, Any]
    ) -> HandlerResult:
        self.send_response(response)

    def configuration_done_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def continue_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def next_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def step_in_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def step_out_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def step_back_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def pause_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def stack_trace_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def scopes_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def variables_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def set_variable_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def source_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def threads_request(self, response: Response) -> HandlerResult:
        self.send_response(response)

    def evaluate_request(self, response: Response, args: dict[str, Any]) -> HandlerResult:
        self.send_response(response)

    def custom_request(self, command: str, response: Response, args: Any) -> HandlerResult:
        """Override this hook to implement adapter-specific requests."""
        self.send_error_response(
            response,
            ERROR_UNRECOGNIZED_REQUEST,
            "unrecognized request",
            None,
            ErrorDestination.TELEMETRY,
        )

    # ---- Coordinate translation --------------------------------------------

    def convert_client_line_to_debugger(self, line: int) -> int:
        return coordinates.convert_client_line_to_debugger(
            line, self.config.client.lines_start_at_1, self.config.debugger.lines_start_at_1
        )

    def convert_debugger_line_to_client(self, line: int) -> int:
        return coordinates.convert_debugger_line_to_client(
            line, self.config.client.lines_start_at_1, self.config.debugger.lines_start_at_1
        )

    def convert_client_column_to_debugger(self, column: int) -> int:
        return coordinates.convert_client_column_to_debugger(
            column, self.config.client.columns_start_at_1, self.config.debugger.columns_start_at_1
        )

    def convert_debugger_column_to_client(self, column: int) -> int:
        return coordinates.convert_debugger_column_to_client(
            column, self.config.client.columns_start_at_1, self.config.debugger.columns_start_at_1
        )

    def convert_client_path_to_debugger(self, client_path: str) -> str:
        return coordinates.convert_client_path_to_debugger(
            client_path, self.config.client.paths_are_uris, self.config.debugger.paths_are_uris
        )

    def convert_debugger_path_to_client(self, debugger_path: str) -> str:
        return coordinates.convert_debugger_path_to_client(
            debugger_path, self.config.client.paths_are_uris, self.config.debugger.paths_are_uris
        )
