"""Shutdown policy and connection lifecycle of a debug session."""

from __future__ import annotations

import asyncio

import pytest

from dapsession.config import SessionConfig
from dapsession.errors import TransportError
from dapsession.session import DebugSession
from tests.mocks import MockConnection
from tests.mocks import drain
from tests.mocks import make_request


@pytest.fixture
def terminations(session):
    calls = []
    session.on_terminate.add_listener(calls.append)
    return calls


# ---------------------------------------------------------------------------
# Shutdown policy
# ---------------------------------------------------------------------------


def test_shutdown_in_stdio_mode_requests_exit(session, terminations):
    session.shutdown()

    assert terminations == [0.1]


def test_shutdown_uses_configured_grace():
    config = SessionConfig(shutdown_grace_seconds=0.5)
    session = DebugSession(config=config)
    calls = []
    session.on_terminate.add_listener(calls.append)

    session.shutdown()

    assert calls == [0.5]


def test_shutdown_in_server_mode_keeps_process(session, terminations):
    session.set_run_as_server(True)

    session.shutdown()

    assert terminations == []


def test_constructor_server_flag():
    session = DebugSession(False, True)

    assert session.config.run_as_server is True
    assert session.config.debugger.lines_start_at_1 is False


def test_exit_requested_only_once(session, terminations):
    session.shutdown()
    session.shutdown()

    assert terminations == [0.1]


def test_disconnect_responds_then_requests_exit(session, terminations):
    session.dispatch_request(make_request("disconnect", {"restart": False}, seq=8))

    (response,) = drain(session)
    assert response["command"] == "disconnect"
    assert response["success"] is True
    assert terminations == [0.1]


def test_set_run_as_server_after_initialize(session):
    session.dispatch_request(make_request("initialize", {"pathFormat": "path"}))

    session.set_run_as_server(True)

    assert session.config.run_as_server is True


# ---------------------------------------------------------------------------
# Connection lifecycle
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_end_of_stream_closes_session():
    session = DebugSession()
    closed = []
    errors = []
    terminations = []
    session.on_close.add_listener(lambda: closed.append(True))
    session.on_error.add_listener(errors.append)
    session.on_terminate.add_listener(terminations.append)

    connection = MockConnection()
    connection.add_request("initialize", {"pathFormat": "path"}, seq=1)
    connection.add_request("threads", seq=2)
    connection.end()

    await asyncio.wait_for(session.start(connection), timeout=5)

    assert closed == [True]
    assert errors == []
    assert connection.closed is True
    assert [m["command"] for m in connection.written_messages] == ["initialize", "threads"]
    # Losing the client ends a stdio session.
    assert terminations == [0.1]


@pytest.mark.asyncio
async def test_transport_fault_reports_error_not_close():
    session = DebugSession()
    closed = []
    errors = []
    session.on_close.add_listener(lambda: closed.append(True))
    session.on_error.add_listener(errors.append)

    fault = TransportError("Content-Length header missing")
    connection = MockConnection()
    connection.fail(fault)

    await asyncio.wait_for(session.start(connection), timeout=5)

    assert errors == [fault]
    assert closed == []
    assert connection.closed is True


@pytest.mark.asyncio
async def test_messages_after_close_are_dropped():
    session = DebugSession()
    connection = MockConnection()
    connection.end()

    await asyncio.wait_for(session.start(connection), timeout=5)
    session.send_event({"type": "event", "event": "output", "body": {"output": "late"}})

    assert drain(session) == []
    assert connection.written_messages == []


@pytest.mark.asyncio
async def test_stop_flushes_queued_messages():
    session = DebugSession()
    connection = MockConnection()

    serve_task = asyncio.create_task(session.start(connection))
    await asyncio.sleep(0.01)
    session.send_event({"type": "event", "event": "initialized"})
    session.stop()
    await asyncio.wait_for(serve_task, timeout=5)

    assert [m["event"] for m in connection.written_messages] == ["initialized"]
    assert session.on_close.fired


@pytest.mark.asyncio
async def test_unexpected_inbound_messages_are_ignored():
    session = DebugSession()
    connection = MockConnection()
    connection.incoming.put_nowait({"seq": 1, "type": "event", "event": "stopped"})
    connection.incoming.put_nowait(
        {"seq": 2, "type": "response", "request_seq": 1, "success": True, "command": "x"}
    )
    connection.add_request("threads", seq=3)
    connection.end()

    await asyncio.wait_for(session.start(connection), timeout=5)

    assert [m["request_seq"] for m in connection.written_messages] == [3]


@pytest.mark.asyncio
async def test_server_mode_session_survives_disconnect():
    session = DebugSession(is_server=True)
    terminations = []
    session.on_terminate.add_listener(terminations.append)

    connection = MockConnection()
    connection.add_request("disconnect", seq=1)
    connection.end()

    await asyncio.wait_for(session.start(connection), timeout=5)

    assert connection.written_messages[0]["command"] == "disconnect"
    assert terminations == []
