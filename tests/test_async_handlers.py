"""Coroutine request handlers: concurrency and failure reporting."""

from __future__ import annotations

import asyncio

import pytest

from dapsession.errors import RequestError
from dapsession.session import ERROR_EXCEPTION_IN_DISPATCH
from dapsession.session import DebugSession
from tests.mocks import MockConnection
from tests.mocks import drain
from tests.mocks import make_request


class SlowLaunchSession(DebugSession):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.launch_may_finish = asyncio.Event()

    async def launch_request(self, response, args):
        await self.launch_may_finish.wait()
        response["body"] = {"program": args.get("program")}
        self.send_response(response)


async def _settle():
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_async_handler_does_not_block_later_requests():
    session = SlowLaunchSession()

    session.dispatch_request(make_request("launch", {"program": "app.py"}, seq=1))
    session.dispatch_request(make_request("threads", seq=2))
    await _settle()

    first = drain(session)
    assert [m["request_seq"] for m in first] == [2]

    session.launch_may_finish.set()
    await _settle()

    (launch,) = drain(session)
    assert launch["request_seq"] == 1
    assert launch["body"] == {"program": "app.py"}
    # Sequence numbers follow send order, not request order.
    assert first[0]["seq"] == 1
    assert launch["seq"] == 2


@pytest.mark.asyncio
async def test_async_handler_exception_becomes_internal_error():
    class BrokenSession(DebugSession):
        async def stack_trace_request(self, response, args):
            await asyncio.sleep(0)
            raise KeyError("frame")

    session = BrokenSession()
    session.dispatch_request(make_request("stackTrace", {"threadId": 1}, seq=4))
    await _settle()

    (response,) = drain(session)
    assert response["success"] is False
    assert response["request_seq"] == 4
    error = response["body"]["error"]
    assert error["id"] == ERROR_EXCEPTION_IN_DISPATCH
    assert "KeyError" in error["variables"]["_stack"]


@pytest.mark.asyncio
async def test_async_request_error(telemetry):
    class MissingSourceSession(DebugSession):
        async def source_request(self, response, args):
            raise RequestError("no source", error_id=2100)

    session = MissingSourceSession(telemetry=telemetry)
    session.dispatch_request(make_request("source", {"sourceReference": 3}))
    await _settle()

    (response,) = drain(session)
    assert response["message"] == "no source"
    assert response["body"]["error"] == {"id": 2100, "format": "no source", "showUser": True}
    assert telemetry.records == []


@pytest.mark.asyncio
async def test_async_handler_failure_after_response_is_only_logged():
    class LateFailureSession(DebugSession):
        async def continue_request(self, response, args):
            self.send_response(response)
            await asyncio.sleep(0)
            raise RuntimeError("after the fact")

    session = LateFailureSession()
    session.dispatch_request(make_request("continue", {"threadId": 1}))
    await _settle()

    (response,) = drain(session)
    assert response["success"] is True


@pytest.mark.asyncio
async def test_out_of_order_responses_over_connection():
    session = SlowLaunchSession()
    connection = MockConnection()
    connection.add_request("launch", {"program": "x.py"}, seq=1)
    connection.add_request("threads", seq=2)

    serve_task = asyncio.create_task(session.start(connection))
    await _settle()
    session.launch_may_finish.set()
    await _settle()
    connection.end()
    await asyncio.wait_for(serve_task, timeout=5)

    assert [m["request_seq"] for m in connection.written_messages] == [2, 1]
    assert [m["seq"] for m in connection.written_messages] == [1, 2]


@pytest.mark.asyncio
async def test_reused_seq_still_gets_one_response_per_request(caplog):
    session = SlowLaunchSession()

    with caplog.at_level("WARNING", logger="dapsession.session"):
        session.dispatch_request(make_request("launch", {"program": "a.py"}, seq=7))
        session.dispatch_request(make_request("launch", {"program": "b.py"}, seq=7))
    session.launch_may_finish.set()
    await _settle()

    responses = drain(session)
    assert sorted(r["body"]["program"] for r in responses) == ["a.py", "b.py"]
    assert all(r["request_seq"] == 7 for r in responses)
    assert "reuses the seq" in caplog.text

    # Both requests are answered; a third response is dropped.
    session.send_response({"type": "response", "request_seq": 7, "success": True, "command": "launch"})
    assert drain(session) == []
