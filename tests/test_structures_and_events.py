"""Tests for value object and event constructors."""

from __future__ import annotations

import pytest

from dapsession.protocol import create_breakpoint
from dapsession.protocol import create_breakpoint_event
from dapsession.protocol import create_exited_event
from dapsession.protocol import create_initialized_event
from dapsession.protocol import create_module
from dapsession.protocol import create_module_event
from dapsession.protocol import create_output_event
from dapsession.protocol import create_scope
from dapsession.protocol import create_source
from dapsession.protocol import create_stack_frame
from dapsession.protocol import create_stopped_event
from dapsession.protocol import create_terminated_event
from dapsession.protocol import create_thread
from dapsession.protocol import create_thread_event
from dapsession.protocol import create_variable


def test_source_minimal():
    assert create_source("app.py", "/src/app.py") == {
        "name": "app.py",
        "path": "/src/app.py",
        "sourceReference": 0,
    }


def test_source_with_origin_and_adapter_data():
    source = create_source("gen.py", "/gen.py", 4, origin="generated", adapter_data={"k": 1})

    assert source["sourceReference"] == 4
    assert source["origin"] == "generated"
    assert source["adapterData"] == {"k": 1}


def test_scope_and_variable_defaults():
    assert create_scope("Locals", 1000) == {
        "name": "Locals",
        "variablesReference": 1000,
        "expensive": False,
    }
    assert create_variable("x", "1") == {"name": "x", "value": "1", "variablesReference": 0}


def test_stack_frame():
    source = create_source("app.py", "/src/app.py")
    frame = create_stack_frame(1, "main", source, 10, 1)

    assert frame == {"id": 1, "name": "main", "source": source, "line": 10, "column": 1}


@pytest.mark.parametrize(("name", "expected"), [("worker", "worker"), (None, "Thread #7"), ("", "Thread #7")])
def test_thread_name(name, expected):
    assert create_thread(7, name) == {"id": 7, "name": expected}


def test_breakpoint_optional_fields():
    assert create_breakpoint(False) == {"verified": False}

    source = create_source("a.py", "/a.py")
    bp = create_breakpoint(True, 0, 3, source)
    assert bp == {"verified": True, "line": 0, "column": 3, "source": source}


def test_module():
    assert create_module("m1", "json") == {"id": "m1", "name": "json"}


def test_stopped_event():
    assert create_stopped_event("breakpoint", 1)["body"] == {"reason": "breakpoint", "threadId": 1}

    event = create_stopped_event("exception", 2, "ValueError: bad")
    assert event["event"] == "stopped"
    assert event["body"]["text"] == "ValueError: bad"


def test_initialized_event_has_no_body():
    assert create_initialized_event() == {"type": "event", "event": "initialized"}


def test_terminated_event_restart_only_when_bool():
    assert "body" not in create_terminated_event()
    assert create_terminated_event(False)["body"] == {"restart": False}
    assert create_terminated_event(True)["body"] == {"restart": True}


def test_exited_and_output_events():
    assert create_exited_event(3)["body"] == {"exitCode": 3}
    assert create_output_event("hello\n")["body"] == {"category": "console", "output": "hello\n"}
    assert create_output_event("oops", "stderr")["body"]["category"] == "stderr"


def test_thread_and_breakpoint_events():
    assert create_thread_event("started", 4)["body"] == {"reason": "started", "threadId": 4}

    bp = create_breakpoint(True, 12)
    event = create_breakpoint_event("changed", bp)
    assert event["event"] == "breakpoint"
    assert event["body"] == {"reason": "changed", "breakpoint": bp}


def test_module_event_reasons():
    module = create_module(1, "os")

    assert create_module_event("new", module)["body"] == {"reason": "new", "module": module}
    with pytest.raises(ValueError, match="Invalid module event reason"):
        create_module_event("loaded", module)
