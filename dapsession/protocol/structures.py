"""
Common object shapes used by many requests/responses: Source, Scope, StackFrame,
Thread, Variable, Breakpoint, Module.

Each shape has a ``create_*`` constructor that fills the required fields and
only adds optional fields that were actually given.
"""

from __future__ import annotations

from typing import Any
from typing import TypedDict
from typing import Union

from typing_extensions import NotRequired


class Source(TypedDict):
    """A source is a descriptor for source code."""

    name: str  # The short name of the source
    path: str  # The path of the source to be shown in the UI
    sourceReference: int  # If > 0, the contents must be retrieved through the source request
    origin: NotRequired[str]  # The origin of this source
    adapterData: NotRequired[Any]  # Opaque data the adapter wants the client to round-trip


class Scope(TypedDict):
    """A Scope is a named container for variables."""

    name: str
    variablesReference: int
    expensive: bool


class StackFrame(TypedDict):
    """A Stackframe contains the source location."""

    id: int
    name: str
    source: Source
    line: int
    column: int


class Thread(TypedDict):
    """A Thread."""

    id: int
    name: str


class Variable(TypedDict):
    """A Variable is a name/value pair."""

    name: str
    value: str
    variablesReference: int  # If > 0, the variable is structured


class Breakpoint(TypedDict):
    """Information about a breakpoint created in setBreakpoints or setFunctionBreakpoints."""

    verified: bool  # If true, the breakpoint could be set
    line: NotRequired[int]
    column: NotRequired[int]
    source: NotRequired[Source]


class Module(TypedDict):
    """A Module object represents a row in the modules view."""

    id: Union[int, str]
    name: str


def create_source(
    name: str,
    path: str,
    source_reference: int = 0,
    origin: str | None = None,
    adapter_data: Any = None,
) -> Source:
    source: Source = {"name": name, "path": path, "sourceReference": source_reference}
    if origin:
        source["origin"] = origin
    if adapter_data:
        source["adapterData"] = adapter_data
    return source


def create_scope(name: str, variables_reference: int, expensive: bool = False) -> Scope:
    return {"name": name, "variablesReference": variables_reference, "expensive": expensive}


def create_stack_frame(
    frame_id: int, name: str, source: Source, line: int, column: int
) -> StackFrame:
    return {"id": frame_id, "name": name, "source": source, "line": line, "column": column}


def create_thread(thread_id: int, name: str | None = None) -> Thread:
    """Build a Thread, naming it ``Thread #<id>`` when no name is given."""
    return {"id": thread_id, "name": name or f"Thread #{thread_id}"}


def create_variable(name: str, value: str, variables_reference: int = 0) -> Variable:
    return {"name": name, "value": value, "variablesReference": variables_reference}


def create_breakpoint(
    verified: bool,
    line: int | None = None,
    column: int | None = None,
    source: Source | None = None,
) -> Breakpoint:
    bp: Breakpoint = {"verified": verified}
    if line is not None:
        bp["line"] = line
    if column is not None:
        bp["column"] = column
    if source:
        bp["source"] = source
    return bp


def create_module(module_id: int | str, name: str) -> Module:
    return {"id": module_id, "name": name}
