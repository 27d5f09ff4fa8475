"""Constructors for the events a session sends to the client."""

from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from dapsession.protocol.protocol import ProtocolFactory

if TYPE_CHECKING:
    from dapsession.protocol.messages import Event
    from dapsession.protocol.structures import Breakpoint
    from dapsession.protocol.structures import Module

MODULE_REASONS = ("new", "changed", "removed")


def create_stopped_event(reason: str, thread_id: int, text: str | None = None) -> Event:
    body: dict[str, Any] = {"reason": reason, "threadId": thread_id}
    if text:
        body["text"] = text
    return ProtocolFactory.create_event("stopped", body)


def create_initialized_event() -> Event:
    return ProtocolFactory.create_event("initialized")


def create_terminated_event(restart: bool | None = None) -> Event:
    """Build a ``terminated`` event; ``restart`` is only sent when it is a bool."""
    if isinstance(restart, bool):
        return ProtocolFactory.create_event("terminated", {"restart": restart})
    return ProtocolFactory.create_event("terminated")


def create_exited_event(exit_code: int) -> Event:
    return ProtocolFactory.create_event("exited", {"exitCode": exit_code})


def create_output_event(output: str, category: str = "console") -> Event:
    return ProtocolFactory.create_event("output", {"category": category, "output": output})


def create_thread_event(reason: str, thread_id: int) -> Event:
    return ProtocolFactory.create_event("thread", {"reason": reason, "threadId": thread_id})


def create_breakpoint_event(reason: str, breakpoint: Breakpoint) -> Event:
    return ProtocolFactory.create_event("breakpoint", {"reason": reason, "breakpoint": breakpoint})


def create_module_event(reason: str, module: Module) -> Event:
    if reason not in MODULE_REASONS:
        msg = f"Invalid module event reason: {reason!r}"
        raise ValueError(msg)
    return ProtocolFactory.create_event("module", {"reason": reason, "module": module})
