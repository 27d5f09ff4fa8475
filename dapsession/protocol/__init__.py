"""Debug Adapter Protocol message model."""

from dapsession.protocol.events import create_breakpoint_event
from dapsession.protocol.events import create_exited_event
from dapsession.protocol.events import create_initialized_event
from dapsession.protocol.events import create_module_event
from dapsession.protocol.events import create_output_event
from dapsession.protocol.events import create_stopped_event
from dapsession.protocol.events import create_terminated_event
from dapsession.protocol.events import create_thread_event
from dapsession.protocol.protocol import ProtocolFactory
from dapsession.protocol.protocol import ProtocolHandler
from dapsession.protocol.structures import create_breakpoint
from dapsession.protocol.structures import create_module
from dapsession.protocol.structures import create_scope
from dapsession.protocol.structures import create_source
from dapsession.protocol.structures import create_stack_frame
from dapsession.protocol.structures import create_thread
from dapsession.protocol.structures import create_variable

__all__ = [
    "ProtocolFactory",
    "ProtocolHandler",
    "create_breakpoint",
    "create_breakpoint_event",
    "create_exited_event",
    "create_initialized_event",
    "create_module",
    "create_module_event",
    "create_output_event",
    "create_scope",
    "create_source",
    "create_stack_frame",
    "create_stopped_event",
    "create_terminated_event",
    "create_thread",
    "create_thread_event",
    "create_variable",
]
