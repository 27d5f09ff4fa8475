"""Transport layer: framed connections and the protocol message loop."""

from dapsession.transport.connection import ConnectionBase
from dapsession.transport.connection import StreamConnection
from dapsession.transport.protocol_server import ProtocolServer
from dapsession.transport.stdio import open_stdio_connection

__all__ = [
    "ConnectionBase",
    "ProtocolServer",
    "StreamConnection",
    "open_stdio_connection",
]
