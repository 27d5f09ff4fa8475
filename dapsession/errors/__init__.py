"""Error handling for the debug session layer."""

from dapsession.errors.formatting import ErrorDestination
from dapsession.errors.formatting import format_pii
from dapsession.errors.session_errors import ConfigurationError
from dapsession.errors.session_errors import ProtocolError
from dapsession.errors.session_errors import RequestError
from dapsession.errors.session_errors import SessionError
from dapsession.errors.session_errors import TransportError
from dapsession.errors.session_errors import describe_exception

__all__ = [
    "ConfigurationError",
    "ErrorDestination",
    "ProtocolError",
    "RequestError",
    "SessionError",
    "TransportError",
    "describe_exception",
    "format_pii",
]
