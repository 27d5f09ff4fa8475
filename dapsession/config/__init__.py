"""Configuration management for debug sessions."""

from dapsession.config.session_config import ClientConventions
from dapsession.config.session_config import DebuggerConventions
from dapsession.config.session_config import SessionConfig

__all__ = [
    "ClientConventions",
    "DebuggerConventions",
    "SessionConfig",
]
