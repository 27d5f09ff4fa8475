"""Configuration records for a debug session.

A session owns two sets of coordinate conventions. The debugger side is chosen
by the embedding adapter before the handshake; the client side is taken from
the ``initialize`` request arguments.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING

from dapsession.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dapsession.protocol.messages import InitializeRequestArguments

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ENV_LOG_LEVEL = "DAPSESSION_LOG_LEVEL"
ENV_SHUTDOWN_GRACE = "DAPSESSION_SHUTDOWN_GRACE"


@dataclass
class DebuggerConventions:
    """Numbering and path conventions used by the debugger."""

    lines_start_at_1: bool = False
    columns_start_at_1: bool = False
    paths_are_uris: bool = False


@dataclass
class ClientConventions:
    """Numbering and path conventions used by the client.

    Defaults follow the protocol: 1-based lines and columns, native paths.
    """

    lines_start_at_1: bool = True
    columns_start_at_1: bool = True
    paths_are_uris: bool = False

    def update_from_initialize(self, args: InitializeRequestArguments) -> None:
        """Apply the numbering flags the client sent, leaving absent ones alone."""
        lines = args.get("linesStartAt1")
        if isinstance(lines, bool):
            self.lines_start_at_1 = lines
        columns = args.get("columnsStartAt1")
        if isinstance(columns, bool):
            self.columns_start_at_1 = columns


@dataclass
class SessionConfig:
    """Configuration for one debug session (one client connection)."""

    debugger: DebuggerConventions = field(default_factory=DebuggerConventions)
    client: ClientConventions = field(default_factory=ClientConventions)

    # Shutdown policy
    run_as_server: bool = False
    shutdown_grace_seconds: float = 0.1

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SessionConfig:
        """Create config from ``DAPSESSION_*`` environment variables."""
        env = os.environ if environ is None else environ
        config = cls()

        level = env.get(ENV_LOG_LEVEL)
        if level:
            config.log_level = level.upper()

        grace = env.get(ENV_SHUTDOWN_GRACE)
        if grace:
            try:
                config.shutdown_grace_seconds = float(grace)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid shutdown grace period: {grace!r}",
                    config_key=ENV_SHUTDOWN_GRACE,
                    cause=e,
                ) from e

        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration and raise errors for invalid setups."""
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level: {self.log_level!r}",
                config_key="log_level",
                details={"allowed": list(LOG_LEVELS)},
            )

        if self.shutdown_grace_seconds < 0:
            raise ConfigurationError(
                "Shutdown grace period must not be negative",
                config_key="shutdown_grace_seconds",
                details={"value": self.shutdown_grace_seconds},
            )
