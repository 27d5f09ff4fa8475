"""dapsession - session layer for Debug Adapter Protocol adapters."""

from dapsession.errors import ErrorDestination
from dapsession.session import DebugSession

__all__ = ["DebugSession", "ErrorDestination", "__version__", "main"]
__version__ = "0.1.0"


def main() -> None:
    """Entry point that runs the default :class:`DebugSession`."""

    raise SystemExit(DebugSession.run())
