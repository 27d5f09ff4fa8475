"""Run the default debug session: ``python -m dapsession [--server=PORT]``.

The default session answers every request with an empty success response;
it is useful for exercising clients and the transport.
"""

import sys

from dapsession.session import DebugSession

if __name__ == "__main__":
    sys.exit(DebugSession.run())
