"""Translation of lines, columns and paths between client and debugger.

The client and the debugger each decide whether lines and columns start at 0
or 1 and whether paths are filesystem paths or ``file://`` URIs. These pure
functions convert a value from one convention to the other. They do no range
checking: a translated line of 0 or below is returned as is.
"""

from __future__ import annotations

from urllib.parse import quote
from urllib.parse import unquote
from urllib.parse import urlparse

__all__ = [
    "convert_client_column_to_debugger",
    "convert_client_line_to_debugger",
    "convert_client_path_to_debugger",
    "convert_debugger_column_to_client",
    "convert_debugger_line_to_client",
    "convert_debugger_path_to_client",
    "path_to_uri",
    "uri_to_path",
]

# Characters left unescaped in URI paths besides alphanumerics and "_.-~".
_URI_SAFE = "/:,@&=+$!*'()"


def _shift(value: int, from_start_at_1: bool, to_start_at_1: bool) -> int:
    if from_start_at_1 == to_start_at_1:
        return value
    return value - 1 if from_start_at_1 else value + 1


def convert_client_line_to_debugger(
    line: int, client_lines_start_at_1: bool, debugger_lines_start_at_1: bool
) -> int:
    return _shift(line, client_lines_start_at_1, debugger_lines_start_at_1)


def convert_debugger_line_to_client(
    line: int, client_lines_start_at_1: bool, debugger_lines_start_at_1: bool
) -> int:
    return _shift(line, debugger_lines_start_at_1, client_lines_start_at_1)


def convert_client_column_to_debugger(
    column: int, client_columns_start_at_1: bool, debugger_columns_start_at_1: bool
) -> int:
    return _shift(column, client_columns_start_at_1, debugger_columns_start_at_1)


def convert_debugger_column_to_client(
    column: int, client_columns_start_at_1: bool, debugger_columns_start_at_1: bool
) -> int:
    return _shift(column, debugger_columns_start_at_1, client_columns_start_at_1)


def path_to_uri(path: str) -> str:
    """Convert a filesystem path into a ``file://`` URI.

    Backslashes become forward slashes and a leading ``/`` is added when the
    path is not rooted (``C:\\x`` becomes ``file:///C:/x``).
    """
    path_name = path.replace("\\", "/")
    if not path_name.startswith("/"):
        path_name = "/" + path_name
    return "file://" + quote(path_name, safe=_URI_SAFE)


def uri_to_path(uri: str) -> str:
    """Return the decoded path component of ``uri``."""
    return unquote(urlparse(uri).path)


def convert_client_path_to_debugger(
    client_path: str, client_paths_are_uris: bool, debugger_paths_are_uris: bool
) -> str:
    if client_paths_are_uris == debugger_paths_are_uris:
        return client_path
    if client_paths_are_uris:
        return uri_to_path(client_path)
    return path_to_uri(client_path)


def convert_debugger_path_to_client(
    debugger_path: str, client_paths_are_uris: bool, debugger_paths_are_uris: bool
) -> str:
    if client_paths_are_uris == debugger_paths_are_uris:
        return debugger_path
    if debugger_paths_are_uris:
        return uri_to_path(debugger_path)
    return path_to_uri(debugger_path)
