"""PII-aware rendering of error message templates.

Error messages carry a ``format`` template with ``{name}`` placeholders and a
``variables`` mapping. The same template is rendered twice: once for the user
(all variables substituted) and once for telemetry, where only placeholders
whose name starts with ``_`` may be substituted.
"""

from __future__ import annotations

import re
from enum import Flag
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = ["ErrorDestination", "format_pii"]

_PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")


class ErrorDestination(Flag):
    """Where an error message should be shown."""

    USER = 1
    TELEMETRY = 2


def format_pii(
    template: str,
    redact_pii: bool,
    variables: Mapping[str, object] | None = None,
) -> str:
    """Substitute ``{name}`` placeholders in ``template``.

    A placeholder is replaced when ``name`` is a key of ``variables`` and
    either ``redact_pii`` is false or ``name`` starts with ``_``. Everything
    else is left as the literal token.
    """
    values = variables or {}

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if redact_pii and not name.startswith("_"):
            return match.group(0)
        if name not in values:
            return match.group(0)
        return str(values[name])

    return _PLACEHOLDER_RE.sub(_replace, template)
