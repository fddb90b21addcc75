"""Helpers for safe debug logging.

Login bodies carry the hashed password and every authenticated request
carries the account token, so request/response bodies are passed
through :func:`redact_for_log` before they reach a DEBUG log line.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

# Compared after lower-casing and dropping underscores.
_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "token",
        "tk",
        "accountid",
        "authorizecode",
        "biztoken",
        "email",
        "username",
        "authorization",
        "cookie",
    }
)

_REDACTED = "<redacted>"
_MAX_DEPTH = 20


def _is_sensitive(key: object) -> bool:
    return str(key).replace("_", "").lower() in _SENSITIVE_VALUE_KEYS


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* with secrets masked and long strings cut.

    Keys match case-insensitively and ignoring underscores, so
    ``accountID`` and ``account_id`` are both masked.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"

    if isinstance(value, Mapping):
        return {
            str(key): _REDACTED
            if _is_sensitive(key)
            else redact_for_log(item, max_string=max_string, _depth=_depth + 1)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    return repr(value)


def loggable(value: Any, *, redact: bool) -> Any:
    """Return *value* as it should appear in a debug log line.

    With ``redact`` off the body is logged verbatim, which is only
    meant for local troubleshooting against a throwaway account.
    """
    if redact:
        return redact_for_log(value)
    return value
