"""Public package surface for the typed environment variable pipeline.

``get(key)`` reads one variable and returns a :class:`Raw` stage; the stage
operations resolve absence and encoding, then convert the text into typed
values while keeping the key and original text for diagnostics.
"""

from __future__ import annotations

from .core import (
    DefaultEnvAccessor,
    EnvAccessor,
    EnvError,
    ErrorKind,
    InvalidUnicodeError,
    MissingError,
    ParseError,
    Parsed,
    Raw,
    StageConsumedError,
    Valid,
    get,
    read_raw,
)
from .observability import bind_trace_id, get_logger

__all__ = [
    "DefaultEnvAccessor",
    "EnvAccessor",
    "EnvError",
    "ErrorKind",
    "InvalidUnicodeError",
    "MissingError",
    "ParseError",
    "Parsed",
    "Raw",
    "StageConsumedError",
    "Valid",
    "bind_trace_id",
    "get",
    "get_logger",
    "read_raw",
]
