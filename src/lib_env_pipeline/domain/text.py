"""Text helpers shared by the pipeline stages.

Purpose
-------
Keep the encoding policy and the type descriptions used in diagnostics in one
place so every stage decodes and names things identically.

Contents
--------
* :data:`RawValue` – what the environment accessor may hand back.
* :func:`decode_checked` – strict UTF-8 validation, ``None`` on failure.
* :func:`decode_lossy` – decode with U+FFFD substitution for invalid sequences.
* :func:`describe_type` / :func:`describe_result` – human-readable type names.
"""

from __future__ import annotations

import os
from typing import Any, Callable, Union

RawValue = Union[bytes, str]
"""Raw environment content: bytes on POSIX, text (possibly with lone surrogates) elsewhere."""

_REPLACEMENT = "replace"
_REPLACEMENT_CHAR = "\ufffd"


def _as_bytes(raw: RawValue) -> bytes:
    """Return the platform byte representation of *raw*.

    Text values round-trip through :func:`os.fsencode`, which restores the
    original bytes of ``surrogateescape``-decoded POSIX values and keeps lone
    surrogates from Windows as ill-formed UTF-8.
    """

    if isinstance(raw, bytes):
        return raw
    try:
        return os.fsencode(raw)
    except UnicodeEncodeError:
        return raw.encode("utf-8", errors="surrogatepass")


def decode_checked(raw: RawValue) -> str | None:
    """Return *raw* as text, or ``None`` when it is not well-formed UTF-8.

    Examples
    --------
    >>> decode_checked(b'8080')
    '8080'
    >>> decode_checked(b'\\xff') is None
    True
    """

    if isinstance(raw, str):
        try:
            raw.encode("utf-8")
        except UnicodeEncodeError:
            pass
        else:
            return raw
    try:
        return _as_bytes(raw).decode("utf-8")
    except UnicodeDecodeError:
        return None


def decode_lossy(raw: RawValue) -> str:
    """Return *raw* as text, replacing invalid sequences with U+FFFD.

    Examples
    --------
    Text values carry invalid content as surrogates (escaped bytes on POSIX,
    unpaired UTF-16 units on Windows); each surrogate becomes one U+FFFD.

    >>> decode_lossy(b'ab\\xffcd') == 'ab\\ufffdcd'
    True
    >>> decode_lossy('a\\ud800b') == 'a\\ufffdb'
    True
    """

    checked = decode_checked(raw)
    if checked is not None:
        return checked
    if isinstance(raw, str):
        return "".join(_REPLACEMENT_CHAR if _is_surrogate(char) else char for char in raw)
    return raw.decode("utf-8", errors=_REPLACEMENT)


def _is_surrogate(char: str) -> bool:
    return "\ud800" <= char <= "\udfff"


def describe_type(tp: Any) -> str:
    """Return a readable name for *tp*.

    Builtins keep their bare name; other types are qualified with their module.

    Examples
    --------
    >>> describe_type(int)
    'int'
    >>> from decimal import Decimal
    >>> describe_type(Decimal)
    'decimal.Decimal'
    """

    if isinstance(tp, str):
        return tp
    name = getattr(tp, "__qualname__", None)
    if name is None:
        return repr(tp)
    module = getattr(tp, "__module__", None)
    if module in (None, "builtins"):
        return name
    return f"{module}.{name}"


def describe_result(fn: Callable[..., Any], target: Any = None) -> str:
    """Name the type produced by *fn* for diagnostics.

    Prefers an explicit *target*, then the return annotation, then the name of
    the function itself.

    Examples
    --------
    >>> def to_port(text: str) -> int:
    ...     return int(text)
    >>> describe_result(to_port)
    'int'
    >>> describe_result(to_port, float)
    'float'
    """

    if target is not None:
        return describe_type(target)
    annotations = getattr(fn, "__annotations__", None) or {}
    returned = annotations.get("return")
    if returned is not None:
        return describe_type(returned)
    return describe_type(fn)
