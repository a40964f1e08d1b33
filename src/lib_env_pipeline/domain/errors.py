"""Domain-level exception hierarchy.

Purpose
-------
Expose the closed error taxonomy raised by the conversion pipeline. Each
variant names a different remediation: set the variable, fix its encoding, or
fix its content.

Contents
--------
* :class:`ErrorKind` – tag identifying the variant without ``isinstance`` chains.
* :class:`EnvError` – umbrella base class carrying the uniform diagnostic
  interface (``key``, ``kind``, ``message``, ``cause``).
* :class:`MissingError` – the variable is absent from the environment.
* :class:`InvalidUnicodeError` – the variable is present but not valid text.
* :class:`ParseError` – a conversion hook rejected the value.

System Role
-----------
Stages raise these exceptions; nothing inside the library catches, logs, or
retries them. Callers catch :class:`EnvError` to handle every pipeline failure
uniformly, or a single subclass when only one remediation applies.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Tag for the three error variants."""

    MISSING = "missing"
    INVALID_UNICODE = "invalid_unicode"
    PARSE = "parse"


class EnvError(Exception):
    """Base type for all errors emitted by ``lib_env_pipeline``.

    Why
    ----
    Provide a single catch-all type with a shared reporting contract so callers
    can print a diagnostic without knowing which variant fired.

    What
    ----
    Stores the key and the formatted message. :attr:`cause` mirrors
    ``__cause__`` so the underlying failure is reachable without walking the
    exception chain by hand.
    """

    kind: ErrorKind

    def __init__(self, key: str, message: str) -> None:
        super().__init__(message)
        self.key = key
        self.message = message

    @property
    def cause(self) -> BaseException | None:
        """Return the chained failure, if any."""

        return self.__cause__


class MissingError(EnvError):
    """Raised when a required variable is absent.

    Examples
    --------
    >>> str(MissingError('PORT'))
    'environment variable `PORT` is not set'
    """

    kind = ErrorKind.MISSING

    def __init__(self, key: str) -> None:
        super().__init__(key, f"environment variable `{key}` is not set")


class InvalidUnicodeError(EnvError):
    """Raised when a variable is present but is not well-formed text.

    ``value`` holds a lossy rendering of what was found, with every invalid
    sequence replaced by U+FFFD.
    """

    kind = ErrorKind.INVALID_UNICODE

    def __init__(self, key: str, value: str) -> None:
        super().__init__(key, f"environment variable `{key}` is not valid unicode: `{value}`")
        self.value = value


class ParseError(EnvError):
    """Raised when a conversion hook fails.

    Why
    ----
    A value that is present and well-formed may still be unusable for the
    application. The error keeps everything needed to explain why without
    re-reading the environment.

    Attributes
    ----------
    key:
        Environment variable name.
    value:
        The validated string that entered the pipeline, even when the failure
        happened several conversions later.
    source / target:
        Human-readable names of the types on each side of the failed step.
    cause:
        The exception raised by the conversion hook.

    Examples
    --------
    >>> err = ParseError('PORT', 'abc', 'str', 'int', ValueError('bad digit'))
    >>> err.message
    'failed to convert environment variable `PORT` with value `abc` from `str` to `int`: bad digit'
    >>> err.cause
    ValueError('bad digit')
    """

    kind = ErrorKind.PARSE

    def __init__(self, key: str, value: str, source: str, target: str, cause: BaseException) -> None:
        super().__init__(
            key,
            f"failed to convert environment variable `{key}` with value `{value}` from `{source}` to `{target}`: {cause}",
        )
        self.value = value
        self.source = source
        self.target = target
        self.__cause__ = cause
