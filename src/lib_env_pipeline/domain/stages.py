"""Pipeline stages turning a raw environment value into a typed value.

Purpose
-------
Model the one-directional conversion chain ``Raw → Valid → Parsed → Parsed``.
Every stage is an immutable value object carrying the variable name so that any
failure, however deep in the chain, can name the variable and the text that
entered the pipeline.

Contents
--------
* :class:`Raw` – key plus optional raw value; resolves absence and encoding.
* :class:`Valid` – key plus well-formed text; entry point for conversions.
* :class:`Parsed` – key, original text, and a typed value; chains conversions.
* :class:`StageConsumedError` – raised when a stage is used twice.

System Role
-----------
Stages live in the domain layer and perform no I/O. They are produced by
:func:`lib_env_pipeline.core.get` and consumed by application start-up code.
Each transition or terminal operation marks its stage as consumed; a stage can
therefore feed exactly one successor. Read-only attributes (``key``,
``value``) stay accessible after consumption for diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar

from .errors import InvalidUnicodeError, MissingError, ParseError
from .text import RawValue, decode_checked, decode_lossy, describe_result, describe_type

T = TypeVar("T")
U = TypeVar("U")

_SOURCE_TEXT = "str"


class StageConsumedError(RuntimeError):
    """Raised when a stage is reused after it already produced a result.

    This is a programming error rather than an environment problem, so it sits
    outside the :class:`~lib_env_pipeline.domain.errors.EnvError` hierarchy.
    """


def _consume(stage: Raw | Valid | Parsed[Any]) -> None:
    """Mark *stage* as consumed or fail if that already happened."""

    if stage._consumed:
        raise StageConsumedError(f"{type(stage).__name__} stage for `{stage.key}` has already been consumed")
    object.__setattr__(stage, "_consumed", True)


@dataclass(frozen=True, slots=True)
class Raw:
    """Key and optional raw value as read from the environment.

    Why
    ----
    Absence and encoding invalidity are independent problems with different
    fixes. The terminal operations cover every combination of
    {required, optional, default} × {checked, unchecked} so the caller picks the
    policy explicitly.

    Examples
    --------
    >>> Raw('PORT', None).with_default_checked('8080').value
    '8080'
    >>> Raw('PORT', b'9090').required_checked().value
    '9090'
    >>> Raw('PORT', None).optional_unchecked() is None
    True
    """

    key: str
    raw: RawValue | None
    _consumed: bool = field(default=False, init=False, repr=False, compare=False)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def into_inner(self) -> RawValue | None:
        """Return the raw value untouched."""

        _consume(self)
        return self.raw

    def required_unchecked(self) -> Valid:
        """Require the variable; repair invalid text with U+FFFD.

        Raises
        ------
        MissingError
            When the variable is not set.
        """

        _consume(self)
        if self.raw is None:
            raise MissingError(self.key)
        return Valid(self.key, decode_lossy(self.raw))

    def required_checked(self) -> Valid:
        """Require the variable and require it to be valid text.

        Raises
        ------
        MissingError
            When the variable is not set.
        InvalidUnicodeError
            When the variable is set but is not well-formed UTF-8.
        """

        _consume(self)
        if self.raw is None:
            raise MissingError(self.key)
        return self._validate(self.raw)

    def optional_unchecked(self) -> Valid | None:
        """Return ``None`` when absent; repair invalid text with U+FFFD."""

        _consume(self)
        if self.raw is None:
            return None
        return Valid(self.key, decode_lossy(self.raw))

    def optional_checked(self) -> Valid | None:
        """Return ``None`` when absent; raise :class:`InvalidUnicodeError` on invalid text."""

        _consume(self)
        if self.raw is None:
            return None
        return self._validate(self.raw)

    def with_default_unchecked(self, default: str) -> Valid:
        """Substitute *default* when absent; repair invalid text with U+FFFD. Never fails."""

        _consume(self)
        if self.raw is None:
            return Valid(self.key, default)
        return Valid(self.key, decode_lossy(self.raw))

    def with_default_unchecked_sub_invalid(self, default: str) -> Valid:
        """Substitute *default* when absent and also when the value is not valid text.

        The invalid value is discarded without a trace; callers who need to know
        about it should use :meth:`with_default_checked` instead.

        Examples
        --------
        >>> Raw('LANG', b'\\xff').with_default_unchecked_sub_invalid('C').value
        'C'
        """

        _consume(self)
        if self.raw is None:
            return Valid(self.key, default)
        text = decode_checked(self.raw)
        return Valid(self.key, default if text is None else text)

    def with_default_checked(self, default: str) -> Valid:
        """Substitute *default* when absent; raise :class:`InvalidUnicodeError` on invalid text."""

        _consume(self)
        if self.raw is None:
            return Valid(self.key, default)
        return self._validate(self.raw)

    def _validate(self, raw: RawValue) -> Valid:
        text = decode_checked(raw)
        if text is None:
            raise InvalidUnicodeError(self.key, decode_lossy(raw))
        return Valid(self.key, text)


@dataclass(frozen=True, slots=True)
class Valid:
    """Key and a well-formed string, ready for conversion.

    Why
    ----
    Conversions come in four shapes: textual parsing, owning conversion,
    borrowing conversion, and caller-supplied functions. Each shape has an
    infallible and a fallible entry point; the fallible ones turn any exception
    raised by the conversion into a :class:`ParseError` that names the key, the
    text, and both types.

    What
    ----
    Python strings are immutable and passed by reference, so the owning
    (``string``) and borrowing (``str``) entry points hand the very same object
    to the conversion. Both families exist so a call site states which contract
    it relies on. Infallible entry points let exceptions from the conversion
    propagate untouched.

    Examples
    --------
    >>> Valid('PORT', '9090').then_try_fromstr_into(int).into_inner()
    9090
    >>> Valid('PORT', 'abc').then_try_fromstr_into(int)
    Traceback (most recent call last):
    ...
    lib_env_pipeline.domain.errors.ParseError: failed to convert environment variable `PORT` with value `abc` from `str` to `int`: invalid literal for int() with base 10: 'abc'
    """

    key: str
    value: str
    _consumed: bool = field(default=False, init=False, repr=False, compare=False)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def into_inner(self) -> str:
        """Return the validated string."""

        _consume(self)
        return self.value

    def then_try_fromstr_into(self, target: Callable[[str], T]) -> Parsed[T]:
        """Parse the text with *target*, typically a type such as ``int`` or ``Decimal``.

        The textual-parse contract is the constructor that accepts a string
        representation. ``bool`` does not honour it (``bool('false')`` is
        ``True``); use :meth:`then_try_fn_str_into` with an explicit parser.
        """

        return self._try_convert(target, describe_type(target))

    def then_string_into(self, target: Callable[[str], T]) -> Parsed[T]:
        """Hand the owned text to *target*, which must not fail."""

        return self._convert(target)

    def then_try_string_into(self, target: Callable[[str], T]) -> Parsed[T]:
        """Hand the owned text to *target*; wrap failures in :class:`ParseError`."""

        return self._try_convert(target, describe_type(target))

    def then_str_into(self, target: Callable[[str], T]) -> Parsed[T]:
        """Build *target* from a view of the text; must not fail."""

        return self._convert(target)

    def then_try_str_into(self, target: Callable[[str], T]) -> Parsed[T]:
        """Build *target* from a view of the text; wrap failures in :class:`ParseError`."""

        return self._try_convert(target, describe_type(target))

    def then_fn_string_into(self, fn: Callable[[str], T]) -> Parsed[T]:
        return self._convert(fn)

    def then_try_fn_string_into(self, fn: Callable[[str], T], *, target: Any = None) -> Parsed[T]:
        """Apply *fn* to the owned text; wrap failures in :class:`ParseError`.

        *target* names the result type in diagnostics when the return annotation
        of *fn* is missing or too vague.
        """

        return self._try_convert(fn, describe_result(fn, target))

    def then_fn_str_into(self, fn: Callable[[str], T]) -> Parsed[T]:
        return self._convert(fn)

    def then_try_fn_str_into(self, fn: Callable[[str], T], *, target: Any = None) -> Parsed[T]:
        """Apply *fn* to a view of the text; wrap failures in :class:`ParseError`.

        Examples
        --------
        >>> def parse_flag(text: str) -> bool:
        ...     return {'true': True, 'false': False}[text.lower()]
        >>> Valid('DEBUG', 'False').then_try_fn_str_into(parse_flag).into_inner()
        False
        """

        return self._try_convert(fn, describe_result(fn, target))

    def _convert(self, fn: Callable[[str], T]) -> Parsed[T]:
        _consume(self)
        return Parsed(self.key, self.value, fn(self.value))

    def _try_convert(self, fn: Callable[[str], T], target_name: str) -> Parsed[T]:
        _consume(self)
        try:
            inner = fn(self.value)
        except Exception as exc:  # noqa: BLE001 - any conversion failure is a parse failure
            raise ParseError(self.key, self.value, _SOURCE_TEXT, target_name, exc) from exc
        return Parsed(self.key, self.value, inner)


@dataclass(frozen=True, slots=True)
class Parsed(Generic[T]):
    """Key, original text, and a typed value that may be refined further.

    Why
    ----
    Multi-step refinement (text → int → enum → domain object) should still
    report the text the operator actually set, not an intermediate value.

    What
    ----
    Conversions operate on :attr:`inner`; :attr:`value` always holds the string
    that entered the first conversion.

    Examples
    --------
    >>> from datetime import timedelta
    >>> parsed = Valid('TIMEOUT', '30').then_try_fromstr_into(int)
    >>> parsed.then_fn_into(lambda seconds: timedelta(seconds=seconds)).into_inner()
    datetime.timedelta(seconds=30)
    """

    key: str
    value: str
    inner: T
    _consumed: bool = field(default=False, init=False, repr=False, compare=False)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def into_inner(self) -> T:
        """Return the typed value, dropping the key and original text."""

        _consume(self)
        return self.inner

    def then_into(self, target: Callable[[T], U]) -> Parsed[U]:
        """Convert the typed value with *target*, which must not fail."""

        _consume(self)
        return Parsed(self.key, self.value, target(self.inner))

    def then_try_into(self, target: Callable[[T], U]) -> Parsed[U]:
        """Convert the typed value with *target*; wrap failures in :class:`ParseError`."""

        return self._try_convert(target, describe_type(target))

    def then_fn_into(self, fn: Callable[[T], U]) -> Parsed[U]:
        _consume(self)
        return Parsed(self.key, self.value, fn(self.inner))

    def then_try_fn_into(self, fn: Callable[[T], U], *, target: Any = None) -> Parsed[U]:
        """Apply *fn* to the typed value; wrap failures in :class:`ParseError`.

        The error names the type of the current typed value as its source and
        carries the original text, not a rendering of the typed value.
        """

        return self._try_convert(fn, describe_result(fn, target))

    def _try_convert(self, fn: Callable[[T], U], target_name: str) -> Parsed[U]:
        _consume(self)
        try:
            inner = fn(self.inner)
        except Exception as exc:  # noqa: BLE001 - any conversion failure is a parse failure
            raise ParseError(self.key, self.value, describe_type(type(self.inner)), target_name, exc) from exc
        return Parsed(self.key, self.value, inner)
