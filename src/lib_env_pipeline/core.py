"""Composition root for ``lib_env_pipeline``.

Purpose
-------
Provide the single entry point that reads one variable through an
:class:`~lib_env_pipeline.application.ports.EnvAccessor` and wraps the result in
a :class:`~lib_env_pipeline.domain.stages.Raw` stage.

Contents
--------
* :func:`get` – start a pipeline for one key.
* Re-exports of the stage and error types so callers need a single import.

System Role
-----------
Connects the environment adapter with the domain stages. The environment is
consulted exactly once per call; everything after that is pure in-memory
transformation.
"""

from __future__ import annotations

from .adapters.env.default import DefaultEnvAccessor, read_raw
from .application.ports import EnvAccessor
from .domain.errors import EnvError, ErrorKind, InvalidUnicodeError, MissingError, ParseError
from .domain.stages import Parsed, Raw, StageConsumedError, Valid

_DEFAULT_ACCESSOR = DefaultEnvAccessor()


def get(key: str, *, accessor: EnvAccessor | None = None) -> Raw:
    """Read *key* once and return the :class:`Raw` stage that starts the pipeline.

    Why
    ----
    Application start-up code wants one fluent expression per setting, from
    lookup to typed value, with errors that say which variable was at fault.

    Parameters
    ----------
    key:
        Environment variable name.
    accessor:
        Source to read from. Defaults to the live process environment.

    Returns
    -------
    Raw
        Stage holding *key* and its raw value (``None`` when unset).

    Examples
    --------
    >>> source = DefaultEnvAccessor(environ={})
    >>> get('PORT', accessor=source).with_default_checked('8080').then_try_fromstr_into(int).into_inner()
    8080
    >>> source = DefaultEnvAccessor(environ={'PORT': '9090'})
    >>> get('PORT', accessor=source).required_checked().then_try_fromstr_into(int).into_inner()
    9090
    """

    source = accessor if accessor is not None else _DEFAULT_ACCESSOR
    return Raw(key, source.read(key))


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
    "get",
    "read_raw",
]
