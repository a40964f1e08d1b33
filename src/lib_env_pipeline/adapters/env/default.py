"""Environment variable adapter.

Purpose
-------
Implement :class:`lib_env_pipeline.application.ports.EnvAccessor` on top of the
process environment. This is the only module that touches :mod:`os` state.

Key behaviours
--------------
* On platforms with a bytes environment (POSIX) values are read from
  :data:`os.environb`, so undecodable content reaches the pipeline intact.
* Elsewhere values come from :data:`os.environ` as text; invalid content shows
  up as lone surrogates.
* An injected mapping replaces the process environment entirely, which keeps
  tests hermetic.
* Every read emits an ``env_variable_read`` debug event with the key and
  whether it was present. Values are never logged.
"""

from __future__ import annotations

import os
from typing import Mapping

from ...domain.text import RawValue
from ...observability import log_debug


class DefaultEnvAccessor:
    """Read raw values from the process environment or an injected mapping."""

    def __init__(self, *, environ: Mapping[str, RawValue] | None = None) -> None:
        """Initialise the accessor with a specific ``environ`` mapping for testability.

        Parameters
        ----------
        environ:
            Mapping keyed by variable name. Defaults to the live process
            environment, consulted on every read.
        """

        self._environ = environ

    def read(self, key: str) -> RawValue | None:
        """Return the raw value for *key* or ``None`` when it is not set.

        Examples
        --------
        >>> accessor = DefaultEnvAccessor(environ={'PORT': '9090'})
        >>> accessor.read('PORT')
        '9090'
        >>> accessor.read('HOST') is None
        True
        """

        if self._environ is not None:
            value = self._environ.get(key)
        else:
            value = _read_process_env(key)
        log_debug("env_variable_read", key=key, present=value is not None)
        return value


def read_raw(key: str, *, environ: Mapping[str, RawValue] | None = None) -> RawValue | None:
    """Return the raw value of *key* without building a pipeline stage.

    Examples
    --------
    >>> read_raw('LIB_ENV_PIPELINE_DOCTEST', environ={}) is None
    True
    """

    return DefaultEnvAccessor(environ=environ).read(key)


def _read_process_env(key: str) -> RawValue | None:
    """Look *key* up in the live environment, preferring the bytes view."""

    if os.supports_bytes_environ:
        return os.environb.get(os.fsencode(key))
    return os.environ.get(key)
