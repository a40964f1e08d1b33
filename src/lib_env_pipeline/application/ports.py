"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contract the composition root relies on to read the
environment, so tests and embedding applications can supply their own source
without touching the stages.

Contents
--------
* :class:`EnvAccessor` – maps a key to an optional raw value.

System Role
-----------
The protocol enforces Dependency Inversion: :func:`lib_env_pipeline.core.get`
asks for behaviour through this abstraction and never imports :mod:`os`.
"""

from __future__ import annotations

from typing import Protocol

from ..domain.text import RawValue


class EnvAccessor(Protocol):
    """Read one environment variable.

    Why
    ----
    Keep the platform-specific lookup at the edge of the system.

    What
    ----
    Returns the raw value for *key* or ``None`` when it is not set. Absence is
    a normal result, never an error. Implementations must not cache.
    """

    def read(self, key: str) -> RawValue | None:
        """Return the current raw value of *key*, or ``None``."""
