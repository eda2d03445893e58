"""Helpers shared by configuration models."""

from __future__ import annotations

import os

_ENV_PREFIX = "env:"


def resolve_env_reference(value: str | None, *, required: bool = True) -> str | None:
    """Expand ``"env:VAR_NAME"`` references against ``os.environ``.

    Plain strings and ``None`` pass through untouched. A reference to a
    missing or empty variable raises :class:`EnvironmentError` unless
    ``required`` is ``False``, in which case ``None`` is returned.
    """

    if value is None or not value.startswith(_ENV_PREFIX):
        return value

    var_name = value[len(_ENV_PREFIX):].strip()
    resolved = os.getenv(var_name)
    if resolved:
        return resolved
    if required:
        raise EnvironmentError(f"Environment variable '{var_name}' is not set or empty")
    return None


__all__ = ["resolve_env_reference"]
