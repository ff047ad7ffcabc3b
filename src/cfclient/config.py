"""Configuration resolution with environment variables and credential sources.

:func:`load_config` merges explicit options, ``CF_*`` environment
variables and defaults into a :class:`~cfclient.models.CFConfig`:

Precedence (high to low):
    1. Explicit ``options`` mapping
    2. Environment variables (see :data:`ENV_VARS`)
    3. Defaults from :mod:`cfclient.models`

Passwords may be given as a credential source descriptor instead of a
literal value; see :func:`resolve_credential`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, Optional

from cfclient.exceptions import ConfigError
from cfclient.models import CFConfig

ENV_VARS = {
    "protocol": "CF_API_PROTOCOL",
    "host": "CF_API_HOST",
    "username": "CF_USERNAME",
    "password": "CF_PASSWORD",
    "skip_ssl_validation": "CF_SKIP_SSL_VALIDATION",
    "timeout": "CF_API_TIMEOUT",
}
"""Option name to environment variable mapping used by :func:`load_config`."""


def load_config(
    options: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> CFConfig:
    """Resolve a :class:`~cfclient.models.CFConfig` from options and the environment.

    Args:
        options: Explicit options, as accepted by
            :meth:`CFConfig.from_options <cfclient.models.CFConfig.from_options>`.
        environ: Environment to read from.  Defaults to :data:`os.environ`.

    Returns:
        The merged configuration.

    Raises:
        ConfigError: If the password is a credential source that cannot
            be resolved.
    """
    environ = os.environ if environ is None else environ
    merged: dict[str, Any] = {}

    for name, var in ENV_VARS.items():
        value = environ.get(var)
        if value:
            merged[name] = value

    explicit = dict(options or {})
    if "skipSslValidation" in explicit:
        explicit.setdefault("skip_ssl_validation", explicit.pop("skipSslValidation"))
    merged.update(explicit)

    if isinstance(merged.get("password"), str):
        merged["password"] = resolve_credential(merged["password"], environ)

    return CFConfig.from_options(merged)


def resolve_credential(source: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Turn a password option into the password itself.

    ``env:NAME`` looks *NAME* up in *environ* (default :data:`os.environ`),
    ``file:PATH`` reads the file at *PATH* and strips surrounding
    whitespace.  Any other value is a literal password.

    Raises:
        ConfigError: If the variable is unset or the file cannot be read.
    """
    scheme, sep, target = source.partition(":")
    if sep and scheme == "env":
        return _password_from_env(target, os.environ if environ is None else environ)
    if sep and scheme == "file":
        return _password_from_file(Path(target).expanduser())
    return source


def _password_from_env(name: str, environ: Mapping[str, str]) -> str:
    if name not in environ:
        raise ConfigError(f"Password variable {name!r} is not set", f"source: env:{name}")
    return environ[name]


def _password_from_file(path: Path) -> str:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"Credential file not found: {path}", exc) from exc
    except OSError as exc:
        raise ConfigError.wrap(exc, f"Cannot read credential file {path}") from exc
    return text.strip()
