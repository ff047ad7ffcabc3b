"""Pydantic models shared across cfclient modules.

* :class:`CFConfig` -- immutable connection settings owned by a client.
* :class:`DiscoveryInfo` -- the document returned by ``GET /v2/info``.
* :class:`Token` -- an OAuth2 access/refresh token pair with expiry.

All models use Pydantic v2.  Models mirroring server documents use
``extra="allow"`` so unknown keys are preserved in ``model_extra``.
"""

from __future__ import annotations

import time
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

DEFAULT_PROTOCOL = "http"
DEFAULT_HOST = "api.bosh-lite.com"
DEFAULT_USERNAME = "admin"
DEFAULT_PASSWORD = "admin"
DEFAULT_TIMEOUT: Optional[float] = None

PORTS = {"http": 80, "https": 443}


# --- Configuration ---


class CFConfig(BaseModel):
    """Connection settings for a Cloud Foundry API endpoint.

    Use :meth:`from_options` to build one from a loosely-typed options
    mapping; it never fails and falls back to defaults for anything absent
    or malformed.  Direct construction validates strictly.

    Example::

        config = CFConfig.from_options({
            "protocol": "https",
            "host": "api.example.com",
            "username": "admin",
            "password": "secret",
            "skipSslValidation": "true",
        })
        assert config.port == 443
    """

    model_config = ConfigDict(frozen=True)

    protocol: Literal["http", "https"] = Field(
        default=DEFAULT_PROTOCOL, description="URL scheme of the API endpoint"
    )
    host: str = Field(default=DEFAULT_HOST, description="FQDN or IP of the API endpoint")
    username: str = DEFAULT_USERNAME
    password: str = Field(default=DEFAULT_PASSWORD, repr=False)
    skip_ssl_validation: bool = Field(
        default=False, description="Disable TLS certificate validation (self-signed certs)"
    )
    timeout: Optional[float] = Field(
        default=DEFAULT_TIMEOUT, description="Network timeout in seconds, None to disable"
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def port(self) -> int:
        """Port derived from the protocol: 80 for http, 443 for https."""
        return PORTS[self.protocol]

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> CFConfig:
        """Build a configuration from a raw options mapping.

        Recognised keys are ``protocol``, ``host``, ``username``,
        ``password``, ``skipSslValidation`` (or ``skip_ssl_validation``) and
        ``timeout``.  Unknown keys are ignored.

        Args:
            options: Raw user-supplied options.  ``None`` means all defaults.

        Returns:
            A fully defaulted :class:`CFConfig`.
        """
        options = dict(options or {})

        protocol = options.get("protocol")
        if isinstance(protocol, str) and protocol.strip().lower() in PORTS:
            protocol = protocol.strip().lower()
        else:
            protocol = DEFAULT_PROTOCOL

        if "skip_ssl_validation" in options:
            skip_ssl = options["skip_ssl_validation"]
        else:
            skip_ssl = options.get("skipSslValidation")

        return cls(
            protocol=protocol,
            host=_string_or_default(options.get("host"), DEFAULT_HOST),
            username=_string_or_default(options.get("username"), DEFAULT_USERNAME),
            password=_string_or_default(options.get("password"), DEFAULT_PASSWORD),
            # Only an exact match enables skipping TLS validation.
            skip_ssl_validation=skip_ssl is True or skip_ssl == "true",
            timeout=_timeout_or_default(options),
        )

    @property
    def verify_ssl(self) -> bool:
        """Whether TLS certificates should be validated."""
        return not self.skip_ssl_validation

    @property
    def base_url(self) -> str:
        """``<protocol>://<host>`` without a port."""
        return f"{self.protocol}://{self.host}"


def _string_or_default(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _timeout_or_default(options: Mapping[str, Any]) -> Optional[float]:
    if "timeout" not in options:
        return DEFAULT_TIMEOUT
    value = options["timeout"]
    if value is None:
        return None
    if isinstance(value, bool):
        return DEFAULT_TIMEOUT
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT
    return timeout if timeout > 0 else DEFAULT_TIMEOUT


# --- Server documents ---


class DiscoveryInfo(BaseModel):
    """The target's ``/v2/info`` document.

    Only the two OAuth2 endpoints are required; every other field the
    Cloud Controller advertises (``name``, ``api_version``,
    ``doppler_logging_endpoint``, ...) is kept in ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    authorization_endpoint: str
    token_endpoint: str


class Token(BaseModel):
    """OAuth2 token issued by the UAA.

    ``expires_at`` is an absolute epoch timestamp computed from
    ``expires_in`` when the token is created.  A token without expiry
    information never reports itself as expired.
    """

    model_config = ConfigDict(extra="allow")

    access_token: str
    token_type: str = "bearer"
    refresh_token: Optional[str] = Field(default=None, repr=False)
    expires_in: Optional[int] = None
    scope: Optional[str] = None
    expires_at: Optional[float] = None

    @classmethod
    def from_response(
        cls,
        data: Mapping[str, Any],
        previous: Optional[Token] = None,
        now: Optional[float] = None,
    ) -> Token:
        """Create a token from a token endpoint JSON response.

        Args:
            data: Parsed JSON body of the token response.
            previous: The token being refreshed.  Its refresh token is kept
                when the response does not carry a new one.
            now: Current epoch time, defaults to :func:`time.time`.
        """
        token = cls.model_validate(dict(data))
        updates: dict[str, Any] = {}
        if token.expires_at is None and token.expires_in is not None:
            updates["expires_at"] = (time.time() if now is None else now) + token.expires_in
        if token.refresh_token is None and previous is not None:
            updates["refresh_token"] = previous.refresh_token
        return token.model_copy(update=updates) if updates else token

    def expired(self, now: Optional[float] = None) -> bool:
        """Return ``True`` when the token's expiry time has passed."""
        if self.expires_at is None:
            return False
        return (time.time() if now is None else now) > self.expires_at

    @property
    def authorization(self) -> str:
        """Value for the ``Authorization`` header of a signed request."""
        scheme = "Bearer" if self.token_type.lower() == "bearer" else self.token_type
        return f"{scheme} {self.access_token}"
