"""OAuth2 token acquisition against the UAA advertised in ``/v2/info``.

Implements the Resource Owner Password Credentials grant
(:rfc:`6749` section 4.3) and the refresh token grant (section 6) as used
by the ``cf`` command line client: public client id ``cf`` with an empty
secret, sent as HTTP Basic client authentication.

Like :mod:`cfclient.discovery`, this module only builds requests and
interprets responses; the clients send them.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from cfclient.exceptions import CFClientError, OAuthError
from cfclient.models import CFConfig, DiscoveryInfo, Token

logger = logging.getLogger(__name__)

CLIENT_ID = "cf"
CLIENT_SECRET = ""


def authorization_url(info: DiscoveryInfo) -> str:
    """The UAA authorization endpoint (unused by the password grant)."""
    return info.authorization_endpoint.rstrip("/") + "/oauth/auth"


def token_url(info: DiscoveryInfo) -> str:
    """The UAA token endpoint."""
    return info.token_endpoint.rstrip("/") + "/oauth/token"


def require_info(info: Optional[DiscoveryInfo]) -> DiscoveryInfo:
    """Return *info*, failing when API info has not been fetched yet."""
    if info is None:
        raise CFClientError("Info data is not set", "Need to set info data...")
    return info


def build_password_request(info: DiscoveryInfo, config: CFConfig) -> httpx.Request:
    """Build the password grant request for the configured user."""
    url = token_url(info)
    logger.debug("Requesting token for user %s from %s", config.username, url)
    return _token_request(
        url,
        {
            "grant_type": "password",
            "username": config.username,
            "password": config.password,
            "scope": "",
        },
    )


def build_refresh_request(info: DiscoveryInfo, token: Token) -> httpx.Request:
    """Build the refresh token grant request for *token*.

    Raises:
        OAuthError: If *token* carries no refresh token.
    """
    if not token.refresh_token:
        raise OAuthError("No refresh token available")
    url = token_url(info)
    logger.debug("Refreshing token at %s", url)
    return _token_request(
        url,
        {"grant_type": "refresh_token", "refresh_token": token.refresh_token},
    )


def parse_token_response(response: httpx.Response, previous: Optional[Token] = None) -> Token:
    """Interpret a token endpoint response.

    Args:
        response: The token endpoint's response.
        previous: The token being refreshed, if any.

    Returns:
        The issued :class:`~cfclient.models.Token`.

    Raises:
        OAuthError: When the endpoint rejects the grant, or the body lacks
            ``access_token`` or carries fields of the wrong type.
    """
    try:
        body: Any = response.json()
    except ValueError:
        body = None

    if not response.is_success:
        error = body.get("error") if isinstance(body, dict) else None
        description = body.get("error_description") if isinstance(body, dict) else None
        detail = description or error or response.text
        raise OAuthError(
            f"Token request failed with status {response.status_code}: {detail}",
            body if body is not None else response.text,
            status_code=response.status_code,
            error=error,
            error_description=description,
        )

    if not isinstance(body, dict) or "access_token" not in body:
        raise OAuthError(
            "Token response missing 'access_token' field",
            response.text,
            status_code=response.status_code,
        )

    try:
        token = Token.from_response(body, previous=previous)
    except ValidationError as exc:
        raise OAuthError.wrap(exc, "Malformed token response") from exc
    logger.debug("Token issued, expires_in=%s", token.expires_in)
    return token


def wrap_transport_error(exc: httpx.TransportError) -> OAuthError:
    """Normalize a network failure of a token request."""
    return OAuthError(f"Token request failed: {exc}", exc)


def _token_request(url: str, data: dict[str, str]) -> httpx.Request:
    credentials = base64.b64encode(f"{CLIENT_ID}:{CLIENT_SECRET}".encode()).decode()
    return httpx.Request(
        "POST",
        url,
        data=data,
        headers={
            "Accept": "application/json",
            "Authorization": f"Basic {credentials}",
        },
    )
