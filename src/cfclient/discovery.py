"""API info discovery -- the single unauthenticated call to ``/v2/info``.

The Cloud Controller advertises the UAA endpoints a client must use for
OAuth2 in its info document.  This module builds the request and
interprets the response; sending it is left to the client so the same
rules serve both :class:`~cfclient.client.SyncCFClient` and
:class:`~cfclient.client.AsyncCFClient`.
"""

from __future__ import annotations

import logging

import httpx

from cfclient.exceptions import StatusCodeError, TransportError
from cfclient.models import CFConfig, DiscoveryInfo

logger = logging.getLogger(__name__)

INFO_PATH = "/v2/info"


def info_url(config: CFConfig) -> str:
    """Absolute URL of the info endpoint, including the port."""
    return f"{config.protocol}://{config.host}:{config.port}{INFO_PATH}"


def build_info_request(config: CFConfig) -> httpx.Request:
    """Build the ``GET /v2/info`` request for *config*."""
    url = info_url(config)
    logger.debug("Fetching API info from %s", url)
    return httpx.Request("GET", url, headers={"Content-Type": "application/json"})


def parse_info_response(response: httpx.Response) -> DiscoveryInfo:
    """Interpret the info endpoint's response.

    Raises:
        StatusCodeError: On any status other than 200, or when the body is
            not a JSON document with ``authorization_endpoint`` and
            ``token_endpoint``.
    """
    if response.status_code != 200:
        raise StatusCodeError(response.status_code)
    try:
        info = DiscoveryInfo.model_validate(response.json())
    except ValueError as exc:  # undecodable JSON or pydantic ValidationError
        raise StatusCodeError(200, f"Malformed API info: {exc}") from exc
    logger.debug(
        "API info: authorization_endpoint=%s token_endpoint=%s",
        info.authorization_endpoint,
        info.token_endpoint,
    )
    return info


def wrap_transport_error(exc: httpx.TransportError) -> TransportError:
    """Normalize a network failure of the info call."""
    return TransportError("Error connecting", exc)
