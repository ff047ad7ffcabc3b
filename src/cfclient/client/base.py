"""Connection state and request rules shared by both client facades.

A client is always in exactly one of two states:

* :class:`Disconnected` -- no token yet.  API info may already be known
  from a ``connect()`` whose token exchange failed.
* :class:`Connected` -- API info and a token are both present.  The token
  may have expired since; that is checked on every request.

:class:`BaseCFClient` owns the state and the parts of the protocol that do
not depend on whether I/O blocks: config validation, building resource
requests and interpreting their responses.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx

from cfclient.exceptions import CFClientError, ConfigError, NotConnectedError, StatusCodeError
from cfclient.models import CFConfig, DiscoveryInfo, Token

logger = logging.getLogger(__name__)

API_VERSION = "/v2/"


@dataclass(frozen=True)
class Disconnected:
    info: Optional[DiscoveryInfo] = None


@dataclass(frozen=True)
class Connected:
    info: DiscoveryInfo
    token: Token


ClientState = Union[Disconnected, Connected]


class BaseCFClient:
    """State holder and request rules for a Cloud Foundry API client.

    Args:
        config: Connection settings.  Must be a
            :class:`~cfclient.models.CFConfig`.

    Raises:
        ConfigError: If *config* is not a :class:`~cfclient.models.CFConfig`.
    """

    def __init__(self, config: CFConfig) -> None:
        if not isinstance(config, CFConfig):
            raise ConfigError(
                "Given config must be an instance of CFConfig",
                'config must be an instance of CFConfig that contains: "protocol", '
                '"host", "username", "password", "skip_ssl_validation"',
            )
        self._config = config
        self._state: ClientState = Disconnected()

    @property
    def config(self) -> CFConfig:
        return self._config

    @property
    def info(self) -> Optional[DiscoveryInfo]:
        """API info from the last successful info fetch, if any."""
        return self._state.info

    @property
    def token(self) -> Optional[Token]:
        """The current token, ``None`` until :meth:`connect` succeeds."""
        return self._state.token if isinstance(self._state, Connected) else None

    @property
    def is_connected(self) -> bool:
        return isinstance(self._state, Connected)

    def resource_url(self, resource_path: str) -> str:
        """Absolute URL of a versioned resource, e.g. ``organizations``."""
        return f"{self._config.base_url}{API_VERSION}{resource_path.lstrip('/')}"

    # ------------------------------------------------------------------ #
    # Helpers for subclasses
    # ------------------------------------------------------------------ #

    def _require_connected(self) -> Connected:
        state = self._state
        if not isinstance(state, Connected):
            raise NotConnectedError("Client is not set", "Need to set client...")
        return state

    def _store_info(self, info: DiscoveryInfo) -> None:
        if isinstance(self._state, Connected):
            self._state = Connected(info, self._state.token)
        else:
            self._state = Disconnected(info)

    def _store_token(self, token: Token) -> None:
        info = self._state.info
        if info is None:
            raise CFClientError("Info data is not set", "Need to set info data...")
        self._state = Connected(info, token)

    def _build_resource_request(
        self,
        token: Token,
        resource_path: str,
        method: str,
        json_body: Any = None,
    ) -> httpx.Request:
        url = self.resource_url(resource_path)
        logger.debug("%s %s", method.upper(), url)
        headers = {
            "Authorization": token.authorization,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if json_body is not None:
            return httpx.Request(method.upper(), url, headers=headers, json=json_body)
        return httpx.Request(method.upper(), url, headers=headers)

    @staticmethod
    def _parse_resource_response(response: httpx.Response) -> str:
        """Return the response body re-serialised as a JSON string.

        Raises:
            StatusCodeError: On any status other than 200.
        """
        if response.status_code != 200:
            raise StatusCodeError(response.status_code)
        try:
            body = response.json()
        except ValueError:
            body = response.text
        return json.dumps(body)
