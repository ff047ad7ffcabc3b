"""Synchronous Cloud Foundry API client -- mirrors :class:`~cfclient.client.async_client.AsyncCFClient`.

:class:`SyncCFClient` runs the same connect and refresh-or-reconnect
sequences over a blocking :class:`httpx.Client`, for scripts and tools
that do not run an event loop.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from cfclient import discovery, oauth
from cfclient.client.base import BaseCFClient, Connected
from cfclient.exceptions import CFClientError
from cfclient.models import CFConfig, DiscoveryInfo, Token

logger = logging.getLogger(__name__)


class SyncCFClient(BaseCFClient):
    """Blocking Cloud Foundry API client.

    Args:
        config: Connection settings.
        http_client: Optional pre-configured :class:`httpx.Client`.  When
            omitted one is created on first use and closed by :meth:`close`.

    Example::

        with SyncCFClient(CFConfig.from_options(options)) as cf:
            cf.connect()
            apps = cf.request("apps")
    """

    def __init__(self, config: CFConfig, http_client: Optional[httpx.Client] = None) -> None:
        super().__init__(config)
        self._client = http_client
        self._owns_client = http_client is None

    def __enter__(self) -> SyncCFClient:
        self._http()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client if this object created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def connect(self) -> None:
        """Fetch API info, then obtain a token.  See :meth:`AsyncCFClient.connect`."""
        info = self._fetch_info()
        self._store_info(info)
        token = self._acquire_token()
        self._store_token(token)
        logger.info("Connected to %s as %s", self.config.base_url, self.config.username)

    def request(self, resource_path: str, method: str = "GET", json_body: Any = None) -> str:
        """Call a versioned API resource.  See :meth:`AsyncCFClient.request`."""
        state = self._require_connected()
        if state.token.expired():
            try:
                token = self._refresh(state)
            except (CFClientError, httpx.HTTPError) as exc:
                logger.warning("Token refresh failed, reconnecting: %s", exc)
                self.connect()
            else:
                self._store_token(token)
        return self._do_request(resource_path, method, json_body)

    def get(self, resource_path: str) -> str:
        return self.request(resource_path, "GET")

    def post(self, resource_path: str, json_body: Any = None) -> str:
        return self.request(resource_path, "POST", json_body)

    def put(self, resource_path: str, json_body: Any = None) -> str:
        return self.request(resource_path, "PUT", json_body)

    def delete(self, resource_path: str) -> str:
        return self.request(resource_path, "DELETE")

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                verify=self.config.verify_ssl,
                timeout=self.config.timeout,
            )
            self._owns_client = True
        return self._client

    def _fetch_info(self) -> DiscoveryInfo:
        request = discovery.build_info_request(self.config)
        try:
            response = self._http().send(request)
        except httpx.TransportError as exc:
            raise discovery.wrap_transport_error(exc) from exc
        return discovery.parse_info_response(response)

    def _acquire_token(self) -> Token:
        info = oauth.require_info(self.info)
        request = oauth.build_password_request(info, self.config)
        try:
            response = self._http().send(request)
        except httpx.TransportError as exc:
            raise oauth.wrap_transport_error(exc) from exc
        return oauth.parse_token_response(response)

    def _refresh(self, state: Connected) -> Token:
        request = oauth.build_refresh_request(state.info, state.token)
        response = self._http().send(request)
        return oauth.parse_token_response(response, previous=state.token)

    def _do_request(self, resource_path: str, method: str, json_body: Any) -> str:
        state = self._require_connected()
        request = self._build_resource_request(state.token, resource_path, method, json_body)
        response = self._http().send(request)
        return self._parse_resource_response(response)
