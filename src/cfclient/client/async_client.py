"""Asynchronous Cloud Foundry API client.

:class:`AsyncCFClient` is the primary facade of the library.  It wraps
:class:`httpx.AsyncClient` and runs the connect and request sequences as
coroutines, so every network call is an await point on the caller's event
loop.

Connect sequence::

    GET /v2/info  ->  POST <token_endpoint>/oauth/token (password grant)

Request sequence::

    token expired?  --no-->  call resource
          |yes
    refresh grant  --ok-->  call resource
          |failed
    connect()  ------->  call resource

There is no locking: two overlapping ``request()`` calls that both see an
expired token will both refresh (or reconnect).

See Also:
    :class:`~cfclient.client.sync_client.SyncCFClient` for the blocking
    equivalent.
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


class AsyncCFClient(BaseCFClient):
    """Non-blocking Cloud Foundry API client.

    Args:
        config: Connection settings.
        http_client: Optional pre-configured :class:`httpx.AsyncClient`.
            When omitted one is created on first use from the config's
            ``skip_ssl_validation`` and ``timeout`` and closed by
            :meth:`aclose`.  A supplied client is never closed by this
            object.

    Raises:
        ConfigError: If *config* is not a :class:`~cfclient.models.CFConfig`.

    Example::

        async with AsyncCFClient(CFConfig.from_options(options)) as cf:
            await cf.connect()
            orgs = json.loads(await cf.request("organizations"))
    """

    def __init__(self, config: CFConfig, http_client: Optional[httpx.AsyncClient] = None) -> None:
        super().__init__(config)
        self._client = http_client
        self._owns_client = http_client is None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncCFClient:
        self._http()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this object created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def connect(self) -> None:
        """Fetch API info, then obtain a token with the configured credentials.

        Raises:
            TransportError: If the info endpoint cannot be reached.
            StatusCodeError: If the info endpoint does not answer 200.
            OAuthError: If the token exchange fails.
        """
        info = await self._fetch_info()
        self._store_info(info)
        token = await self._acquire_token()
        self._store_token(token)
        logger.info("Connected to %s as %s", self.config.base_url, self.config.username)

    async def request(self, resource_path: str, method: str = "GET", json_body: Any = None) -> str:
        """Call a versioned API resource, refreshing the token if it expired.

        Args:
            resource_path: Path below the API version, e.g. ``"organizations"``
                for ``/v2/organizations``.
            method: HTTP method.
            json_body: Optional JSON-serialisable request body.

        Returns:
            The response body as a JSON string.

        Raises:
            NotConnectedError: If :meth:`connect` has not succeeded yet.
            StatusCodeError: If the resource does not answer 200.
            httpx.TransportError: On network failures of the resource call.
        """
        state = self._require_connected()
        if state.token.expired():
            try:
                token = await self._refresh(state)
            except (CFClientError, httpx.HTTPError) as exc:
                logger.warning("Token refresh failed, reconnecting: %s", exc)
                await self.connect()
            else:
                self._store_token(token)
        return await self._do_request(resource_path, method, json_body)

    async def get(self, resource_path: str) -> str:
        """Send a GET request.  See :meth:`request`."""
        return await self.request(resource_path, "GET")

    async def post(self, resource_path: str, json_body: Any = None) -> str:
        """Send a POST request.  See :meth:`request`."""
        return await self.request(resource_path, "POST", json_body)

    async def put(self, resource_path: str, json_body: Any = None) -> str:
        """Send a PUT request.  See :meth:`request`."""
        return await self.request(resource_path, "PUT", json_body)

    async def delete(self, resource_path: str) -> str:
        """Send a DELETE request.  See :meth:`request`."""
        return await self.request(resource_path, "DELETE")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=self.config.verify_ssl,
                timeout=self.config.timeout,
            )
            self._owns_client = True
        return self._client

    async def _fetch_info(self) -> DiscoveryInfo:
        request = discovery.build_info_request(self.config)
        try:
            response = await self._http().send(request)
        except httpx.TransportError as exc:
            raise discovery.wrap_transport_error(exc) from exc
        return discovery.parse_info_response(response)

    async def _acquire_token(self) -> Token:
        info = oauth.require_info(self.info)
        request = oauth.build_password_request(info, self.config)
        try:
            response = await self._http().send(request)
        except httpx.TransportError as exc:
            raise oauth.wrap_transport_error(exc) from exc
        return oauth.parse_token_response(response)

    async def _refresh(self, state: Connected) -> Token:
        request = oauth.build_refresh_request(state.info, state.token)
        response = await self._http().send(request)
        return oauth.parse_token_response(response, previous=state.token)

    async def _do_request(self, resource_path: str, method: str, json_body: Any) -> str:
        state = self._require_connected()
        request = self._build_resource_request(state.token, resource_path, method, json_body)
        response = await self._http().send(request)
        return self._parse_resource_response(response)
