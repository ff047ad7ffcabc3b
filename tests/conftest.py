"""Shared test fixtures for cfclient.

Provides a fake Cloud Controller + UAA implemented as an
:class:`httpx.MockTransport` handler, configs pointing at it, and clients
wired to it.  These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import time
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest

from cfclient.client import AsyncCFClient, SyncCFClient
from cfclient.models import CFConfig, Token

API_HOST = "api.example.com"
UAA_HOST = "uaa.example.com"

INFO_BODY: dict[str, Any] = {
    "name": "vcap",
    "api_version": "2.54.0",
    "authorization_endpoint": "https://login.example.com",
    "token_endpoint": f"https://{UAA_HOST}",
    "doppler_logging_endpoint": "wss://doppler.example.com:4443",
}

ORGANIZATIONS_BODY: dict[str, Any] = {
    "total_results": 1,
    "total_pages": 1,
    "prev_url": None,
    "next_url": None,
    "resources": [
        {
            "metadata": {"guid": "a7aff246-5f5b-4cf8-87d8-f316053e4a20"},
            "entity": {"name": "seedorg", "status": "active"},
        }
    ],
}


# ---------------------------------------------------------------------------
# Fake Cloud Controller / UAA
# ---------------------------------------------------------------------------


class FakeCloudFoundry:
    """Routes requests to canned Cloud Controller and UAA responses.

    Every request is recorded in :attr:`requests`.  Tests tweak the
    ``*_status`` / ``*_body`` attributes to simulate failures.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.info_status = 200
        self.info_body: Any = dict(INFO_BODY)
        self.password_status = 200
        self.refresh_status = 200
        self.password_body: Any = None
        self.refresh_body: Any = None
        self.resource_status = 200
        self.resources: dict[str, Any] = {"/v2/organizations": ORGANIZATIONS_BODY}
        self._issued = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/v2/info":
            return httpx.Response(self.info_status, json=self.info_body)
        if request.url.host == UAA_HOST and request.url.path == "/oauth/token":
            return self._token(request)
        if request.url.path.startswith("/v2/"):
            return self._resource(request)
        return httpx.Response(404, json={"code": 10000, "description": "Unknown request"})

    # --- helpers used by tests ---

    def form(self, request: httpx.Request) -> dict[str, str]:
        return {k: v[0] for k, v in parse_qs(request.content.decode(), keep_blank_values=True).items()}

    def grants(self) -> list[str]:
        return [
            self.form(r)["grant_type"]
            for r in self.requests
            if r.url.host == UAA_HOST
        ]

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    # --- handlers ---

    def _token(self, request: httpx.Request) -> httpx.Response:
        grant = self.form(request)["grant_type"]
        status = self.password_status if grant == "password" else self.refresh_status
        if status != 200:
            return httpx.Response(
                status,
                json={"error": "invalid_grant", "error_description": f"{grant} grant rejected"},
            )
        override = self.password_body if grant == "password" else self.refresh_body
        if override is not None:
            return httpx.Response(200, json=override)
        self._issued += 1
        return httpx.Response(
            200,
            json={
                "access_token": f"{grant}-token-{self._issued}",
                "token_type": "bearer",
                "refresh_token": f"refresh-{self._issued}",
                "expires_in": 599,
                "scope": "cloud_controller.read cloud_controller.write",
                "jti": f"jti-{self._issued}",
            },
        )

    def _resource(self, request: httpx.Request) -> httpx.Response:
        if not request.headers.get("Authorization", "").startswith("Bearer "):
            return httpx.Response(401, json={"code": 1000, "error_code": "CF-InvalidAuthToken"})
        if self.resource_status != 200:
            return httpx.Response(self.resource_status, json={"error_code": "CF-Error"})
        body = self.resources.get(request.url.path)
        if body is None:
            return httpx.Response(404, json={"code": 10000, "error_code": "CF-NotFound"})
        return httpx.Response(200, json=body)


def expired_token(**kwargs: Any) -> Token:
    """A token whose expiry passed ten seconds ago."""
    defaults: dict[str, Any] = {
        "access_token": "stale-token",
        "refresh_token": "stale-refresh",
        "expires_in": 599,
        "expires_at": time.time() - 10,
    }
    defaults.update(kwargs)
    return Token(**defaults)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fake_cf() -> FakeCloudFoundry:
    return FakeCloudFoundry()


@pytest.fixture
def cf_config() -> CFConfig:
    return CFConfig.from_options(
        {"protocol": "https", "host": API_HOST, "username": "admin", "password": "s3cret"}
    )


@pytest.fixture
def sync_client(cf_config: CFConfig, fake_cf: FakeCloudFoundry):
    http_client = httpx.Client(transport=httpx.MockTransport(fake_cf))
    client = SyncCFClient(cf_config, http_client=http_client)
    yield client
    http_client.close()


@pytest.fixture
async def async_client(cf_config: CFConfig, fake_cf: FakeCloudFoundry):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_cf))
    client = AsyncCFClient(cf_config, http_client=http_client)
    yield client
    await http_client.aclose()


@pytest.fixture
def stale_token() -> Token:
    return expired_token()
