"""cfclient -- OAuth2 client for the Cloud Foundry v2 API.

Authenticates with the resource-owner password grant against the UAA
advertised by the target's ``/v2/info`` endpoint, caches the bearer token
in memory and issues authenticated requests against ``/v2/<resource>``,
refreshing or re-authenticating when the token expires.

Typical usage::

    import asyncio
    from cfclient import AsyncCFClient, CFConfig

    async def main():
        config = CFConfig.from_options({"protocol": "https", "host": "api.example.com"})
        async with AsyncCFClient(config) as cf:
            await cf.connect()
            print(await cf.request("organizations"))

    asyncio.run(main())

Modules:
    client: Sync and async client facades.
    models: Pydantic models (config, API info, token).
    config: Environment-variable and credential-source resolution.
    discovery: The ``/v2/info`` call.
    oauth: Password and refresh token grants.
    exceptions: Exception hierarchy.
"""

from cfclient.client import AsyncCFClient, SyncCFClient
from cfclient.config import load_config
from cfclient.exceptions import (
    CFClientError,
    ConfigError,
    ErrorKind,
    NotConnectedError,
    OAuthError,
    StatusCodeError,
    TransportError,
)
from cfclient.models import CFConfig, DiscoveryInfo, Token

__version__ = "0.1.0"

__all__ = [
    "AsyncCFClient",
    "SyncCFClient",
    "CFConfig",
    "DiscoveryInfo",
    "Token",
    "load_config",
    "CFClientError",
    "ConfigError",
    "ErrorKind",
    "NotConnectedError",
    "OAuthError",
    "StatusCodeError",
    "TransportError",
]
