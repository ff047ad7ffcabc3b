"""Cloud Foundry API client facades.

Classes:
    :class:`AsyncCFClient` -- non-blocking client backed by :class:`httpx.AsyncClient`.
    :class:`SyncCFClient` -- blocking client backed by :class:`httpx.Client`.

Both take a :class:`~cfclient.models.CFConfig`, expose ``connect()`` and
``request(resource_path, method="GET")``, and can be used as context
managers so the underlying transport is closed.

Example::

    from cfclient.client import AsyncCFClient

    async with AsyncCFClient(config) as cf:
        await cf.connect()
        body = await cf.request("organizations")
"""

from cfclient.client.async_client import AsyncCFClient
from cfclient.client.base import ClientState, Connected, Disconnected
from cfclient.client.sync_client import SyncCFClient

__all__ = ["AsyncCFClient", "SyncCFClient", "ClientState", "Connected", "Disconnected"]
