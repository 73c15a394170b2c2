"""
Record store client.

The back office keeps orders, zones, staff and the geocode cache in a generic
REST resource API (json-server style): ``GET /<resource>``, ``POST
/<resource>`` and ``PATCH /<resource>/<id>``. This module is the only place
that knows those verbs and paths.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

import httpx

import config

logger = logging.getLogger(__name__)


class RecordStoreError(Exception):
    """A call to the record store failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PersistenceError(RecordStoreError):
    """A create or patch was rejected by the record store."""


def build_http_client(base_url: str | None = None, **kwargs) -> httpx.AsyncClient:
    kwargs.setdefault("timeout", config.HTTP_TIMEOUT_SECONDS)
    return httpx.AsyncClient(base_url=base_url or config.JSON_SERVER_URL, **kwargs)


class RecordStore:
    """Thin async wrapper over the resource API."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def fetch(self, resource: str, **params) -> httpx.Response:
        """Raw GET of a collection. Callers decide what a non-2xx means."""
        return await self.client.get(f"/{resource}", params=params or None)

    async def list(self, resource: str, **params) -> list[dict[str, Any]]:
        response = await self.fetch(resource, **params)
        if not response.is_success:
            raise RecordStoreError(
                f"Failed to load /{resource}", status_code=response.status_code
            )
        return response.json()

    async def create(self, resource: str, body: dict[str, Any]) -> dict[str, Any]:
        response = await self.client.post(f"/{resource}", json=body)
        if not response.is_success:
            raise PersistenceError(
                f"Failed to create /{resource}", status_code=response.status_code
            )
        return response.json()

    async def patch(self, resource: str, record_id: str, body: dict[str, Any]) -> dict[str, Any]:
        path = f"/{resource}/{record_id}"
        response = await self.client.patch(path, json=body)
        if not response.is_success:
            raise PersistenceError(f"Failed to update {path}", status_code=response.status_code)
        return response.json()

    async def count(self, resource: str) -> int:
        try:
            return len(await self.list(resource))
        except (RecordStoreError, httpx.HTTPError) as e:
            logger.warning("Could not count /%s: %s", resource, e)
            return 0


@asynccontextmanager
async def open_store(base_url: str | None = None):
    """Open a record store client for one unit of work."""
    client = build_http_client(base_url)
    try:
        yield RecordStore(client)
    finally:
        await client.aclose()


async def get_resource_counts(store: RecordStore) -> dict:
    counts = {}
    for resource in ["orders", "zones", "staff", "geocodeCache"]:
        counts[resource] = await store.count(resource)
    return counts
