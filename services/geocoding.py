"""
Geocoding Service - Resolves delivery addresses to coordinates

Lookups go through the geocode cache in the record store first, then an
ordered chain of providers: the free OpenStreetMap search and, if that misses,
the key-based Google geocoding API. Any provider hit is written back to the
cache so an address is paid for at most once.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import httpx

import config
from models import GeocodeCacheEntry, GeocodeProvider
from store import RecordStore
from .exceptions import GeocoderConfigError, GeocodingFailed

logger = logging.getLogger(__name__)

CACHE_RESOURCE = "geocodeCache"


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True)
class GeocodeResult:
    lat: float
    lng: float
    provider: str
    from_cache: bool = False


class GeocodeCache:
    """Address -> coordinate memo kept in the record store. Entries are never
    refreshed; the first match for an address wins."""

    def __init__(self, records: RecordStore):
        self.records = records

    async def lookup(self, address: str) -> Optional[GeocodeCacheEntry]:
        """First entry for the exact address. An unreadable cache is a miss."""
        try:
            response = await self.records.fetch(CACHE_RESOURCE, address=address)
        except httpx.HTTPError as e:
            logger.warning("Geocode cache unreachable: %s", e)
            return None
        if not response.is_success:
            logger.debug("Geocode cache lookup returned %s", response.status_code)
            return None

        try:
            entries = response.json()
            if not isinstance(entries, list) or not entries:
                return None
            return GeocodeCacheEntry.model_validate(entries[0])
        except (ValueError, TypeError) as e:
            logger.warning("Unreadable geocode cache entry for %r: %s", address, e)
            return None

    async def store(self, address: str, lat: float, lng: float, provider: str) -> dict:
        created_at = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        return await self.records.create(CACHE_RESOURCE, {
            "address": address,
            "lat": lat,
            "lng": lng,
            "provider": provider,
            "createdAt": created_at,
        })


class GeocodingProvider(ABC):
    """One way of turning an address into coordinates.

    ``geocode`` returns None for a soft miss so the chain can move on. Raising
    is reserved for conditions the caller must hear about.
    """

    name: str

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @abstractmethod
    async def geocode(self, address: str) -> Optional[Coordinates]:
        pass


class NominatimProvider(GeocodingProvider):
    name = GeocodeProvider.OSM.value

    def __init__(self, client: httpx.AsyncClient, base_url: str | None = None,
                 user_agent: str | None = None):
        super().__init__(client)
        self.base_url = base_url or config.NOMINATIM_URL
        self.user_agent = user_agent or config.GEOCODER_USER_AGENT

    async def geocode(self, address: str) -> Optional[Coordinates]:
        try:
            response = await self.client.get(
                self.base_url,
                params={"format": "json", "limit": 1, "q": address},
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.warning("OSM geocoder unreachable: %s", e)
            return None

        if not response.is_success:
            logger.debug("OSM geocoder returned %s for %r", response.status_code, address)
            return None
        if "application/json" not in response.headers.get("content-type", ""):
            return None

        try:
            data = response.json()
            if not isinstance(data, list) or not data:
                return None
            return Coordinates(lat=float(data[0]["lat"]), lng=float(data[0]["lon"]))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Unexpected OSM payload for %r: %s", address, e)
            return None


class GoogleGeocodingProvider(GeocodingProvider):
    name = GeocodeProvider.GOOGLE.value

    def __init__(self, client: httpx.AsyncClient, api_key: str | None = None,
                 base_url: str | None = None):
        super().__init__(client)
        self.api_key = api_key
        self.base_url = base_url or config.GOOGLE_GEOCODE_URL

    async def geocode(self, address: str) -> Optional[Coordinates]:
        if not self.api_key:
            raise GeocoderConfigError(address, "GOOGLE_MAPS_API_KEY is not set")

        try:
            response = await self.client.get(
                self.base_url, params={"address": address, "key": self.api_key}
            )
            data = response.json()
        except httpx.HTTPError as e:
            logger.warning("Google geocoder unreachable: %s", e)
            return None
        except ValueError:
            logger.warning("Google geocoder returned a non-JSON body (%s)", response.status_code)
            return None

        if not isinstance(data, dict) or data.get("status") != "OK" or not data.get("results"):
            logger.debug("Google geocoder gave no result for %r", address)
            return None
        try:
            location = data["results"][0]["geometry"]["location"]
            return Coordinates(lat=float(location["lat"]), lng=float(location["lng"]))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning("Unexpected Google payload for %r: %s", address, e)
            return None


class GeocoderChain:
    """Cache first, then each provider in order until one resolves the address."""

    def __init__(self, cache: GeocodeCache, providers: list[GeocodingProvider],
                 max_concurrency: int | None = None):
        self.cache = cache
        self.providers = providers
        # Caps in-flight provider calls across a whole fan-out
        self._semaphore = asyncio.Semaphore(max_concurrency or config.GEOCODE_CONCURRENCY)

    async def resolve(self, address: str) -> GeocodeResult:
        cached = await self.cache.lookup(address)
        if cached:
            return GeocodeResult(cached.lat, cached.lng, cached.provider, from_cache=True)

        for provider in self.providers:
            async with self._semaphore:
                coords = await provider.geocode(address)
            if coords is None:
                continue
            await self.cache.store(address, coords.lat, coords.lng, provider.name)
            logger.info("Geocoded %r via %s", address, provider.name)
            return GeocodeResult(coords.lat, coords.lng, provider.name)

        raise GeocodingFailed(address)


def build_geocoder(store: RecordStore, client: httpx.AsyncClient) -> GeocoderChain:
    """Default chain: OpenStreetMap, then Google."""
    return GeocoderChain(
        GeocodeCache(store),
        [
            NominatimProvider(client),
            GoogleGeocodingProvider(client, api_key=config.GOOGLE_MAPS_API_KEY),
        ],
    )
