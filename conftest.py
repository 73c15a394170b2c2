"""
Shared fixtures: an in-memory record store and fake geocoding providers, both
served through httpx.MockTransport so the real clients run unchanged.
"""

import copy
import json

import httpx
import pytest

from store import RecordStore
from services.geocoding import (
    GeocodeCache,
    GeocoderChain,
    GoogleGeocodingProvider,
    NominatimProvider,
)

STORE_URL = "http://records.test"


class FakeRecordStore:
    """Just enough of a json-server: list with equality filters, create, patch."""

    def __init__(self, **collections):
        self.data = {"orders": [], "zones": [], "staff": [], "geocodeCache": []}
        for name, records in collections.items():
            self.data[name] = copy.deepcopy(records)
        self.fail: dict[tuple[str, str], int] = {}
        self.unreachable: set[tuple[str, str]] = set()
        self.garbled: set[str] = set()
        self.requests: list[httpx.Request] = []
        self._next_id = 1000

    def writes(self, method: str | None = None, resource: str | None = None) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method in ({method} if method else {"POST", "PATCH"})
            and (resource is None or r.url.path.strip("/").split("/")[0] == resource)
        ]

    def get(self, resource: str, record_id: str) -> dict:
        return next(r for r in self.data[resource] if str(r["id"]) == record_id)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.strip("/").split("/")
        resource = parts[0]

        if (request.method, resource) in self.unreachable:
            raise httpx.ConnectError("record store down", request=request)
        status = self.fail.get((request.method, resource))
        if status:
            return httpx.Response(status, json={"error": "injected"})
        if resource not in self.data:
            return httpx.Response(404, json={})
        records = self.data[resource]

        if request.method == "GET" and resource in self.garbled:
            return httpx.Response(200, text="<html>maintenance</html>")
        if request.method == "GET":
            params = dict(request.url.params)
            matches = [
                r for r in records
                if all(str(r.get(key)) == value for key, value in params.items())
            ]
            return httpx.Response(200, json=matches)

        body = json.loads(request.content)
        if request.method == "POST":
            if "id" not in body:
                self._next_id += 1
                body["id"] = str(self._next_id)
            records.append(body)
            return httpx.Response(201, json=body)

        if request.method == "PATCH":
            for record in records:
                if str(record["id"]) == parts[1]:
                    record.update(body)
                    return httpx.Response(200, json=record)
            return httpx.Response(404, json={})

        return httpx.Response(405, json={})


class FakeGeocoders:
    """OSM answers queries with ``q``; Google answers queries with ``address``."""

    def __init__(self):
        self.osm: dict[str, tuple[float, float]] = {}
        self.google: dict[str, tuple[float, float]] = {}
        # verbatim Google bodies, for malformed answers
        self.google_raw: dict[str, object] = {}
        self.osm_status = 200
        self.osm_html = False
        self.calls: list[tuple[str, str]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        if "q" in params:
            address = params["q"]
            self.calls.append(("osm", address))
            if self.osm_status != 200:
                return httpx.Response(self.osm_status, text="unavailable")
            if self.osm_html:
                return httpx.Response(200, text="<html>rate limited</html>",
                                      headers={"content-type": "text/html"})
            if address not in self.osm:
                return httpx.Response(200, json=[])
            lat, lng = self.osm[address]
            return httpx.Response(200, json=[{"lat": str(lat), "lon": str(lng)}])

        address = params["address"]
        self.calls.append(("google", address))
        if address in self.google_raw:
            return httpx.Response(200, json=self.google_raw[address])
        if address not in self.google:
            return httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})
        lat, lng = self.google[address]
        return httpx.Response(200, json={
            "status": "OK",
            "results": [{"geometry": {"location": {"lat": lat, "lng": lng}}}],
        })

    def provider_calls(self, provider: str | None = None) -> list[str]:
        return [a for p, a in self.calls if provider is None or p == provider]


@pytest.fixture
def records():
    return FakeRecordStore()


@pytest.fixture
def geocoders():
    return FakeGeocoders()


def make_store(records: FakeRecordStore) -> RecordStore:
    return RecordStore(httpx.AsyncClient(
        transport=httpx.MockTransport(records.handler), base_url=STORE_URL
    ))


def make_geocoder_client(geocoders: FakeGeocoders) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(geocoders.handler))


def make_chain(store: RecordStore, geocoders: FakeGeocoders,
               api_key: str | None = "test-key") -> GeocoderChain:
    client = make_geocoder_client(geocoders)
    return GeocoderChain(
        GeocodeCache(store),
        [NominatimProvider(client), GoogleGeocodingProvider(client, api_key=api_key)],
        max_concurrency=4,
    )
