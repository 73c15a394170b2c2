"""Geocode cache and provider chain."""

import asyncio

import pytest

from conftest import FakeRecordStore, make_chain, make_store
from services.exceptions import GeocoderConfigError, GeocodingError, GeocodingFailed


def run(coro):
    return asyncio.run(coro)


def test_cache_hit_skips_providers(geocoders):
    records = FakeRecordStore(geocodeCache=[
        {"id": "1", "address": "Av. Vallarta 1", "lat": 20.67, "lng": -103.39,
         "provider": "google", "createdAt": "2026-01-01T00:00:00Z"},
    ])
    geocoders.osm["Av. Vallarta 1"] = (1.0, 1.0)

    async def scenario():
        return await make_chain(make_store(records), geocoders).resolve("Av. Vallarta 1")

    result = run(scenario())
    assert (result.lat, result.lng, result.provider) == (20.67, -103.39, "google")
    assert result.from_cache
    assert geocoders.calls == []
    assert records.writes() == []


def test_osm_hit_is_written_to_cache(records, geocoders):
    geocoders.osm["Av. Juárez 10"] = (20.6736, -103.3441)

    async def scenario():
        return await make_chain(make_store(records), geocoders).resolve("Av. Juárez 10")

    result = run(scenario())
    assert (result.lat, result.lng, result.provider) == (20.6736, -103.3441, "osm")
    assert geocoders.provider_calls("google") == []

    [entry] = records.data["geocodeCache"]
    assert entry["address"] == "Av. Juárez 10"
    assert (entry["lat"], entry["lng"], entry["provider"]) == (20.6736, -103.3441, "osm")
    assert entry["createdAt"].endswith("Z")


def test_osm_miss_falls_back_to_google(records, geocoders):
    geocoders.google["Calle 5"] = (20.7, -103.4)

    async def scenario():
        return await make_chain(make_store(records), geocoders).resolve("Calle 5")

    result = run(scenario())
    assert result.provider == "google"
    assert geocoders.calls == [("osm", "Calle 5"), ("google", "Calle 5")]
    assert records.data["geocodeCache"][0]["provider"] == "google"


@pytest.mark.parametrize("status, html", [(503, False), (429, False), (200, True)])
def test_osm_errors_are_soft_misses(records, geocoders, status, html):
    geocoders.osm["Calle 5"] = (1.0, 1.0)
    geocoders.osm_status = status
    geocoders.osm_html = html
    geocoders.google["Calle 5"] = (20.7, -103.4)

    async def scenario():
        return await make_chain(make_store(records), geocoders).resolve("Calle 5")

    assert run(scenario()).provider == "google"


def test_both_providers_missing_fails(records, geocoders):
    async def scenario():
        return await make_chain(make_store(records), geocoders).resolve("Nowhere")

    with pytest.raises(GeocodingFailed) as excinfo:
        run(scenario())
    assert excinfo.value.address == "Nowhere"
    assert records.data["geocodeCache"] == []


def test_missing_key_fails_only_after_osm_miss(records, geocoders):
    async def scenario():
        return await make_chain(make_store(records), geocoders, api_key=None).resolve("Nowhere")

    with pytest.raises(GeocoderConfigError):
        run(scenario())
    assert geocoders.provider_calls("osm") == ["Nowhere"]


def test_missing_key_is_irrelevant_when_osm_hits(records, geocoders):
    geocoders.osm["Calle 5"] = (20.7, -103.4)

    async def scenario():
        return await make_chain(make_store(records), geocoders, api_key=None).resolve("Calle 5")

    assert run(scenario()).provider == "osm"


def test_config_error_is_a_geocoding_error():
    assert issubclass(GeocoderConfigError, GeocodingError)


def test_second_resolution_comes_from_cache(records, geocoders):
    geocoders.osm["Calle 5"] = (20.7, -103.4)

    async def scenario():
        chain = make_chain(make_store(records), geocoders)
        first = await chain.resolve("Calle 5")
        second = await chain.resolve("Calle 5")
        return first, second

    first, second = run(scenario())
    assert geocoders.provider_calls() == ["Calle 5"]
    assert not first.from_cache
    assert second.from_cache
    assert (second.lat, second.lng, second.provider) == (20.7, -103.4, "osm")


def test_duplicate_cache_entries_first_wins(geocoders):
    records = FakeRecordStore(geocodeCache=[
        {"id": "1", "address": "Calle 5", "lat": 1.0, "lng": 2.0, "provider": "osm"},
        {"id": "2", "address": "Calle 5", "lat": 3.0, "lng": 4.0, "provider": "google"},
    ])

    async def scenario():
        return await make_chain(make_store(records), geocoders).resolve("Calle 5")

    result = run(scenario())
    assert (result.lat, result.lng, result.provider) == (1.0, 2.0, "osm")


def test_unreadable_cache_counts_as_miss(records, geocoders):
    records.fail[("GET", "geocodeCache")] = 500
    geocoders.osm["Calle 5"] = (20.7, -103.4)

    async def scenario():
        return await make_chain(make_store(records), geocoders).resolve("Calle 5")

    assert run(scenario()).provider == "osm"


@pytest.mark.parametrize("body", [
    {"status": "OK", "results": [{"formatted_address": "Calle 9"}]},
    {"status": "OK", "results": [{"geometry": {"location": {"lat": "n/a", "lng": 1}}}]},
    {"status": "OK", "results": "nothing"},
])
def test_malformed_google_result_is_a_miss(records, geocoders, body):
    geocoders.google_raw["Calle 9"] = body

    async def scenario():
        return await make_chain(make_store(records), geocoders).resolve("Calle 9")

    with pytest.raises(GeocodingFailed):
        run(scenario())
    assert records.data["geocodeCache"] == []


def test_unreachable_cache_counts_as_miss(records, geocoders):
    records.unreachable.add(("GET", "geocodeCache"))
    geocoders.osm["Calle 5"] = (20.7, -103.4)

    async def scenario():
        return await make_chain(make_store(records), geocoders).resolve("Calle 5")

    result = run(scenario())
    assert (result.provider, result.from_cache) == ("osm", False)


def test_non_json_cache_body_counts_as_miss(records, geocoders):
    records.garbled.add("geocodeCache")
    geocoders.osm["Calle 5"] = (20.7, -103.4)

    async def scenario():
        return await make_chain(make_store(records), geocoders).resolve("Calle 5")

    assert run(scenario()).provider == "osm"


def test_cache_lookup_uses_exact_address(geocoders):
    records = FakeRecordStore(geocodeCache=[
        {"id": "1", "address": "Calle 5", "lat": 1.0, "lng": 2.0, "provider": "osm"},
    ])
    geocoders.osm[" Calle 5 "] = (3.0, 4.0)

    async def scenario():
        return await make_chain(make_store(records), geocoders).resolve(" Calle 5 ")

    result = run(scenario())
    assert (result.lat, result.from_cache) == (3.0, False)
    assert records.data["geocodeCache"][-1]["address"] == " Calle 5 "
