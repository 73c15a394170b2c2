"""Failure conditions raised by the zoning services."""

from store import PersistenceError, RecordStoreError


class FetchFailure(RecordStoreError):
    """Orders, zones or staff could not be loaded; nothing was changed."""

    def __init__(self, statuses: dict[str, int | str]):
        self.statuses = statuses
        super().__init__(" ".join(f"{name}:{status}" for name, status in statuses.items()))


class GeocodingError(Exception):
    """An address could not be turned into coordinates."""

    def __init__(self, address: str, message: str):
        super().__init__(message)
        self.address = address


class GeocodingFailed(GeocodingError):
    def __init__(self, address: str):
        super().__init__(address, "Geocoding failed")


class GeocoderConfigError(GeocodingError):
    """The paid provider was needed but has no credential configured."""


class RecalculationInProgress(Exception):
    """Another zone recalculation pass holds the single-flight guard."""


__all__ = [
    "FetchFailure",
    "GeocodingError",
    "GeocodingFailed",
    "GeocoderConfigError",
    "PersistenceError",
    "RecalculationInProgress",
    "RecordStoreError",
]
