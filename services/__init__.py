from .exceptions import (
    FetchFailure,
    GeocoderConfigError,
    GeocodingError,
    GeocodingFailed,
    RecalculationInProgress,
)
from .geocoding import GeocodeCache, GeocoderChain, GeocodeResult, build_geocoder
from .geometry import TIME_WINDOWS, classify_window, haversine_distance
from .recalculation import RecalculationSummary, ZoneRecalculator
from .zoning import assign_to_existing_zones, form_new_zones

__all__ = [
    "FetchFailure",
    "GeocoderConfigError",
    "GeocodingError",
    "GeocodingFailed",
    "RecalculationInProgress",
    "GeocodeCache",
    "GeocoderChain",
    "GeocodeResult",
    "build_geocoder",
    "TIME_WINDOWS",
    "classify_window",
    "haversine_distance",
    "RecalculationSummary",
    "ZoneRecalculator",
    "assign_to_existing_zones",
    "form_new_zones",
]
