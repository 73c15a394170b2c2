"""
Configuration for the delivery zoning service.

Everything is environment-supplied. A local ``.env`` file is loaded first so
development setups can keep credentials out of the shell profile.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r, using %s", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", name, raw, default)
        return default


# =============================================================================
# RECORD STORE
# =============================================================================

JSON_SERVER_URL = (
    os.getenv("JSON_SERVER_URL")
    or os.getenv("NEXT_PUBLIC_API_URL")
    or "http://localhost:9002"
).rstrip("/")

HTTP_TIMEOUT_SECONDS = _env_float("HTTP_TIMEOUT_SECONDS", 30.0)

# =============================================================================
# GEOCODING
# =============================================================================

NOMINATIM_URL = os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org/search")
GOOGLE_GEOCODE_URL = os.getenv(
    "GOOGLE_GEOCODE_URL", "https://maps.googleapis.com/maps/api/geocode/json"
)
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "").strip() or None

# Nominatim's usage policy asks for an identifying agent
GEOCODER_USER_AGENT = os.getenv(
    "GEOCODER_USER_AGENT", "LogisticsPro/1.0 (contact: support@example.com)"
)

GEOCODE_CONCURRENCY = max(1, min(10, _env_int("GEOCODE_CONCURRENCY", 4)))

# Returned by the address geocoding endpoint when no provider resolves
FALLBACK_LATITUDE = _env_float("FALLBACK_LATITUDE", 20.8833)
FALLBACK_LONGITUDE = _env_float("FALLBACK_LONGITUDE", -103.8360)

# =============================================================================
# ZONING
# =============================================================================

ZONE_RADIUS_KM = _env_float("ZONE_RADIUS_KM", 2.0)
"""Default clustering radius for newly formed zones."""

DRIVER_ROLE = os.getenv("DRIVER_ROLE", "Repartidor")
ACTIVE_STATUS = os.getenv("ACTIVE_STATUS", "Activo")

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging(level: str | None = None):
    logging.basicConfig(
        level=level or LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
