"""
Service Areas for Seeded Orders

Circular areas the back office delivers to. Seeded orders that skip geocoding
get coordinates drawn uniformly inside one of these circles.
"""

import math
import random


SERVICE_AREAS = [
    {
        "city": "Guadalajara",
        "lat": 20.6767,
        "lon": -103.3475,
        "radius_km": 8.0,  # centro to the inner ring road
        "weight": 0.45,
    },
    {
        "city": "Zapopan",
        "lat": 20.7236,
        "lon": -103.3848,
        "radius_km": 7.0,
        "weight": 0.30,
    },
    {
        "city": "Tlaquepaque",
        "lat": 20.6409,
        "lon": -103.2933,
        "radius_km": 5.0,
        "weight": 0.15,
    },
    {
        "city": "Tala",
        "lat": 20.6536,
        "lon": -103.7006,
        "radius_km": 4.0,
        "weight": 0.10,
    },
]


def random_point_in_area(area: dict) -> tuple[float, float]:
    """Uniform point inside the area's circle (sqrt keeps density even)."""
    r = area["radius_km"] * math.sqrt(random.random())
    theta = random.uniform(0, 2 * math.pi)

    # 1 degree of latitude is roughly 111 km
    lat_offset = (r * math.cos(theta)) / 111.0
    lon_offset = (r * math.sin(theta)) / (111.0 * math.cos(math.radians(area["lat"])))

    return area["lat"] + lat_offset, area["lon"] + lon_offset


def get_all_areas() -> list[dict]:
    return SERVICE_AREAS.copy()


def get_area_weights() -> list[float]:
    return [area["weight"] for area in SERVICE_AREAS]
