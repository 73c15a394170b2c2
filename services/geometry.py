"""
Distance and delivery-window helpers shared by the zoning engines.
"""

import math
from dataclasses import dataclass
from typing import Optional

from models import Order, TimeSlot


EARTH_RADIUS_KM = 6371


@dataclass(frozen=True)
class TimeWindow:
    key: str
    start: int  # minute of day, inclusive
    end: int  # minute of day, exclusive


TIME_WINDOWS = [
    TimeWindow("09:00-11:00", 9 * 60, 11 * 60),
    TimeWindow("11:00-13:00", 11 * 60, 13 * 60),
    TimeWindow("13:00-15:00", 13 * 60, 15 * 60),
]

SLOT_WINDOWS = {
    TimeSlot.MORNING: "09:00-11:00",
    TimeSlot.AFTERNOON: "11:00-13:00",
    TimeSlot.EVENING: "13:00-15:00",
}


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate distance between two points in kilometers.
    Uses Haversine formula for accuracy on Earth's surface.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (math.sin(delta_lat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) *
         math.sin(delta_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def parse_time_to_minutes(value: str | None) -> Optional[int]:
    """'HH:MM' -> minute of day, or None when absent or malformed."""
    if not value:
        return None
    try:
        hours, minutes = value.strip().split(":")[:2]
        return int(hours) * 60 + int(minutes)
    except ValueError:
        return None


def classify_window(order: Order) -> Optional[str]:
    """
    Map an order to one of the fixed service windows.

    An explicit start/end pair wins when a single window contains it. Otherwise
    the symbolic slot decides. None means the order sits out this pass.
    """
    start = parse_time_to_minutes(order.delivery_start)
    end = parse_time_to_minutes(order.delivery_end)
    if start is not None and end is not None:
        for window in TIME_WINDOWS:
            if start >= window.start and end <= window.end:
                return window.key

    if order.time_slot is None:
        return None
    return SLOT_WINDOWS.get(order.time_slot)
