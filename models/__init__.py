from .schemas import (
    Order,
    Zone,
    StaffMember,
    GeocodeCacheEntry,
    GeocodeProvider,
    StaffRole,
    StaffStatus,
    TimeSlot,
)

__all__ = [
    "Order",
    "Zone",
    "StaffMember",
    "GeocodeCacheEntry",
    "GeocodeProvider",
    "StaffRole",
    "StaffStatus",
    "TimeSlot",
]
