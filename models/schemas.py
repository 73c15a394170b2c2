from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional
from enum import Enum


class TimeSlot(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class GeocodeProvider(str, Enum):
    OSM = "osm"
    GOOGLE = "google"


class StaffRole(str, Enum):
    DRIVER = "Repartidor"
    ADMIN = "Administrador"
    SENIOR_FLORIST = "Florista Senior"
    MANAGER = "Gerente"


class StaffStatus(str, Enum):
    ACTIVE = "Activo"
    INACTIVE = "Inactivo"


class Record(BaseModel):
    """Base for record store resources. Fields this service does not know about
    are kept so a round trip never drops them."""

    model_config = ConfigDict(
        extra="allow", populate_by_name=True, coerce_numbers_to_str=True
    )


class Order(Record):
    id: str
    address: str = ""
    lat: Optional[float] = None
    lng: Optional[float] = None
    delivery_start: Optional[str] = None
    delivery_end: Optional[str] = None
    time_slot: Optional[TimeSlot] = Field(default=None, alias="deliveryTimeSlot")
    geocoded: bool = False
    zoned: bool = False
    zone_id: Optional[str] = None

    @field_validator("time_slot", mode="before")
    @classmethod
    def _blank_slot_is_none(cls, value):
        return value or None

    @field_validator("geocoded", "zoned", mode="before")
    @classmethod
    def _missing_flag_is_false(cls, value):
        return False if value is None else value

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None

    @property
    def has_time_signal(self) -> bool:
        return bool(self.delivery_start or self.delivery_end or self.time_slot)


class Zone(Record):
    id: str
    center_lat: float
    center_lng: float
    radius_km: float
    time_window: str
    orders: list[str] = Field(default_factory=list)
    driver_id: Optional[str] = None
    driver_name: Optional[str] = None


class StaffMember(Record):
    id: str
    name: str = ""
    role: str = ""
    status: str = ""


class GeocodeCacheEntry(Record):
    id: Optional[str] = None
    address: str
    lat: float
    lng: float
    provider: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
