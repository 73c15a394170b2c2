import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RecalculateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Anything but a finite number falls back to the configured radius
    radius_km: Any = Field(default=None, alias="radiusKm")

    @property
    def radius(self) -> float | None:
        value = self.radius_km
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return None
        try:
            radius = float(value)
        except OverflowError:
            return None
        return radius if math.isfinite(radius) else None


class RecalculateResponse(BaseModel):
    updatedOrders: int
    createdZones: int


class ErrorResponse(BaseModel):
    error: str
    detail: str


class GeocodeRequest(BaseModel):
    address: Any = ""


class GeocodeResponse(BaseModel):
    latitude: float
    longitude: float
    provider: str | None = None
