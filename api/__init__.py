from .main import app
from .models import (
    ErrorResponse,
    GeocodeRequest,
    GeocodeResponse,
    RecalculateRequest,
    RecalculateResponse,
)

__all__ = [
    "app",
    "ErrorResponse",
    "GeocodeRequest",
    "GeocodeResponse",
    "RecalculateRequest",
    "RecalculateResponse",
]
