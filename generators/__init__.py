from .orders import OrderGenerator
from .staff import StaffGenerator

__all__ = [
    "OrderGenerator",
    "StaffGenerator",
]
