import uuid
import random
from datetime import datetime, timedelta

from models import TimeSlot
from services.geometry import TIME_WINDOWS
from .base import BaseGenerator
from .geofence import get_all_areas, get_area_weights, random_point_in_area


class OrderGenerator(BaseGenerator):
    """Generates delivery orders the way the order form records them."""

    resource = "orders"

    PRODUCTS = [
        "Ramo de rosas", "Arreglo de girasoles", "Caja de tulipanes",
        "Centro de mesa", "Orquídea en maceta", "Corona fúnebre",
        "Ramo de novia", "Arreglo de lirios",
    ]

    # (value, weight)
    SLOTS = [
        (TimeSlot.MORNING, 0.45),
        (TimeSlot.AFTERNOON, 0.35),
        (TimeSlot.EVENING, 0.20),
    ]
    EXACT_TIME_RATE = 0.30
    OUT_OF_WINDOW_RATE = 0.05  # exact times that straddle two windows

    def __init__(self, seed: int | None = 42, geocoded: bool = False):
        super().__init__(seed)
        self.geocoded = geocoded
        self.service_areas = get_all_areas()
        self._sequence = 0

    def _weighted_choice(self, choices: list[tuple]):
        items, weights = zip(*choices)
        return random.choices(items, weights=weights)[0]

    def _generate_exact_time(self) -> tuple[str, str]:
        """Start/end pair, usually inside one window."""
        window = random.choice(TIME_WINDOWS)
        if random.random() < self.OUT_OF_WINDOW_RATE:
            start = window.end - 30
            end = window.end + 30
        else:
            start = random.randrange(window.start, window.end - 30, 15)
            end = min(window.end, start + random.choice([30, 60, 90]))
        return f"{start // 60:02d}:{start % 60:02d}", f"{end // 60:02d}:{end % 60:02d}"

    def generate_one(self) -> dict:
        self._sequence += 1
        area = random.choices(self.service_areas, weights=get_area_weights())[0]

        order = {
            "id": str(uuid.uuid4()),
            "orderNumber": f"ORD-{self._sequence:04d}",
            "address": f"{self.fake.street_address()}, {area['city']}, Jalisco",
            "recipientName": self.fake.name(),
            "product": random.choice(self.PRODUCTS),
            "contactNumber": self.fake.phone_number(),
            "deliveryType": "delivery",
            "paymentStatus": random.choice(["paid", "due"]),
            "priority": random.choice(["Alta", "Media", "Baja"]),
            "deliveryTimeType": "timeslot",
            "deliveryTimeSlot": None,
            "delivery_start": None,
            "delivery_end": None,
            "lat": None,
            "lng": None,
            "geocoded": False,
            "zoned": False,
            "zone_id": None,
            "createdAt": (datetime.now() - timedelta(minutes=random.randint(0, 600))).isoformat(),
        }

        if random.random() < self.EXACT_TIME_RATE:
            order["deliveryTimeType"] = "exact_time"
            order["delivery_start"], order["delivery_end"] = self._generate_exact_time()
        else:
            order["deliveryTimeSlot"] = self._weighted_choice(self.SLOTS).value

        if self.geocoded:
            order["lat"], order["lng"] = random_point_in_area(area)
            order["geocoded"] = True

        return order
