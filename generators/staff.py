import uuid
import random
from datetime import datetime, timedelta

from models import StaffRole, StaffStatus
from .base import BaseGenerator


class StaffGenerator(BaseGenerator):
    resource = "staff"

    VEHICLE_TYPES = [
        ("moto", 0.40),
        ("furgoneta", 0.20),
        ("camioneta_empresa", 0.15),
        ("carro_propio", 0.15),
        ("bici", 0.10),
    ]

    SHIFTS = ["08:00-16:00", "09:00-17:00", "07:00-15:00"]

    # (value, weight) for everyone who is not on the road
    SUPPORT_ROLES = [
        (StaffRole.SENIOR_FLORIST, 0.50),
        (StaffRole.ADMIN, 0.30),
        (StaffRole.MANAGER, 0.20),
    ]

    def _weighted_choice(self, choices: list[tuple]):
        items, weights = zip(*choices)
        return random.choices(items, weights=weights)[0]

    def generate_one(self, role: StaffRole = StaffRole.DRIVER) -> dict:
        first_name = self.fake.first_name()
        last_name = self.fake.last_name()
        days_ago = random.randint(0, 730)
        is_driver = role == StaffRole.DRIVER

        return {
            "id": str(uuid.uuid4()),
            "name": f"{first_name} {last_name}",
            "email": self.fake.unique.email(),
            "phone": self.fake.phone_number(),
            "role": role.value,
            # most of the roster is working on any given day
            "status": (StaffStatus.ACTIVE if random.random() < 0.85 else StaffStatus.INACTIVE).value,
            "shift": random.choice(self.SHIFTS),
            "vehicleType": self._weighted_choice(self.VEHICLE_TYPES) if is_driver else "ninguno",
            "licenseNumber": self.fake.bothify("??-######").upper() if is_driver else None,
            "avatarUrl": "",
            "createdAt": (datetime.now() - timedelta(days=days_ago)).isoformat(),
        }

    def generate_drivers(self, count: int) -> list[dict]:
        return [self.generate_one(StaffRole.DRIVER) for _ in range(count)]

    def generate_support_staff(self, count: int) -> list[dict]:
        return [self.generate_one(self._weighted_choice(self.SUPPORT_ROLES)) for _ in range(count)]
