from abc import ABC, abstractmethod
from faker import Faker
import random

from store import RecordStore


class BaseGenerator(ABC):
    """Fake record factory. Records are plain dicts in the record store's
    wire format so they can be posted as-is."""

    resource: str

    def __init__(self, seed: int | None = 42, locale: str = "es_MX"):
        self.fake = Faker(locale)
        if seed is not None:
            Faker.seed(seed)
            random.seed(seed)

    @abstractmethod
    def generate_one(self) -> dict:
        pass

    def generate_batch(self, count: int) -> list[dict]:
        return [self.generate_one() for _ in range(count)]

    async def save_to_store(self, store: RecordStore, records: list[dict]) -> int:
        for record in records:
            await store.create(self.resource, record)
        print(f"Saved {len(records)} {self.resource}")
        return len(records)
