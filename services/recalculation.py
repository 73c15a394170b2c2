"""
Zone Recalculation

One pass over the back office's orders:
1. Load orders, zones and staff (all or nothing)
2. Pick candidates: orders with a delivery time signal that are missing
   geocoding or zoning
3. Geocode the ungeocoded ones concurrently, one lookup per distinct address
4. Assign geocoded, unzoned orders to existing zones
5. Form new zones from the leftovers and rotate drivers across them
6. Persist changed zones, new zones and order assignments

Only one pass runs at a time per recalculator. There is no rollback: a failed
write leaves whatever already landed in place, and the next pass picks up from
the persisted state.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Optional

import config
from models import Order, StaffMember, Zone
from store import RecordStore
from .exceptions import FetchFailure, GeocodingError, RecalculationInProgress
from .geocoding import GeocoderChain
from .zoning import active_drivers, assign_to_existing_zones, form_new_zones

logger = logging.getLogger(__name__)

BASE_RESOURCES = ("orders", "zones", "staff")


@dataclass
class Snapshot:
    orders: list[Order]
    zones: list[Zone]
    staff: list[StaffMember]


@dataclass
class RecalculationSummary:
    updated_orders: int
    created_zones: int
    geocoded_orders: int = 0
    failed_geocodes: int = 0

    def to_response(self) -> dict:
        return {"updatedOrders": self.updated_orders, "createdZones": self.created_zones}


def select_candidates(orders: list[Order]) -> list[Order]:
    """Orders worth a look this pass: incomplete, with some delivery time."""
    return [
        o for o in orders
        if (not o.geocoded or not o.zoned) and o.has_time_signal
    ]


class ZoneRecalculator:
    def __init__(self, store: RecordStore, geocoder: GeocoderChain,
                 default_radius_km: float | None = None):
        self.store = store
        self.geocoder = geocoder
        self.default_radius_km = default_radius_km or config.ZONE_RADIUS_KM
        self._lock = asyncio.Lock()

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    async def recalculate(self, radius_km: Optional[float] = None) -> RecalculationSummary:
        if self._lock.locked():
            raise RecalculationInProgress("A zone recalculation is already running")
        async with self._lock:
            return await self._run_pass(
                radius_km if radius_km is not None else self.default_radius_km
            )

    async def fetch_snapshot(self) -> Snapshot:
        responses = await asyncio.gather(*(self.store.fetch(r) for r in BASE_RESOURCES))
        statuses = {name: resp.status_code for name, resp in zip(BASE_RESOURCES, responses)}
        if not all(resp.is_success for resp in responses):
            raise FetchFailure(statuses)

        orders_res, zones_res, staff_res = responses
        return Snapshot(
            orders=[Order.model_validate(r) for r in orders_res.json()],
            zones=[Zone.model_validate(r) for r in zones_res.json()],
            staff=[StaffMember.model_validate(r) for r in staff_res.json()],
        )

    async def _run_pass(self, radius_km: float) -> RecalculationSummary:
        if not math.isfinite(radius_km) or radius_km <= 0:
            raise ValueError(f"radius_km must be a positive finite number, got {radius_km}")

        snapshot = await self.fetch_snapshot()
        candidates = select_candidates(snapshot.orders)
        logger.info(
            "Recalculating zones: %d candidates of %d orders, %d existing zones, radius %.2f km",
            len(candidates), len(snapshot.orders), len(snapshot.zones), radius_km,
        )

        geocoded = await self.geocode_orders([o for o in candidates if not o.geocoded])
        candidates = [geocoded.get(o.id, o) for o in candidates]
        failed = sum(1 for o in candidates if not o.geocoded)

        unzoned = [o for o in candidates if not o.zoned and o.geocoded and o.has_coordinates]
        assignment = assign_to_existing_zones(unzoned, snapshot.zones)
        formation = form_new_zones(
            assignment.leftovers, radius_km, active_drivers(snapshot.staff)
        )

        assignments = assignment.assignments + formation.assignments
        await self.persist(assignment.changed_zones, formation.zones, assignments)

        summary = RecalculationSummary(
            updated_orders=len(assignments),
            created_zones=len(formation.zones),
            geocoded_orders=len(geocoded),
            failed_geocodes=failed,
        )
        logger.info(
            "Zones recalculated: %d orders assigned, %d zones created, %d geocoded, %d geocode failures",
            summary.updated_orders, summary.created_zones,
            summary.geocoded_orders, summary.failed_geocodes,
        )
        return summary

    async def geocode_orders(self, orders: list[Order]) -> dict[str, Order]:
        """
        Resolve and persist coordinates for ungeocoded orders.

        Orders with the exact same address share one lookup, keyed on the
        address as stored. An address that cannot be
        resolved leaves its orders untouched; they are retried next pass.
        Returns the updated copies keyed by order id.
        """
        by_address: dict[str, list[Order]] = {}
        for order in orders:
            by_address.setdefault(order.address, []).append(order)

        async def resolve(address: str, group: list[Order]) -> list[Order]:
            if not address.strip():
                logger.warning("Orders %s have no address to geocode", [o.id for o in group])
                return []
            try:
                result = await self.geocoder.resolve(address)
            except GeocodingError as e:
                logger.warning("Could not geocode %r (%s): %s", address, [o.id for o in group], e)
                return []

            fields = {"lat": result.lat, "lng": result.lng, "geocoded": True}
            await asyncio.gather(*(self.store.patch("orders", o.id, fields) for o in group))
            return [o.model_copy(update=fields) for o in group]

        resolved = await asyncio.gather(*(resolve(a, g) for a, g in by_address.items()))
        return {order.id: order for group in resolved for order in group}

    async def persist(self, changed_zones: list[Zone], new_zones: list[Zone],
                      assignments: list[tuple[str, str]]):
        await asyncio.gather(*(
            self.store.patch("zones", zone.id, {
                "orders": zone.orders,
                "driver_id": zone.driver_id,
                "driver_name": zone.driver_name,
            })
            for zone in changed_zones
        ))
        await asyncio.gather(*(
            self.store.create("zones", zone.model_dump(by_alias=True))
            for zone in new_zones
        ))
        await asyncio.gather(*(
            self.store.patch("orders", order_id, {"zoned": True, "zone_id": zone_id})
            for order_id, zone_id in assignments
        ))
