"""
Zoning Engines

Places geocoded orders into delivery zones:
1. Assignment: join the nearest existing zone of the same delivery window whose
   service radius covers the order
2. Formation: cluster what is left, per window, around seed orders and open one
   new zone per cluster, rotating drivers across the new zones

Both engines are pure. They never touch the records they are given; changed
zones come back as copies so the caller knows exactly what to persist.
"""

import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional

import config
from models import Order, StaffMember, Zone
from .geometry import TIME_WINDOWS, classify_window, haversine_distance


@dataclass
class AssignmentResult:
    assignments: list[tuple[str, str]] = field(default_factory=list)  # (order_id, zone_id)
    changed_zones: list[Zone] = field(default_factory=list)
    leftovers: list[Order] = field(default_factory=list)


@dataclass
class FormationResult:
    zones: list[Zone] = field(default_factory=list)
    assignments: list[tuple[str, str]] = field(default_factory=list)
    cursor: int = 0


def active_drivers(staff: list[StaffMember]) -> list[StaffMember]:
    """Staff eligible for round-robin: delivery role and active status."""
    return [
        s for s in staff
        if s.role == config.DRIVER_ROLE and s.status == config.ACTIVE_STATUS
    ]


def group_zones_by_window(zones: list[Zone]) -> dict[str, list[Zone]]:
    grouped: dict[str, list[Zone]] = {}
    for zone in zones:
        grouped.setdefault(zone.time_window, []).append(zone)
    return grouped


def find_nearest_zone(order: Order, zones: list[Zone]) -> Optional[Zone]:
    """Closest zone whose radius covers the order; the first one wins a tie."""
    best_zone = None
    best_dist = float('inf')

    for zone in zones:
        dist = haversine_distance(order.lat, order.lng, zone.center_lat, zone.center_lng)
        if dist <= zone.radius_km and dist < best_dist:
            best_dist = dist
            best_zone = zone

    return best_zone


def assign_to_existing_zones(orders: list[Order], zones: list[Zone]) -> AssignmentResult:
    """
    Attach each order to at most one existing zone.

    Only zones sharing the order's window are considered. Orders with no window
    are skipped entirely; orders with a window but no covering zone are
    returned as leftovers for formation.
    """
    result = AssignmentResult()
    by_window = group_zones_by_window(zones)
    snapshots = {zone.id: zone for zone in zones}
    changed: set[str] = set()

    for order in orders:
        window_key = classify_window(order)
        if window_key is None:
            continue

        nearest = find_nearest_zone(order, by_window.get(window_key, []))
        if nearest is None:
            result.leftovers.append(order)
            continue

        current = snapshots[nearest.id]
        if order.id not in current.orders:
            snapshots[nearest.id] = current.model_copy(
                update={"orders": [*current.orders, order.id]}
            )
            changed.add(nearest.id)
        result.assignments.append((order.id, nearest.id))

    result.changed_zones = [snapshots[zone.id] for zone in zones if zone.id in changed]
    return result


def next_driver(drivers: list[StaffMember], cursor: int) -> tuple[Optional[StaffMember], int]:
    """Round-robin pick. The cursor only moves when a driver is handed out."""
    if not drivers:
        return None, cursor
    return drivers[cursor % len(drivers)], cursor + 1


def form_new_zones(
    orders: list[Order],
    radius_km: float,
    drivers: list[StaffMember],
    cursor: int = 0,
    new_id: Callable[[], str] = lambda: str(uuid.uuid4()),
) -> FormationResult:
    """
    Group orders into new zones, one window at a time.

    Algorithm (star clustering):
    1. Walk the window's orders in input order
    2. Each unvisited order seeds a cluster
    3. Every other unvisited order within radius_km of the seed joins it;
       distance to other members does not matter
    4. The cluster becomes a zone centred on the seed with radius radius_km
    """
    result = FormationResult(cursor=cursor)

    for window in TIME_WINDOWS:
        window_orders = [o for o in orders if classify_window(o) == window.key]
        visited: set[str] = set()

        for seed in window_orders:
            if seed.id in visited:
                continue

            members = [seed]
            visited.add(seed.id)
            for other in window_orders:
                if other.id in visited:
                    continue
                dist = haversine_distance(seed.lat, seed.lng, other.lat, other.lng)
                if dist <= radius_km:
                    members.append(other)
                    visited.add(other.id)

            driver, result.cursor = next_driver(drivers, result.cursor)
            zone = Zone(
                id=new_id(),
                center_lat=seed.lat,
                center_lng=seed.lng,
                radius_km=radius_km,
                time_window=window.key,
                orders=[m.id for m in members],
                driver_id=driver.id if driver else None,
                driver_name=driver.name if driver else None,
            )
            result.zones.append(zone)
            result.assignments.extend((m.id, zone.id) for m in members)

    return result
