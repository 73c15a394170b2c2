#!/usr/bin/env python3
"""
Delivery Zoning CLI

Seed a record store with fake orders and drivers, run a zone recalculation
pass, and export the result.
"""

import argparse
import asyncio
import sys
from pathlib import Path

import httpx

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

import config
from store import open_store, get_resource_counts
from generators import OrderGenerator, StaffGenerator
from services import ZoneRecalculator, build_geocoder


async def seed_data(num_orders: int, num_drivers: int, num_support: int, seed: int,
                    geocoded: bool):
    """Post fake staff and orders to the record store."""
    async with open_store() as store:
        staff_gen = StaffGenerator(seed)
        if num_drivers:
            print(f"🚗 Generating {num_drivers} drivers...")
            await staff_gen.save_to_store(store, staff_gen.generate_drivers(num_drivers))

        if num_support:
            print(f"💐 Generating {num_support} florists and office staff...")
            await staff_gen.save_to_store(store, staff_gen.generate_support_staff(num_support))

        if num_orders:
            mode = "pre-geocoded" if geocoded else "ungeocoded"
            print(f"📝 Generating {num_orders} {mode} orders...")
            order_gen = OrderGenerator(seed, geocoded=geocoded)
            await order_gen.save_to_store(store, order_gen.generate_batch(num_orders))

    print("\n✅ Seeding complete!")


async def recalculate(radius_km: float | None):
    """Run one recalculation pass and print the summary."""
    async with open_store() as store:
        async with httpx.AsyncClient(timeout=config.HTTP_TIMEOUT_SECONDS) as client:
            recalculator = ZoneRecalculator(store, build_geocoder(store, client))
            summary = await recalculator.recalculate(radius_km)

    print(f"\n🗺️  Zone Recalculation:")
    print("-" * 40)
    print(f"   Orders assigned:    {summary.updated_orders:,}")
    print(f"   Zones created:      {summary.created_zones:,}")
    print(f"   Orders geocoded:    {summary.geocoded_orders:,}")
    print(f"   Geocode failures:   {summary.failed_geocodes:,}")
    print("-" * 40)


async def export_to_csv():
    """Export zones and orders to CSV files"""
    import pandas as pd

    export_dir = Path(__file__).parent / "exports"
    export_dir.mkdir(exist_ok=True)

    print("\n📁 Exporting to CSV...")
    async with open_store() as store:
        for resource in ["zones", "orders"]:
            df = pd.DataFrame(await store.list(resource))
            if resource == "zones" and not df.empty:
                df["order_count"] = df["orders"].apply(len)
                df["orders"] = df["orders"].apply(lambda ids: ";".join(map(str, ids)))
            output_path = export_dir / f"{resource}.csv"
            df.to_csv(output_path, index=False)
            print(f"   - {output_path} ({len(df)} rows)")

    print("\n✅ Export complete!")


async def show_stats():
    """Display current record store statistics"""
    async with open_store() as store:
        counts = await get_resource_counts(store)

    print("\n📈 Record Store Statistics:")
    print("-" * 30)
    for resource, count in counts.items():
        print(f"   {resource:15} {count:>8,} rows")
    print("-" * 30)
    print(f"   {'Total':15} {sum(counts.values()):>8,} rows")
    print(f"\n   Record store: {config.JSON_SERVER_URL}")


def main():
    parser = argparse.ArgumentParser(
        description="Seed, zone and export same-day delivery orders",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --seed-orders 50 --seed-drivers 4      # Seed fake data
  python main.py --seed-orders 50 --geocoded            # Seed with coordinates
  python main.py --seed-drivers 4 --seed-support 3      # Drivers plus office staff
  python main.py --recalculate                          # Zone pending orders
  python main.py --recalculate --radius 3.5             # Custom zone radius
  python main.py --export                               # Export zones/orders to CSV
  python main.py --stats                                # Show record counts
        """
    )

    parser.add_argument(
        "--seed-orders", "-n",
        type=int,
        default=0,
        help="Number of fake orders to create"
    )

    parser.add_argument(
        "--seed-drivers", "-d",
        type=int,
        default=0,
        help="Number of fake drivers to create"
    )

    parser.add_argument(
        "--seed-support",
        type=int,
        default=0,
        help="Number of fake non-driver staff to create (never assigned to zones)"
    )

    parser.add_argument(
        "--geocoded",
        action="store_true",
        help="Give seeded orders coordinates instead of leaving them for the geocoder"
    )

    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=42,
        help="Random seed for reproducibility (default: 42)"
    )

    parser.add_argument(
        "--recalculate", "-r",
        action="store_true",
        help="Run a zone recalculation pass"
    )

    parser.add_argument(
        "--radius",
        type=float,
        default=None,
        help=f"Clustering radius in km (default: {config.ZONE_RADIUS_KM})"
    )

    parser.add_argument(
        "--export", "-e",
        action="store_true",
        help="Export zones and orders to CSV files"
    )

    parser.add_argument(
        "--stats",
        action="store_true",
        help="Show record store statistics"
    )

    args = parser.parse_args()
    config.configure_logging()

    if args.stats:
        asyncio.run(show_stats())
        return

    if args.export:
        asyncio.run(export_to_csv())
        return

    seeding = args.seed_orders or args.seed_drivers or args.seed_support
    if seeding:
        asyncio.run(seed_data(
            args.seed_orders, args.seed_drivers, args.seed_support, args.seed, args.geocoded
        ))

    if args.recalculate:
        asyncio.run(recalculate(args.radius))

    if not (seeding or args.recalculate):
        parser.print_help()


if __name__ == "__main__":
    main()
