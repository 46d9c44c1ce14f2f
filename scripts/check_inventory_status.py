"""
Check inventory status - units per size for every active product, plus alerts.

Usage:
    python scripts/check_inventory_status.py
    python scripts/check_inventory_status.py --threshold 2
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.size import Size
from repositories.product_repository import list_products
from services.inventory_service import get_stock_alerts
from services.reporting_service import get_lifetime_stock


def check_inventory_status(threshold=None):
    """Print stock by size, out-of-stock / low-stock products and lifetime units."""

    products = list_products(active_only=True)

    print("=" * 60)
    print("INVENTORY STATUS")
    print("=" * 60)
    header = f"{'SKU':<14}{'Product':<22}" + "".join(f"{s.value:>5}" for s in Size) + f"{'Total':>7}"
    print(header)
    print("-" * 60)
    for product in products:
        sizes = "".join(f"{product.stock_for(s):>5}" for s in Size)
        print(f"{product.sku[:13]:<14}{product.name[:21]:<22}{sizes}{product.size_inventory.total_units:>7}")
    print("-" * 60)

    alerts = get_stock_alerts(threshold)
    print(f"\nOut of stock ({len(alerts.out_of_stock)}):")
    for product in alerts.out_of_stock:
        print(f"  {product.sku}  {product.name}")

    print(f"\nLow stock, any size <= {alerts.threshold} ({len(alerts.low_stock)}):")
    for product in alerts.low_stock:
        empty = [s.value for s in Size if product.stock_for(s) <= alerts.threshold]
        print(f"  {product.sku}  {product.name}  ({', '.join(empty)})")

    lifetime = get_lifetime_stock()
    print()
    print("=" * 60)
    print(f"Units in stock:   {lifetime.current_units}")
    print(f"Units sold:       {lifetime.sold_units}")
    print(f"Lifetime stock:   {lifetime.lifetime_units}")
    print("=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Show per-size stock and stock alerts")
    parser.add_argument(
        "--threshold",
        "-t",
        type=int,
        default=None,
        help="Low-stock threshold (defaults to LOW_STOCK_THRESHOLD)"
    )
    args = parser.parse_args()
    check_inventory_status(args.threshold)
