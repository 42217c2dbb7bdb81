# storefront/domain/inventory.py
"""Derived product fields, computed at serialization time and never stored."""
from decimal import Decimal, ROUND_HALF_UP

IN_STOCK = "in_stock"
LOW_STOCK = "low_stock"
OUT_OF_STOCK = "out_of_stock"
BACKORDER = "backorder"


def stock_status(quantity: int, low_stock_threshold: int, track_inventory: bool, allow_backorders: bool) -> str:
    if not track_inventory:
        return IN_STOCK
    if quantity <= 0:
        return BACKORDER if allow_backorders else OUT_OF_STOCK
    if quantity <= low_stock_threshold:
        return LOW_STOCK
    return IN_STOCK


def discount_percentage(price: Decimal, compare_price: Decimal | None) -> int:
    if compare_price and compare_price > price:
        pct = (compare_price - price) / compare_price * 100
        return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return 0


def remaining_after(quantity: int, requested: int, allow_backorders: bool) -> int | None:
    """Stock left once ``requested`` units are reserved, or None if they can't be.

    Backordered units never drive stored stock below zero.
    """
    if requested <= quantity:
        return quantity - requested
    if allow_backorders:
        return 0
    return None
