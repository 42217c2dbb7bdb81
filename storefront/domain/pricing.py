# storefront/domain/pricing.py
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from storefront.utils.settings import FREE_SHIPPING_THRESHOLD, FLAT_SHIPPING_FEE, TAX_RATE

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    """Major currency units -> integer minor units (paise, cents) for providers."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def shipping_cost(subtotal: Decimal) -> Decimal:
    if subtotal > FREE_SHIPPING_THRESHOLD:
        return ZERO
    return money(FLAT_SHIPPING_FEE)


def tax_for(subtotal: Decimal) -> Decimal:
    # liczone od subtotal przed rabatem
    return money(subtotal * TAX_RATE)


def coupon_discount(
    subtotal: Decimal,
    discount_type: str,
    discount_value: Decimal,
    max_discount: Decimal | None = None,
) -> Decimal:
    if discount_type == "percentage":
        discount = subtotal * discount_value / 100
    else:
        discount = discount_value

    if max_discount is not None and discount > max_discount:
        discount = max_discount

    return money(min(discount, subtotal))


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    shipping_cost: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal


def order_totals(subtotal: Decimal, discount: Decimal = ZERO) -> OrderTotals:
    subtotal = money(subtotal)
    discount = money(discount)
    shipping = shipping_cost(subtotal)
    tax = tax_for(subtotal)
    total = subtotal + shipping + tax - discount
    if total < 0:
        raise ValueError(f"Order total cannot be negative: {total}")
    return OrderTotals(
        subtotal=subtotal,
        shipping_cost=shipping,
        tax=tax,
        discount=discount,
        total=money(total),
    )
