"""Order arithmetic — price tiers, case/unit conversion, support-fund credit.

Pure functions over products and line items; no database access. The order
and support-fund services build on these, and the same functions back the
summary endpoints so what a client sees is what the server persists.

Money is handled as :class:`~decimal.Decimal` throughout. Line totals are
exact (units × unit price, both already at cent precision); only the earned
credit is rounded, half-up to the cent.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from partners_hub.core.exceptions import ValidationError
from partners_hub.domain.product import PriceTier, Product

CENT = Decimal("0.01")
ZERO = Decimal("0")

_INTERNATIONAL_MARKER = "international"


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


# ---------------------------------------------------------------------------
# Price tier selection
# ---------------------------------------------------------------------------

def resolve_price_tier(class_name: Optional[str]) -> PriceTier:
    """Map a company class name to a price tier.

    Any class whose name contains "international" (case-insensitive) prices
    at the international tier; everything else, including a missing class,
    prices at the Americas tier.
    """
    if class_name and _INTERNATIONAL_MARKER in class_name.lower():
        return PriceTier.INTERNATIONAL
    return PriceTier.AMERICAS


def unit_price_for(product: Product, tier: PriceTier) -> Decimal:
    if tier is PriceTier.INTERNATIONAL:
        return to_decimal(product.price_international)
    return to_decimal(product.price_americas)


def is_visible_to(product: Product, tier: PriceTier) -> bool:
    if tier is PriceTier.INTERNATIONAL:
        return bool(product.visible_to_international)
    return bool(product.visible_to_americas)


# ---------------------------------------------------------------------------
# Case-to-unit conversion and line totals
# ---------------------------------------------------------------------------

@dataclass
class LineItem:
    product_id: str
    case_qty: int
    case_pack: int
    unit_price: Decimal
    total_units: int
    total_price: Decimal
    product: Optional[Product] = field(default=None, repr=False, compare=False)


def build_line(product: Product, case_qty: int, tier: PriceTier) -> LineItem:
    if case_qty < 0:
        raise ValidationError(f"Case quantity for '{product.sku}' cannot be negative")
    if product.case_pack < 1:
        raise ValidationError(f"Product '{product.sku}' has an invalid case pack")

    unit_price = unit_price_for(product, tier)
    total_units = case_qty * product.case_pack
    return LineItem(
        product_id=product.id,
        case_qty=case_qty,
        case_pack=product.case_pack,
        unit_price=unit_price,
        total_units=total_units,
        total_price=unit_price * total_units,
        product=product,
    )


def set_case_qty(
    lines: list[LineItem], product: Product, case_qty: int, tier: PriceTier
) -> list[LineItem]:
    """Return a new working set with the product's line set to *case_qty* cases.

    Zero removes the line; it is never kept as a zero-quantity row.
    """
    if case_qty == 0:
        return [line for line in lines if line.product_id != product.id]

    new_line = build_line(product, case_qty, tier)
    updated = list(lines)
    for i, line in enumerate(updated):
        if line.product_id == product.id:
            updated[i] = new_line
            return updated
    updated.append(new_line)
    return updated


def lines_total(lines: Iterable[LineItem]) -> Decimal:
    return sum((line.total_price for line in lines), ZERO)


# ---------------------------------------------------------------------------
# Support fund
# ---------------------------------------------------------------------------

def support_fund_earned(order_total, percent) -> Decimal:
    earned = to_decimal(order_total) * to_decimal(percent) / Decimal(100)
    return earned.quantize(CENT, rounding=ROUND_HALF_UP)


def max_redeemable_cases(remaining, unit_price, case_pack: int) -> Optional[int]:
    """Largest case quantity of one product the remaining credit still covers.

    ``None`` means unbounded (a zero-priced product costs no credit).
    """
    remaining = to_decimal(remaining)
    unit_price = to_decimal(unit_price)
    if unit_price <= ZERO:
        return None
    if remaining <= ZERO or case_pack < 1:
        return 0
    return max(0, math.floor(remaining / unit_price / case_pack))


@dataclass
class SupportFundTotals:
    percent: Decimal
    earned: Decimal
    used: Decimal
    remaining: Decimal
    original_total: Decimal
    final_total: Decimal
    item_count: int

    @property
    def overspent(self) -> bool:
        return self.remaining < ZERO


def compute_support_fund_totals(
    order_total, percent, redeemed: Iterable[LineItem] = ()
) -> SupportFundTotals:
    """Credit earned on *order_total* and what redeeming *redeemed* leaves.

    Overspending is reported (negative ``remaining``), not prevented; callers
    that persist a redemption must check :attr:`SupportFundTotals.overspent`.
    """
    redeemed = list(redeemed)
    original_total = to_decimal(order_total)
    earned = support_fund_earned(original_total, percent)
    used = lines_total(redeemed)
    return SupportFundTotals(
        percent=to_decimal(percent),
        earned=earned,
        used=used,
        remaining=earned - used,
        original_total=original_total,
        final_total=original_total - used,
        item_count=len(redeemed),
    )
