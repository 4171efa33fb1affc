"""Commission calculations over committed sales. Pure functions, no I/O."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional

from dealerops.core.config import settings
from dealerops.core.validation import to_decimal
from dealerops.schemas.commission import CommissionSummary, CommissionTier

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
DEFAULT_RATE = Decimal(str(settings.DEFAULT_COMMISSION_RATE))

# (lower bound inclusive, tier, rate, display name), highest first
COMMISSION_TIERS = (
    (Decimal("500000"), "platinum", Decimal("0.08"), "Platinum"),
    (Decimal("250000"), "gold", Decimal("0.06"), "Gold"),
    (Decimal("100000"), "silver", Decimal("0.05"), "Silver"),
    (Decimal("0"), "bronze", Decimal("0.03"), "Bronze"),
)


def _money(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def calculate_commission(sale_price: Any, trade_in_value: Any = 0, rate: Any = DEFAULT_RATE) -> Decimal:
    """Commission on the net amount (sale price minus trade-in), never negative."""
    price = to_decimal(sale_price)
    if price is None or price <= 0:
        return ZERO

    trade_in = to_decimal(trade_in_value) or Decimal("0")
    commission_rate = to_decimal(rate)
    if commission_rate is None:
        commission_rate = DEFAULT_RATE

    commission = (price - trade_in) * commission_rate
    return _money(max(Decimal("0"), commission))


def get_commission_tier(total_sales: Any) -> CommissionTier:
    volume = to_decimal(total_sales) or Decimal("0")
    for lower_bound, tier, rate, name in COMMISSION_TIERS:
        if volume >= lower_bound:
            return CommissionTier(tier=tier, rate=rate, name=name)
    _, tier, rate, name = COMMISSION_TIERS[-1]
    return CommissionTier(tier=tier, rate=rate, name=name)


def _field(sale: Any, name: str) -> Optional[Any]:
    if isinstance(sale, dict):
        return sale.get(name)
    return getattr(sale, name, None)


def calculate_total_commission(sales: Any) -> Decimal:
    """Sum per-sale commission at the default rate; tiers are not applied."""
    if not isinstance(sales, (list, tuple)):
        return ZERO

    total = ZERO
    for sale in sales:
        total += calculate_commission(_field(sale, "sale_price"), _field(sale, "trade_in_value"))
    return total


def format_commission(amount: Any) -> str:
    value = to_decimal(amount) or Decimal("0")
    return f"${_money(value):,.2f}"


def summarize_commission(sales: Iterable[Any], salesperson_id: Optional[int] = None) -> CommissionSummary:
    sales = list(sales)
    volume = sum(
        (to_decimal(_field(sale, "sale_price")) or Decimal("0") for sale in sales),
        ZERO,
    )
    total = calculate_total_commission(sales)
    return CommissionSummary(
        salesperson_id=salesperson_id,
        completed_sales=len(sales),
        total_sales=_money(volume),
        total_commission=total,
        formatted_commission=format_commission(total),
        tier=get_commission_tier(volume),
    )
