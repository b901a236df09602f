"""History metrics - daily valuation and PnL series for one holding.

All arithmetic stays in ``Decimal``; rounding happens only when results are
formatted, so cumulative PnL accumulates from unrounded daily deltas.

Note that the percentage columns are price relative while the monetary
columns are quantity scaled. The percentage reports instrument performance
independent of position size, so it does not change with quantity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Sequence

from chainfolio.core.errors import DegenerateSeriesError
from chainfolio.repositories.base import PricePoint

HUNDRED = Decimal(100)
WHOLE_UNIT = Decimal(1)
CENT = Decimal("0.01")
MICRO = Decimal("0.000001")


@dataclass(frozen=True)
class HistoryEntry:
    date: date
    price: str
    value: int
    daily_pnl: int
    cumulative_pnl: int
    cumulative_pnl_percentage: float


@dataclass(frozen=True)
class AssetHistory:
    history: List[HistoryEntry] = field(default_factory=list)
    quantity: str = "0.000000"
    overall_pnl: int = 0
    overall_pnl_percentage: float = 0.0


# -----------------------------------------------------------------------------
# Output formatting
# -----------------------------------------------------------------------------
def round_money(value: Decimal) -> int:
    return int(value.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP))


def round_percentage(value: Decimal) -> float:
    return float(value.quantize(CENT, rounding=ROUND_HALF_UP))


def format_price(price: Decimal) -> str:
    return str(Decimal(price).quantize(MICRO, rounding=ROUND_HALF_UP))


def format_quantity(quantity: Decimal | None) -> str:
    if quantity is None:
        return format_price(Decimal(0))
    return format_price(quantity)


# -----------------------------------------------------------------------------
# Calculation
# -----------------------------------------------------------------------------
def _percentage_change(price: Decimal, initial: Decimal) -> Decimal:
    return (price - initial) / initial * HUNDRED


def empty_history(quantity: Decimal | None) -> AssetHistory:
    """Well-formed result for a holding with no prices in range."""
    return AssetHistory(history=[], quantity=format_quantity(quantity), overall_pnl=0, overall_pnl_percentage=0.0)


def compute_history(points: Sequence[PricePoint], quantity: Decimal) -> AssetHistory:
    """Build the HistoryEntry series and overall PnL.

    ``points`` must already be in ascending date order; ``quantity`` is the
    effective quantity (1 for unique assets).
    """
    if not points:
        return empty_history(quantity)

    initial_price = Decimal(points[0].price)
    if initial_price <= 0:
        raise DegenerateSeriesError(
            f"Cannot compute PnL for asset {points[0].asset_id}: first price is {initial_price}"
        )

    entries: List[HistoryEntry] = []
    cumulative_pnl = Decimal(0)
    previous_value: Decimal | None = None

    for point in points:
        price = Decimal(point.price)
        value = price * quantity
        daily_pnl = value - previous_value if previous_value is not None else Decimal(0)
        cumulative_pnl += daily_pnl
        previous_value = value

        entries.append(
            HistoryEntry(
                date=point.recorded_on,
                price=format_price(price),
                value=round_money(value),
                daily_pnl=round_money(daily_pnl),
                cumulative_pnl=round_money(cumulative_pnl),
                cumulative_pnl_percentage=round_percentage(_percentage_change(price, initial_price)),
            )
        )

    current_price = Decimal(points[-1].price)
    overall_pnl = (current_price - initial_price) * quantity

    return AssetHistory(
        history=entries,
        quantity=format_quantity(quantity),
        overall_pnl=round_money(overall_pnl),
        overall_pnl_percentage=round_percentage(_percentage_change(current_price, initial_price)),
    )
