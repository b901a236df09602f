"""Portfolio aggregation - one total value and PnL across a user's holdings."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Awaitable, Optional, Sequence, TypeVar

from chainfolio.core.config import settings
from chainfolio.core.errors import PortfolioAggregationError
from chainfolio.core.logging import get_logger
from chainfolio.repositories.base import HoldingRepository, HoldingView, PricePoint, PriceStore

log = get_logger("portfolio_service")

CENT = Decimal("0.01")

T = TypeVar("T")


@dataclass(frozen=True)
class PortfolioValue:
    total_value: float
    pnl: float
    pnl_percentage: float


@dataclass(frozen=True)
class _HoldingContribution:
    value: Decimal
    cost: Decimal


_NO_CONTRIBUTION = _HoldingContribution(value=Decimal(0), cost=Decimal(0))


def _round2(value: Decimal) -> float:
    return float(value.quantize(CENT, rounding=ROUND_HALF_UP))


async def _gather_settled(*aws: Awaitable[T]) -> list[T]:
    """Like ``asyncio.gather``, but on failure or cancellation the unfinished
    awaitables are cancelled and awaited before the error propagates, so no
    store call outlives the aggregation.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def summarize(contributions: Sequence[_HoldingContribution]) -> PortfolioValue:
    total_value = sum((c.value for c in contributions), Decimal(0))
    total_cost = sum((c.cost for c in contributions), Decimal(0))
    pnl = total_value - total_cost
    pnl_percentage = pnl / total_cost * 100 if total_cost != 0 else Decimal(0)

    return PortfolioValue(
        total_value=_round2(total_value),
        pnl=_round2(pnl),
        pnl_percentage=_round2(pnl_percentage),
    )


class PortfolioService:
    """Reads only; never mutates holdings or prices.

    Each holding's latest and earliest prices are fetched concurrently, and
    holdings run concurrently up to ``concurrency`` at a time. Any store
    failure aborts the whole call: no partial portfolio is returned.
    """

    def __init__(
        self,
        holdings: HoldingRepository,
        prices: PriceStore,
        concurrency: Optional[int] = None,
    ):
        self.holdings = holdings
        self.prices = prices
        self.concurrency = max(1, concurrency or settings.PORTFOLIO_CONCURRENCY)

    async def get_portfolio_value_and_pnl(self, user_id: str) -> PortfolioValue:
        user_holdings = await self.holdings.list_holdings(user_id)
        return await self.aggregate(user_id, user_holdings)

    async def aggregate(self, user_id: str, user_holdings: Sequence[HoldingView]) -> PortfolioValue:
        if not user_holdings:
            return PortfolioValue(total_value=0, pnl=0, pnl_percentage=0)

        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(holding: HoldingView) -> _HoldingContribution:
            async with semaphore:
                return await self._contribution(holding)

        try:
            contributions = await _gather_settled(*(bounded(h) for h in user_holdings))
        except Exception as exc:
            log.error(f"Error getting portfolio value and PnL for user {user_id}: {exc}")
            raise PortfolioAggregationError(user_id) from exc

        result = summarize(contributions)
        log.debug(
            f"Portfolio for user {user_id}: holdings={len(user_holdings)} "
            f"value={result.total_value} pnl={result.pnl} ({result.pnl_percentage}%)"
        )
        return result

    async def _contribution(self, holding: HoldingView) -> _HoldingContribution:
        if not holding.has_quantity:
            log.warning(f"Skipping holding {holding.holding_id}: fungible holding has no quantity")
            return _NO_CONTRIBUTION

        latest, earliest = await _gather_settled(
            self.prices.latest_price(holding.asset_id),
            self.prices.earliest_price(holding.asset_id),
        )
        if latest is None or earliest is None:
            log.warning(
                f"Skipping holding {holding.holding_id}: asset {holding.asset_id} has no recorded price"
            )
            return _NO_CONTRIBUTION

        return self._value(holding, latest, earliest)

    @staticmethod
    def _value(holding: HoldingView, latest: PricePoint, earliest: PricePoint) -> _HoldingContribution:
        quantity = holding.effective_quantity
        return _HoldingContribution(value=latest.price * quantity, cost=earliest.price * quantity)
