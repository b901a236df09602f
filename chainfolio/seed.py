"""Demo data for local development.

Usage:
    python -m chainfolio.seed demo [user_id]      # USDC, ETH and a CryptoPunk with 30 days of prices
    python -m chainfolio.seed mixed [user_id]     # one gaining coin, one losing coin, one stable NFT
    python -m chainfolio.seed losses [user_id]    # everything loses value
    python -m chainfolio.seed empty [user_id]     # remove all of the user's holdings
    python -m chainfolio.seed clear               # wipe every table

Send the same user id in the X-User-Id header to see the data through the API.
Re-running a scenario adds new holdings; prices already recorded are kept.
"""

import asyncio
import math
import random
import sys
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy import delete

from chainfolio.core.db import SessionLocal, engine
from chainfolio.core.logging import get_logger
from chainfolio.ingestion.base import PriceSource
from chainfolio.models import Asset, AssetClass, AssetDailyPrice, Chain, Holding, IngestionRun
from chainfolio.repositories.base import PricePoint
from chainfolio.repositories.prices import SqlPriceStore
from chainfolio.services.holding_service import HoldingService, NewHolding

logger = get_logger("seed")

DEFAULT_USER_ID = "demo-user"
SEED_DAYS = 30


@dataclass(frozen=True)
class SeedAsset:
    name: str
    asset_class: AssetClass
    description: str
    contract_address: str
    price_on: Callable[[int], float]  # days_ago -> price
    token_id: Optional[str] = None
    quantity: Optional[int] = None


SCENARIOS: dict[str, list[SeedAsset]] = {
    "demo": [
        SeedAsset("USDC", AssetClass.FUNGIBLE, "USD Coin", "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
                  lambda days_ago: random.uniform(1, 1000), quantity=1000),
        SeedAsset("ETH", AssetClass.FUNGIBLE, "Ethereum", "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
                  lambda days_ago: random.uniform(1, 1000), quantity=1000),
        SeedAsset("CryptoPunk #7804", AssetClass.UNIQUE, "CryptoPunk NFT", "0xb47e3cd837dDF8e4c57F05d70Ab865de6e193BBB",
                  lambda days_ago: 100000, token_id="7804"),
    ],
    "mixed": [
        SeedAsset("GainCoin", AssetClass.FUNGIBLE, "A coin that goes up", "0x3000000000000000000000000000000000000003",
                  lambda days_ago: 100 - days_ago * 3, quantity=1000),
        SeedAsset("LossCoin", AssetClass.FUNGIBLE, "A coin that goes down", "0x4000000000000000000000000000000000000004",
                  lambda days_ago: 100 + days_ago * 2, quantity=1000),
        SeedAsset("StableNFT", AssetClass.UNIQUE, "An NFT with stable value", "0x5000000000000000000000000000000000000005",
                  lambda days_ago: 1000 + math.sin(days_ago) * 50, token_id="1"),
    ],
    "losses": [
        SeedAsset("LossCoin", AssetClass.FUNGIBLE, "A coin that only goes down", "0x1000000000000000000000000000000000000001",
                  lambda days_ago: 13 + days_ago * 3, quantity=1000),
        SeedAsset("DepreciatingNFT", AssetClass.UNIQUE, "An NFT that loses value", "0x2000000000000000000000000000000000000002",
                  lambda days_ago: 130 + days_ago * 30, token_id="1"),
    ],
}


async def seed_scenario(name: str, user_id: str, today: Optional[date] = None) -> int:
    """Create the scenario's holdings for ``user_id`` and backfill daily prices. Returns points created."""
    today = today or date.today()
    prices = SqlPriceStore(SessionLocal)

    async with SessionLocal() as db:
        service = HoldingService(db, prices=prices)
        points: list[PricePoint] = []
        for seed_asset in SCENARIOS[name]:
            created = await service.create_holding(
                user_id,
                NewHolding(
                    name=seed_asset.name,
                    asset_class=seed_asset.asset_class,
                    contract_address=seed_asset.contract_address,
                    chain=Chain.ETHEREUM.value,
                    description=seed_asset.description,
                    token_id=seed_asset.token_id,
                    quantity=seed_asset.quantity,
                ),
            )
            points.extend(
                PricePoint(
                    asset_id=created.asset_id,
                    price=PriceSource.quantize(Decimal(str(seed_asset.price_on(days_ago)))),
                    recorded_on=today - timedelta(days=days_ago),
                )
                for days_ago in range(SEED_DAYS - 1, -1, -1)
            )

    outcomes = await prices.append_prices(points)
    created_count = sum(1 for o in outcomes if o.status == "created")
    logger.info(f"Seeded scenario '{name}' for user {user_id}: {created_count} price points created")
    return created_count


async def empty_portfolio(user_id: str) -> int:
    async with SessionLocal() as db:
        service = HoldingService(db, session_factory=SessionLocal)
        holdings = await service.list_holdings(user_id)
        for holding in holdings:
            await service.remove_holding(holding.holding_id, user_id)
    logger.info(f"Removed {len(holdings)} holding(s) of user {user_id}")
    return len(holdings)


async def clear_tables() -> None:
    async with SessionLocal() as db:
        for model in (AssetDailyPrice, Holding, Asset, IngestionRun):
            await db.execute(delete(model))
        await db.commit()
    logger.info("All tables cleared successfully")


async def run(command: str, user_id: str) -> None:
    try:
        if command == "clear":
            await clear_tables()
        elif command == "empty":
            await empty_portfolio(user_id)
        else:
            await seed_scenario(command, user_id)
    finally:
        await engine.dispose()


def main():
    command = sys.argv[1] if len(sys.argv) > 1 else "demo"
    user_id = sys.argv[2] if len(sys.argv) > 2 else DEFAULT_USER_ID

    if command not in (*SCENARIOS, "empty", "clear"):
        logger.error(f"Invalid scenario: {command}. Must be one of: {', '.join(SCENARIOS)}, empty, clear")
        sys.exit(1)

    asyncio.run(run(command, user_id))


if __name__ == "__main__":
    main()
