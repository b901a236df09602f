"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; keep tests off the file sink and any real database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./chainfolio-test.db")
os.environ["LOG_DIR"] = ""
os.environ["SLACK_WEBHOOK_URL"] = ""
os.environ["INGESTION_ENABLED"] = "false"

from collections import Counter, defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional

import pytest
import pytest_asyncio

from chainfolio.core.db import build_engine, build_session_factory
from chainfolio.core.errors import DuplicatePricePointError
from chainfolio.models import AssetClass, Base
from chainfolio.repositories.base import AppendOutcome, HoldingView, PricePoint
from chainfolio.repositories.prices import SqlPriceStore


class FakePriceStore:
    """In-memory price store that counts calls and can be told to fail."""

    def __init__(self):
        self.points: dict[str, dict[date, Decimal]] = defaultdict(dict)
        self.calls: Counter = Counter()
        self.failing_assets: set[str] = set()

    def add(self, asset_id: str, day: date, price) -> None:
        self.points[asset_id][day] = Decimal(str(price))

    def _check(self, asset_id: str) -> None:
        if asset_id in self.failing_assets:
            raise RuntimeError(f"store unavailable for {asset_id}")

    async def append_price(self, asset_id: str, day: date, price: Decimal) -> None:
        self.calls["append_price"] += 1
        self._check(asset_id)
        if day in self.points[asset_id]:
            raise DuplicatePricePointError(asset_id, day)
        self.points[asset_id][day] = price

    async def append_prices(self, points) -> list[AppendOutcome]:
        self.calls["append_prices"] += 1
        outcomes = []
        for point in points:
            try:
                await self.append_price(point.asset_id, point.recorded_on, point.price)
            except DuplicatePricePointError:
                outcomes.append(AppendOutcome(point.asset_id, point.recorded_on, "duplicate"))
            except RuntimeError as exc:
                outcomes.append(AppendOutcome(point.asset_id, point.recorded_on, "failed", str(exc)))
            else:
                outcomes.append(AppendOutcome(point.asset_id, point.recorded_on, "created"))
        return outcomes

    async def latest_price(self, asset_id: str) -> Optional[PricePoint]:
        self.calls["latest_price"] += 1
        self._check(asset_id)
        series = await self._series(asset_id)
        return series[-1] if series else None

    async def earliest_price(self, asset_id: str) -> Optional[PricePoint]:
        self.calls["earliest_price"] += 1
        self._check(asset_id)
        series = await self._series(asset_id)
        return series[0] if series else None

    async def price_series(self, asset_id: str, start_date=None, end_date=None) -> list[PricePoint]:
        self.calls["price_series"] += 1
        self._check(asset_id)
        return [
            p
            for p in await self._series(asset_id)
            if (start_date is None or p.recorded_on >= start_date) and (end_date is None or p.recorded_on <= end_date)
        ]

    async def _series(self, asset_id: str) -> list[PricePoint]:
        return [
            PricePoint(asset_id=asset_id, price=price, recorded_on=day)
            for day, price in sorted(self.points.get(asset_id, {}).items())
        ]


class FakeHoldingRepository:
    def __init__(self, holdings: list[HoldingView]):
        self.holdings = holdings

    async def list_holdings(self, user_id: str) -> list[HoldingView]:
        return [h for h in self.holdings if h.user_id == user_id]


def make_holding(
    asset_id: str,
    quantity=None,
    asset_class: AssetClass = AssetClass.FUNGIBLE,
    user_id: str = "user-1",
    holding_id: Optional[str] = None,
) -> HoldingView:
    return HoldingView(
        holding_id=holding_id or f"holding-{asset_id}",
        user_id=user_id,
        asset_id=asset_id,
        asset_class=asset_class,
        name=asset_id.upper(),
        description=None,
        contract_address="0x" + "0" * 40,
        chain="Ethereum",
        token_id="1" if asset_class is AssetClass.UNIQUE else None,
        quantity=Decimal(str(quantity)) if quantity is not None else None,
    )


@pytest.fixture
def fake_prices():
    return FakePriceStore()


@pytest.fixture
def holding_factory():
    return make_holding


@pytest.fixture
def holding_repo_factory():
    return FakeHoldingRepository


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh SQLite database per test, schema created from the ORM models."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'chainfolio.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def price_store(session_factory):
    return SqlPriceStore(session_factory)
