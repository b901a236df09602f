"""Daily price ingestion tests"""

import asyncio
import random
from datetime import date
from decimal import Decimal

import pytest

from chainfolio.ingestion.base import PriceSource
from chainfolio.ingestion.random_walk import RandomWalkPriceSource
from chainfolio.ingestion.runner import IngestionRunner
from chainfolio.models import AssetClass
from chainfolio.repositories.base import AssetRef

DAY = date(2024, 10, 27)


def asset(asset_id: str) -> AssetRef:
    return AssetRef(
        id=asset_id,
        name=asset_id.upper(),
        asset_class=AssetClass.FUNGIBLE,
        contract_address="0x" + "1" * 40,
        chain="Ethereum",
    )


class FixedPriceSource(PriceSource):
    """Quotes a fixed price; fails for the configured asset ids"""

    name = "fixed"

    def __init__(self, price="10", failing=()):
        self.price = Decimal(price)
        self.failing = set(failing)

    async def quote(self, asset, day):
        if asset.id in self.failing:
            raise ConnectionError("feed timeout")
        return self.quantize(self.price)


class TestRandomWalkPriceSource:
    """Simulated market feed"""

    @pytest.mark.asyncio
    async def test_seeds_first_price_in_range(self, fake_prices):
        source = RandomWalkPriceSource(fake_prices, rng=random.Random(7))

        price = await source.quote(asset("new"), DAY)

        assert Decimal(1) <= price <= Decimal(1000)
        assert price == price.quantize(Decimal("0.000001"))

    @pytest.mark.asyncio
    async def test_walks_within_step_of_prior(self, fake_prices):
        fake_prices.add("eth", date(2024, 10, 26), 200)
        source = RandomWalkPriceSource(fake_prices, max_step=0.05, rng=random.Random(11))

        for _ in range(50):
            price = await source.quote(asset("eth"), DAY)
            assert Decimal(190) <= price <= Decimal(210)

    @pytest.mark.asyncio
    async def test_zero_step_repeats_prior(self, fake_prices):
        fake_prices.add("eth", date(2024, 10, 26), "123.456789")
        source = RandomWalkPriceSource(fake_prices, max_step=0)

        assert await source.quote(asset("eth"), DAY) == Decimal("123.456789")

    def test_rejects_invalid_parameters(self, fake_prices):
        with pytest.raises(ValueError):
            RandomWalkPriceSource(fake_prices, max_step=1.5)
        with pytest.raises(ValueError):
            RandomWalkPriceSource(fake_prices, seed_min=10, seed_max=5)


class TestIngestionRunner:
    """Per-asset outcomes of one run"""

    @pytest.mark.asyncio
    async def test_appends_one_point_per_asset(self, fake_prices):
        runner = IngestionRunner(FixedPriceSource("10"), fake_prices)

        report = await runner.run([asset("a"), asset("b")], DAY)

        assert report.success
        assert report.status == "success"
        assert sorted(report.created) == ["a", "b"]
        assert fake_prices.points["a"] == {DAY: Decimal("10.000000")}

    @pytest.mark.asyncio
    async def test_second_run_same_day_is_noop(self, fake_prices):
        runner = IngestionRunner(FixedPriceSource("10"), fake_prices)
        await runner.run([asset("a")], DAY)

        report = await runner.run([asset("a")], DAY)

        assert report.success
        assert report.created == []
        assert report.duplicates == ["a"]
        assert len(fake_prices.points["a"]) == 1

    @pytest.mark.asyncio
    async def test_quote_failure_is_reported_per_asset(self, fake_prices):
        runner = IngestionRunner(FixedPriceSource("10", failing={"b"}), fake_prices)

        report = await runner.run([asset("a"), asset("b")], DAY)

        assert not report.success
        assert report.status == "partial"
        assert report.created == ["a"]
        assert "b" in report.failed
        assert "feed timeout" in report.failed["b"]

    @pytest.mark.asyncio
    async def test_negative_quote_is_rejected(self, fake_prices):
        runner = IngestionRunner(FixedPriceSource("-1"), fake_prices)

        report = await runner.run([asset("a")], DAY)

        assert "a" in report.failed
        assert DAY not in fake_prices.points["a"]

    @pytest.mark.asyncio
    async def test_write_failure_is_reported_per_asset(self, fake_prices):
        fake_prices.failing_assets.add("b")
        runner = IngestionRunner(FixedPriceSource("10"), fake_prices)

        report = await runner.run([asset("a"), asset("b")], DAY)

        assert report.created == ["a"]
        assert "b" in report.failed

    @pytest.mark.asyncio
    async def test_no_assets(self, fake_prices):
        report = await IngestionRunner(FixedPriceSource(), fake_prices).run([], DAY)

        assert report.success
        assert report.assets_total == 0
        assert fake_prices.calls["append_prices"] == 0

    @pytest.mark.asyncio
    async def test_quotes_are_bounded(self, fake_prices):
        """No more than ``concurrency`` quotes are in flight at once"""
        in_flight = 0
        peak = 0

        class SlowSource(FixedPriceSource):
            async def quote(self, asset, day):
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return await super().quote(asset, day)

        runner = IngestionRunner(SlowSource("10"), fake_prices, concurrency=3)

        report = await runner.run([asset(f"a{i}") for i in range(10)], DAY)

        assert len(report.created) == 10
        assert peak <= 3
