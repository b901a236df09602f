"""API endpoint tests"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio

from chainfolio.api.deps import get_db, get_session_factory
from chainfolio.main import app, seconds_until_next_run

USER = {"X-User-Id": "user-1"}
DAY = date(2024, 10, 27)

ETH_BODY = {
    "name": "ETH",
    "asset_class": "fungible",
    "description": "Ethereum",
    "contract_address": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
    "chain": "Ethereum",
    "quantity": 10,
}

PUNK_BODY = {
    "name": "CryptoPunk #7804",
    "asset_class": "unique",
    "contract_address": "0xb47e3cd837dDF8e4c57F05d70Ab865de6e193BBB",
    "chain": "Ethereum",
    "token_id": "7804",
}


class TestAPI:
    """Test API endpoints"""

    @pytest_asyncio.fixture
    async def client(self, session_factory):
        """Create test client bound to the temporary database"""

        async def override_get_db():
            async with session_factory() as session:
                yield session

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_session_factory] = lambda: session_factory
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
        app.dependency_overrides.clear()

    @pytest.mark.asyncio
    async def test_missing_user_header(self, client):
        """Test requests without the identity header are rejected"""
        response = await client.get("/assets")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_and_list_holdings(self, client):
        """Test creating fungible and unique holdings"""
        response = await client.post("/assets", json=ETH_BODY, headers=USER)
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Asset added to user portfolio successfully"
        assert body["assetId"] and body["holdingId"]

        response = await client.post("/assets", json=PUNK_BODY, headers=USER)
        assert response.status_code == 201

        response = await client.get("/assets", headers=USER)
        assert response.status_code == 200
        by_name = {h["name"]: h for h in response.json()}
        assert by_name["ETH"]["quantity"] == 10
        assert by_name["ETH"]["asset_class"] == "fungible"
        assert by_name["CryptoPunk #7804"]["quantity"] is None
        assert by_name["CryptoPunk #7804"]["token_id"] == "7804"

        other = await client.get("/assets", headers={"X-User-Id": "user-2"})
        assert other.json() == []

    @pytest.mark.asyncio
    async def test_create_rejects_invalid_terms(self, client):
        """Test class/field violations return 400 with the rule name"""
        response = await client.post("/assets", json={**PUNK_BODY, "quantity": 1}, headers=USER)
        assert response.status_code == 400
        assert response.json()["rule"] == "quantity_forbidden"

        response = await client.post("/assets", json={**ETH_BODY, "quantity": -1}, headers=USER)
        assert response.status_code == 400
        assert response.json()["rule"] == "quantity_required"

        response = await client.post("/assets", json={**ETH_BODY, "quantity": 0.0000001}, headers=USER)
        assert response.status_code == 400
        assert response.json()["rule"] == "quantity_precision"

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_chain(self, client):
        response = await client.post("/assets", json={**ETH_BODY, "chain": "Solana"}, headers=USER)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_get_and_remove_holding(self, client):
        """Test a removed holding is gone"""
        created = (await client.post("/assets", json=ETH_BODY, headers=USER)).json()
        holding_id = created["holdingId"]

        response = await client.get(f"/assets/{holding_id}", headers=USER)
        assert response.status_code == 200
        assert response.json()["asset_id"] == created["assetId"]

        response = await client.delete(f"/assets/{holding_id}", headers=USER)
        assert response.status_code == 200
        assert response.json()["message"] == "Asset removed from user portfolio successfully"

        response = await client.get(f"/assets/{holding_id}", headers=USER)
        assert response.status_code == 404
        assert "detail" in response.json()

    @pytest.mark.asyncio
    async def test_holding_history(self, client, price_store):
        """Test history response shape and values"""
        created = (await client.post("/assets", json=ETH_BODY, headers=USER)).json()
        for offset, price in enumerate((100, 110, 105)):
            await price_store.append_price(created["assetId"], DAY + timedelta(days=offset), Decimal(price))

        response = await client.get(f"/assets/{created['holdingId']}/history", headers=USER)
        assert response.status_code == 200
        body = response.json()
        assert body["quantity"] == "10.000000"
        assert body["overallPnl"] == 50
        assert body["overallPnlPercentage"] == 5.0
        assert body["history"][1] == {
            "date": "2024-10-28",
            "price": "110.000000",
            "value": 1100,
            "dailyPnl": 100,
            "cumulativePnl": 100,
            "cumulativePnlPercentage": 10.0,
        }

        response = await client.get(
            f"/assets/{created['holdingId']}/history",
            params={"startDate": "2024-10-28", "endDate": "2024-10-28"},
            headers=USER,
        )
        assert [e["date"] for e in response.json()["history"]] == ["2024-10-28"]

    @pytest.mark.asyncio
    async def test_history_rejects_inverted_range(self, client):
        created = (await client.post("/assets", json=ETH_BODY, headers=USER)).json()

        response = await client.get(
            f"/assets/{created['holdingId']}/history",
            params={"startDate": "2024-10-28", "endDate": "2024-10-01"},
            headers=USER,
        )
        assert response.status_code == 400
        assert response.json()["rule"] == "date_range"

    @pytest.mark.asyncio
    async def test_empty_portfolio(self, client):
        response = await client.get("/portfolio", headers=USER)
        assert response.status_code == 200
        assert response.json() == {"totalValue": 0, "pnl": 0, "pnlPercentage": 0}

    @pytest.mark.asyncio
    async def test_portfolio_value(self, client, price_store):
        """Test value and PnL from earliest and latest prices"""
        created = (await client.post("/assets", json=ETH_BODY, headers=USER)).json()
        await price_store.append_price(created["assetId"], DAY, Decimal(50))
        await price_store.append_price(created["assetId"], DAY + timedelta(days=29), Decimal(100))

        response = await client.get("/portfolio", headers=USER)
        assert response.status_code == 200
        assert response.json() == {"totalValue": 1000, "pnl": 500, "pnlPercentage": 100}

    @pytest.mark.asyncio
    async def test_price_update_is_idempotent(self, client):
        """Test a second update on the same day only reports duplicates"""
        await client.post("/assets", json=ETH_BODY, headers=USER)

        first = await client.post("/prices/update")
        assert first.status_code == 200
        assert first.json()["created"] == 1
        assert first.json()["success"] is True

        second = await client.post("/prices/update")
        assert second.json()["created"] == 0
        assert second.json()["duplicates"] == 1

        runs = await client.get("/prices/runs")
        assert runs.status_code == 200
        assert len(runs.json()) == 2
        assert {r["status"] for r in runs.json()} == {"success"}

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        """Test health check endpoint"""
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "ok"
        assert response.json()["last_ingestion_status"] is None

        await client.post("/prices/update")
        response = await client.get("/health")
        assert response.json()["last_ingestion_status"] == "success"

    @pytest.mark.asyncio
    async def test_readiness(self, client):
        response = await client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    @pytest.mark.asyncio
    async def test_invalid_endpoint(self, client):
        """Test invalid endpoint returns 404"""
        response = await client.get("/invalid")
        assert response.status_code == 404


class TestSchedule:
    """Next daily ingestion time"""

    def test_later_today(self):
        now = datetime(2024, 10, 27, 10, 30, tzinfo=timezone.utc)
        assert seconds_until_next_run(now, 12) == 90 * 60

    def test_rolls_over_to_tomorrow(self):
        now = datetime(2024, 10, 27, 0, 0, tzinfo=timezone.utc)
        assert seconds_until_next_run(now, 0) == 24 * 3600
