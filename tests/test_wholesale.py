"""Wholesale batch endpoints, derived figures and profit analytics."""
import uuid
from datetime import datetime

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import add_batch


@pytest.mark.asyncio
async def test_create_batch_includes_derived_figures(client: AsyncClient):
    response = await client.post(
        "/api/wholesale",
        json={"date": "2026-10-10T00:00:00Z", "investment_amount": 1000, "boxes_purchased": 50},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Wholesale batch created successfully"
    data = body["data"]
    assert data["profit_per_box"] == 20
    assert data["cost_per_box"] == 20
    assert data["total_potential_profit"] == 1000
    assert data["profit_margin_percentage"] == "100.00"
    assert data["selling_price_per_box"] == 40
    assert data["total_selling_value"] == 2000


@pytest.mark.asyncio
async def test_create_without_date_uses_clock(client: AsyncClient, now: datetime):
    response = await client.post(
        "/api/wholesale",
        json={"investment_amount": 500, "boxes_purchased": 10, "profit_per_box": 5},
    )
    assert response.json()["data"]["date"] == now.isoformat()


@pytest.mark.asyncio
async def test_zero_boxes_is_rejected(client: AsyncClient):
    response = await client.post(
        "/api/wholesale",
        json={"investment_amount": 1000, "boxes_purchased": 0},
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "boxes_purchased"


@pytest.mark.asyncio
async def test_update_to_zero_boxes_is_rejected(client: AsyncClient, test_session: AsyncSession):
    batch = await add_batch(test_session, datetime(2026, 10, 1), 1000, 50)

    response = await client.put(f"/api/wholesale/{batch.id}", json={"boxes_purchased": 0})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "boxes_purchased"

    data = (await client.get(f"/api/wholesale/{batch.id}")).json()["data"]
    assert data["boxes_purchased"] == 50
    assert data["cost_per_box"] == 20


@pytest.mark.asyncio
async def test_update_recomputes_derived_figures(client: AsyncClient, test_session: AsyncSession):
    batch = await add_batch(test_session, datetime(2026, 10, 1), 1000, 50)

    response = await client.put(f"/api/wholesale/{batch.id}", json={"boxes_purchased": 100})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["cost_per_box"] == 10
    assert data["profit_margin_percentage"] == "200.00"
    assert data["total_potential_profit"] == 2000


@pytest.mark.asyncio
async def test_get_and_delete_batch(client: AsyncClient, test_session: AsyncSession):
    batch = await add_batch(test_session, datetime(2026, 10, 1), 1000, 50)

    response = await client.get(f"/api/wholesale/{batch.id}")
    assert response.json()["data"]["id"] == batch.id

    response = await client.delete(f"/api/wholesale/{batch.id}")
    assert response.json() == {"success": True, "message": "Wholesale batch deleted successfully"}

    response = await client.get(f"/api/wholesale/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["message"] == "Wholesale batch not found"

    response = await client.get("/api/wholesale/abc")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_filters_by_investment(client: AsyncClient, test_session: AsyncSession):
    await add_batch(test_session, datetime(2026, 9, 1), 500, 25)
    await add_batch(test_session, datetime(2026, 9, 15), 1500, 60)
    await add_batch(test_session, datetime(2026, 10, 1), 3000, 100)

    body = (
        await client.get("/api/wholesale", params={"minInvestment": 1000, "maxInvestment": 2000})
    ).json()
    assert [b["investment_amount"] for b in body["data"]] == [1500]

    body = (await client.get("/api/wholesale", params={"startDate": "2026-09-10T00:00:00"})).json()
    assert [b["investment_amount"] for b in body["data"]] == [3000, 1500]


@pytest.mark.asyncio
async def test_recent_batches(client: AsyncClient, test_session: AsyncSession):
    for day in range(1, 8):
        await add_batch(test_session, datetime(2026, 10, day), 100 * day, 10)

    data = (await client.get("/api/wholesale/recent")).json()["data"]
    assert [b["investment_amount"] for b in data] == [700, 600, 500, 400, 300]


@pytest.mark.asyncio
async def test_summary_sums_profit_per_batch(client: AsyncClient, test_session: AsyncSession):
    await add_batch(test_session, datetime(2026, 10, 2), 1000, 50, profit_per_box=20)
    await add_batch(test_session, datetime(2026, 10, 9), 1000, 20, profit_per_box=10)
    # Previous window
    await add_batch(test_session, datetime(2026, 9, 25), 1000, 10)

    response = await client.get("/api/wholesale/analytics/summary")

    summary = response.json()["data"]["summary"]
    assert summary["totalBatches"] == 2
    assert summary["totalInvestment"] == 2000
    assert summary["totalBoxes"] == 70
    # 50 * 20 + 20 * 10
    assert summary["totalPotentialProfit"] == 1200
    assert summary["profitMarginPercentage"] == 60.0
    assert summary["totalSellingValue"] == 3200
    assert summary["averageCostPerBox"] == 28.57
    assert summary["previousTotalInvestment"] == 1000
    assert summary["percentageChange"] == 100.0


@pytest.mark.asyncio
async def test_summary_without_data(client: AsyncClient):
    summary = (await client.get("/api/wholesale/analytics/summary")).json()["data"]["summary"]
    assert summary["totalBatches"] == 0
    assert summary["averageCostPerBox"] == 0
    assert summary["profitMarginPercentage"] == 0
    assert summary["percentageChange"] == 0


@pytest.mark.asyncio
async def test_trends_by_month(client: AsyncClient, test_session: AsyncSession):
    await add_batch(test_session, datetime(2026, 8, 3), 1000, 50)
    await add_batch(test_session, datetime(2026, 10, 3), 400, 20)
    await add_batch(test_session, datetime(2026, 10, 5), 600, 30)
    # Before the six month window
    await add_batch(test_session, datetime(2026, 3, 31), 9999, 1)

    trends = (await client.get("/api/wholesale/analytics/trends")).json()["data"]["trends"]

    assert [t["label"] for t in trends] == ["2026-08", "2026-10"]
    assert trends[1] == {
        "period": {"year": 2026, "month": 10},
        "label": "2026-10",
        "totalInvestment": 1000,
        "totalBoxes": 50,
        "totalProfit": 1000,
        "batchCount": 2,
    }


@pytest.mark.asyncio
async def test_stats(client: AsyncClient, test_session: AsyncSession):
    await add_batch(test_session, datetime(2026, 10, 3), 3000, 100)
    await add_batch(test_session, datetime(2026, 8, 3), 1000, 50)

    data = (await client.get("/api/wholesale/analytics/stats")).json()["data"]

    assert data["totalBatches"] == 2
    assert data["totalInvestment"] == 4000
    assert data["totalPotentialProfit"] == 3000
    assert data["averageInvestmentPerBatch"] == 2000
    assert data["totalPotentialReturn"] == 7000
    assert data["overallProfitMargin"] == 75.0
    assert data["firstBatch"]["investmentAmount"] == 1000
    assert data["latestBatch"]["investmentAmount"] == 3000


@pytest.mark.asyncio
async def test_tips_without_batches_are_general_only(client: AsyncClient):
    tips = (await client.get("/api/wholesale/analytics/tips")).json()["data"]
    assert [t["type"] for t in tips] == ["tip", "tip", "tip"]


@pytest.mark.asyncio
async def test_tips_flag_high_margin(client: AsyncClient, test_session: AsyncSession):
    await add_batch(test_session, datetime(2026, 10, 3), 1000, 50)

    tips = (await client.get("/api/wholesale/analytics/tips")).json()["data"]

    assert tips[0]["title"] == "Excellent Profit Margin"
    assert tips[0]["type"] == "success"
    assert len(tips) == 4


@pytest.mark.asyncio
async def test_tips_flag_low_margin_small_batches_and_spread(client: AsyncClient, test_session: AsyncSession):
    # Cost per box 100 and 200 against 10 profit per box
    await add_batch(test_session, datetime(2026, 10, 3), 1000, 10, profit_per_box=10)
    await add_batch(test_session, datetime(2026, 10, 4), 4000, 20, profit_per_box=10)

    tips = (await client.get("/api/wholesale/analytics/tips")).json()["data"]

    titles = [t["title"] for t in tips]
    assert titles[:3] == ["Low Profit Margin", "Scale Up Opportunity", "Investment Consistency"]
    assert "6.7%" in tips[0]["message"]
