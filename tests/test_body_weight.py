"""Body weight endpoints and weight analytics."""
import uuid
from datetime import datetime

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import add_body_weight


@pytest.mark.asyncio
async def test_create_rounds_measurements_to_one_decimal(client: AsyncClient):
    response = await client.post(
        "/api/body-weight",
        json={
            "weight": 72.34,
            "date": "2026-10-15T07:00:00Z",
            "bodyFatPercentage": 18.26,
            "bmi": 23.04,
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Body weight entry created successfully"
    data = body["data"]
    assert data["weight"] == 72.3
    assert data["unit"] == "kg"
    assert data["bodyFatPercentage"] == 18.3
    assert data["bmi"] == 23.0
    assert data["formattedWeight"] == "72.3 kg"
    assert data["monthYear"] == "2026-10"


@pytest.mark.asyncio
async def test_create_rounds_exact_halves_up(client: AsyncClient):
    response = await client.post("/api/body-weight", json={"weight": 72.25, "bmi": 22.45})

    data = response.json()["data"]
    assert data["weight"] == 72.3
    assert data["bmi"] == 22.5
    assert data["formattedWeight"] == "72.3 kg"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, field",
    [
        ({"weight": 0.5}, "weight"),
        ({"weight": 1001}, "weight"),
        ({"weight": 70, "unit": "stone"}, "unit"),
        ({"weight": 70, "bodyFatPercentage": 120}, "bodyFatPercentage"),
    ],
)
async def test_create_rejects_out_of_range_values(client: AsyncClient, payload, field):
    response = await client.post("/api/body-weight", json=payload)

    assert response.status_code == 400
    assert field in [e["field"] for e in response.json()["errors"]]


@pytest.mark.asyncio
async def test_update_and_delete_entry(client: AsyncClient, test_session: AsyncSession):
    entry = await add_body_weight(test_session, datetime(2026, 10, 1), 80.0)

    response = await client.put(f"/api/body-weight/{entry.id}", json={"weight": 79.46, "unit": "lbs"})
    assert response.status_code == 200
    assert response.json()["data"]["weight"] == 79.5
    assert response.json()["data"]["unit"] == "lbs"

    response = await client.delete(f"/api/body-weight/{entry.id}")
    assert response.json()["message"] == "Body weight entry deleted successfully"

    response = await client.get(f"/api/body-weight/{entry.id}")
    assert response.status_code == 404
    assert response.json()["message"] == "Body weight entry not found"


@pytest.mark.asyncio
async def test_dates_after_the_clock_are_rejected(client: AsyncClient, test_session: AsyncSession):
    response = await client.post("/api/body-weight", json={"weight": 70, "date": "2026-10-19T12:00:01Z"})
    assert response.status_code == 400
    assert response.json()["errors"] == [{"field": "date", "message": "Date cannot be in the future"}]

    entry = await add_body_weight(test_session, datetime(2026, 10, 1), 80.0)
    response = await client.put(f"/api/body-weight/{entry.id}", json={"date": "2026-10-20T00:00:00Z"})
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "date"


@pytest.mark.asyncio
async def test_malformed_id(client: AsyncClient):
    response = await client.delete("/api/body-weight/123")
    assert response.status_code == 400
    assert response.json()["success"] is False

    response = await client.get(f"/api/body-weight/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_filters_by_unit(client: AsyncClient, test_session: AsyncSession):
    await add_body_weight(test_session, datetime(2026, 10, 1), 80.0)
    await add_body_weight(test_session, datetime(2026, 10, 2), 176.0, unit="lbs")

    body = (await client.get("/api/body-weight", params={"unit": "lbs"})).json()
    assert [e["weight"] for e in body["data"]] == [176.0]
    assert body["pagination"]["totalItems"] == 1


@pytest.mark.asyncio
async def test_recent_returns_last_seven_days_newest_first(client: AsyncClient, test_session: AsyncSession):
    await add_body_weight(test_session, datetime(2026, 10, 1), 81.0)
    await add_body_weight(test_session, datetime(2026, 10, 14), 80.0)
    await add_body_weight(test_session, datetime(2026, 10, 18), 79.0)

    data = (await client.get("/api/body-weight/recent")).json()["data"]
    assert [e["weight"] for e in data] == [79.0, 80.0]


@pytest.mark.asyncio
async def test_summary_without_data_is_zero_valued(client: AsyncClient):
    response = await client.get("/api/body-weight/analytics/summary")

    assert response.status_code == 200
    summary = response.json()["data"]["summary"]
    assert summary["totalEntries"] == 0
    assert summary["averageWeight"] == 0
    assert summary["weightTrend"] == 0
    assert summary["averageBodyFat"] is None
    assert summary["percentageChange"] == 0


@pytest.mark.asyncio
async def test_summary_trend_uses_entry_dates(client: AsyncClient, test_session: AsyncSession):
    # Inserted out of date order
    await add_body_weight(test_session, datetime(2026, 10, 15), 79.0, body_fat_percentage=20.0)
    await add_body_weight(test_session, datetime(2026, 10, 2), 81.0)
    await add_body_weight(test_session, datetime(2026, 10, 9), 80.0, body_fat_percentage=21.0)
    # Previous window (September)
    await add_body_weight(test_session, datetime(2026, 9, 20), 82.0)

    response = await client.get("/api/body-weight/analytics/summary", params={"period": "monthly"})

    data = response.json()["data"]
    assert data["dateRange"]["endDate"] == "2026-10-19T12:00:00"
    summary = data["summary"]
    assert summary["totalEntries"] == 3
    assert summary["averageWeight"] == 80.0
    assert summary["firstWeight"] == 81.0
    assert summary["latestWeight"] == 79.0
    assert summary["weightTrend"] == -2.0
    assert summary["averageBodyFat"] == 20.5
    assert summary["averageMuscleMass"] is None
    assert summary["previousAverageWeight"] == 82.0
    assert summary["percentageChange"] == -2.44


@pytest.mark.asyncio
async def test_trends_limit_keeps_latest_buckets(client: AsyncClient, test_session: AsyncSession):
    for month in range(6, 11):
        await add_body_weight(test_session, datetime(2026, month, 5), 70.0 + month)

    response = await client.get("/api/body-weight/analytics/trends", params={"period": "monthly", "limit": 3})

    trends = response.json()["data"]["trends"]
    assert [t["label"] for t in trends] == ["2026-08", "2026-09", "2026-10"]
    assert [t["averageWeight"] for t in trends] == [78.0, 79.0, 80.0]
    assert all(t["entryCount"] == 1 for t in trends)


@pytest.mark.asyncio
async def test_stats(client: AsyncClient, test_session: AsyncSession):
    await add_body_weight(test_session, datetime(2026, 9, 1), 82.0)
    await add_body_weight(test_session, datetime(2026, 10, 1), 79.5)
    await add_body_weight(test_session, datetime(2026, 9, 15), 180.0, unit="lbs")

    data = (await client.get("/api/body-weight/analytics/stats")).json()["data"]

    assert data["totalEntries"] == 3
    assert data["firstEntry"]["weight"] == 82.0
    assert data["latestEntry"]["weight"] == 79.5
    assert data["totalWeightChange"] == -2.5
    assert {u["unit"]: u["count"] for u in data["unitBreakdown"]} == {"kg": 2, "lbs": 1}


@pytest.mark.asyncio
async def test_stats_without_data(client: AsyncClient):
    data = (await client.get("/api/body-weight/analytics/stats")).json()["data"]
    assert data["totalEntries"] == 0
    assert data["firstEntry"] is None
    assert data["unitBreakdown"] == []
