"""
Tests for the available-car search and branch list.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.booking_store import BookingStore
from app.models.booking import CANCELLED
from app.services.availability_service import search_available_cars
from conftest import make_booking, make_car, utc


@pytest.mark.asyncio
async def test_search_excludes_booked_car(db_session: AsyncSession, store: BookingStore):
    """Window [02-01, 02-05]: car A booked 02-02..02-03, car B free -> only B."""
    car_a = await make_car(db_session, model="Car A")
    car_b = await make_car(db_session, model="Car B", daily_price=40)
    car_a_id, car_b_id = car_a.id, car_b.id
    await make_booking(db_session, car_a, utc(2024, 2, 2), utc(2024, 2, 3))

    result = await search_available_cars(store, utc(2024, 2, 1), utc(2024, 2, 5))

    assert {item["id"] for item in result["items"]} == {car_b_id}
    assert car_a_id not in {item["id"] for item in result["items"]}
    assert result["days"] == 4
    assert result["items"][0]["price_before_deals"] == 160
    assert result["items"][0]["final_price"] == 160


@pytest.mark.asyncio
async def test_search_ignores_cancelled_bookings(db_session: AsyncSession, store: BookingStore):
    car = await make_car(db_session)
    car_id = car.id
    await make_booking(db_session, car, utc(2024, 2, 2), utc(2024, 2, 3), status=CANCELLED)

    result = await search_available_cars(store, utc(2024, 2, 1), utc(2024, 2, 5))
    assert [item["id"] for item in result["items"]] == [car_id]


@pytest.mark.asyncio
async def test_search_filters_by_pickup_branch(client: AsyncClient, db_session: AsyncSession):
    await make_car(db_session, model="Dhaka Car", branch="DAC")
    ctg = await make_car(db_session, model="Chattogram Car", branch="CTG")

    response = await client.get(
        "/api/v1/search",
        params={"from": "2024-02-01", "to": "2024-02-03", "pickup": "CTG"},
    )
    assert response.status_code == 200
    items = response.json()["items"]
    assert [item["id"] for item in items] == [ctg.id]


@pytest.mark.asyncio
async def test_search_applies_promo(client: AsyncClient, db_session: AsyncSession):
    await make_car(db_session, daily_price=40)

    response = await client.get(
        "/api/v1/search",
        params={"from": "2024-02-01", "to": "2024-02-05", "promo": "save10"},
    )
    data = response.json()
    assert data["promo_applied"] == 10
    assert data["days"] == 4
    assert data["items"][0]["price_before_deals"] == 160
    assert data["items"][0]["final_price"] == 144


@pytest.mark.asyncio
async def test_search_same_day_window_is_one_day(client: AsyncClient, db_session: AsyncSession):
    await make_car(db_session, daily_price=40)

    response = await client.get("/api/v1/search", params={"from": "2024-02-01", "to": "2024-02-01"})
    assert response.status_code == 200
    assert response.json()["days"] == 1


@pytest.mark.asyncio
async def test_search_rejects_reversed_window(client: AsyncClient):
    response = await client.get("/api/v1/search", params={"from": "2024-02-05", "to": "2024-02-01"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_search_rejects_malformed_dates(client: AsyncClient):
    response = await client.get("/api/v1/search", params={"from": "yesterday", "to": "2024-02-01"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_locations(client: AsyncClient):
    response = await client.get("/api/v1/locations")
    assert response.status_code == 200
    codes = [b["code"] for b in response.json()["branches"]]
    assert codes == ["DAC", "CTG", "SYL"]
