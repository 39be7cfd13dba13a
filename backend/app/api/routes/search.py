"""
Search for available cars and the static branch list.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.infrastructure.booking_store import BookingStore, get_store
from app.schemas.car import LocationsResponse, SearchResponse
from app.services.availability_service import search_available_cars
from app.services.car_service import BRANCHES

router = APIRouter(tags=["Search"])


@router.get("/search", response_model=SearchResponse)
async def search_cars(
    from_: datetime = Query(..., alias="from"),
    to: datetime = Query(...),
    pickup: Optional[str] = Query(None, max_length=10),
    dropoff: Optional[str] = Query(None, max_length=10),
    promo: Optional[str] = Query(None, max_length=32),
    store: BookingStore = Depends(get_store),
):
    """
    Cars free for the whole window, priced for it.
    `pickup` filters by branch; `dropoff` is accepted but does not filter.
    """
    return await search_available_cars(store, from_, to, branch=pickup, promo=promo)


@router.get("/locations", response_model=LocationsResponse)
async def list_locations():
    return {"branches": BRANCHES}
