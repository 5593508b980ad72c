"""
Dasher (delivery driver) endpoints
==================================

GET   /api/v1/dasher/orders                      -- recent orders for pickup
PATCH /api/v1/dasher/orders/{order_id}/accept    -- claim a Pending order
PATCH /api/v1/dasher/orders/{order_id}/deliver   -- mark a claimed order delivered
PATCH /api/v1/dasher/drivers/{driver_id}/status  -- go Online / Offline
GET   /api/v1/dasher/drivers/available           -- online drivers
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.api.middleware import limiter
from src.api.routes.orders import (
    apply_transition,
    change_state,
    order_lines,
    to_response,
)
from src.api.schemas import (
    DasherOrderResponse,
    DriverActionRequest,
    DriverResponse,
    DriverStatusRequest,
    GeoPointSchema,
    OrderResponse,
)
from src.config import settings
from src.domain.distance import SERVERY_COORDINATES, haversine_miles
from src.domain.entities import GeoPoint
from src.domain.enums import OrderStatus, ServeryName
from src.infrastructure.models import OrderModel, UserModel
from src.infrastructure.repositories import OrderRepository, UserRepository

router = APIRouter(prefix="/dasher", tags=["dasher"])


def _as_utc(ts: datetime) -> datetime:
    # SQLite hands back naive timestamps; they are stored in UTC.
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def _feed_entry(
    order: OrderModel, now: datetime, dasher: Optional[GeoPoint]
) -> DasherOrderResponse:
    customer = order.customer
    pickup = SERVERY_COORDINATES[ServeryName(order.servery_name).value]
    if dasher is not None:
        miles = haversine_miles(dasher, pickup)
    else:
        miles = order.delivery_miles
    placed = _as_utc(order.order_timestamp)
    return DasherOrderResponse(
        id=order.id,
        customer_name=customer.full_name,
        customer_phone=customer.phone_number or "No phone provided",
        servery_name=order.servery_name,
        order_items=order_lines(order),
        total_amount=float(order.total_amount),
        delivery_location=order.delivery_location,
        order_timestamp=placed,
        status=order.status,
        payment_status=order.payment_status,
        minutes_ago=int((now - placed).total_seconds() // 60),
        pickup_coords=GeoPointSchema(lat=pickup.lat, lng=pickup.lng),
        delivery_coords=GeoPointSchema(lat=order.delivery_lat, lng=order.delivery_lng),
        distance_miles=round(miles, 2),
    )


async def _get_driver(db: AsyncSession, driver_id: str) -> UserModel:
    driver = await UserRepository(db).get_by_id(driver_id)
    if not driver:
        raise HTTPException(status_code=404, detail="Driver not found")
    if not driver.is_delivery_driver:
        raise HTTPException(status_code=403, detail="User is not a delivery driver")
    return driver


async def _get_order(db: AsyncSession, order_id: str) -> OrderModel:
    order = await OrderRepository(db).get_by_id(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.get(
    "/orders",
    response_model=list[DasherOrderResponse],
    summary="Recent orders with customer details",
    description=(
        "Orders placed within the recent-orders window.  When the dasher's "
        "``lat``/``lng`` are given, orders are sorted by straight-line "
        "distance to their servery, closest first."
    ),
)
@limiter.limit(settings.rate_limit)
async def get_recent_orders(
    request: Request,
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    db: AsyncSession = Depends(get_db),
):
    now = datetime.now(timezone.utc)
    since = now - timedelta(minutes=settings.recent_orders_window_minutes)
    orders = await OrderRepository(db).get_recent_with_customers(since)

    dasher = GeoPoint(lat, lng) if lat is not None and lng is not None else None
    feed = [_feed_entry(o, now, dasher) for o in orders]
    if dasher is not None:
        feed.sort(key=lambda entry: entry.distance_miles)
    return feed


@router.patch(
    "/orders/{order_id}/accept",
    response_model=OrderResponse,
    summary="Accept a pending order",
)
@limiter.limit(settings.rate_limit)
async def accept_order(
    request: Request,
    order_id: str,
    body: DriverActionRequest,
    db: AsyncSession = Depends(get_db),
):
    driver = await _get_driver(db, body.driver_id)
    order = await _get_order(db, order_id)
    change_state(order, lambda entity: entity.accept(driver.id))
    return to_response(order)


@router.patch(
    "/orders/{order_id}/deliver",
    response_model=OrderResponse,
    summary="Mark an accepted order delivered",
)
@limiter.limit(settings.rate_limit)
async def deliver_order(
    request: Request,
    order_id: str,
    body: DriverActionRequest,
    db: AsyncSession = Depends(get_db),
):
    driver = await _get_driver(db, body.driver_id)
    order = await _get_order(db, order_id)
    if order.delivery_person_id != driver.id:
        raise HTTPException(status_code=403, detail="Order is assigned to another driver")
    apply_transition(order, OrderStatus.DELIVERED)
    return to_response(order)


@router.patch(
    "/drivers/{driver_id}/status",
    response_model=DriverResponse,
    summary="Set a driver Online or Offline",
)
@limiter.limit(settings.rate_limit)
async def set_driver_status(
    request: Request,
    driver_id: str,
    body: DriverStatusRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = UserRepository(db)
    user = await repo.get_by_id(driver_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return await repo.set_driver_status(user, body.status)


@router.get(
    "/drivers/available",
    response_model=list[DriverResponse],
    summary="List online delivery drivers",
)
@limiter.limit(settings.rate_limit)
async def get_available_drivers(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    return await UserRepository(db).get_available_drivers()
