"""
Order endpoints
===============

GET   /api/v1/menu/{servery}          -- menu for the current meal time
POST  /api/v1/orders                  -- price and place an order (201)
GET   /api/v1/orders?customer_id=...  -- a customer's orders, newest first
PATCH /api/v1/orders/{order_id}/cancel -- cancel a Pending/Accepted order
"""

import logging
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, get_meal_time, get_resolver
from src.api.middleware import limiter
from src.api.schemas import (
    ErrorResponse,
    MenuItemResponse,
    MenuResponse,
    OrderCreateRequest,
    OrderLineResponse,
    OrderResponse,
)
from src.config import settings
from src.domain.distance import DistanceResolver
from src.domain.entities import CartItem, InvalidStateTransition, Order
from src.domain.enums import MealTime, OrderStatus, ServeryName
from src.domain.menu import MENU, find_item
from src.domain.quote import EMPTY_CART, DeliveryQuote, OrderDraft, OrderNotPayable, StaticGeolocation
from src.infrastructure.models import OrderModel
from src.infrastructure.repositories import OrderRepository, UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["orders"])


def order_lines(order: OrderModel) -> list[OrderLineResponse]:
    payload = order.order_items or {}
    return [OrderLineResponse(**line) for line in payload.get("items", [])]


def to_response(order: OrderModel) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        customer_id=order.customer_id,
        delivery_person_id=order.delivery_person_id,
        servery_name=order.servery_name,
        items=order_lines(order),
        meal_time=(order.order_items or {}).get("meal_time"),
        status=order.status,
        payment_status=order.payment_status,
        items_subtotal=float(order.items_subtotal),
        delivery_fee=float(order.delivery_fee),
        delivery_miles=order.delivery_miles,
        distance_provenance=order.distance_provenance,
        total_amount=float(order.total_amount),
        delivery_location=order.delivery_location,
        delivery_lat=order.delivery_lat,
        delivery_lng=order.delivery_lng,
        order_timestamp=order.order_timestamp,
    )


def change_state(order: OrderModel, change: Callable[[Order], None]) -> None:
    """Apply *change* to the order entity and copy the result back, or raise 409."""
    entity = Order(
        id=order.id,
        status=OrderStatus(order.status),
        delivery_person_id=order.delivery_person_id,
    )
    try:
        change(entity)
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    order.status = entity.status
    order.delivery_person_id = entity.delivery_person_id


def apply_transition(order: OrderModel, new_status: OrderStatus) -> None:
    change_state(order, lambda entity: entity.transition_to(new_status))


@router.get(
    "/menu/{servery}",
    response_model=MenuResponse,
    summary="Menu for the current meal time",
)
@limiter.limit(settings.rate_limit)
async def get_menu(
    request: Request,
    servery: ServeryName,
    current_meal: MealTime = Depends(get_meal_time),
):
    return MenuResponse(
        servery=servery,
        meal_time=current_meal,
        items=[
            MenuItemResponse(id=i.id, name=i.name, category=i.category, price=float(i.price))
            for i in MENU[current_meal]
        ],
    )


@router.post(
    "/orders",
    status_code=201,
    response_model=OrderResponse,
    summary="Place an order",
    responses={
        400: {"model": ErrorResponse, "description": "Empty cart or unknown menu item"},
        404: {"model": ErrorResponse, "description": "Customer not found"},
        422: {"model": ErrorResponse, "description": "Delivery price unavailable"},
    },
)
@limiter.limit(settings.rate_limit)
async def create_order(
    request: Request,
    body: OrderCreateRequest,
    db: AsyncSession = Depends(get_db),
    resolver: DistanceResolver = Depends(get_resolver),
    current_meal: MealTime = Depends(get_meal_time),
):
    customer = await UserRepository(db).get_by_id(body.customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")

    cart: list[CartItem] = []
    for line in body.items:
        item = find_item(line.id, current_meal)
        if item is None:
            raise HTTPException(
                status_code=400,
                detail=f"Menu item {line.id!r} is not served for {current_meal.value}",
            )
        cart.append(CartItem(item.id, item.name, item.category, line.quantity, item.price))
    if not cart:
        raise HTTPException(status_code=400, detail=EMPTY_CART)

    quote = DeliveryQuote(resolver)
    await quote.acquire_location(
        StaticGeolocation(body.location.to_domain() if body.location else None)
    )
    await quote.select_pickup(body.servery.value)

    repo = OrderRepository(db)

    async def persist(draft: OrderDraft) -> OrderModel:
        return await repo.create_order(
            customer_id=customer.id,
            servery=body.servery,
            draft=draft,
            meal_time=current_meal.value,
            delivery_location=body.delivery_location,
        )

    try:
        order = await quote.submit(cart, persist)
    except OrderNotPayable as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    logger.info(
        "Order %s placed at %s: %.2f mi (%s), total %s",
        order.id,
        body.servery.value,
        order.delivery_miles,
        order.distance_provenance,
        order.total_amount,
    )
    return to_response(order)


@router.get(
    "/orders",
    response_model=list[OrderResponse],
    summary="List a customer's orders",
)
@limiter.limit(settings.rate_limit)
async def list_orders(
    request: Request,
    customer_id: str = Query(...),
    db: AsyncSession = Depends(get_db),
):
    orders = await OrderRepository(db).list_for_customer(customer_id)
    return [to_response(o) for o in orders]


@router.patch(
    "/orders/{order_id}/cancel",
    response_model=OrderResponse,
    summary="Cancel an order",
    description="Transitions a Pending or Accepted order to Cancelled.",
)
@limiter.limit(settings.rate_limit)
async def cancel_order(
    request: Request,
    order_id: str,
    db: AsyncSession = Depends(get_db),
):
    order = await OrderRepository(db).get_by_id(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    apply_transition(order, OrderStatus.CANCELLED)
    return to_response(order)
