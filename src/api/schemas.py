"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional, Union

from pydantic import BaseModel, Field

from src.domain.entities import GeoPoint
from src.domain.enums import (
    DriverStatus,
    MealTime,
    OrderStatus,
    PaymentStatus,
    Provenance,
    QuoteState,
    ServeryName,
    TravelMode,
)

PlaceName = Annotated[str, Field(min_length=1, max_length=255)]


# ── Shared ────────────────────────────────────────────────────────────


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def to_domain(self) -> GeoPoint:
        return GeoPoint(self.lat, self.lng)


# ── Requests ──────────────────────────────────────────────────────────


class DistanceRequest(BaseModel):
    origin: Union[GeoPointSchema, PlaceName]
    destination: Union[GeoPointSchema, PlaceName]
    mode: TravelMode = TravelMode.WALKING


class QuoteRequest(BaseModel):
    servery: ServeryName
    location: Optional[GeoPointSchema] = Field(
        None, description="Device location; omit when the user denied access."
    )


class OrderItemRequest(BaseModel):
    id: str = Field(..., min_length=1, max_length=64)
    quantity: int = Field(1, ge=1, le=20)


class OrderCreateRequest(BaseModel):
    customer_id: str
    servery: ServeryName
    items: list[OrderItemRequest]
    location: Optional[GeoPointSchema] = None
    delivery_location: Optional[str] = Field(None, max_length=255)


class DriverActionRequest(BaseModel):
    driver_id: str


class DriverStatusRequest(BaseModel):
    status: DriverStatus


# ── Responses ─────────────────────────────────────────────────────────


class DistanceInfo(BaseModel):
    meters: int
    miles: float
    text: str


class DurationInfo(BaseModel):
    seconds: int
    minutes: int
    text: str


class DistanceResponse(BaseModel):
    distance: DistanceInfo
    duration: DurationInfo
    origin: str
    destination: str
    mode: TravelMode


class QuoteResponse(BaseModel):
    servery: ServeryName
    state: QuoteState
    miles: Optional[float] = None
    provenance: Optional[Provenance] = None
    delivery_price: Optional[float] = None
    payable: bool
    message: Optional[str] = None


class MenuItemResponse(BaseModel):
    id: str
    name: str
    category: str
    price: float


class MenuResponse(BaseModel):
    servery: ServeryName
    meal_time: MealTime
    items: list[MenuItemResponse]


class OrderLineResponse(BaseModel):
    id: str
    name: str
    category: str
    quantity: int
    price: float


class OrderResponse(BaseModel):
    id: str
    customer_id: str
    delivery_person_id: Optional[str] = None
    servery_name: ServeryName
    items: list[OrderLineResponse]
    meal_time: Optional[str] = None
    status: OrderStatus
    payment_status: PaymentStatus
    items_subtotal: float
    delivery_fee: float
    delivery_miles: float
    distance_provenance: Provenance
    total_amount: float
    delivery_location: str
    delivery_lat: float
    delivery_lng: float
    order_timestamp: Optional[datetime] = None


class DasherOrderResponse(BaseModel):
    id: str
    customer_name: str
    customer_phone: str
    servery_name: ServeryName
    order_items: list[OrderLineResponse]
    total_amount: float
    delivery_location: str
    order_timestamp: datetime
    status: OrderStatus
    payment_status: PaymentStatus
    minutes_ago: int
    pickup_coords: GeoPointSchema
    delivery_coords: GeoPointSchema
    distance_miles: float


class DriverResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    is_delivery_driver: bool
    driver_status: Optional[DriverStatus] = None

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
