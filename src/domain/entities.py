"""
Domain entities with business logic.

Patterns used
-------------
- **Value Objects** ``GeoPoint`` and ``DistanceResult`` validate their
  invariants on construction (coordinate ranges, non-negative finite miles).
- **State Pattern** on ``Order``: enforces valid lifecycle transitions
  (Pending -> Accepted -> Delivered, Pending | Accepted -> Cancelled).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from .enums import ORDER_TRANSITIONS, OrderStatus, Provenance


class InvalidStateTransition(Exception):
    """Raised when an order status change violates the state machine."""


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"latitude out of range: {self.lat}")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"longitude out of range: {self.lng}")

    def as_param(self) -> str:
        """``"lat,lng"`` as accepted by mapping services."""
        return f"{self.lat},{self.lng}"


# A pickup is either a coordinate or a place name the router understands.
PickupDescriptor = Union[GeoPoint, str]


@dataclass(frozen=True)
class DistanceResult:
    miles: float
    provenance: Provenance

    def __post_init__(self) -> None:
        if not math.isfinite(self.miles) or self.miles < 0:
            raise ValueError(f"invalid distance: {self.miles!r}")


@dataclass(frozen=True)
class CartItem:
    id: str
    name: str
    category: str
    quantity: int
    price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Order:
    id: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    delivery_person_id: Optional[str] = None

    def transition_to(self, new_status: OrderStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        allowed = ORDER_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.status.value} to {new_status.value}"
            )
        self.status = new_status

    def accept(self, driver_id: str) -> None:
        self.transition_to(OrderStatus.ACCEPTED)
        self.delivery_person_id = driver_id
