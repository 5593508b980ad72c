"""
Delivery quote orchestration (one per client session).

State machine
-------------
IDLE        -- pickup or user location missing; no distance, no price
RESOLVING   -- a distance lookup is in flight
RESOLVED    -- the latest lookup finished; distance and price are set
UNRESOLVED  -- the latest lookup found no distance; submission blocked

Any pickup or location change re-enters RESOLVING (or IDLE when one of the
two is missing).

Ordering
--------
Every refresh takes a new request token.  A lookup commits its result only
if its token is still the latest one when it completes, so a slow,
superseded lookup can never overwrite a newer one.  Stale results are
dropped silently.  The quote is owned by a single task/event loop, so the
token comparison needs no lock.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import Awaitable, Callable, Iterable, Optional, Protocol, TypeVar

from .distance import DistanceResolver
from .entities import CartItem, DistanceResult, GeoPoint, PickupDescriptor
from .enums import QuoteState
from .pricing import cart_subtotal, delivery_price, to_cents

logger = logging.getLogger(__name__)

PRICE_UNAVAILABLE = "Enable location sharing and select a valid pickup point"
EMPTY_CART = "Add at least one item to your cart"

T = TypeVar("T")


class LocationDenied(Exception):
    """Geolocation was refused or is unavailable on the device."""


class OrderNotPayable(Exception):
    """The quote cannot be turned into an order yet."""


@dataclass(frozen=True)
class GeolocationOptions:
    high_accuracy: bool = True
    timeout_seconds: float = 10.0
    maximum_age_seconds: float = 300.0


class GeolocationProvider(Protocol):
    async def current_position(self, options: GeolocationOptions) -> GeoPoint: ...


class StaticGeolocation:
    """A position already reported by the client (``None`` means denied)."""

    def __init__(self, point: Optional[GeoPoint]):
        self.point = point

    async def current_position(self, options: GeolocationOptions) -> GeoPoint:
        if self.point is None:
            raise LocationDenied("client did not share a location")
        return self.point


@dataclass(frozen=True)
class OrderDraft:
    pickup: PickupDescriptor
    user_location: GeoPoint
    items: tuple[CartItem, ...]
    distance: DistanceResult
    items_subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal


OrderSink = Callable[[OrderDraft], Awaitable[T]]


class DeliveryQuote:
    def __init__(self, resolver: DistanceResolver):
        self.resolver = resolver
        self.pickup: Optional[PickupDescriptor] = None
        self.user_location: Optional[GeoPoint] = None
        self.distance: Optional[DistanceResult] = None
        self.state = QuoteState.IDLE
        self._request_token = 0
        self._location_requested = False

    @property
    def price(self) -> Optional[Decimal]:
        if self.distance is None:
            return None
        return delivery_price(self.distance.miles)

    # ── Inputs ────────────────────────────────────────────────────────

    async def acquire_location(
        self,
        provider: GeolocationProvider,
        options: GeolocationOptions = GeolocationOptions(),
        *,
        retry: bool = False,
    ) -> Optional[GeoPoint]:
        """Ask *provider* for the user's position once per session.

        A denial leaves the location unset; pass ``retry=True`` to ask again.
        """
        if self._location_requested and not retry:
            return self.user_location
        self._location_requested = True
        try:
            point: Optional[GeoPoint] = await provider.current_position(options)
        except LocationDenied as exc:
            logger.info("Location unavailable: %s", exc)
            point = None
        await self.update_location(point)
        return point

    async def select_pickup(self, pickup: Optional[PickupDescriptor]) -> None:
        self.pickup = pickup or None
        await self._refresh()

    async def update_location(self, location: Optional[GeoPoint]) -> None:
        if location == self.user_location and self.state is not QuoteState.IDLE:
            return
        self.user_location = location
        await self._refresh()

    # ── Resolution ────────────────────────────────────────────────────

    async def _refresh(self) -> None:
        self._request_token += 1
        token = self._request_token
        self.distance = None

        if self.pickup is None or self.user_location is None:
            self.state = QuoteState.IDLE
            return

        self.state = QuoteState.RESOLVING
        pickup = self.pickup
        result = await self.resolver.resolve(pickup, self.user_location)

        if token != self._request_token:
            logger.debug("Discarding stale distance for pickup %r", pickup)
            return
        self.distance = result
        self.state = QuoteState.RESOLVED if result else QuoteState.UNRESOLVED

    # ── Submission ────────────────────────────────────────────────────

    def checkout(self, items: Iterable[CartItem]) -> OrderDraft:
        """Freeze the current quote into an order draft or raise."""
        cart = tuple(items)
        if not cart:
            raise OrderNotPayable(EMPTY_CART)
        fee = self.price
        if (
            self.state is not QuoteState.RESOLVED
            or fee is None
            or self.distance is None
            or self.pickup is None
            or self.user_location is None
        ):
            raise OrderNotPayable(PRICE_UNAVAILABLE)

        subtotal = cart_subtotal(cart)
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, subtotal.adjusted() + 4, fee.adjusted() + 4)
            total = to_cents(subtotal + fee)
        return OrderDraft(
            pickup=self.pickup,
            user_location=self.user_location,
            items=cart,
            distance=self.distance,
            items_subtotal=subtotal,
            delivery_fee=fee,
            total=total,
        )

    async def submit(self, items: Iterable[CartItem], sink: OrderSink[T]) -> T:
        return await sink(self.checkout(items))
