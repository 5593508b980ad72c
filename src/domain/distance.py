"""
Distance resolution: routed lookup first, great-circle fallback second.

Pipeline
--------
1. No user location -> unresolved (``None``); no lookup is attempted.
2. Ask the routed-distance provider for a walking distance, bounded by a
   timeout.  A finite, non-negative mile value wins.
3. On *any* provider failure, fall back to the Haversine distance between
   the pickup coordinate and the user.  A pickup name missing from the
   known-coordinate table cannot fall back and yields ``None``.

The resolver never raises to its caller.  ``None`` means "unresolved" and
is distinct from a zero-mile result.

Complexity: O(1) per call plus one network round trip.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Mapping, Optional, Protocol

from .entities import DistanceResult, GeoPoint, PickupDescriptor
from .enums import Provenance, ServeryName, TravelMode

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3958.8

# Known servery coordinates, used only by the great-circle fallback.
SERVERY_COORDINATES: dict[str, GeoPoint] = {
    ServeryName.BAKER.value: GeoPoint(29.7164, -95.4018),
    ServeryName.NORTH.value: GeoPoint(29.7184, -95.4018),
    ServeryName.SEIBEL.value: GeoPoint(29.7174, -95.4008),
    ServeryName.SOUTH.value: GeoPoint(29.7164, -95.4008),
    ServeryName.WEST.value: GeoPoint(29.7174, -95.4028),
}


class RouteLookupFailure(Exception):
    """The routed-distance provider could not produce a distance."""


class UnknownPickupCoordinate(Exception):
    """A pickup name has no entry in the known-coordinate table."""


class RouteDistanceProvider(Protocol):
    async def route_miles(
        self,
        origin: PickupDescriptor,
        destination: PickupDescriptor,
        mode: TravelMode,
    ) -> float: ...


def haversine_miles(a: GeoPoint, b: GeoPoint) -> float:
    """Return the great-circle distance in **miles** between two points."""
    lat1_r, lat2_r = math.radians(a.lat), math.radians(b.lat)
    dlat = math.radians(b.lat - a.lat)
    dlng = math.radians(b.lng - a.lng)

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(min(1.0, h)))


def pickup_coordinate(
    pickup: PickupDescriptor,
    known: Mapping[str, GeoPoint] = SERVERY_COORDINATES,
) -> GeoPoint:
    """Resolve *pickup* to a coordinate or raise ``UnknownPickupCoordinate``."""
    if isinstance(pickup, GeoPoint):
        return pickup
    try:
        return known[pickup]
    except KeyError:
        raise UnknownPickupCoordinate(pickup) from None


class DistanceResolver:
    """Stateless distance pipeline shared by every quote."""

    def __init__(
        self,
        provider: Optional[RouteDistanceProvider],
        known_coordinates: Mapping[str, GeoPoint] = SERVERY_COORDINATES,
        timeout_seconds: float = 8.0,
        mode: TravelMode = TravelMode.WALKING,
    ):
        self.provider = provider
        self.known_coordinates = known_coordinates
        self.timeout_seconds = timeout_seconds
        self.mode = mode

    async def resolve(
        self, pickup: PickupDescriptor, user_location: Optional[GeoPoint]
    ) -> Optional[DistanceResult]:
        if user_location is None:
            return None
        if isinstance(pickup, str) and not pickup:
            return None

        miles = await self._routed_miles(pickup, user_location)
        if miles is not None:
            return DistanceResult(miles, Provenance.ROUTED)
        return self._great_circle(pickup, user_location)

    async def _routed_miles(
        self, pickup: PickupDescriptor, user_location: GeoPoint
    ) -> Optional[float]:
        if self.provider is None:
            return None
        try:
            miles = await asyncio.wait_for(
                self.provider.route_miles(pickup, user_location, self.mode),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Route lookup timed out after %.1fs; using great-circle distance",
                self.timeout_seconds,
            )
            return None
        except Exception as exc:
            logger.warning(
                "Route lookup failed (%s); using great-circle distance", exc
            )
            return None

        if (
            isinstance(miles, bool)
            or not isinstance(miles, (int, float))
            or not math.isfinite(miles)
            or miles < 0
        ):
            logger.warning(
                "Route lookup returned unusable distance %r; "
                "using great-circle distance",
                miles,
            )
            return None
        return float(miles)

    def _great_circle(
        self, pickup: PickupDescriptor, user_location: GeoPoint
    ) -> Optional[DistanceResult]:
        try:
            origin = pickup_coordinate(pickup, self.known_coordinates)
        except UnknownPickupCoordinate:
            logger.info("No known coordinate for pickup %r; distance unresolved", pickup)
            return None
        miles = haversine_miles(origin, user_location)
        if math.isnan(miles):
            return None
        return DistanceResult(miles, Provenance.GREAT_CIRCLE_FALLBACK)


async def resolve_distance(
    pickup: PickupDescriptor,
    user_location: Optional[GeoPoint],
    provider: Optional[RouteDistanceProvider],
    known_coordinates: Mapping[str, GeoPoint] = SERVERY_COORDINATES,
) -> Optional[DistanceResult]:
    """One-shot helper around ``DistanceResolver.resolve``."""
    return await DistanceResolver(provider, known_coordinates).resolve(
        pickup, user_location
    )
