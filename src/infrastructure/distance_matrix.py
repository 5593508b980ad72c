"""
Google Distance Matrix client.

Requests a single origin/destination pair in imperial units and reports
the first element.  Every failure mode (missing key, transport error,
non-2xx response, non-``OK`` element, malformed payload) is raised as a
``RouteLookupFailure`` so callers can fall back uniformly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from src.config import settings
from src.domain.distance import RouteLookupFailure
from src.domain.entities import GeoPoint, PickupDescriptor
from src.domain.enums import TravelMode

logger = logging.getLogger(__name__)

MILES_PER_METER = 0.000621371


class MissingApiKey(RouteLookupFailure):
    """No Google Maps API key is configured."""


@dataclass(frozen=True)
class RouteLeg:
    meters: int
    miles: float
    distance_text: str
    seconds: int
    minutes: int
    duration_text: str
    origin: str
    destination: str
    mode: TravelMode


def _param(place: PickupDescriptor) -> str:
    return place.as_param() if isinstance(place, GeoPoint) else place


class GoogleDistanceMatrixClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: str = settings.distance_matrix_url,
        timeout_seconds: float = settings.distance_lookup_timeout_seconds,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.http = http or httpx.AsyncClient(timeout=timeout_seconds)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def lookup(
        self,
        origin: PickupDescriptor,
        destination: PickupDescriptor,
        mode: TravelMode = TravelMode.WALKING,
    ) -> RouteLeg:
        if not self.api_key:
            raise MissingApiKey("Google Maps API key not configured")

        origin_param = _param(origin)
        destination_param = _param(destination)
        params = {
            "key": self.api_key,
            "origins": origin_param,
            "destinations": destination_param,
            "mode": mode.value,
            "units": "imperial",
        }

        try:
            resp = await self.http.get(self.base_url, params=params)
        except httpx.HTTPError as exc:
            raise RouteLookupFailure(f"Distance API unreachable: {exc}") from exc
        if resp.status_code != 200:
            raise RouteLookupFailure(f"Distance API error: {resp.text}")

        try:
            data: dict[str, Any] = resp.json()
        except ValueError as exc:
            raise RouteLookupFailure("Distance API returned invalid JSON") from exc

        return self._parse(data, origin_param, destination_param, mode)

    @staticmethod
    def _parse(
        data: dict[str, Any],
        origin_param: str,
        destination_param: str,
        mode: TravelMode,
    ) -> RouteLeg:
        try:
            element = data["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError):
            element = {}
        status = element.get("status") if isinstance(element, dict) else None
        if status != "OK":
            raise RouteLookupFailure(f"Distance lookup failed: {status or 'UNKNOWN'}")

        try:
            meters = int(element["distance"]["value"])
            seconds = int(element["duration"]["value"])
            distance_text = str(element["distance"].get("text", ""))
            duration_text = str(element["duration"].get("text", ""))
        except (KeyError, TypeError, ValueError) as exc:
            raise RouteLookupFailure("Distance lookup returned no distance") from exc

        origins = data.get("origin_addresses") or []
        destinations = data.get("destination_addresses") or []
        return RouteLeg(
            meters=meters,
            miles=meters * MILES_PER_METER,
            distance_text=distance_text,
            seconds=seconds,
            minutes=(seconds + 30) // 60,
            duration_text=duration_text,
            origin=origins[0] if origins else origin_param,
            destination=destinations[0] if destinations else destination_param,
            mode=mode,
        )

    async def route_miles(
        self,
        origin: PickupDescriptor,
        destination: PickupDescriptor,
        mode: TravelMode,
    ) -> float:
        leg = await self.lookup(origin, destination, mode)
        logger.debug("Routed %s -> %s: %.3f mi", leg.origin, leg.destination, leg.miles)
        return leg.miles
