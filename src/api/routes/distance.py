"""
Distance & quote endpoints
==========================

POST /api/v1/distance -- routed distance between two places (Google proxy)
POST /api/v1/quotes   -- delivery distance and price for a servery pickup
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.dependencies import get_distance_client, get_resolver
from src.api.middleware import limiter
from src.api.schemas import (
    DistanceInfo,
    DistanceRequest,
    DistanceResponse,
    DurationInfo,
    GeoPointSchema,
    QuoteRequest,
    QuoteResponse,
)
from src.config import settings
from src.domain.distance import DistanceResolver, RouteLookupFailure
from src.domain.enums import QuoteState
from src.domain.quote import PRICE_UNAVAILABLE, DeliveryQuote, StaticGeolocation
from src.infrastructure.distance_matrix import GoogleDistanceMatrixClient, MissingApiKey

router = APIRouter(tags=["distance"])


def _place(value):
    return value.to_domain() if isinstance(value, GeoPointSchema) else value


@router.post(
    "/distance",
    response_model=DistanceResponse,
    summary="Routed distance between two places",
    responses={500: {"description": "API key not configured"}, 502: {"description": "Upstream failure"}},
)
@limiter.limit(settings.rate_limit)
async def get_distance(
    request: Request,
    body: DistanceRequest,
    client: GoogleDistanceMatrixClient = Depends(get_distance_client),
):
    try:
        leg = await client.lookup(_place(body.origin), _place(body.destination), body.mode)
    except MissingApiKey as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    except RouteLookupFailure as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    return DistanceResponse(
        distance=DistanceInfo(meters=leg.meters, miles=leg.miles, text=leg.distance_text),
        duration=DurationInfo(seconds=leg.seconds, minutes=leg.minutes, text=leg.duration_text),
        origin=leg.origin,
        destination=leg.destination,
        mode=leg.mode,
    )


@router.post(
    "/quotes",
    response_model=QuoteResponse,
    summary="Delivery price for a servery pickup",
    description=(
        "Resolves the walking distance from the servery to the user "
        "(great-circle fallback when routing fails) and prices it. "
        "``payable`` is false when no distance could be resolved."
    ),
)
@limiter.limit(settings.rate_limit)
async def create_quote(
    request: Request,
    body: QuoteRequest,
    resolver: DistanceResolver = Depends(get_resolver),
):
    quote = DeliveryQuote(resolver)
    await quote.acquire_location(
        StaticGeolocation(body.location.to_domain() if body.location else None)
    )
    await quote.select_pickup(body.servery.value)

    price = quote.price
    payable = quote.state is QuoteState.RESOLVED and price is not None
    return QuoteResponse(
        servery=body.servery,
        state=quote.state,
        miles=quote.distance.miles if quote.distance else None,
        provenance=quote.distance.provenance if quote.distance else None,
        delivery_price=float(price) if price is not None else None,
        payable=payable,
        message=None if payable else PRICE_UNAVAILABLE,
    )
