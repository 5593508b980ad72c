"""FastAPI dependency injection helpers."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain.distance import DistanceResolver, RouteDistanceProvider
from src.domain.enums import MealTime, TravelMode
from src.domain.menu import meal_time
from src.infrastructure.database import async_session_factory
from src.infrastructure.distance_matrix import GoogleDistanceMatrixClient


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_distance_client(request: Request) -> GoogleDistanceMatrixClient:
    """The process-wide Distance Matrix client created in the app lifespan."""
    return request.app.state.distance_client


def get_route_provider(
    client: GoogleDistanceMatrixClient = Depends(get_distance_client),
) -> RouteDistanceProvider:
    return client


def get_resolver(
    provider: RouteDistanceProvider = Depends(get_route_provider),
) -> DistanceResolver:
    return DistanceResolver(
        provider,
        timeout_seconds=settings.distance_lookup_timeout_seconds,
        mode=TravelMode(settings.default_travel_mode),
    )


def get_meal_time() -> MealTime:
    return meal_time()
