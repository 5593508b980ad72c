"""
FastAPI application factory.

* Registers routes for distance/quotes, orders, the dasher dashboard and admin.
* Opens / closes the shared Distance Matrix HTTP client via lifespan events.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import admin, dasher, distance, orders
from src.config import settings
from src.infrastructure.distance_matrix import GoogleDistanceMatrixClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the Distance Matrix client on startup; close it on shutdown."""
    app.state.distance_client = GoogleDistanceMatrixClient(settings.google_maps_api_key)
    if not settings.google_maps_api_key:
        logger.warning(
            "GOOGLE_MAPS_API_KEY not set; delivery distances will use "
            "great-circle estimates"
        )
    yield
    await app.state.distance_client.aclose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Campus Delivery API",
        description=(
            "Servery food ordering and peer delivery for campus students. "
            "Prices delivery by walking distance from the servery, with a "
            "great-circle fallback when routing is unavailable."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Routers
    app.include_router(distance.router, prefix="/api/v1")
    app.include_router(orders.router, prefix="/api/v1")
    app.include_router(dasher.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
