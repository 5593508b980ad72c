"""
Admin / observability endpoints
===============================

GET /api/v1/admin/pending-orders -- unassigned Pending orders
GET /api/v1/admin/health         -- simple health check
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.api.middleware import limiter
from src.api.routes.orders import to_response
from src.api.schemas import HealthResponse, OrderResponse
from src.config import settings
from src.infrastructure.repositories import OrderRepository

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/pending-orders",
    response_model=list[OrderResponse],
    summary="List unassigned pending orders",
)
@limiter.limit(settings.rate_limit)
async def get_pending_orders(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    orders = await OrderRepository(db).get_pending()
    return [to_response(o) for o in orders]


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
