"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import OrderModel, UserModel
from src.config import settings
from src.domain.enums import DriverStatus, OrderStatus, ServeryName
from src.domain.quote import OrderDraft


class OrderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_order(
        self,
        *,
        customer_id: str,
        servery: ServeryName,
        draft: OrderDraft,
        meal_time: str,
        delivery_location: Optional[str] = None,
    ) -> OrderModel:
        """Persist a priced order draft as a Pending order."""
        now = datetime.now(timezone.utc)
        order = OrderModel(
            customer_id=customer_id,
            servery_name=servery,
            order_items={
                "items": [
                    {
                        "id": item.id,
                        "name": item.name,
                        "category": item.category,
                        "quantity": item.quantity,
                        "price": str(item.price),
                    }
                    for item in draft.items
                ],
                "meal_time": meal_time,
                "timestamp": now.isoformat(),
            },
            items_subtotal=draft.items_subtotal,
            delivery_fee=draft.delivery_fee,
            delivery_miles=draft.distance.miles,
            distance_provenance=draft.distance.provenance.value,
            total_amount=draft.total,
            delivery_location=delivery_location or settings.default_delivery_location,
            delivery_lat=draft.user_location.lat,
            delivery_lng=draft.user_location.lng,
            order_timestamp=now,
        )
        self.session.add(order)
        await self.session.flush()
        return order

    async def get_by_id(self, order_id: str) -> Optional[OrderModel]:
        return await self.session.get(OrderModel, order_id)

    async def list_for_customer(self, customer_id: str) -> list[OrderModel]:
        result = await self.session.execute(
            select(OrderModel)
            .where(OrderModel.customer_id == customer_id)
            .order_by(OrderModel.order_timestamp.desc())
        )
        return list(result.scalars().all())

    async def get_recent_with_customers(self, since: datetime) -> list[OrderModel]:
        """Orders placed at or after *since*, oldest first, customer eager-loaded."""
        result = await self.session.execute(
            select(OrderModel)
            .join(UserModel, OrderModel.customer_id == UserModel.id)
            .where(OrderModel.order_timestamp >= since)
            .order_by(OrderModel.order_timestamp)
        )
        return list(result.scalars().unique().all())

    async def get_pending(self) -> list[OrderModel]:
        result = await self.session.execute(
            select(OrderModel).where(
                and_(
                    OrderModel.status == OrderStatus.PENDING,
                    OrderModel.delivery_person_id.is_(None),
                )
            )
        )
        return list(result.scalars().unique().all())


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_user(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        phone_number: Optional[str] = None,
    ) -> UserModel:
        user = UserModel(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone_number=phone_number,
        )
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: str) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)

    async def set_driver_status(
        self, user: UserModel, status: DriverStatus
    ) -> UserModel:
        user.is_delivery_driver = True
        user.driver_status = status
        await self.session.flush()
        return user

    async def get_available_drivers(self) -> list[UserModel]:
        result = await self.session.execute(
            select(UserModel).where(
                and_(
                    UserModel.is_delivery_driver.is_(True),
                    UserModel.driver_status == DriverStatus.ONLINE,
                )
            )
        )
        return list(result.scalars().all())
