"""
SQLAlchemy ORM models  (maps to PostgreSQL).

Tables
------
* ``users``   -- students; some of them are also delivery drivers (dashers)
* ``orders``  -- servery orders from placement to delivery

Indexes
-------
* **B-Tree** on ``status``, ``customer_id``, ``delivery_person_id`` and
  ``order_timestamp`` for the customer history and the dasher feed.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from src.domain.enums import DriverStatus, OrderStatus, PaymentStatus, ServeryName


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum(enum_cls, name: str) -> Enum:
    # Persist the display values ("Pending"), not the member names.
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
    )


class UserModel(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone_number = Column(String(20), nullable=True)
    password_hash = Column(String(255), nullable=True)
    is_delivery_driver = Column(Boolean, default=False, nullable=False)
    driver_status = Column(
        _enum(DriverStatus, "driver_status"), default=DriverStatus.OFFLINE
    )
    created_at = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_new_id)
    customer_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    delivery_person_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    servery_name = Column(_enum(ServeryName, "servery_name"), nullable=False)

    # {"items": [...], "meal_time": "...", "timestamp": "..."}
    order_items = Column(JSON, nullable=False)

    status = Column(
        _enum(OrderStatus, "order_status"),
        default=OrderStatus.PENDING,
        nullable=False,
    )
    payment_status = Column(
        _enum(PaymentStatus, "payment_status"),
        default=PaymentStatus.PENDING,
        nullable=False,
    )

    items_subtotal = Column(Numeric(6, 2), nullable=False)
    delivery_fee = Column(Numeric(6, 2), nullable=False)
    delivery_miles = Column(Float, nullable=False)
    distance_provenance = Column(String(32), nullable=False)
    total_amount = Column(Numeric(6, 2), nullable=False)

    delivery_location = Column(String(255), nullable=False)
    delivery_lat = Column(Float, nullable=False)
    delivery_lng = Column(Float, nullable=False)

    order_timestamp = Column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
    )
    delivery_rating = Column(Integer, nullable=True)

    customer = relationship("UserModel", foreign_keys=[customer_id], lazy="joined")

    __table_args__ = (
        Index("idx_orders_status", "status"),
        Index("idx_orders_customer", "customer_id"),
        Index("idx_orders_delivery_person", "delivery_person_id"),
        Index("idx_orders_timestamp", "order_timestamp"),
    )
