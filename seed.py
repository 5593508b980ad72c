"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 8 sample students (3 of them online dashers)
  - 5 sample orders, one per servery, priced from great-circle distance
"""

import asyncio
from datetime import datetime, timezone

from sqlalchemy import text

from src.domain.distance import SERVERY_COORDINATES, haversine_miles
from src.domain.entities import CartItem, GeoPoint
from src.domain.enums import DriverStatus, MealTime, OrderStatus, Provenance, ServeryName
from src.domain.menu import MENU
from src.domain.pricing import cart_subtotal, delivery_price, to_cents
from src.infrastructure.database import async_session_factory, engine
from src.infrastructure.models import OrderModel, UserModel


USERS = [
    {"first_name": "Ava", "last_name": "Nguyen", "email": "ava.nguyen@rice.edu", "phone": "713-555-0101", "dasher": False},
    {"first_name": "Liam", "last_name": "Patel", "email": "liam.patel@rice.edu", "phone": "713-555-0102", "dasher": False},
    {"first_name": "Maya", "last_name": "Okafor", "email": "maya.okafor@rice.edu", "phone": None, "dasher": False},
    {"first_name": "Noah", "last_name": "Garcia", "email": "noah.garcia@rice.edu", "phone": "713-555-0104", "dasher": False},
    {"first_name": "Zoe", "last_name": "Kim", "email": "zoe.kim@rice.edu", "phone": "713-555-0105", "dasher": False},
    {"first_name": "Ethan", "last_name": "Brooks", "email": "ethan.brooks@rice.edu", "phone": "713-555-0106", "dasher": True},
    {"first_name": "Sofia", "last_name": "Rossi", "email": "sofia.rossi@rice.edu", "phone": "713-555-0107", "dasher": True},
    {"first_name": "Jonah", "last_name": "Meyer", "email": "jonah.meyer@rice.edu", "phone": "713-555-0108", "dasher": True},
]

# Residential colleges near each servery
ORDERS = [
    {"servery": ServeryName.BAKER, "to": "Lovett College, Room 205", "at": (29.7165, -95.3990)},
    {"servery": ServeryName.NORTH, "to": "Wiess College, Room 312", "at": (29.7200, -95.3985)},
    {"servery": ServeryName.SEIBEL, "to": "Brown College, Room 108", "at": (29.7215, -95.3965)},
    {"servery": ServeryName.SOUTH, "to": "Martel College, Room 401", "at": (29.7218, -95.3975)},
    {"servery": ServeryName.WEST, "to": "Jones College, Room 156", "at": (29.7210, -95.3960)},
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM users"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Users ─────────────────────────────────────────────────────
        user_models = []
        for u in USERS:
            m = UserModel(
                first_name=u["first_name"],
                last_name=u["last_name"],
                email=u["email"],
                phone_number=u["phone"],
                is_delivery_driver=u["dasher"],
                driver_status=DriverStatus.ONLINE if u["dasher"] else DriverStatus.OFFLINE,
            )
            session.add(m)
            user_models.append(m)
        await session.flush()
        print(f"  Created {len(user_models)} users")

        # ── Orders ────────────────────────────────────────────────────
        menu = MENU[MealTime.LUNCH_DINNER]
        now = datetime.now(timezone.utc)
        for i, o in enumerate(ORDERS):
            dest = GeoPoint(*o["at"])
            miles = haversine_miles(SERVERY_COORDINATES[o["servery"].value], dest)
            fee = delivery_price(miles)
            picks = [menu[i % len(menu)], menu[(i + 3) % len(menu)]]
            cart = [CartItem(m.id, m.name, m.category, 1, m.price) for m in picks]
            subtotal = cart_subtotal(cart)
            session.add(
                OrderModel(
                    customer_id=user_models[i].id,
                    servery_name=o["servery"],
                    order_items={
                        "items": [
                            {
                                "id": c.id,
                                "name": c.name,
                                "category": c.category,
                                "quantity": c.quantity,
                                "price": str(c.price),
                            }
                            for c in cart
                        ],
                        "meal_time": MealTime.LUNCH_DINNER.value,
                        "timestamp": now.isoformat(),
                    },
                    status=OrderStatus.PENDING,
                    items_subtotal=subtotal,
                    delivery_fee=fee,
                    delivery_miles=miles,
                    distance_provenance=Provenance.GREAT_CIRCLE_FALLBACK.value,
                    total_amount=to_cents(subtotal + fee),
                    delivery_location=o["to"],
                    delivery_lat=dest.lat,
                    delivery_lng=dest.lng,
                    order_timestamp=now,
                )
            )
        await session.flush()
        print(f"  Created {len(ORDERS)} orders")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
