"""Initial schema: users and orders.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column(
            "is_delivery_driver", sa.Boolean, default=False, nullable=False
        ),
        sa.Column(
            "driver_status",
            sa.Enum("Online", "Offline", name="driver_status"),
            default="Offline",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    # ── orders ────────────────────────────────────────────────────────
    op.create_table(
        "orders",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column(
            "customer_id",
            sa.String(36),
            sa.ForeignKey("users.id", name="fk_orders_customer_id_users"),
            nullable=False,
        ),
        sa.Column(
            "delivery_person_id",
            sa.String(36),
            sa.ForeignKey("users.id", name="fk_orders_delivery_person_id_users"),
            nullable=True,
        ),
        sa.Column(
            "servery_name",
            sa.Enum(
                "Baker", "North", "Seibel", "South", "West", name="servery_name"
            ),
            nullable=False,
        ),
        sa.Column("order_items", sa.JSON, nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "Pending",
                "Accepted",
                "Delivered",
                "Cancelled",
                name="order_status",
            ),
            default="Pending",
            nullable=False,
        ),
        sa.Column(
            "payment_status",
            sa.Enum("Pending", "Paid", "Refunded", name="payment_status"),
            default="Pending",
            nullable=False,
        ),
        sa.Column("items_subtotal", sa.Numeric(6, 2), nullable=False),
        sa.Column("delivery_fee", sa.Numeric(6, 2), nullable=False),
        sa.Column("delivery_miles", sa.Float, nullable=False),
        sa.Column("distance_provenance", sa.String(32), nullable=False),
        sa.Column("total_amount", sa.Numeric(6, 2), nullable=False),
        sa.Column("delivery_location", sa.String(255), nullable=False),
        sa.Column("delivery_lat", sa.Float, nullable=False),
        sa.Column("delivery_lng", sa.Float, nullable=False),
        sa.Column(
            "order_timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("delivery_rating", sa.Integer, nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_orders"),
    )
    op.create_index("idx_orders_status", "orders", ["status"])
    op.create_index("idx_orders_customer", "orders", ["customer_id"])
    op.create_index(
        "idx_orders_delivery_person", "orders", ["delivery_person_id"]
    )
    op.create_index("idx_orders_timestamp", "orders", ["order_timestamp"])


def downgrade() -> None:
    op.drop_table("orders")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS payment_status")
    op.execute("DROP TYPE IF EXISTS order_status")
    op.execute("DROP TYPE IF EXISTS servery_name")
    op.execute("DROP TYPE IF EXISTS driver_status")
