"""Create schema - accounts, supply, orders, deliveries, scoring, payments

Revision ID: 002
Revises: 001
Create Date: 2026-10-17

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# --- Enum types ---
user_role_enum = sa.Enum("FARMER", "BUYER", "ADMIN", name="userrole", create_type=False)
user_status_enum = sa.Enum(
    "APPLIED", "PENDING", "ACTIVE", "PROBATIONARY", "SUSPENDED", "BLOCKED",
    name="userstatus", create_type=False,
)
buyer_type_enum = sa.Enum(
    "RESTAURANT", "HOTEL", "CATERER", "INDIVIDUAL", name="buyertype", create_type=False
)
order_type_enum = sa.Enum("ONE_TIME", "STANDING", name="ordertype", create_type=False)
order_status_enum = sa.Enum(
    "PENDING", "APPROVED", "ALLOCATION", "DELIVERED", "REJECTED", "FAILED",
    name="orderstatus", create_type=False,
)
assignment_status_enum = sa.Enum(
    "PENDING", "DELIVERED", "FAILED", name="assignmentstatus", create_type=False
)
quality_result_enum = sa.Enum("PASS", "PARTIAL", "FAIL", name="qualityresult", create_type=False)
performance_tier_enum = sa.Enum(
    "PROBATIONARY", "STANDARD", "PREFERRED", name="performancetier", create_type=False
)
payment_status_enum = sa.Enum(
    "NOT_PAID", "PARTIALLY_PAID", "PAID", name="paymentstatus", create_type=False
)
payment_method_enum = sa.Enum(
    "BANK_TRANSFER", "MOBILE_MONEY", "CASH", "CHECK", name="paymentmethod", create_type=False
)

ALL_ENUMS = (
    user_role_enum,
    user_status_enum,
    buyer_type_enum,
    order_type_enum,
    order_status_enum,
    assignment_status_enum,
    quality_result_enum,
    performance_tier_enum,
    payment_status_enum,
    payment_method_enum,
)


def _id() -> sa.Column:
    return sa.Column(
        "id", UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), primary_key=True
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def _fk(column: str, target: str, ondelete: str, nullable: bool = True) -> sa.Column:
    return sa.Column(
        column, UUID(as_uuid=True), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable
    )


def upgrade() -> None:
    # Create enum types first
    for enum_type in ALL_ENUMS:
        enum_type.create(op.get_bind(), checkfirst=True)

    # 1. users
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("phone", sa.String(20), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("status", user_status_enum, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_role_status", "users", ["role", "status"])

    # 2. farmers
    op.create_table(
        "farmers",
        _id(),
        sa.Column(
            "user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        sa.Column("full_name", sa.String(100), nullable=False),
        sa.Column("farm_name", sa.String(100), nullable=True),
        sa.Column("region", sa.String(100), nullable=False),
        sa.Column("town", sa.String(100), nullable=False),
        sa.Column("weekly_capacity_min", sa.Integer, nullable=False),
        sa.Column("weekly_capacity_max", sa.Integer, nullable=False),
        sa.Column("produce_category", sa.String(50), nullable=False),
        sa.Column("feeding_method", sa.String(100), nullable=True),
        sa.Column("verification_date", sa.DateTime(timezone=True), nullable=True),
        _fk("verification_admin_id", "users.id", "SET NULL"),
        *_timestamps(),
    )
    op.create_index("ix_farmers_region", "farmers", ["region"])
    op.create_index("ix_farmers_produce_category", "farmers", ["produce_category"])

    # 3. farmer_applications
    op.create_table(
        "farmer_applications",
        _id(),
        sa.Column(
            "farmer_id", UUID(as_uuid=True), sa.ForeignKey("farmers.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        sa.Column("status", user_status_enum, nullable=False),
        sa.Column("terms_accepted", sa.Boolean, server_default="false", nullable=False),
        sa.Column("terms_accepted_at", sa.DateTime(timezone=True), nullable=True),
        _fk("reviewed_by", "users.id", "SET NULL"),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("admin_notes", sa.Text, nullable=True),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_farmer_applications_status", "farmer_applications", ["status"])

    # 4. buyers
    op.create_table(
        "buyers",
        _id(),
        sa.Column(
            "user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        sa.Column("full_name", sa.String(100), nullable=False),
        sa.Column("business_name", sa.String(100), nullable=True),
        sa.Column("buyer_type", buyer_type_enum, nullable=False),
        sa.Column("contact_person", sa.String(100), nullable=False),
        sa.Column("estimated_volume", sa.Integer, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_buyers_buyer_type", "buyers", ["buyer_type"])

    # 5. buyer_registrations
    op.create_table(
        "buyer_registrations",
        _id(),
        sa.Column(
            "buyer_id", UUID(as_uuid=True), sa.ForeignKey("buyers.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        sa.Column("status", user_status_enum, nullable=False),
        _fk("reviewed_by", "users.id", "SET NULL"),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("admin_notes", sa.Text, nullable=True),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_buyer_registrations_status", "buyer_registrations", ["status"])

    # 6. delivery_addresses
    op.create_table(
        "delivery_addresses",
        _id(),
        _fk("buyer_id", "buyers.id", "CASCADE", nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("landmark", sa.String(200), nullable=True),
        sa.Column("is_default", sa.Boolean, server_default="false", nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_delivery_addresses_buyer_id", "delivery_addresses", ["buyer_id"])

    # 7. weekly_availability
    op.create_table(
        "weekly_availability",
        _id(),
        _fk("farmer_id", "farmers.id", "CASCADE", nullable=False),
        sa.Column("week_start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("product_type", sa.String(100), nullable=False),
        sa.Column("quantity_available", sa.Integer, nullable=False),
        sa.Column("avg_weight", sa.Numeric(10, 2), nullable=True),
        sa.Column("ready_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("photo_url", sa.String(500), nullable=True),
        sa.Column("is_late", sa.Boolean, server_default="false", nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "farmer_id", "week_start_date", "product_type",
            name="uq_weekly_availability_farmer_week_product",
        ),
    )
    op.create_index("ix_weekly_availability_week_start_date", "weekly_availability", ["week_start_date"])

    # 8. orders
    op.create_table(
        "orders",
        _id(),
        _fk("buyer_id", "buyers.id", "CASCADE", nullable=False),
        sa.Column("product_type", sa.String(100), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("order_type", order_type_enum, nullable=False),
        sa.Column("delivery_date", sa.DateTime(timezone=True), nullable=False),
        _fk("delivery_address_id", "delivery_addresses.id", "RESTRICT", nullable=False),
        sa.Column("status", order_status_enum, server_default="PENDING", nullable=False),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        _fk("approved_by", "users.id", "SET NULL"),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_orders_buyer_id", "orders", ["buyer_id"])
    op.create_index("ix_orders_status", "orders", ["status"])
    op.create_index("ix_orders_delivery_date", "orders", ["delivery_date"])

    # 9. delivery_assignments
    op.create_table(
        "delivery_assignments",
        _id(),
        _fk("order_id", "orders.id", "CASCADE", nullable=False),
        _fk("farmer_id", "farmers.id", "CASCADE", nullable=False),
        sa.Column("assigned_quantity", sa.Integer, nullable=False),
        sa.Column("delivery_date", sa.DateTime(timezone=True), nullable=False),
        _fk("delivery_address_id", "delivery_addresses.id", "RESTRICT", nullable=False),
        sa.Column("status", assignment_status_enum, server_default="PENDING", nullable=False),
        sa.Column("quantity_delivered", sa.Integer, nullable=True),
        sa.Column("quality_result", quality_result_enum, nullable=True),
        sa.Column("confirmation_notes", sa.Text, nullable=True),
        _fk("confirmed_by", "users.id", "SET NULL"),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("assigned_quantity > 0", name="ck_delivery_assignments_assigned_positive"),
        sa.CheckConstraint(
            "quantity_delivered IS NULL OR quantity_delivered <= assigned_quantity",
            name="ck_delivery_assignments_delivered_le_assigned",
        ),
    )
    op.create_index("ix_delivery_assignments_order_id", "delivery_assignments", ["order_id"])
    op.create_index(
        "ix_delivery_assignments_farmer_status", "delivery_assignments", ["farmer_id", "status"]
    )

    # 10. farmer_performance
    op.create_table(
        "farmer_performance",
        _id(),
        sa.Column(
            "farmer_id", UUID(as_uuid=True), sa.ForeignKey("farmers.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("tier", performance_tier_enum, nullable=False),
        *_timestamps(),
    )

    # 11. farmer_performance_breakdown
    op.create_table(
        "farmer_performance_breakdown",
        _id(),
        sa.Column(
            "farmer_id", UUID(as_uuid=True), sa.ForeignKey("farmers.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        sa.Column("on_time_delivery_score", sa.Integer, server_default="0", nullable=False),
        sa.Column("quantity_accuracy_score", sa.Integer, server_default="0", nullable=False),
        sa.Column("quality_score", sa.Integer, server_default="0", nullable=False),
        sa.Column("availability_submission_score", sa.Integer, server_default="0", nullable=False),
        *_timestamps(),
    )

    # 12. farmer_performance_history (append-only)
    op.create_table(
        "farmer_performance_history",
        _id(),
        _fk("farmer_id", "farmers.id", "CASCADE", nullable=False),
        sa.Column("previous_score", sa.Integer, nullable=False),
        sa.Column("new_score", sa.Integer, nullable=False),
        sa.Column("previous_tier", performance_tier_enum, nullable=False),
        sa.Column("new_tier", performance_tier_enum, nullable=False),
        sa.Column("reason", sa.String(255), nullable=False),
        _fk("delivery_assignment_id", "delivery_assignments.id", "SET NULL"),
        _fk("created_by", "users.id", "SET NULL"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index(
        "ix_farmer_performance_history_farmer_created",
        "farmer_performance_history",
        ["farmer_id", "created_at"],
    )

    # 13. payments (append-only ledger)
    op.create_table(
        "payments",
        _id(),
        _fk("farmer_id", "farmers.id", "CASCADE", nullable=False),
        _fk("delivery_assignment_id", "delivery_assignments.id", "SET NULL"),
        sa.Column("amount_owed", sa.Numeric(12, 2), nullable=False),
        sa.Column("amount_paid", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_status", payment_status_enum, nullable=False),
        sa.Column("payment_method", payment_method_enum, nullable=False),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=False),
        _fk("recorded_by", "users.id", "SET NULL"),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_payments_farmer_id", "payments", ["farmer_id"])
    op.create_index("ix_payments_payment_date", "payments", ["payment_date"])


def downgrade() -> None:
    for table in (
        "payments",
        "farmer_performance_history",
        "farmer_performance_breakdown",
        "farmer_performance",
        "delivery_assignments",
        "orders",
        "weekly_availability",
        "delivery_addresses",
        "buyer_registrations",
        "buyers",
        "farmer_applications",
        "farmers",
        "users",
    ):
        op.drop_table(table)

    for enum_type in reversed(ALL_ENUMS):
        enum_type.drop(op.get_bind(), checkfirst=True)
