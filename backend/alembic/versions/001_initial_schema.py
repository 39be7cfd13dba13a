"""Initial schema: cars, bookings, feedback with overlap and owner indexes.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Cars table
    op.create_table(
        "cars",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("model", sa.String(255), nullable=False),
        sa.Column("daily_price", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("description", sa.String(2000), nullable=True),
        sa.Column("branch", sa.String(10), nullable=True),
        sa.Column("owner_email", sa.String(255), nullable=False),
        sa.Column("booking_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("daily_price >= 0", name="check_car_daily_price_non_negative"),
        sa.CheckConstraint("booking_count >= 0", name="check_car_booking_count_non_negative"),
    )
    op.create_index("ix_cars_id", "cars", ["id"])
    op.create_index("ix_cars_owner_email", "cars", ["owner_email"])
    # Search filters by pickup branch
    op.create_index("ix_cars_branch", "cars", ["branch"])

    # Bookings table
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("car_id", sa.Integer(), sa.ForeignKey("cars.id", ondelete="CASCADE"), nullable=False),
        sa.Column("owner_email", sa.String(255), nullable=False),
        sa.Column("car_model", sa.String(255), nullable=False, server_default=sa.text("''")),
        sa.Column("car_image", sa.String(1000), nullable=False, server_default=sa.text("''")),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total_price", sa.Float(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("end_date >= start_date", name="check_booking_range_ordered"),
        sa.CheckConstraint("total_price >= 0", name="check_booking_total_price_non_negative"),
        sa.CheckConstraint("status IN ('pending', 'confirmed', 'cancelled')", name="check_booking_status"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    # Overlap query: car_id = ? AND start_date <= ? AND end_date >= ?
    op.create_index("ix_bookings_car_range", "bookings", ["car_id", "start_date", "end_date"])
    # "My bookings" listing, newest first
    op.create_index("ix_bookings_owner_created", "bookings", ["owner_email", "created_at"])

    # Feedback table
    op.create_table(
        "feedback",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("car_id", sa.Integer(), sa.ForeignKey("cars.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_email", sa.String(255), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.String(2000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="check_feedback_rating_range"),
    )
    op.create_index("ix_feedback_id", "feedback", ["id"])
    op.create_index("ix_feedback_car_id", "feedback", ["car_id"])


def downgrade() -> None:
    op.drop_table("feedback")
    op.drop_table("bookings")
    op.drop_table("cars")
