"""Ledger schema: matches, players, bookings, revenue, settings + default settings.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DEFAULT_SETTINGS = [
    ("ticket_price_vip", "20"),
    ("ticket_price_regular", "10"),
    ("ticket_price_student", "5"),
    ("membership_fee", "50"),
    ("club_name", "FC Inkiwanjani"),
    ("club_slogan", "The Pride of Mile 46"),
    ("club_nickname", "The Wolves"),
    ("club_location", "Mile 46, Nakuru County"),
    ("club_email", "info@fcinkiwanjani.com"),
    ("club_phone", "+254 700 000 000"),
]


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "matches",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("opponent", sa.String(100), nullable=False),
        sa.Column("match_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("venue", sa.String(10), nullable=False),
        sa.Column("competition", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'upcoming'")),
        sa.Column("home_score", sa.Integer(), nullable=True),
        sa.Column("away_score", sa.Integer(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("attendance", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_matches_id", "matches", ["id"])
    op.create_index("ix_matches_status", "matches", ["status"])
    # Revenue-by-match and upcoming fixtures both sort on match_date
    op.create_index("ix_matches_match_date", "matches", ["match_date"])

    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("jersey_number", sa.Integer(), nullable=False, unique=True),
        sa.Column("position", sa.String(20), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("goals", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("assists", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("appearances", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("yellow_cards", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("red_cards", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("date_joined", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_players_id", "players", ["id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "match_id",
            sa.Integer(),
            sa.ForeignKey("matches.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("customer_name", sa.String(100), nullable=False),
        sa.Column("customer_email", sa.String(100), nullable=False),
        sa.Column("customer_phone", sa.String(20), nullable=False),
        sa.Column("ticket_type", sa.String(10), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("booking_reference", sa.String(50), nullable=False),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        *_timestamps(),
        # The booking service retries inserts only when this constraint fires
        sa.UniqueConstraint("booking_reference", name="uq_bookings_booking_reference"),
        sa.CheckConstraint("quantity >= 1 AND quantity <= 50", name="check_booking_quantity_range"),
        sa.CheckConstraint("ticket_type IN ('vip', 'regular', 'student')", name="check_booking_ticket_type"),
        sa.CheckConstraint(
            "payment_status IN ('pending', 'paid', 'cancelled')",
            name="check_booking_payment_status",
        ),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_match_id", "bookings", ["match_id"])
    op.create_index("ix_bookings_customer_email", "bookings", ["customer_email"])
    op.create_index("ix_bookings_payment_status", "bookings", ["payment_status"])

    op.create_table(
        "revenue",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("source", sa.String(20), nullable=False),
        sa.Column("amount", sa.Numeric(12, 4), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("amount > 0", name="check_revenue_amount_positive"),
        sa.CheckConstraint(
            "source IN ('tickets', 'merchandise', 'membership', 'sponsorship', 'other')",
            name="check_revenue_source",
        ),
    )
    op.create_index("ix_revenue_id", "revenue", ["id"])
    op.create_index("ix_revenue_source", "revenue", ["source"])
    op.create_index("ix_revenue_transaction_date", "revenue", ["transaction_date"])

    settings_table = op.create_table(
        "settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("setting_key", sa.String(100), nullable=False, unique=True),
        sa.Column("setting_value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_settings_id", "settings", ["id"])

    op.bulk_insert(
        settings_table,
        [{"setting_key": k, "setting_value": v} for k, v in DEFAULT_SETTINGS],
    )


def downgrade() -> None:
    op.drop_table("settings")
    op.drop_table("revenue")
    op.drop_table("bookings")
    op.drop_table("players")
    op.drop_table("matches")
