"""
Booking model: a ticket purchase for one match.

Key design decisions:
- booking_reference is unique at the DB level; the constraint name contains the
  column name so the service can tell a reference collision from any other
  integrity error and retry only the former
- total_amount is written by the service from configured prices, never by clients
- Status changes are the only mutation after creation
"""

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, UniqueConstraint, CheckConstraint, Index
from sqlalchemy.orm import relationship

from club_ledger.db.base import Base, TimestampMixin

TICKET_TYPES = ("vip", "regular", "student")
PAYMENT_STATUSES = ("pending", "paid", "cancelled")


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    match_id = Column(Integer, ForeignKey("matches.id", ondelete="CASCADE"), nullable=False)
    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(100), nullable=False)
    customer_phone = Column(String(20), nullable=False)
    ticket_type = Column(String(10), nullable=False)
    quantity = Column(Integer, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    booking_reference = Column(String(50), nullable=False)
    payment_status = Column(String(20), nullable=False, default="pending")

    match = relationship("Match", back_populates="bookings", lazy="joined")

    __table_args__ = (
        UniqueConstraint("booking_reference", name="uq_bookings_booking_reference"),
        CheckConstraint("quantity >= 1 AND quantity <= 50", name="check_booking_quantity_range"),
        CheckConstraint("ticket_type IN ('vip', 'regular', 'student')", name="check_booking_ticket_type"),
        CheckConstraint(
            "payment_status IN ('pending', 'paid', 'cancelled')",
            name="check_booking_payment_status",
        ),
        Index("ix_bookings_match_id", "match_id"),
        Index("ix_bookings_customer_email", "customer_email"),
        Index("ix_bookings_payment_status", "payment_status"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, ref={self.booking_reference}, match={self.match_id}, status={self.payment_status})>"
