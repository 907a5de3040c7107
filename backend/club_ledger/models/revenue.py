"""
Manually recorded revenue (merchandise, sponsorship, membership, ...).

amount keeps four decimal places so reports can round an aggregate once
instead of summing values that were already rounded per row.
"""

from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, CheckConstraint, Index, func

from club_ledger.db.base import Base

REVENUE_SOURCES = ("tickets", "merchandise", "membership", "sponsorship", "other")


class RevenueEntry(Base):
    __tablename__ = "revenue"

    id = Column(Integer, primary_key=True, index=True)
    source = Column(String(20), nullable=False)
    amount = Column(Numeric(12, 4), nullable=False)
    description = Column(String(255), nullable=True)
    transaction_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("amount > 0", name="check_revenue_amount_positive"),
        CheckConstraint(
            "source IN ('tickets', 'merchandise', 'membership', 'sponsorship', 'other')",
            name="check_revenue_source",
        ),
        Index("ix_revenue_source", "source"),
        Index("ix_revenue_transaction_date", "transaction_date"),
    )

    def __repr__(self) -> str:
        return f"<RevenueEntry(id={self.id}, source={self.source}, amount={self.amount})>"
