"""
Match model. Owned by the fixtures module; the ledger only reads it to check
that a booking targets an existing match and to label reports.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, Index
from sqlalchemy.orm import relationship

from club_ledger.db.base import Base, TimestampMixin


class Match(Base, TimestampMixin):
    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, index=True)
    opponent = Column(String(100), nullable=False)
    match_date = Column(DateTime(timezone=True), nullable=False)
    venue = Column(String(10), nullable=False)  # home, away
    competition = Column(String(20), nullable=False)  # league, cup, friendly
    status = Column(String(20), nullable=False, default="upcoming")  # upcoming, live, completed, cancelled
    home_score = Column(Integer, nullable=True)
    away_score = Column(Integer, nullable=True)
    summary = Column(Text, nullable=True)
    attendance = Column(Integer, nullable=True)

    bookings = relationship(
        "Booking",
        back_populates="match",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_matches_status", "status"),
        Index("ix_matches_match_date", "match_date"),
    )

    def __repr__(self) -> str:
        return f"<Match(id={self.id}, opponent={self.opponent}, date={self.match_date})>"
