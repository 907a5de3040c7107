"""
Player model (squad module). Read here only for dashboard listings.
"""

from datetime import date

from sqlalchemy import Column, Integer, String, Boolean, Date

from club_ledger.db.base import Base, TimestampMixin


class Player(Base, TimestampMixin):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    jersey_number = Column(Integer, nullable=False, unique=True)
    position = Column(String(20), nullable=False)  # goalkeeper, defender, midfielder, forward
    age = Column(Integer, nullable=False)
    goals = Column(Integer, nullable=False, default=0)
    assists = Column(Integer, nullable=False, default=0)
    appearances = Column(Integer, nullable=False, default=0)
    yellow_cards = Column(Integer, nullable=False, default=0)
    red_cards = Column(Integer, nullable=False, default=0)
    date_joined = Column(Date, nullable=True, default=date.today)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Player(id={self.id}, name={self.name}, number={self.jersey_number})>"
