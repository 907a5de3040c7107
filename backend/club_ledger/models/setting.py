"""
Key/value configuration row. setting_key is case-sensitive and unique.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, func

from club_ledger.db.base import Base


class Setting(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, index=True)
    setting_key = Column(String(100), nullable=False, unique=True)
    setting_value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Setting({self.setting_key}={self.setting_value!r})>"
