"""Per-user, per-operation rate-limit record."""
from __future__ import annotations

from sqlalchemy import Column, Integer, String

from fitcoach.db.base import Base
from fitcoach.db.types import UTCDateTime


class RateLimit(Base):
    __tablename__ = "rate_limits"

    user_id = Column(String(length=128), primary_key=True)
    operation_key = Column(String(length=64), primary_key=True)
    last_call_at = Column(UTCDateTime, nullable=False)
    window_start = Column(UTCDateTime, nullable=False)
    count = Column(Integer, nullable=False, default=0)
