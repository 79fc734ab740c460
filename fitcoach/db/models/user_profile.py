"""Canonical user profile ORM model."""
from __future__ import annotations

from sqlalchemy import Column, String, func

from fitcoach.db.base import Base
from fitcoach.db.types import JSONBCompat, UTCDateTime


class UserProfile(Base):
    __tablename__ = "user_profiles"

    user_id = Column(String(length=128), primary_key=True)
    fitness_level = Column(String(length=20), nullable=False)
    fitness_goals = Column(JSONBCompat, nullable=False, default=list)
    available_equipment = Column(JSONBCompat, nullable=False, default=list)
    time_commitment = Column(JSONBCompat, nullable=False)
    preferences = Column(JSONBCompat, nullable=False)
    # Derived sub-record, recomputed on every write.
    system = Column(JSONBCompat, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, server_default=func.now())
    updated_at = Column(UTCDateTime, nullable=False, server_default=func.now(), onupdate=func.now())
