"""Generated workout plan ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from fitcoach.db.base import Base
from fitcoach.db.types import JSONBCompat, UTCDateTime


class WorkoutPlan(Base):
    __tablename__ = "workout_plans"
    __table_args__ = (
        Index("ix_workout_plans_user_id", "user_id"),
        # Advisory only: several plans may share a dedupe key.
        Index("ix_workout_plans_dedupe_key", "dedupe_key"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(String(length=128), nullable=False)
    name = Column(Text, nullable=False)
    type = Column(String(length=64), nullable=False)
    difficulty = Column(String(length=20), nullable=False)
    estimated_duration = Column(Integer, nullable=False)
    equipment = Column(JSONBCompat, nullable=False, default=list)
    # Full validated plan body (exercises, warm-up, tips, ...).
    plan = Column(JSONBCompat, nullable=False)
    source = Column(String(length=32), nullable=False)
    model = Column(String(length=128), nullable=True)
    usage = Column(JSONBCompat, nullable=True)
    personalized_for = Column(JSONBCompat, nullable=True)
    progression_level = Column(Integer, nullable=True)
    profile_digest = Column(String(length=64), nullable=True)
    dedupe_key = Column(String(length=128), nullable=False)
    status = Column(String(length=32), nullable=False, default="ready")
    adapted_from = Column(
        UUID(as_uuid=True),
        ForeignKey("workout_plans.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at = Column(UTCDateTime, nullable=False, server_default=func.now())
