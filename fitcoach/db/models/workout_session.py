"""Workout session history ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from fitcoach.db.base import Base
from fitcoach.db.types import JSONBCompat, UTCDateTime


class WorkoutSession(Base):
    __tablename__ = "workout_sessions"
    __table_args__ = (Index("ix_workout_sessions_user_start", "user_id", "start_time"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(String(length=128), nullable=False)
    workout_plan_id = Column(UUID(as_uuid=True), nullable=True)
    workout_type = Column(String(length=64), nullable=True)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=True)
    status = Column(String(length=32), nullable=False, default="completed")
    rating = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=True)
    # List of {"exercise_id": ..., "sets": [...], "skipped": bool}
    completed_exercises = Column(JSONBCompat, nullable=False, default=list)
    created_at = Column(UTCDateTime, nullable=False, server_default=func.now())
