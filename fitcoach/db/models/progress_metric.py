"""Body progress metric ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, Float, Index, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from fitcoach.db.base import Base
from fitcoach.db.types import JSONBCompat, UTCDateTime


class ProgressMetric(Base):
    __tablename__ = "progress_metrics"
    __table_args__ = (Index("ix_progress_metrics_user_date", "user_id", "date"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(String(length=128), nullable=False)
    date = Column(UTCDateTime, nullable=False)
    weight = Column(Float, nullable=True)
    body_fat_percentage = Column(Float, nullable=True)
    measurements = Column(JSONBCompat, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, server_default=func.now())
