"""Recent session and progress-metric sampling for personalization context."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from fitcoach.core.config import settings
from fitcoach.db.models.progress_metric import ProgressMetric
from fitcoach.db.models.workout_session import WorkoutSession


@dataclass
class SessionSample:
    type: Optional[str]
    completed_at: Optional[datetime]
    rating: Optional[float]
    feedback: Optional[str]
    exercises: List[str] = field(default_factory=list)
    duration: Optional[int] = None

    def to_prompt_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "rating": self.rating,
            "feedback": self.feedback,
            "exercises": list(self.exercises),
            "duration": self.duration,
        }


@dataclass
class HistorySample:
    sessions: List[SessionSample] = field(default_factory=list)
    progress: List[Dict[str, Any]] = field(default_factory=list)


def sample_history(
    db: Session,
    user_id: str,
    *,
    session_limit: Optional[int] = None,
    progress_limit: Optional[int] = None,
) -> HistorySample:
    """Read the newest sessions and progress metrics for a user.

    Both reads are plain snapshots; an empty history is a valid result.
    """
    session_limit = session_limit or settings.history_sample_limit
    progress_limit = progress_limit or settings.progress_sample_limit

    session_rows = (
        db.query(WorkoutSession)
        .filter(WorkoutSession.user_id == user_id)
        .order_by(desc(WorkoutSession.start_time))
        .limit(session_limit)
        .all()
    )
    metric_rows = (
        db.query(ProgressMetric)
        .filter(ProgressMetric.user_id == user_id)
        .order_by(desc(ProgressMetric.date))
        .limit(progress_limit)
        .all()
    )
    return HistorySample(
        sessions=[_project_session(row) for row in session_rows],
        progress=[_project_metric(row) for row in metric_rows],
    )


def session_duration_minutes(start: Optional[datetime], end: Optional[datetime]) -> Optional[int]:
    if start is None or end is None:
        return None
    return int(math.floor((end - start).total_seconds() / 60 + 0.5))


def _project_session(row: WorkoutSession) -> SessionSample:
    exercise_ids = [
        entry.get("exercise_id")
        for entry in row.completed_exercises or []
        if isinstance(entry, dict) and entry.get("exercise_id")
    ]
    return SessionSample(
        type=row.workout_type,
        completed_at=row.end_time,
        rating=row.rating,
        feedback=row.feedback,
        exercises=exercise_ids,
        duration=session_duration_minutes(row.start_time, row.end_time),
    )


def _project_metric(row: ProgressMetric) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"date": row.date.date().isoformat() if row.date else None}
    if row.weight is not None:
        payload["weight"] = row.weight
    if row.body_fat_percentage is not None:
        payload["body_fat_percentage"] = row.body_fat_percentage
    if row.measurements:
        payload["measurements"] = row.measurements
    if row.notes:
        payload["notes"] = row.notes
    return payload
