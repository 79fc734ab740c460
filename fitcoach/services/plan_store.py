"""Dedupe-key derivation and persistence of finished workout plans."""
from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fitcoach.api.schemas.workout_plan import WorkoutPlanDraft, WorkoutPlanPayload
from fitcoach.db.models.workout_plan import WorkoutPlan

logger = logging.getLogger(__name__)


def digest(value: Any) -> str:
    encoded = json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


def generation_dedupe_key(
    *,
    user_id: str,
    plan_type: str,
    minutes_per_session: int,
    progression_level: int,
    equipment: Iterable[str],
    profile_digest: Optional[str],
    idempotency_key: Optional[str] = None,
) -> str:
    """Caller key when supplied, otherwise a digest of the generation inputs."""
    if idempotency_key:
        return idempotency_key
    return digest(
        {
            "uid": user_id,
            "type": plan_type,
            "minutes": minutes_per_session,
            "level": progression_level,
            "equip": sorted(set(equipment)),
            "digest": profile_digest,
        }
    )


def adaptive_dedupe_key(*, user_id: str, adapted_from: str, progression_level: int, equipment: Iterable[str]) -> str:
    return digest(
        {
            "uid": user_id,
            "adapted_from": adapted_from,
            "level": progression_level,
            "equip": sorted(set(equipment)),
        }
    )


def save_plan(
    db: Session,
    *,
    user_id: str,
    plan: WorkoutPlanDraft,
    source: str,
    model: Optional[str],
    usage: Optional[Dict[str, Any]],
    personalized_for: Dict[str, Any],
    progression_level: int,
    profile_digest: Optional[str],
    dedupe_key: str,
    adapted_from: Optional[UUID] = None,
) -> WorkoutPlan:
    """Insert a new plan document; never updates an existing one."""
    body = plan.model_dump(mode="json", exclude_none=True)
    record = WorkoutPlan(
        user_id=user_id,
        name=plan.name,
        type=plan.type,
        difficulty=plan.difficulty,
        estimated_duration=plan.estimated_duration,
        equipment=list(plan.equipment),
        plan=body,
        source=source,
        model=model,
        usage=usage,
        personalized_for=personalized_for,
        progression_level=progression_level,
        profile_digest=profile_digest,
        dedupe_key=dedupe_key,
        status="ready",
        adapted_from=adapted_from,
        created_at=datetime.now(timezone.utc),
    )
    try:
        db.add(record)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to persist workout plan for %s", user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store workout plan",
        ) from exc
    db.refresh(record)
    return record


def get_owned_plan(db: Session, user_id: str, plan_id: str) -> WorkoutPlan:
    """Load a plan by id, enforcing that it belongs to ``user_id``."""
    try:
        key = UUID(str(plan_id))
    except ValueError:
        key = None
    record = db.get(WorkoutPlan, key) if key else None
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout plan not found")
    if record.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Workout plan does not belong to user")
    return record


def list_plans(db: Session, user_id: str, *, dedupe_key: Optional[str] = None, limit: int = 20) -> List[WorkoutPlan]:
    query = db.query(WorkoutPlan).filter(WorkoutPlan.user_id == user_id)
    if dedupe_key:
        query = query.filter(WorkoutPlan.dedupe_key == dedupe_key)
    return query.order_by(desc(WorkoutPlan.created_at)).limit(limit).all()


def serialize_plan(record: WorkoutPlan) -> WorkoutPlanPayload:
    body = dict(record.plan or {})
    body["equipment"] = list(record.equipment or [])
    return WorkoutPlanPayload(
        **body,
        id=str(record.id),
        ai_generated=True,
        personalized_for=dict(record.personalized_for or {}),
        source=record.source,
        model=record.model,
        progression_level=record.progression_level,
        profile_digest=record.profile_digest,
        dedupe_key=record.dedupe_key,
        status=record.status,
        adapted_from=str(record.adapted_from) if record.adapted_from else None,
        created_at=record.created_at.isoformat() if record.created_at else None,
    )
