"""AI workout generation endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from fitcoach.api.deps import get_current_user_id, get_model_client
from fitcoach.api.schemas.workout import (
    Adaptations,
    AdaptiveWorkoutRequest,
    AdaptiveWorkoutResponse,
    WorkoutGenerationRequest,
    WorkoutGenerationResponse,
    WorkoutPlanListResponse,
)
from fitcoach.api.schemas.workout_plan import WorkoutPlanPayload
from fitcoach.db.deps import get_db
from fitcoach.observability.metrics import record_outcome
from fitcoach.observability.tracing import annotate, trace
from fitcoach.services import plan_store
from fitcoach.services.llm_client import WorkoutModelClient
from fitcoach.services.workout_generator import generate_adaptive_workout, generate_workout

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workouts", tags=["workouts"])


@router.post("/generate", response_model=WorkoutGenerationResponse)
def generate_workout_endpoint(
    payload: WorkoutGenerationRequest,
    http_request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    model_client: WorkoutModelClient = Depends(get_model_client),
) -> WorkoutGenerationResponse:
    """Generate a personalized single-session workout plan."""
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"route": "/workouts/generate", "workout_type": payload.workout_type}

    with record_outcome("workout.generate", {"user_id": user_id}) as outcome:
        with trace("workout.generate", metadata=metadata, user_id=user_id, request_id=request_id) as generate_trace:
            result = _run_pipeline(
                db,
                lambda: generate_workout(db, user_id=user_id, request=payload, model_client=model_client),
            )
            annotate(generate_trace, plan_id=str(result.record.id), progression_level=result.progression_level)
        outcome["progression_level"] = result.progression_level

    return WorkoutGenerationResponse(
        workout_plan=plan_store.serialize_plan(result.record),
        dedupe_key=result.dedupe_key,
    )


@router.post("/adaptive", response_model=AdaptiveWorkoutResponse)
def generate_adaptive_workout_endpoint(
    payload: AdaptiveWorkoutRequest,
    http_request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    model_client: WorkoutModelClient = Depends(get_model_client),
) -> AdaptiveWorkoutResponse:
    """Regenerate a workout from feedback on a previously generated plan."""
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {
        "route": "/workouts/adaptive",
        "previous_workout_id": payload.previous_workout_id,
        "difficulty_feedback": payload.difficulty_feedback,
    }

    with record_outcome("workout.adaptive", {"user_id": user_id}) as outcome:
        with trace("workout.adaptive", metadata=metadata, user_id=user_id, request_id=request_id) as adaptive_trace:
            result = _run_pipeline(
                db,
                lambda: generate_adaptive_workout(db, user_id=user_id, request=payload, model_client=model_client),
            )
            annotate(adaptive_trace, plan_id=str(result.record.id), progression_level=result.progression_level)
        outcome["progression_level"] = result.progression_level

    return AdaptiveWorkoutResponse(
        workout_plan=plan_store.serialize_plan(result.record),
        dedupe_key=result.dedupe_key,
        adaptations=Adaptations(
            new_progression_level=result.progression_level,
            reason=payload.difficulty_feedback,
        ),
    )


@router.get("/plans", response_model=WorkoutPlanListResponse)
def list_workout_plans(
    dedupe_key: str | None = Query(default=None, max_length=128),
    limit: int = Query(default=20, ge=1, le=50),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> WorkoutPlanListResponse:
    """List the caller's plans, newest first, optionally matching a dedupe key."""
    records = plan_store.list_plans(db, user_id, dedupe_key=dedupe_key, limit=limit)
    return WorkoutPlanListResponse(plans=[plan_store.serialize_plan(record) for record in records])


@router.get("/plans/{plan_id}", response_model=WorkoutPlanPayload)
def get_workout_plan(
    plan_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> WorkoutPlanPayload:
    return plan_store.serialize_plan(plan_store.get_owned_plan(db, user_id, plan_id))


def _run_pipeline(db: Session, run):
    try:
        return run()
    except HTTPException:
        db.rollback()
        raise
    except Exception as exc:
        logger.exception("Unexpected error while generating workout")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unexpected error while generating workout",
        ) from exc
