"""Workout generation pipelines.

Validated request -> rate limit -> profile -> history -> progression level ->
prompt -> model -> parse/validate -> equipment enforcement -> persist.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from fitcoach.api.schemas.profile import ProfileShape
from fitcoach.api.schemas.workout import AdaptiveWorkoutRequest, WorkoutGenerationRequest
from fitcoach.api.schemas.workout_plan import WorkoutPlanDraft
from fitcoach.db.models.workout_plan import WorkoutPlan
from fitcoach.services import plan_store, profile_service, prompt_builder
from fitcoach.services.equipment import enforce_plan_equipment
from fitcoach.services.history_sampler import sample_history
from fitcoach.services.llm_client import ModelCompletion, ModelInvocationError, WorkoutModelClient
from fitcoach.services.plan_parser import PlanParseError, parse_plan
from fitcoach.services.progression import (
    SessionFeedback,
    adaptive_level,
    baseline_level,
    frequent_exercises,
)
from fitcoach.services.rate_limiter import enforce_rate_limit

logger = logging.getLogger(__name__)

GENERATE_OPERATION = "generateWorkout"
ADAPTIVE_OPERATION = "generateAdaptiveWorkout"


@dataclass
class GenerationResult:
    record: WorkoutPlan
    dedupe_key: str
    progression_level: int


def generate_workout(
    db: Session,
    *,
    user_id: str,
    request: WorkoutGenerationRequest,
    model_client: WorkoutModelClient,
) -> GenerationResult:
    enforce_rate_limit(db, user_id, GENERATE_OPERATION)

    profile = profile_service.resolve_profile(db, user_id, request)
    history = sample_history(db, user_id)
    level = request.progression_level or baseline_level(history.sessions, profile.fitness_level)

    user_prompt = prompt_builder.build_plan_prompt(
        profile=profile,
        workout_type=request.workout_type,
        progression_level=level,
        focus_areas=profile_service.normalize_tags(request.focus_areas),
        history=history.sessions,
        progress=history.progress,
        frequent=frequent_exercises(history.sessions),
    )
    completion, plan = _invoke_and_parse(model_client, prompt_builder.build_messages(user_prompt))

    equipment = enforce_plan_equipment(plan.equipment, profile.available_equipment)
    plan = plan.model_copy(update={"equipment": equipment})

    digest = _profile_digest(profile)
    dedupe_key = plan_store.generation_dedupe_key(
        user_id=user_id,
        plan_type=plan.type,
        minutes_per_session=profile.time_commitment.minutes_per_session,
        progression_level=level,
        equipment=equipment,
        profile_digest=digest,
        idempotency_key=request.idempotency_key,
    )
    record = plan_store.save_plan(
        db,
        user_id=user_id,
        plan=plan,
        source="ai",
        model=completion.model,
        usage=completion.usage,
        personalized_for={
            "fitness_level": profile.fitness_level,
            "goals": list(profile.fitness_goals),
            "equipment": list(profile.available_equipment),
            "intensity_pref": profile.preferences.intensity,
            "progression_level": level,
        },
        progression_level=level,
        profile_digest=digest,
        dedupe_key=dedupe_key,
    )
    logger.info("Workout generated for %s (plan=%s, level=%s, model=%s)", user_id, record.id, level, completion.model)
    return GenerationResult(record=record, dedupe_key=dedupe_key, progression_level=level)


def generate_adaptive_workout(
    db: Session,
    *,
    user_id: str,
    request: AdaptiveWorkoutRequest,
    model_client: WorkoutModelClient,
) -> GenerationResult:
    enforce_rate_limit(db, user_id, ADAPTIVE_OPERATION)

    previous = plan_store.get_owned_plan(db, user_id, request.previous_workout_id)
    profile = profile_service.read_canonical_profile(db, user_id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_412_PRECONDITION_FAILED,
            detail="Profile not found. Complete onboarding.",
        )

    feedback = SessionFeedback(
        performance_rating=request.performance_rating,
        completion_rate=request.completion_rate,
        difficulty_feedback=request.difficulty_feedback,
        time_actual=request.time_actual,
    )
    training_load = profile.system.training_load_index if profile.system else None
    level = adaptive_level(training_load, feedback, previous.estimated_duration)

    previous_plan = dict(previous.plan or {})
    previous_plan["equipment"] = list(previous.equipment or [])
    user_prompt = prompt_builder.build_adaptive_prompt(
        previous_plan=previous_plan,
        feedback=feedback,
        progression_level=level,
    )
    completion, plan = _invoke_and_parse(model_client, prompt_builder.build_messages(user_prompt))

    # Regenerated plans stay within what the user had for the prior session.
    allowed = previous.equipment if isinstance(previous.equipment, list) else profile.available_equipment
    equipment = enforce_plan_equipment(plan.equipment, allowed)
    plan = plan.model_copy(update={"equipment": equipment})

    dedupe_key = plan_store.adaptive_dedupe_key(
        user_id=user_id,
        adapted_from=str(previous.id),
        progression_level=level,
        equipment=equipment,
    )
    record = plan_store.save_plan(
        db,
        user_id=user_id,
        plan=plan,
        source="ai-adaptive",
        model=completion.model,
        usage=completion.usage,
        personalized_for={
            "adapted_from": str(previous.id),
            "reason": request.difficulty_feedback,
            "fitness_level": profile.fitness_level,
            "progression_level": level,
        },
        progression_level=level,
        profile_digest=_profile_digest(profile),
        dedupe_key=dedupe_key,
        adapted_from=previous.id,
    )
    logger.info(
        "Adaptive workout generated for %s (plan=%s, from=%s, level=%s)",
        user_id,
        record.id,
        previous.id,
        level,
    )
    return GenerationResult(record=record, dedupe_key=dedupe_key, progression_level=level)


def _invoke_and_parse(
    model_client: WorkoutModelClient,
    messages: list,
) -> tuple[ModelCompletion, WorkoutPlanDraft]:
    """Run the model and validate its output; any failure becomes a generic 500."""
    try:
        completion = model_client.complete_json(messages)
        plan = parse_plan(completion.content)
    except (ModelInvocationError, PlanParseError) as exc:
        logger.error("Workout generation failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Workout generation failed. Please try again.",
        ) from exc
    return completion, plan


def _profile_digest(profile: ProfileShape) -> Optional[str]:
    return profile.system.profile_digest if profile.system else None
