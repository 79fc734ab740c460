"""Schemas for workout generation endpoints."""
from __future__ import annotations

from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from fitcoach.api.schemas.common import (
    Difficulty,
    DifficultyFeedback,
    StrId,
    StrTiny,
    TagList,
)
from fitcoach.api.schemas.profile import Preferences, TimeCommitment
from fitcoach.api.schemas.workout_plan import WorkoutPlanPayload

IdempotencyKey = Annotated[str, StringConstraints(strip_whitespace=True, min_length=8, max_length=64)]


class WorkoutGenerationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    workout_type: StrTiny
    progression_level: Optional[int] = Field(default=None, ge=1, le=10)
    focus_areas: Optional[List[StrTiny]] = Field(default=None, max_length=8)
    previous_workouts: Optional[List[StrId]] = Field(default=None, max_length=20)
    # Inline profile shape, only consulted when no canonical profile exists yet.
    fitness_level: Optional[Difficulty] = None
    fitness_goals: Optional[TagList] = None
    available_equipment: Optional[TagList] = None
    time_commitment: Optional[TimeCommitment] = None
    preferences: Optional[Preferences] = None
    idempotency_key: Optional[IdempotencyKey] = None


class AdaptiveWorkoutRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    previous_workout_id: StrId
    performance_rating: float = Field(..., ge=1, le=5)
    completion_rate: float = Field(..., ge=0, le=1)
    difficulty_feedback: DifficultyFeedback
    time_actual: int = Field(..., ge=5, le=600, description="Minutes actually spent.")


class WorkoutGenerationResponse(BaseModel):
    success: bool = True
    workout_plan: WorkoutPlanPayload
    dedupe_key: str


class Adaptations(BaseModel):
    new_progression_level: int
    reason: DifficultyFeedback


class AdaptiveWorkoutResponse(WorkoutGenerationResponse):
    adaptations: Adaptations


class WorkoutPlanListResponse(BaseModel):
    plans: List[WorkoutPlanPayload]
