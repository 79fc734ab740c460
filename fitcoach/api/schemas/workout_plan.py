"""Workout plan schema shared by the model-output validator and API responses."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from fitcoach.api.schemas.common import Difficulty, StrLong, StrShort, StrTiny


class Exercise(BaseModel):
    """A single prescribed movement.

    ``reps`` and ``duration`` are both optional and not mutually exclusive;
    an exercise normally carries one of them.
    """

    name: StrTiny
    description: StrLong
    instructions: List[StrShort] = Field(..., min_length=1, max_length=12)
    target_muscles: List[StrTiny] = Field(..., min_length=1, max_length=10)
    equipment: List[StrTiny] = Field(default_factory=list, max_length=10)
    difficulty: Difficulty
    sets: int = Field(..., ge=1, le=10)
    reps: Optional[int] = Field(default=None, ge=1, le=50)
    duration: Optional[int] = Field(default=None, ge=5, le=3600, description="Seconds, for timed work.")
    rest_time: int = Field(..., ge=0, le=600, description="Rest between sets in seconds.")
    tips: List[StrShort] = Field(default_factory=list, max_length=10)
    progression_notes: Optional[StrLong] = None
    alternatives: Optional[List[StrTiny]] = Field(default=None, max_length=8)
    form_cues: Optional[List[StrShort]] = Field(default=None, max_length=10)


class WorkoutPlanDraft(BaseModel):
    """Structured single-session plan returned by the model."""

    name: StrTiny
    description: StrLong
    type: StrTiny
    difficulty: Difficulty
    estimated_duration: int = Field(..., ge=10, le=180, description="Minutes, including warm-up and cool-down.")
    exercises: List[Exercise] = Field(..., min_length=1, max_length=40)
    equipment: List[StrTiny] = Field(default_factory=list, max_length=20)
    target_muscles: List[StrTiny] = Field(default_factory=list, max_length=20)
    warm_up: Optional[List[Exercise]] = Field(default=None, max_length=10)
    cool_down: Optional[List[Exercise]] = Field(default=None, max_length=10)
    progression_tips: Optional[List[StrShort]] = Field(default=None, max_length=10)
    motivational_quote: Optional[StrShort] = None
    calorie_estimate: Optional[int] = Field(default=None, ge=50, le=1500)


class WorkoutPlanPayload(WorkoutPlanDraft):
    id: str
    ai_generated: bool = True
    personalized_for: Dict[str, Any] = Field(default_factory=dict)
    source: Optional[str] = None
    model: Optional[str] = None
    progression_level: Optional[int] = None
    profile_digest: Optional[str] = None
    dedupe_key: Optional[str] = None
    status: Optional[str] = None
    adapted_from: Optional[str] = None
    created_at: Optional[str] = None
