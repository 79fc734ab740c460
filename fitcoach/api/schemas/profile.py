"""Schemas for the canonical fitness profile."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fitcoach.api.schemas.common import Difficulty, Intensity, PreferredTime, TagList


class TimeCommitment(BaseModel):
    days_per_week: int = Field(..., ge=1, le=7)
    minutes_per_session: int = Field(..., ge=10, le=180)
    preferred_times: List[PreferredTime] = Field(..., min_length=1, max_length=4)


class Preferences(BaseModel):
    workout_types: TagList = Field(default_factory=list)
    intensity: Intensity
    rest_day_preference: int = Field(..., ge=0, le=6)
    injuries_or_limitations: TagList = Field(default_factory=list)


class ProfileSystem(BaseModel):
    """Server-derived enrichments recomputed on every profile write."""

    weekly_minutes: Optional[int] = Field(default=None, ge=10, le=1260)
    intensity_score: Optional[int] = Field(default=None, ge=1, le=3)
    training_load_index: Optional[int] = Field(default=None, ge=10, le=10000)
    profile_digest: Optional[str] = Field(default=None, min_length=64, max_length=64)
    completeness: Optional[int] = Field(default=None, ge=0, le=100)


class ProfileShape(BaseModel):
    fitness_level: Difficulty
    fitness_goals: TagList = Field(default_factory=list)
    available_equipment: TagList = Field(default_factory=list)
    time_commitment: TimeCommitment
    preferences: Preferences
    system: Optional[ProfileSystem] = None


class ProfileUpsertRequest(BaseModel):
    """Full profile submission; every bound is enforced."""

    model_config = ConfigDict(extra="forbid")

    fitness_level: Difficulty
    fitness_goals: TagList = Field(default_factory=list)
    available_equipment: TagList = Field(default_factory=list)
    time_commitment: TimeCommitment
    preferences: Preferences


class TimeCommitmentPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Numeric fields are clamped on merge rather than rejected.
    days_per_week: Optional[int] = None
    minutes_per_session: Optional[int] = None
    preferred_times: Optional[List[PreferredTime]] = Field(default=None, min_length=1, max_length=4)


class PreferencesPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    workout_types: Optional[TagList] = None
    intensity: Optional[Intensity] = None
    rest_day_preference: Optional[int] = None
    injuries_or_limitations: Optional[TagList] = None


class ProfileUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fitness_level: Optional[Difficulty] = None
    fitness_goals: Optional[TagList] = None
    available_equipment: Optional[TagList] = None
    time_commitment: Optional[TimeCommitmentPatch] = None
    preferences: Optional[PreferencesPatch] = None


class ProfilePayload(ProfileShape):
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileResponse(BaseModel):
    profile: Optional[ProfilePayload] = None
