"""Canonical profile normalization, derivation, persistence and resolution."""
from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fitcoach.api.schemas.profile import (
    ProfileShape,
    ProfileUpdateRequest,
    ProfileUpsertRequest,
)
from fitcoach.api.schemas.workout import WorkoutGenerationRequest
from fitcoach.db.models.user_profile import UserProfile

logger = logging.getLogger(__name__)

INTENSITY_SCORES = {"low": 1, "moderate": 2, "high": 3}

DAYS_RANGE = (1, 7)
MINUTES_RANGE = (10, 180)
REST_DAY_RANGE = (0, 6)


def normalize_tags(values: Optional[Iterable[str]]) -> List[str]:
    """Trim, lower-case and de-duplicate tags, keeping first-seen order."""
    seen: List[str] = []
    for raw in values or []:
        tag = str(raw).strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def clamp(value: int, bounds: tuple[int, int]) -> int:
    low, high = bounds
    return max(low, min(high, int(value)))


def profile_digest(shape: Dict[str, Any]) -> str:
    """Order-independent SHA-256 of the normalized profile."""
    time_commitment = shape.get("time_commitment") or {}
    preferences = shape.get("preferences") or {}
    canonical = {
        "fitness_level": shape.get("fitness_level"),
        "fitness_goals": sorted(normalize_tags(shape.get("fitness_goals"))),
        "available_equipment": sorted(normalize_tags(shape.get("available_equipment"))),
        "time_commitment": {
            "days_per_week": time_commitment.get("days_per_week"),
            "minutes_per_session": time_commitment.get("minutes_per_session"),
            "preferred_times": sorted(normalize_tags(time_commitment.get("preferred_times"))),
        },
        "preferences": {
            "workout_types": sorted(normalize_tags(preferences.get("workout_types"))),
            "intensity": preferences.get("intensity"),
            "rest_day_preference": preferences.get("rest_day_preference"),
            "injuries_or_limitations": sorted(normalize_tags(preferences.get("injuries_or_limitations"))),
        },
    }
    encoded = json.dumps(canonical, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


def profile_completeness(shape: Dict[str, Any]) -> int:
    time_commitment = shape.get("time_commitment") or {}
    preferences = shape.get("preferences") or {}
    score = 0
    if shape.get("fitness_level"):
        score += 20
    if shape.get("fitness_goals"):
        score += 20
    if shape.get("available_equipment"):
        score += 15
    if time_commitment.get("days_per_week") and time_commitment.get("minutes_per_session") and time_commitment.get("preferred_times"):
        score += 20
    if preferences.get("workout_types"):
        score += 15
    if preferences.get("intensity"):
        score += 10
    return min(100, score)


def derive_system(shape: Dict[str, Any]) -> Dict[str, Any]:
    """Compute the derived sub-record stored alongside every profile write."""
    time_commitment = shape["time_commitment"]
    weekly_minutes = int(time_commitment["days_per_week"]) * int(time_commitment["minutes_per_session"])
    intensity_score = INTENSITY_SCORES[shape["preferences"]["intensity"]]
    return {
        "weekly_minutes": weekly_minutes,
        "intensity_score": intensity_score,
        "training_load_index": weekly_minutes * intensity_score,
        "profile_digest": profile_digest(shape),
        "completeness": profile_completeness(shape),
    }


def normalize_shape(shape: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize tag arrays and clamp numeric fields of a full profile shape."""
    time_commitment = dict(shape["time_commitment"])
    preferences = dict(shape["preferences"])
    time_commitment["days_per_week"] = clamp(time_commitment["days_per_week"], DAYS_RANGE)
    time_commitment["minutes_per_session"] = clamp(time_commitment["minutes_per_session"], MINUTES_RANGE)
    time_commitment["preferred_times"] = normalize_tags(time_commitment.get("preferred_times"))
    preferences["rest_day_preference"] = clamp(preferences["rest_day_preference"], REST_DAY_RANGE)
    preferences["workout_types"] = normalize_tags(preferences.get("workout_types"))
    preferences["injuries_or_limitations"] = normalize_tags(preferences.get("injuries_or_limitations"))
    return {
        "fitness_level": shape["fitness_level"],
        "fitness_goals": normalize_tags(shape.get("fitness_goals")),
        "available_equipment": normalize_tags(shape.get("available_equipment")),
        "time_commitment": time_commitment,
        "preferences": preferences,
    }


def profile_to_shape(profile: UserProfile) -> Dict[str, Any]:
    return {
        "fitness_level": profile.fitness_level,
        "fitness_goals": list(profile.fitness_goals or []),
        "available_equipment": list(profile.available_equipment or []),
        "time_commitment": dict(profile.time_commitment or {}),
        "preferences": dict(profile.preferences or {}),
        "system": dict(profile.system) if profile.system else None,
    }


def get_profile(db: Session, user_id: str) -> Optional[UserProfile]:
    return db.get(UserProfile, user_id)


def upsert_profile(db: Session, user_id: str, payload: ProfileUpsertRequest) -> UserProfile:
    """Create or replace the canonical profile, recomputing derived fields."""
    shape = normalize_shape(payload.model_dump())
    now = datetime.now(timezone.utc)
    try:
        profile = _locked_profile(db, user_id)
        if profile is None:
            profile = UserProfile(user_id=user_id, created_at=now)
            db.add(profile)
        _apply_shape(profile, shape, now)
        db.commit()
    except IntegrityError:
        # Lost a first-insert race; the row now exists, so replace it.
        db.rollback()
        try:
            profile = _locked_profile(db, user_id)
            if profile is None:
                raise
            _apply_shape(profile, shape, now)
            db.commit()
        except Exception:
            db.rollback()
            raise
    except Exception:
        db.rollback()
        raise
    db.refresh(profile)
    logger.info("Profile written for %s (digest=%s)", user_id, profile.system.get("profile_digest"))
    return profile


def merge_profile(db: Session, user_id: str, patch: ProfileUpdateRequest) -> UserProfile:
    """Merge a partial update into the existing canonical profile."""
    try:
        profile = _locked_profile(db, user_id)
        if profile is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

        current = profile_to_shape(profile)
        changes = patch.model_dump(exclude_unset=True)
        for key in ("time_commitment", "preferences"):
            nested = changes.pop(key, None)
            if nested:
                current[key] = {**current[key], **{k: v for k, v in nested.items() if v is not None}}
        current.update({k: v for k, v in changes.items() if v is not None})

        _apply_shape(profile, normalize_shape(current), datetime.now(timezone.utc))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(profile)
    return profile


def read_canonical_profile(db: Session, user_id: str) -> Optional[ProfileShape]:
    """Load and validate the stored profile; ``None`` when the user has none."""
    profile = get_profile(db, user_id)
    if profile is None:
        return None
    try:
        return ProfileShape.model_validate(profile_to_shape(profile))
    except ValidationError as exc:
        logger.error("Stored profile for %s failed validation: %s", user_id, exc.errors())
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Stored profile is invalid",
        ) from exc


def resolve_profile(db: Session, user_id: str, request: WorkoutGenerationRequest) -> ProfileShape:
    """Return the canonical profile, or a transient one built from inline request data.

    The inline fallback applies when no readable canonical profile exists and
    the request carries fitness level, time commitment and preferences. The
    transient profile is never persisted and carries no derived record.
    """
    has_inline = (
        request.fitness_level is not None
        and request.time_commitment is not None
        and request.preferences is not None
    )
    try:
        canonical = read_canonical_profile(db, user_id)
    except HTTPException:
        if not has_inline:
            raise
        logger.warning("Stored profile for %s is unreadable; using inline profile shape", user_id)
        canonical = None
    if canonical is not None:
        return canonical

    if not has_inline:
        raise HTTPException(
            status_code=status.HTTP_412_PRECONDITION_FAILED,
            detail="Profile not found. Complete onboarding.",
        )

    logger.info("No canonical profile for %s; using inline profile shape", user_id)
    shape = normalize_shape(
        {
            "fitness_level": request.fitness_level,
            "fitness_goals": request.fitness_goals,
            "available_equipment": request.available_equipment,
            "time_commitment": request.time_commitment.model_dump(),
            "preferences": request.preferences.model_dump(),
        }
    )
    return ProfileShape.model_validate(shape)


def _locked_profile(db: Session, user_id: str) -> Optional[UserProfile]:
    return (
        db.query(UserProfile)
        .filter(UserProfile.user_id == user_id)
        .with_for_update()
        .one_or_none()
    )


def _apply_shape(profile: UserProfile, shape: Dict[str, Any], now: datetime) -> None:
    profile.fitness_level = shape["fitness_level"]
    profile.fitness_goals = shape["fitness_goals"]
    profile.available_equipment = shape["available_equipment"]
    profile.time_commitment = shape["time_commitment"]
    profile.preferences = shape["preferences"]
    profile.system = derive_system(shape)
    profile.updated_at = now
