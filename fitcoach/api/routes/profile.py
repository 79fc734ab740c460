"""Canonical profile endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fitcoach.api.deps import get_current_user_id
from fitcoach.api.schemas.profile import (
    ProfilePayload,
    ProfileResponse,
    ProfileUpdateRequest,
    ProfileUpsertRequest,
)
from fitcoach.db.deps import get_db
from fitcoach.db.models.user_profile import UserProfile
from fitcoach.services import profile_service

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
def get_profile(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ProfileResponse:
    profile = profile_service.get_profile(db, user_id)
    return ProfileResponse(profile=_serialize(profile) if profile else None)


@router.put("", response_model=ProfileResponse)
def put_profile(
    payload: ProfileUpsertRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ProfileResponse:
    """Create or replace the caller's canonical profile."""
    profile = profile_service.upsert_profile(db, user_id, payload)
    return ProfileResponse(profile=_serialize(profile))


@router.patch("", response_model=ProfileResponse)
def patch_profile(
    payload: ProfileUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ProfileResponse:
    """Merge a partial update; numeric fields are clamped into range."""
    profile = profile_service.merge_profile(db, user_id, payload)
    return ProfileResponse(profile=_serialize(profile))


def _serialize(profile: UserProfile) -> ProfilePayload:
    return ProfilePayload(
        user_id=profile.user_id,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
        **profile_service.profile_to_shape(profile),
    )
