"""Shared FastAPI dependencies for caller identity and the model client."""
from __future__ import annotations

from functools import lru_cache

from fastapi import Header, HTTPException, status

from fitcoach.core.config import settings
from fitcoach.services.llm_client import WorkoutModelClient


def get_current_user_id(x_user_id: str | None = Header(default=None, alias="X-User-Id")) -> str:
    """Return the caller identity forwarded by the authenticating gateway."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User must be authenticated.")
    if len(user_id) > 128:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid caller identity.")
    return user_id


@lru_cache
def _build_model_client() -> WorkoutModelClient:
    return WorkoutModelClient.from_settings(settings)


def get_model_client() -> WorkoutModelClient:
    """Return the process-wide model client, built once from settings."""
    if not settings.openai_api_key:
        raise HTTPException(
            status_code=status.HTTP_412_PRECONDITION_FAILED,
            detail="Server misconfiguration: OPENAI_API_KEY is not set.",
        )
    return _build_model_client()
