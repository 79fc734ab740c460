"""Transactional per-user, per-operation abuse control."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fitcoach.core.config import settings
from fitcoach.db.models.rate_limit import RateLimit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    cooldown: timedelta
    hourly_quota: int
    window: timedelta

    @classmethod
    def from_settings(cls) -> "RateLimitPolicy":
        return cls(
            cooldown=timedelta(seconds=settings.rate_limit_cooldown_seconds),
            hourly_quota=settings.rate_limit_hourly_quota,
            window=timedelta(seconds=settings.rate_limit_window_seconds),
        )


def enforce_rate_limit(
    db: Session,
    user_id: str,
    operation_key: str,
    *,
    now: Optional[datetime] = None,
    policy: Optional[RateLimitPolicy] = None,
) -> RateLimit:
    """Admit one call for (user, operation) or raise 429.

    The record is read under a row lock, checked and written in a single
    transaction that commits before returning, so a later failure in the
    caller still counts against the quota.
    """
    policy = policy or RateLimitPolicy.from_settings()
    now = now or datetime.now(timezone.utc)
    try:
        return _admit(db, user_id, operation_key, now, policy)
    except IntegrityError:
        # Concurrent first call inserted the record; re-run against the locked row.
        db.rollback()
        return _admit(db, user_id, operation_key, now, policy)


def _admit(db: Session, user_id: str, operation_key: str, now: datetime, policy: RateLimitPolicy) -> RateLimit:
    try:
        record = (
            db.query(RateLimit)
            .filter(RateLimit.user_id == user_id, RateLimit.operation_key == operation_key)
            .with_for_update()
            .one_or_none()
        )

        if record is not None and record.last_call_at > now - policy.cooldown:
            retry_after = (record.last_call_at + policy.cooldown - now).total_seconds()
            logger.info("Cooldown hit for %s on %s", user_id, operation_key)
            raise _exhausted("Please wait a few seconds before trying again.", retry_after)

        window_start = record.window_start if record is not None else now
        count = record.count if record is not None else 0
        if window_start < now - policy.window:
            window_start = now
            count = 0
        if count >= policy.hourly_quota:
            retry_after = (window_start + policy.window - now).total_seconds()
            logger.info("Hourly quota reached for %s on %s", user_id, operation_key)
            raise _exhausted("Hourly generation limit reached. Try later.", retry_after)

        if record is None:
            record = RateLimit(user_id=user_id, operation_key=operation_key)
            db.add(record)
        record.last_call_at = now
        record.window_start = window_start
        record.count = count + 1
        db.commit()
        return record
    except HTTPException:
        db.rollback()
        raise
    except IntegrityError:
        raise
    except Exception:
        db.rollback()
        raise


def _exhausted(detail: str, retry_after_seconds: float) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=detail,
        headers={"Retry-After": str(max(int(retry_after_seconds) + 1, 1))},
    )
