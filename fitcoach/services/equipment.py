"""Plan-level equipment constraint enforcement."""
from __future__ import annotations

from typing import Iterable, List

BODYWEIGHT = "bodyweight"


def enforce_plan_equipment(plan_equipment: Iterable[str], allowed_equipment: Iterable[str]) -> List[str]:
    """Keep only plan tags the caller actually has.

    Matching is case-insensitive and ``bodyweight`` is always allowed. The
    result is lower-cased, de-duplicated and never empty.
    """
    allowed = {tag.strip().lower() for tag in allowed_equipment if tag and tag.strip()}
    allowed.add(BODYWEIGHT)
    kept: List[str] = []
    for tag in plan_equipment:
        normalized = (tag or "").strip().lower()
        if normalized in allowed and normalized not in kept:
            kept.append(normalized)
    return kept or [BODYWEIGHT]
