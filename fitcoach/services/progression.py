"""Progression level derivation from history and session feedback."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from fitcoach.services.history_sampler import SessionSample

MIN_LEVEL = 1
MAX_LEVEL = 10
DEFAULT_ADAPTIVE_LEVEL = 5
DEFAULT_ESTIMATED_DURATION = 45
TRAINING_LOAD_PER_LEVEL = 900
FREQUENT_EXERCISE_THRESHOLD = 3

TIER_BASE = {"beginner": 1, "intermediate": 4, "advanced": 7}


def clamp_level(value: float) -> int:
    """Round half up and clamp into [1, 10]."""
    rounded = int(math.floor(value + 0.5))
    return max(MIN_LEVEL, min(MAX_LEVEL, rounded))


def baseline_level(history: Sequence[SessionSample], fitness_level: str) -> int:
    """Level for a fresh generation when the caller did not pin one.

    Starts from the tier base, +1 once five sessions are rated 3 or better,
    +1 more once ten are and the average rating reaches 4.5.
    """
    level = TIER_BASE.get(fitness_level, TIER_BASE["beginner"])
    if not history:
        return clamp_level(level)

    ratings = [session.rating or 0 for session in history]
    completed = sum(1 for rating in ratings if rating >= 3)
    average = sum(ratings) / len(ratings)
    if completed >= 5:
        level += 1
    if completed >= 10 and average >= 4.5:
        level += 1
    return clamp_level(level)


@dataclass(frozen=True)
class SessionFeedback:
    performance_rating: float
    completion_rate: float
    difficulty_feedback: str
    time_actual: int


def level_from_training_load(training_load_index: Optional[int]) -> int:
    if not training_load_index or training_load_index <= 0:
        return DEFAULT_ADAPTIVE_LEVEL
    return clamp_level(training_load_index / TRAINING_LOAD_PER_LEVEL + 1)


def feedback_adjustment(feedback: SessionFeedback, estimated_duration: Optional[int]) -> float:
    estimated = estimated_duration or DEFAULT_ESTIMATED_DURATION
    adjustment = 0.0
    if feedback.performance_rating >= 4 and feedback.completion_rate >= 0.9:
        adjustment += 1
    if feedback.performance_rating <= 2 or feedback.completion_rate < 0.7:
        adjustment -= 1
    if feedback.difficulty_feedback == "too_easy":
        adjustment += 1
    elif feedback.difficulty_feedback == "too_hard":
        adjustment -= 1
    # Finishing early earns a half step; running long is not penalized.
    if feedback.time_actual < estimated * 0.8:
        adjustment += 0.5
    return adjustment


def adaptive_level(
    training_load_index: Optional[int],
    feedback: SessionFeedback,
    estimated_duration: Optional[int],
) -> int:
    current = level_from_training_load(training_load_index)
    return clamp_level(current + feedback_adjustment(feedback, estimated_duration))


def frequent_exercises(history: Iterable[SessionSample], threshold: int = FREQUENT_EXERCISE_THRESHOLD) -> List[str]:
    """Exercise ids performed in at least ``threshold`` of the sampled sessions."""
    counts: Dict[str, int] = {}
    for session in history:
        for exercise_id in dict.fromkeys(session.exercises):
            counts[exercise_id] = counts.get(exercise_id, 0) + 1
    return [exercise_id for exercise_id, count in counts.items() if count >= threshold]
