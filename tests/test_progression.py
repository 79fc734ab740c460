from __future__ import annotations

import pytest

from fitcoach.services.history_sampler import SessionSample
from fitcoach.services.progression import (
    SessionFeedback,
    adaptive_level,
    baseline_level,
    clamp_level,
    feedback_adjustment,
    frequent_exercises,
    level_from_training_load,
)


def _sessions(*ratings, exercises=None):
    return [
        SessionSample(type="strength", completed_at=None, rating=rating, feedback=None, exercises=list(exercises or []))
        for rating in ratings
    ]


@pytest.mark.parametrize(
    ("fitness_level", "expected"),
    [("beginner", 1), ("intermediate", 4), ("advanced", 7)],
)
def test_baseline_without_history_uses_tier_base(fitness_level, expected) -> None:
    assert baseline_level([], fitness_level) == expected


def test_baseline_adds_one_after_five_completed_sessions() -> None:
    assert baseline_level(_sessions(3, 3, 3, 3, 3), "beginner") == 2
    assert baseline_level(_sessions(3, 3, 3, 3, 2), "beginner") == 1


def test_baseline_adds_second_step_for_ten_highly_rated_sessions() -> None:
    assert baseline_level(_sessions(*([5] * 10)), "intermediate") == 6
    assert baseline_level(_sessions(*([4] * 10)), "intermediate") == 5


def test_baseline_missing_ratings_count_as_zero() -> None:
    history = _sessions(5, 5, 5, 5, 5, 5, 5, 5, 5, None)
    assert baseline_level(history, "intermediate") == 5


def test_baseline_never_exceeds_ten() -> None:
    assert baseline_level(_sessions(*([5] * 10)), "advanced") == 9
    assert clamp_level(12) == 10


def test_level_from_training_load() -> None:
    assert level_from_training_load(None) == 5
    assert level_from_training_load(0) == 5
    assert level_from_training_load(360) == 1
    assert level_from_training_load(3600) == 5
    assert level_from_training_load(3780) == 5
    assert level_from_training_load(50000) == 10


def test_adaptive_example_rounds_half_up() -> None:
    feedback = SessionFeedback(performance_rating=5, completion_rate=1.0, difficulty_feedback="too_easy", time_actual=30)

    assert feedback_adjustment(feedback, 45) == 2.5
    assert adaptive_level(3600, feedback, 45) == 8


def test_adaptive_penalizes_poor_sessions() -> None:
    feedback = SessionFeedback(performance_rating=2, completion_rate=0.5, difficulty_feedback="too_hard", time_actual=45)

    assert feedback_adjustment(feedback, 45) == -2
    assert adaptive_level(None, feedback, 45) == 3


def test_running_long_is_not_penalized() -> None:
    feedback = SessionFeedback(performance_rating=3, completion_rate=0.8, difficulty_feedback="just_right", time_actual=120)

    assert feedback_adjustment(feedback, 45) == 0


def test_missing_estimate_defaults_to_forty_five_minutes() -> None:
    feedback = SessionFeedback(performance_rating=3, completion_rate=0.8, difficulty_feedback="just_right", time_actual=35)

    assert feedback_adjustment(feedback, None) == 0.5


@pytest.mark.parametrize("load", [None, 10, 900, 4500, 9000, 10000])
@pytest.mark.parametrize(
    "feedback",
    [
        SessionFeedback(5, 1.0, "too_easy", 5),
        SessionFeedback(1, 0.0, "too_hard", 600),
        SessionFeedback(3, 0.75, "just_right", 40),
    ],
)
def test_adaptive_level_always_in_range(load, feedback) -> None:
    level = adaptive_level(load, feedback, 180)
    assert isinstance(level, int)
    assert 1 <= level <= 10


def test_frequent_exercises_counts_sessions_not_repeats() -> None:
    history = [
        SessionSample("strength", None, 4, None, ["squat", "squat", "row"]),
        SessionSample("strength", None, 4, None, ["squat", "row"]),
        SessionSample("strength", None, 4, None, ["squat", "lunge"]),
        SessionSample("strength", None, 4, None, ["lunge"]),
    ]

    assert frequent_exercises(history) == ["squat"]
    assert frequent_exercises([]) == []
