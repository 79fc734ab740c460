from __future__ import annotations

from fitcoach.services.equipment import enforce_plan_equipment


def test_keeps_only_allowed_tags_case_insensitively() -> None:
    result = enforce_plan_equipment(["Dumbbells", "Barbell", "kettlebell"], ["dumbbells", "kettlebell"])

    assert result == ["dumbbells", "kettlebell"]


def test_bodyweight_is_always_allowed() -> None:
    assert enforce_plan_equipment(["Bodyweight", "rower"], []) == ["bodyweight"]


def test_empty_result_falls_back_to_bodyweight() -> None:
    assert enforce_plan_equipment(["barbell"], ["dumbbells"]) == ["bodyweight"]
    assert enforce_plan_equipment([], ["dumbbells"]) == ["bodyweight"]


def test_result_is_subset_of_allowed_plus_bodyweight() -> None:
    allowed = ["pull-up bar", "Bands"]
    plan = ["bands", "BANDS", "pull-up bar", "sled", "bodyweight", "  "]

    result = enforce_plan_equipment(plan, allowed)

    assert result
    assert set(result) <= {"pull-up bar", "bands", "bodyweight"}
    assert len(result) == len(set(result))
