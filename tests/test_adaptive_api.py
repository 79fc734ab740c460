from __future__ import annotations

from uuid import uuid4

from tests.conftest import profile_payload, sample_plan, seed_profile

HEADERS = {"X-User-Id": "user-1"}

FEEDBACK = {
    "performance_rating": 5,
    "completion_rate": 1.0,
    "difficulty_feedback": "too_easy",
    "time_actual": 30,
}


def _seed_high_load_profile(api) -> None:
    # 7 x 180 min at high intensity gives a training load index of 3780, i.e. level 5.
    seed_profile(
        api.sessions,
        "user-1",
        time_commitment={"days_per_week": 7, "minutes_per_session": 180, "preferred_times": ["evening"]},
        preferences={
            "workout_types": ["strength"],
            "intensity": "high",
            "rest_day_preference": 0,
            "injuries_or_limitations": [],
        },
    )


def _generate_plan(api) -> str:
    api.use_model(sample_plan())
    response = api.client.post("/workouts/generate", json={"workout_type": "strength"}, headers=HEADERS)
    assert response.status_code == 200
    return response.json()["workout_plan"]["id"]


def test_unknown_previous_plan_is_not_found(api) -> None:
    _seed_high_load_profile(api)

    response = api.client.post(
        "/workouts/adaptive",
        json={"previous_workout_id": str(uuid4()), **FEEDBACK},
        headers=HEADERS,
    )

    assert response.status_code == 404


def test_previous_plan_of_another_user_is_forbidden(api) -> None:
    _seed_high_load_profile(api)
    plan_id = _generate_plan(api)

    response = api.client.post(
        "/workouts/adaptive",
        json={"previous_workout_id": plan_id, **FEEDBACK},
        headers={"X-User-Id": "user-2"},
    )

    assert response.status_code == 403


def test_adaptive_requires_canonical_profile(api) -> None:
    api.use_model(sample_plan())
    plan_id = api.client.post(
        "/workouts/generate",
        json={"workout_type": "strength", **profile_payload()},
        headers=HEADERS,
    ).json()["workout_plan"]["id"]

    response = api.client.post(
        "/workouts/adaptive",
        json={"previous_workout_id": plan_id, **FEEDBACK},
        headers=HEADERS,
    )

    assert response.status_code == 412


def test_strong_feedback_raises_level_and_keeps_prior_equipment(api) -> None:
    _seed_high_load_profile(api)
    plan_id = _generate_plan(api)
    completions = api.use_model(sample_plan(equipment=["Dumbbells", "resistance bands", "kettlebell"]))

    response = api.client.post(
        "/workouts/adaptive",
        json={"previous_workout_id": plan_id, **FEEDBACK},
        headers=HEADERS,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["adaptations"] == {"new_progression_level": 8, "reason": "too_easy"}
    plan = body["workout_plan"]
    assert plan["equipment"] == ["dumbbells"]
    assert plan["source"] == "ai-adaptive"
    assert plan["adapted_from"] == plan_id
    assert plan["personalized_for"]["adapted_from"] == plan_id
    prompt = completions.calls[0]["messages"][1]["content"]
    assert "- Equipment: dumbbells, bodyweight" in prompt
    assert "- Completion rate: 100%" in prompt


def test_adaptive_validation_bounds(api) -> None:
    response = api.client.post(
        "/workouts/adaptive",
        json={**FEEDBACK, "previous_workout_id": "abc", "completion_rate": 1.5},
        headers=HEADERS,
    )

    assert response.status_code == 422
