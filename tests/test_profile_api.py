from __future__ import annotations

from tests.conftest import profile_payload

HEADERS = {"X-User-Id": "user-1"}


def test_profile_absent_until_written(api) -> None:
    response = api.client.get("/profile", headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"profile": None}


def test_put_profile_normalizes_and_derives(api) -> None:
    response = api.client.put("/profile", json=profile_payload(), headers=HEADERS)

    assert response.status_code == 200
    profile = response.json()["profile"]
    assert profile["user_id"] == "user-1"
    assert profile["fitness_goals"] == ["build muscle", "endurance"]
    assert profile["available_equipment"] == ["dumbbells", "resistance bands"]
    assert profile["system"]["weekly_minutes"] == 180
    assert profile["system"]["training_load_index"] == 360
    assert profile["system"]["completeness"] == 100


def test_put_profile_rejects_out_of_range_values(api) -> None:
    payload = profile_payload(
        time_commitment={"days_per_week": 9, "minutes_per_session": 45, "preferred_times": ["morning"]}
    )

    response = api.client.put("/profile", json=payload, headers=HEADERS)

    assert response.status_code == 422


def test_patch_profile_clamps_and_recomputes(api) -> None:
    api.client.put("/profile", json=profile_payload(), headers=HEADERS)

    response = api.client.patch(
        "/profile",
        json={"time_commitment": {"minutes_per_session": 500}, "preferences": {"intensity": "low"}},
        headers=HEADERS,
    )

    profile = response.json()["profile"]
    assert profile["time_commitment"]["minutes_per_session"] == 180
    assert profile["time_commitment"]["days_per_week"] == 4
    assert profile["system"]["training_load_index"] == 720


def test_patch_without_profile_is_not_found(api) -> None:
    response = api.client.patch("/profile", json={"fitness_level": "advanced"}, headers=HEADERS)

    assert response.status_code == 404
