from __future__ import annotations

from datetime import timedelta

from fitcoach.db.models.progress_metric import ProgressMetric
from fitcoach.services.history_sampler import sample_history, session_duration_minutes
from tests.conftest import BASE_TIME, seed_sessions


def test_empty_history_is_valid(db) -> None:
    sample = sample_history(db, "nobody")

    assert sample.sessions == []
    assert sample.progress == []


def test_sessions_are_newest_first_and_bounded(session_factory, db) -> None:
    seed_sessions(session_factory, "user-1", [{"rating": index % 5 + 1, "exercises": [f"ex-{index}"]} for index in range(12)])
    seed_sessions(session_factory, "user-2", [{"rating": 5}])

    sample = sample_history(db, "user-1")

    assert len(sample.sessions) == 10
    assert sample.sessions[0].exercises == ["ex-11"]
    assert sample.sessions[-1].exercises == ["ex-2"]
    assert all(session.duration == 40 for session in sample.sessions)


def test_duration_requires_both_timestamps() -> None:
    assert session_duration_minutes(BASE_TIME, None) is None
    assert session_duration_minutes(BASE_TIME, BASE_TIME + timedelta(minutes=29, seconds=31)) == 30


def test_progress_metrics_projection(session_factory, db) -> None:
    with session_factory() as session:
        for day in range(7):
            session.add(ProgressMetric(user_id="user-1", date=BASE_TIME + timedelta(days=day), weight=80 - day * 0.5))
        session.commit()

    sample = sample_history(db, "user-1")

    assert len(sample.progress) == 5
    assert sample.progress[0] == {"date": "2026-03-08", "weight": 77.0}
