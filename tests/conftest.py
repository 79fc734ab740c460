from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List

import httpx
import openai
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fitcoach.api.deps import get_model_client
from fitcoach.api.schemas.profile import ProfileUpsertRequest
from fitcoach.db.base import Base
from fitcoach.db import models  # noqa: F401  ensure models are loaded
from fitcoach.db.deps import get_db
from fitcoach.db.models.workout_session import WorkoutSession
from fitcoach.main import app
from fitcoach.services.llm_client import WorkoutModelClient
from fitcoach.services.profile_service import upsert_profile

BASE_TIME = datetime(2026, 3, 2, 7, 0, tzinfo=timezone.utc)


def sample_exercise(name: str = "Goblet Squat", **overrides: Any) -> Dict[str, Any]:
    exercise = {
        "name": name,
        "description": "Hold a dumbbell at chest height and squat to depth.",
        "instructions": ["Brace your core", "Sit back and down", "Drive through heels"],
        "target_muscles": ["quads", "glutes"],
        "equipment": ["dumbbells"],
        "difficulty": "intermediate",
        "sets": 3,
        "reps": 10,
        "rest_time": 60,
        "tips": ["Keep chest tall"],
    }
    exercise.update(overrides)
    return exercise


def sample_plan(**overrides: Any) -> Dict[str, Any]:
    plan = {
        "name": "Lower Body Builder",
        "description": "A strength session focused on legs and glutes.",
        "type": "strength",
        "difficulty": "intermediate",
        "estimated_duration": 45,
        "exercises": [
            sample_exercise(),
            sample_exercise("Plank", reps=None, duration=45, equipment=[], target_muscles=["core"]),
        ],
        "equipment": ["Dumbbells", "barbell", "bodyweight"],
        "target_muscles": ["quads", "glutes", "core"],
        "progression_tips": ["Add 2kg next week"],
        "motivational_quote": "Strong legs, strong life.",
        "calorie_estimate": 320,
    }
    plan.update(overrides)
    return plan


def profile_payload(**overrides: Any) -> Dict[str, Any]:
    payload = {
        "fitness_level": "intermediate",
        "fitness_goals": ["Build Muscle", "endurance"],
        "available_equipment": ["Dumbbells", "resistance bands"],
        "time_commitment": {
            "days_per_week": 4,
            "minutes_per_session": 45,
            "preferred_times": ["morning"],
        },
        "preferences": {
            "workout_types": ["strength"],
            "intensity": "moderate",
            "rest_day_preference": 0,
            "injuries_or_limitations": [],
        },
    }
    payload.update(overrides)
    return payload


def unsupported_mode_error() -> openai.BadRequestError:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(400, request=request)
    return openai.BadRequestError(
        "Invalid parameter: 'response_format' of type 'json_object' is not supported with this model.",
        response=response,
        body=None,
    )


class FakeCompletions:
    """Records calls and replays queued responses or exceptions."""

    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if not self.responses:
            raise AssertionError("Unexpected model call")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        content = item if isinstance(item, str) else json.dumps(item)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
            usage=SimpleNamespace(
                model_dump=lambda **_: {"prompt_tokens": 900, "completion_tokens": 600, "total_tokens": 1500}
            ),
            model="gpt-4o-mini",
        )


class FakeOpenAI:
    def __init__(self, responses: List[Any]):
        self.completions = FakeCompletions(responses)
        self.chat = SimpleNamespace(completions=self.completions)


def fake_model_client(*responses: Any) -> tuple[WorkoutModelClient, FakeCompletions]:
    fake = FakeOpenAI(list(responses))
    return WorkoutModelClient(fake, model="gpt-4o-mini"), fake.completions


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    yield factory
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def race_sessions(tmp_path):
    """Two sessions on separate connections to one file-backed SQLite database."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 5},
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    session_a, session_b = factory(), factory()
    try:
        yield session_a, session_b
    finally:
        session_a.close()
        session_b.close()
        engine.dispose()


@pytest.fixture()
def api(session_factory):
    """TestClient wired to SQLite plus a swappable fake model client."""
    state: Dict[str, Any] = {}

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def use_model(*responses: Any) -> FakeCompletions:
        client, completions = fake_model_client(*responses)
        state["client"] = client
        return completions

    use_model()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_model_client] = lambda: state["client"]
    with TestClient(app) as test_client:
        yield SimpleNamespace(client=test_client, sessions=session_factory, use_model=use_model)
    app.dependency_overrides.clear()


def seed_profile(session_factory, user_id: str, **overrides: Any):
    with session_factory() as session:
        return upsert_profile(session, user_id, ProfileUpsertRequest(**profile_payload(**overrides)))


def seed_sessions(session_factory, user_id: str, entries: List[Dict[str, Any]]) -> None:
    with session_factory() as session:
        for index, entry in enumerate(entries):
            start = entry.get("start_time", BASE_TIME + timedelta(days=index))
            session.add(
                WorkoutSession(
                    user_id=user_id,
                    workout_type=entry.get("workout_type", "strength"),
                    start_time=start,
                    end_time=entry.get("end_time", start + timedelta(minutes=40)),
                    rating=entry.get("rating"),
                    feedback=entry.get("feedback"),
                    completed_exercises=[{"exercise_id": ex} for ex in entry.get("exercises", [])],
                )
            )
        session.commit()
