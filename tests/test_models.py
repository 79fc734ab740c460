from fitcoach.db.base import Base
from fitcoach.db import models  # noqa: F401  ensure models are loaded


def test_metadata_contains_core_tables() -> None:
    table_names = set(Base.metadata.tables.keys())
    expected = {
        "user_profiles",
        "workout_plans",
        "workout_sessions",
        "progress_metrics",
        "rate_limits",
    }

    assert expected == table_names


def test_plan_dedupe_key_is_indexed_but_not_unique() -> None:
    plans = Base.metadata.tables["workout_plans"]

    assert plans.c.dedupe_key.index is True
    assert not plans.c.dedupe_key.unique
