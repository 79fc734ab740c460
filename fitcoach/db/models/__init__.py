"""ORM models exposed for metadata discovery."""
from fitcoach.db.models.progress_metric import ProgressMetric
from fitcoach.db.models.rate_limit import RateLimit
from fitcoach.db.models.user_profile import UserProfile
from fitcoach.db.models.workout_plan import WorkoutPlan
from fitcoach.db.models.workout_session import WorkoutSession

__all__ = [
    "ProgressMetric",
    "RateLimit",
    "UserProfile",
    "WorkoutPlan",
    "WorkoutSession",
]
