"""Database utilities and models."""

from fitcoach.db.base import Base
from fitcoach.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
