"""Constrained string and enum types shared by request and plan schemas."""
from __future__ import annotations

from typing import Annotated, List, Literal

from pydantic import Field, StringConstraints

Difficulty = Literal["beginner", "intermediate", "advanced"]
Intensity = Literal["low", "moderate", "high"]
PreferredTime = Literal["morning", "afternoon", "evening", "variable"]
DifficultyFeedback = Literal["too_easy", "just_right", "too_hard"]

StrId = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=128)]
StrTiny = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]
StrShort = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=160)]
StrLong = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=2000)]
TagList = Annotated[List[StrTiny], Field(max_length=30)]
