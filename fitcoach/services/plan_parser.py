"""Extraction and validation of untrusted model output."""
from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from fitcoach.api.schemas.workout_plan import WorkoutPlanDraft

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_LOG_EXCERPT = 500


class PlanParseError(ValueError):
    """Model output could not be turned into a valid workout plan."""


def extract_json(text: str) -> str:
    """Pull a JSON object out of bare, fenced, or prose-wrapped model text."""
    trimmed = (text or "").strip()
    if trimmed.startswith("{") and trimmed.endswith("}"):
        return trimmed
    fence = _FENCE.search(trimmed)
    if fence and fence.group(1):
        return fence.group(1)
    first = trimmed.find("{")
    last = trimmed.rfind("}")
    if first != -1 and last > first:
        return trimmed[first : last + 1]
    raise PlanParseError("No JSON object found in model output.")


def parse_plan(text: str) -> WorkoutPlanDraft:
    """Extract, decode and schema-check a plan; details go to the log only."""
    try:
        raw = extract_json(text)
    except PlanParseError:
        logger.error("Model output contained no JSON object: %r", (text or "")[:_LOG_EXCERPT])
        raise

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.error("Model JSON could not be decoded (%s): %r", exc, raw[:_LOG_EXCERPT])
        raise PlanParseError("Model returned malformed JSON.") from exc

    if not isinstance(payload, dict):
        logger.error("Model JSON was %s, expected an object", type(payload).__name__)
        raise PlanParseError("Model returned a non-object JSON value.")

    try:
        return WorkoutPlanDraft.model_validate(payload)
    except ValidationError as exc:
        logger.error("Model JSON failed validation: %s", exc.errors(include_url=False))
        raise PlanParseError("Model returned invalid plan JSON.") from exc
