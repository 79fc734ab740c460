"""Deterministic prompt rendering for workout generation."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

from fitcoach.api.schemas.profile import ProfileShape
from fitcoach.api.schemas.workout_plan import WorkoutPlanDraft
from fitcoach.services.history_sampler import SessionSample
from fitcoach.services.progression import SessionFeedback

HISTORY_PROMPT_SAMPLE = 5
PROGRESS_PROMPT_SAMPLE = 3

Message = Dict[str, str]


def plan_schema_json() -> str:
    return json.dumps(WorkoutPlanDraft.model_json_schema(), indent=2, sort_keys=True)


def build_system_prompt() -> str:
    return "\n".join(
        [
            "You are an elite personal trainer and exercise physiologist.",
            "Create highly personalized, progressive workouts that are safe, effective, and motivating.",
            "Requirements:",
            "- Safety first (clear form cues, account for limitations)",
            "- Progressive overload (note how to progress/regress)",
            "- Specificity to goals and equipment only",
            "- Variety without randomness, and respect session time",
            "- Recovery balance and smart rest",
            "Output: STRICT JSON conforming to the provided schema. No comments or markdown.",
        ]
    )


def build_plan_prompt(
    *,
    profile: ProfileShape,
    workout_type: str,
    progression_level: int,
    focus_areas: Sequence[str],
    history: Sequence[SessionSample],
    progress: Sequence[Dict[str, Any]],
    frequent: Sequence[str],
) -> str:
    time_commitment = profile.time_commitment
    preferences = profile.preferences
    system = profile.system
    weekly_minutes = system.weekly_minutes if system and system.weekly_minutes is not None else "n/a"
    load_index = system.training_load_index if system and system.training_load_index is not None else "n/a"
    history_sample = [session.to_prompt_dict() for session in history[:HISTORY_PROMPT_SAMPLE]]
    progress_sample = list(progress[:PROGRESS_PROMPT_SAMPLE])

    return (
        "Generate a single-session workout tailored to this user:\n\n"
        "PROFILE\n"
        f"- Fitness level: {profile.fitness_level}\n"
        f"- Goals: {_joined(profile.fitness_goals, '-')}\n"
        f"- Equipment ONLY: {_joined(profile.available_equipment, 'bodyweight')}\n"
        f"- Time: {time_commitment.minutes_per_session} min, {time_commitment.days_per_week} days/week, "
        f"preferred: {_joined(time_commitment.preferred_times, '-')}\n"
        f"- Preferences: types={_joined(preferences.workout_types, '-')}, intensity={preferences.intensity}, "
        f"rest-day={preferences.rest_day_preference}, "
        f"limitations={_joined(preferences.injuries_or_limitations, 'none')}\n"
        f"- System: weeklyMinutes={weekly_minutes}, trainingLoadIndex={load_index}\n\n"
        "SESSION\n"
        f"- Type: {workout_type}\n"
        f"- Focus areas: {_joined(focus_areas, 'general fitness')}\n"
        f"- Target progression level (1..10): {progression_level}\n\n"
        "DATA POINTS\n"
        f"- History sample: {_compact(history_sample)}\n"
        f"- Recent progress sample: {_compact(progress_sample)}\n"
        f"- Frequently used exercises to avoid repeating: {_joined(frequent, 'none')}\n\n"
        "SCHEMA\n"
        f"{plan_schema_json()}\n\n"
        "CONSTRAINTS\n"
        "- Use only the allowed equipment.\n"
        "- Fit within the allotted minutes including warm-up and cool-down.\n"
        "- Provide exercise-level instructions, rest_time (sec), and realistic sets/reps or duration.\n"
        "- Include helpful progression tips and a motivational quote."
    )


def build_adaptive_prompt(
    *,
    previous_plan: Dict[str, Any],
    feedback: SessionFeedback,
    progression_level: int,
) -> str:
    return (
        "Create an ADAPTIVE workout improving on the prior session.\n\n"
        "PRIOR SESSION\n"
        f"- Name: {previous_plan.get('name')}\n"
        f"- Type: {previous_plan.get('type')}\n"
        f"- Estimated duration: {previous_plan.get('estimated_duration')} min\n"
        f"- Equipment: {_joined(previous_plan.get('equipment') or [], 'bodyweight')}\n\n"
        "FEEDBACK\n"
        f"- Performance rating: {_number(feedback.performance_rating)}/5\n"
        f"- Completion rate: {int(feedback.completion_rate * 100 + 0.5)}%\n"
        f"- Difficulty feedback: {feedback.difficulty_feedback}\n"
        f"- Time taken: {feedback.time_actual} min\n\n"
        "ADAPTATION TARGET\n"
        f"- New progression level: {progression_level} (1..10)\n\n"
        "SCHEMA\n"
        f"{plan_schema_json()}\n\n"
        "Rules:\n"
        "- Preserve theme/type but adjust intensity, volume, and complexity according to feedback.\n"
        "- Keep equipment constraints identical to previous.\n"
        "- Maintain or improve movement quality; emphasize form cues and safety.\n"
        "- Output STRICT JSON for the schema above."
    )


def build_messages(user_prompt: str, system_prompt: Optional[str] = None) -> List[Message]:
    return [
        {"role": "system", "content": system_prompt or build_system_prompt()},
        {"role": "user", "content": user_prompt},
    ]


def _joined(values: Sequence[str], empty: str) -> str:
    return ", ".join(values) if values else empty


def _compact(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
