from __future__ import annotations

from typing import Dict, List, Optional

from leqet.services.nutrition import round_half_up

INTENSITY_MULTIPLIERS: Dict[str, float] = {
    "low": 0.8,
    "medium": 1.0,
    "high": 1.3,
}

CARDIO_CALORIES_PER_MIN = 8
STRENGTH_CALORIES_PER_MIN = 6
DEFAULT_CALORIES_PER_MIN = 5

_CATEGORY_KEYWORDS = (
    ("cardio", ("run", "cycle", "bike", "walk")),
    ("strength", ("press", "squat", "deadlift", "bench")),
    ("flexibility", ("yoga", "stretch")),
)


def calories_burned(calories_per_minute: float, duration_minutes: float, intensity: str = "medium") -> int:
    """Calories for a session; unknown intensities count as medium."""
    if float(duration_minutes) <= 0:
        raise ValueError("Duration must be greater than 0")
    multiplier = INTENSITY_MULTIPLIERS.get((intensity or "medium").lower(), 1.0)
    return round_half_up(float(calories_per_minute) * float(duration_minutes) * multiplier)


def infer_exercise_category(name: Optional[str]) -> str:
    lowered = (name or "").lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(word in lowered for word in keywords):
            return category
    return "sports"


def estimate_calories_per_minute(exercise: dict) -> float:
    """Calories/minute from an external exercise record, with a type-based fallback."""
    try:
        duration = float(exercise.get("duration") or 0)
        calories = float(exercise.get("calories") or 0)
    except (TypeError, ValueError):
        duration = calories = 0
    if duration > 0 and calories > 0:
        return calories / duration

    kind = str(exercise.get("type") or "").lower()
    if "cardio" in kind:
        return CARDIO_CALORIES_PER_MIN
    if "strength" in kind:
        return STRENGTH_CALORIES_PER_MIN
    return DEFAULT_CALORIES_PER_MIN


def split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def weekly_sessions_target(weekly_minutes) -> int:
    """Thirty-minute sessions per week, at least one."""
    try:
        minutes = float(weekly_minutes)
    except (TypeError, ValueError):
        minutes = 0
    return max(1, round_half_up(minutes / 30))
