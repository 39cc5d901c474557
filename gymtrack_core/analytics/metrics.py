# =============================================================================
# gymtrack_core/analytics/metrics.py
# Per-Session Metrics and Unit Helpers
# =============================================================================

from __future__ import annotations
from typing import Optional

from gymtrack_core.models import WorkoutSession

LBS_PER_KG = 2.205

BASE_BURN_PER_MINUTE = 5      # kcal/min, average for weight training
MAX_INTENSITY_MULTIPLIER = 1.5
INTENSITY_PER_SET = 0.05


def epley(weight: float, reps: int) -> float:
    """Epley one-rep-max estimate: weight x (1 + reps/30)"""
    return weight * (1 + reps / 30)


def estimate_one_rep_max(weight: float, reps: int) -> float:
    """
    Estimated one-rep max for a set.

    A single rep is its own maximum; otherwise the Epley formula applies.
    """
    if reps == 1:
        return weight
    return epley(weight, reps)


def set_volume(weight: Optional[float], reps: Optional[int]) -> float:
    return (weight or 0) * (reps or 0)


def workout_volume(session: WorkoutSession) -> float:
    """Sum of weight x reps over completed sets"""
    return sum(set_volume(s.weight, s.reps) for _, s in session.completed_sets())


def estimate_session_calories(session: WorkoutSession, duration_seconds: float) -> int:
    """
    Estimate calories burned in a session.

    minutes x 5 x min(1.5, 1 + 0.05 x sets_per_exercise), rounded.

    Args:
        session: The session being finished (all logged sets count)
        duration_seconds: Wall-clock duration

    Returns:
        Estimated kcal
    """
    minutes = duration_seconds / 60
    exercise_count = len(session.exercises)

    multiplier = 1.0
    if exercise_count:
        sets_per_exercise = session.total_sets / exercise_count
        multiplier = min(MAX_INTENSITY_MULTIPLIER, 1 + INTENSITY_PER_SET * sets_per_exercise)

    return round(minutes * BASE_BURN_PER_MINUTE * multiplier)


# =============================================================================
# UNITS AND FORMATTING
# =============================================================================

def kg_to_lbs(kg: float) -> float:
    return kg * LBS_PER_KG


def lbs_to_kg(lbs: float) -> float:
    return lbs / LBS_PER_KG


def format_weight(weight_kg: float, imperial: bool = False) -> str:
    if imperial:
        return f"{kg_to_lbs(weight_kg):.1f} lbs"
    return f"{weight_kg:g} kg"


def format_duration(seconds: int) -> str:
    """
    Human-readable duration.

    >>> format_duration(45), format_duration(300), format_duration(3900)
    ('45s', '5m', '1h 5m')
    """
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds}s"
    hours, remainder = divmod(seconds, 3600)
    minutes = remainder // 60
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
