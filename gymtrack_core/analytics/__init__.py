"""
Derived-data helpers. Pure functions over the in-memory collections.
"""

from .metrics import (
    epley,
    estimate_one_rep_max,
    set_volume,
    workout_volume,
    estimate_session_calories,
    kg_to_lbs,
    lbs_to_kg,
    format_weight,
    format_duration,
)
from .records import update_personal_records
from .summaries import (
    WeeklySummary,
    MonthlySummary,
    LifetimeTotals,
    sessions_frame,
    exercises_frame,
    week_bounds,
    weekly_summary,
    monthly_summary,
    calculate_streak,
    lifetime_totals,
)

__all__ = [
    "epley",
    "estimate_one_rep_max",
    "set_volume",
    "workout_volume",
    "estimate_session_calories",
    "kg_to_lbs",
    "lbs_to_kg",
    "format_weight",
    "format_duration",
    "update_personal_records",
    "WeeklySummary",
    "MonthlySummary",
    "LifetimeTotals",
    "sessions_frame",
    "exercises_frame",
    "week_bounds",
    "weekly_summary",
    "monthly_summary",
    "calculate_streak",
    "lifetime_totals",
]
