# =============================================================================
# gymtrack_core/analytics/summaries.py
# Weekly / Monthly Summaries, Streak and Lifetime Totals
# =============================================================================
"""
Aggregate statistics over the in-memory workout history.

Everything here is a pure function of its inputs and is recomputed on every
call. Completed sessions are flattened into pandas frames (one row per
session, one row per exercise) and filtered by calendar window.

Weeks run Sunday to Saturday. Only completed sessions count; within them
only completed sets contribute to volume, set and rep totals.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Union

import pandas as pd

from gymtrack_core.analytics.metrics import set_volume
from gymtrack_core.models import MuscleGroup, PersonalRecord, WorkoutSession

MAX_STREAK_DAYS = 365

SESSION_COLUMNS = ["session_id", "date", "duration", "calories", "volume", "sets", "reps"]
EXERCISE_COLUMNS = ["session_id", "muscle_group"]


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass
class WeeklySummary:
    week_start: date
    week_end: date
    total_workouts: int = 0
    total_duration: int = 0
    total_volume: float = 0.0
    total_sets: int = 0
    total_reps: int = 0
    calories_burned: int = 0
    muscle_group_breakdown: Dict[MuscleGroup, int] = field(default_factory=dict)


@dataclass
class MonthlySummary:
    month: str  # YYYY-MM
    total_workouts: int = 0
    total_duration: int = 0
    total_volume: float = 0.0
    total_sets: int = 0
    total_reps: int = 0
    calories_burned: int = 0
    personal_records: int = 0
    average_workout_duration: int = 0
    consistency_percentage: int = 0


@dataclass
class LifetimeTotals:
    total_workouts: int = 0
    total_duration: int = 0
    total_volume: float = 0.0
    total_calories: int = 0


# =============================================================================
# FRAMES
# =============================================================================

def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def sessions_frame(workouts: Iterable[WorkoutSession]) -> pd.DataFrame:
    """One row per completed session with its completed-set totals"""
    rows = []
    for workout in workouts:
        if not workout.is_completed:
            continue
        completed = [s for _, s in workout.completed_sets()]
        rows.append({
            "session_id": workout.id,
            "date": workout.date[:10],
            "duration": workout.duration or 0,
            "calories": workout.calories_estimate or 0,
            "volume": sum(set_volume(s.weight, s.reps) for s in completed),
            "sets": len(completed),
            "reps": sum(s.reps or 0 for s in completed),
        })

    frame = pd.DataFrame(rows, columns=SESSION_COLUMNS)
    frame["date"] = pd.to_datetime(frame["date"])
    return frame


def exercises_frame(workouts: Iterable[WorkoutSession]) -> pd.DataFrame:
    """One row per exercise of every completed session"""
    rows = [
        {"session_id": workout.id, "muscle_group": exercise.muscle_group.value}
        for workout in workouts
        if workout.is_completed
        for exercise in workout.exercises
    ]
    return pd.DataFrame(rows, columns=EXERCISE_COLUMNS)


def _window(frame: pd.DataFrame, start: date, end: date) -> pd.DataFrame:
    return frame[frame["date"].between(pd.Timestamp(start), pd.Timestamp(end))]


def _totals(frame: pd.DataFrame) -> Dict[str, Union[int, float]]:
    return {
        "total_workouts": int(len(frame)),
        "total_duration": int(frame["duration"].sum()),
        "total_volume": float(frame["volume"].sum()),
        "total_sets": int(frame["sets"].sum()),
        "total_reps": int(frame["reps"].sum()),
        "calories_burned": int(frame["calories"].sum()),
    }


# =============================================================================
# SUMMARIES
# =============================================================================

def week_bounds(now: Union[date, datetime]) -> tuple:
    """(Sunday, Saturday) of the week containing now"""
    today = _as_date(now)
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def weekly_summary(workouts: List[WorkoutSession], now: Union[date, datetime]) -> WeeklySummary:
    """
    Totals for the Sunday-to-Saturday week containing now.

    Includes a histogram of exercises performed per muscle group.
    """
    start, end = week_bounds(now)
    week = _window(sessions_frame(workouts), start, end)

    exercises = exercises_frame(workouts)
    counts = exercises[exercises["session_id"].isin(week["session_id"])]["muscle_group"].value_counts()

    return WeeklySummary(
        week_start=start,
        week_end=end,
        muscle_group_breakdown={MuscleGroup(group): int(n) for group, n in counts.items()},
        **_totals(week),
    )


def monthly_summary(
    workouts: List[WorkoutSession],
    now: Union[date, datetime],
    personal_records: Optional[List[PersonalRecord]] = None,
) -> MonthlySummary:
    """
    Totals for the calendar month containing now.

    consistency_percentage is the share of the month's days with at least
    one completed session; personal_records counts records set this month.
    """
    today = _as_date(now)
    period = pd.Period(today, freq="M")
    start = period.start_time.date()
    end = period.end_time.date()

    month = _window(sessions_frame(workouts), start, end)
    totals = _totals(month)

    workout_days = month["date"].nunique()
    record_count = sum(
        1 for r in (personal_records or []) if start.isoformat() <= r.date[:10] <= end.isoformat()
    )

    return MonthlySummary(
        month=f"{today.year}-{today.month:02d}",
        personal_records=record_count,
        average_workout_duration=(
            round(totals["total_duration"] / totals["total_workouts"]) if totals["total_workouts"] else 0
        ),
        consistency_percentage=round(workout_days / period.days_in_month * 100),
        **totals,
    )


def calculate_streak(
    workouts: List[WorkoutSession],
    today: Union[date, datetime],
    allow_empty_today: bool = False,
) -> int:
    """
    Consecutive days with a completed session, counting back from today.

    Args:
        workouts: Workout history
        today: Day the streak is evaluated on
        allow_empty_today: Treat an empty today as "not trained yet" rather
            than a gap, so yesterday's streak is still reported

    Returns:
        Streak length in days (capped at 365)
    """
    completed_dates = {w.date[:10] for w in workouts if w.is_completed}
    day = _as_date(today)

    streak = 0
    for offset in range(MAX_STREAK_DAYS):
        check = (day - timedelta(days=offset)).isoformat()
        if check in completed_dates:
            streak += 1
        elif offset == 0 and allow_empty_today:
            continue
        else:
            break
    return streak


def lifetime_totals(workouts: List[WorkoutSession]) -> LifetimeTotals:
    frame = sessions_frame(workouts)
    return LifetimeTotals(
        total_workouts=int(len(frame)),
        total_duration=int(frame["duration"].sum()),
        total_volume=float(frame["volume"].sum()),
        total_calories=int(frame["calories"].sum()),
    )
