# =============================================================================
# tests/unit/test_summaries.py
# Unit Tests for Weekly/Monthly Summaries, Streaks and Lifetime Totals
# =============================================================================

from datetime import date, datetime

import pandas as pd

from gymtrack_core.analytics import (
    calculate_streak,
    lifetime_totals,
    monthly_summary,
    sessions_frame,
    week_bounds,
    weekly_summary,
)
from gymtrack_core.models import MuscleGroup, PersonalRecord

NOW = datetime(2024, 6, 14, 18, 30)


class TestWeekBounds:
    """Test Sunday-to-Saturday weeks"""

    def test_midweek(self):
        assert week_bounds(NOW) == (date(2024, 6, 9), date(2024, 6, 15))

    def test_sunday_starts_its_own_week(self):
        assert week_bounds(date(2024, 6, 9))[0] == date(2024, 6, 9)

    def test_saturday_ends_the_week(self):
        assert week_bounds(date(2024, 6, 15)) == (date(2024, 6, 9), date(2024, 6, 15))


class TestWeeklySummary:
    """Test weekly totals"""

    def test_totals(self, sample_workouts):
        summary = weekly_summary(sample_workouts, NOW)

        assert summary.total_workouts == 3
        assert summary.total_duration == 3 * 3600
        assert summary.total_volume == 1500
        assert summary.total_sets == 3
        assert summary.total_reps == 15
        assert summary.calories_burned == 900

    def test_muscle_group_breakdown(self, sample_workouts):
        summary = weekly_summary(sample_workouts, NOW)
        assert summary.muscle_group_breakdown == {MuscleGroup.CHEST: 2, MuscleGroup.BACK: 1}

    def test_previous_week_excluded(self, sample_workouts, workout_factory):
        workouts = sample_workouts + [workout_factory("old", "2024-06-08")]
        assert weekly_summary(workouts, NOW).total_workouts == 3

    def test_incomplete_sessions_excluded(self, sample_workouts, workout_factory):
        workouts = sample_workouts + [workout_factory("open", "2024-06-13", completed=False)]
        assert weekly_summary(workouts, NOW).total_workouts == 3

    def test_incomplete_sets_add_no_volume(self, workout_factory, set_factory):
        workout = workout_factory("w1", "2024-06-12", sets=[
            set_factory("a", 1, 100, 5),
            set_factory("b", 2, 100, 5, completed=False),
        ])
        summary = weekly_summary([workout], NOW)

        assert summary.total_volume == 500
        assert summary.total_sets == 1

    def test_empty_history(self):
        summary = weekly_summary([], NOW)

        assert summary.total_workouts == 0
        assert summary.total_volume == 0
        assert summary.muscle_group_breakdown == {}


class TestMonthlySummary:
    """Test monthly totals"""

    def test_totals_and_consistency(self, sample_workouts, workout_factory):
        workouts = sample_workouts + [workout_factory("may", "2024-05-31")]
        summary = monthly_summary(workouts, NOW)

        assert summary.month == "2024-06"
        assert summary.total_workouts == 3
        assert summary.average_workout_duration == 3600
        # 3 of 30 days
        assert summary.consistency_percentage == 10

    def test_two_sessions_same_day_count_once_for_consistency(self, workout_factory):
        workouts = [workout_factory("a", "2024-06-03"), workout_factory("b", "2024-06-03")]
        summary = monthly_summary(workouts, NOW)

        assert summary.total_workouts == 2
        assert summary.consistency_percentage == 3

    def test_personal_records_in_month(self, sample_workouts):
        records = [
            PersonalRecord(id="1", user_id="u", exercise_id="ex_1", exercise_name="Bench",
                           weight=100, reps=5, date="2024-06-12"),
            PersonalRecord(id="2", user_id="u", exercise_id="ex_2", exercise_name="Incline",
                           weight=80, reps=5, date="2024-05-20"),
        ]
        assert monthly_summary(sample_workouts, NOW, records).personal_records == 1

    def test_empty_month(self):
        summary = monthly_summary([], NOW)

        assert summary.total_workouts == 0
        assert summary.average_workout_duration == 0
        assert summary.consistency_percentage == 0


class TestStreak:
    """Test streak counting"""

    def test_streak_on_last_training_day(self, sample_workouts):
        assert calculate_streak(sample_workouts, date(2024, 6, 12)) == 3

    def test_gap_day_breaks_streak(self, sample_workouts):
        assert calculate_streak(sample_workouts, date(2024, 6, 13)) == 0

    def test_empty_today_allowed(self, sample_workouts):
        """An untrained today does not end yesterday's streak when allowed"""
        assert calculate_streak(sample_workouts, date(2024, 6, 13), allow_empty_today=True) == 3

    def test_earlier_gap_still_breaks_when_allowed(self, sample_workouts):
        assert calculate_streak(sample_workouts, date(2024, 6, 14), allow_empty_today=True) == 0

    def test_incomplete_sessions_do_not_count(self, workout_factory):
        workouts = [workout_factory("a", "2024-06-12", completed=False)]
        assert calculate_streak(workouts, date(2024, 6, 12)) == 0

    def test_accepts_datetime(self, sample_workouts):
        assert calculate_streak(sample_workouts, datetime(2024, 6, 12, 23, 59)) == 3

    def test_capped_at_a_year(self, workout_factory):
        workouts = [
            workout_factory(f"w{i}", d.date().isoformat())
            for i, d in enumerate(
                pd.date_range(end="2024-06-12", periods=400, freq="D")
            )
        ]
        assert calculate_streak(workouts, date(2024, 6, 12)) == 365


class TestLifetimeTotals:
    """Test all-time totals"""

    def test_totals(self, sample_workouts, workout_factory):
        workouts = sample_workouts + [workout_factory("open", "2024-06-13", completed=False)]
        totals = lifetime_totals(workouts)

        assert totals.total_workouts == 3
        assert totals.total_duration == 10800
        assert totals.total_volume == 1500
        assert totals.total_calories == 900

    def test_sessions_frame_columns(self, sample_workouts):
        frame = sessions_frame(sample_workouts)

        assert list(frame["session_id"]) == ["w3", "w2", "w1"]
        assert frame["date"].dt.day.tolist() == [12, 11, 10]

    def test_empty(self):
        assert lifetime_totals([]).total_workouts == 0
