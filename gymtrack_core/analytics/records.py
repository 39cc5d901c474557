# =============================================================================
# gymtrack_core/analytics/records.py
# Personal Record Recompute
# =============================================================================

from __future__ import annotations
from typing import Callable, Dict, List, Tuple

from gymtrack_core.analytics.metrics import epley
from gymtrack_core.models import PersonalRecord, WorkoutSession


def update_personal_records(
    records: List[PersonalRecord],
    session: WorkoutSession,
    account_id: str,
    id_factory: Callable[[], str],
) -> Tuple[List[PersonalRecord], List[PersonalRecord]]:
    """
    Fold a finished session's completed sets into the personal records.

    For each completed set with a weight and rep count, the Epley estimate
    replaces the exercise's record when it is strictly higher (or no record
    exists). Sets are applied one by one, so a session can raise the same
    record several times and only the best survives.

    Args:
        records: Current records, at most one per exercise
        session: The finished session
        account_id: Owner of any new records
        id_factory: Generates ids for new records

    Returns:
        (all records, records that changed in this call)
    """
    by_exercise: Dict[str, PersonalRecord] = {r.exercise_id: r for r in records}
    changed: Dict[str, PersonalRecord] = {}

    for exercise, set_entry in session.completed_sets():
        if not set_entry.weight or not set_entry.reps:
            continue

        one_rep_max = epley(set_entry.weight, set_entry.reps)
        current = by_exercise.get(exercise.exercise_id)
        best = current.one_rep_max if current and current.one_rep_max is not None else None

        if current is not None and best is not None and one_rep_max <= best:
            continue

        record = PersonalRecord(
            id=current.id if current is not None else id_factory(),
            user_id=account_id,
            exercise_id=exercise.exercise_id,
            exercise_name=exercise.exercise_name,
            weight=set_entry.weight,
            reps=set_entry.reps,
            date=session.date,
            one_rep_max=one_rep_max,
        )
        by_exercise[exercise.exercise_id] = record
        changed[exercise.exercise_id] = record

    untouched = [r for r in records if r.exercise_id not in changed]
    return untouched + list(changed.values()), list(changed.values())
