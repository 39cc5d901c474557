# =============================================================================
# gymtrack_core/backends/field_mapping.py
# camelCase Record <-> snake_case Row Mapping
# =============================================================================
"""
Column mapping for the relational backend.

Every dataclass field of a record type maps to the column with the same
snake_case name, so the mapping is total and reversible:

    workout.startTime      <-> workouts.start_time
    workout.exercises      <-> workouts.exercises   (JSON column)
    account.profile        <-> profiles.profile     (JSON column)

Nested records and lists are stored as JSON with their camelCase keys
untouched; only top-level field names are converted. Rows for categories
whose record type carries no owner field (custom exercises) receive an
extra user_id column on write, which is dropped again on read.
"""

from __future__ import annotations
import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from gymtrack_core.backends.base import ORDER_FIELDS, RemoteCategory
from gymtrack_core.models import (
    Account,
    BodyMeasurement,
    BodyWeightEntry,
    ExerciseCatalogEntry,
    Goal,
    PersonalRecord,
    ProgressPhoto,
    Record,
    WorkoutSession,
    WorkoutTemplate,
    to_camel,
    to_snake,
)

OWNER_COLUMN = "user_id"


@dataclass(frozen=True)
class TableSpec:
    """Where a category lives in the relational store"""
    table: str
    record_type: Type[Record]
    order_column: Optional[str] = None


CATEGORY_RECORD_TYPES: Dict[RemoteCategory, Type[Record]] = {
    RemoteCategory.WORKOUTS: WorkoutSession,
    RemoteCategory.CUSTOM_EXERCISES: ExerciseCatalogEntry,
    RemoteCategory.BODY_WEIGHTS: BodyWeightEntry,
    RemoteCategory.MEASUREMENTS: BodyMeasurement,
    RemoteCategory.PROGRESS_PHOTOS: ProgressPhoto,
    RemoteCategory.PERSONAL_RECORDS: PersonalRecord,
    RemoteCategory.GOALS: Goal,
    RemoteCategory.TEMPLATES: WorkoutTemplate,
}

_TABLE_NAMES: Dict[RemoteCategory, str] = {
    RemoteCategory.WORKOUTS: "workouts",
    RemoteCategory.CUSTOM_EXERCISES: "custom_exercises",
    RemoteCategory.BODY_WEIGHTS: "body_weights",
    RemoteCategory.MEASUREMENTS: "measurements",
    RemoteCategory.PROGRESS_PHOTOS: "progress_photos",
    RemoteCategory.PERSONAL_RECORDS: "personal_records",
    RemoteCategory.GOALS: "goals",
    RemoteCategory.TEMPLATES: "workout_templates",
}


def _order_column(category: RemoteCategory) -> Optional[str]:
    field = ORDER_FIELDS[category]
    return to_snake(field) if field else None


TABLES: Dict[RemoteCategory, TableSpec] = {
    category: TableSpec(
        table=_TABLE_NAMES[category],
        record_type=CATEGORY_RECORD_TYPES[category],
        order_column=_order_column(category),
    )
    for category in RemoteCategory
}

ACCOUNT_TABLE = TableSpec(table="profiles", record_type=Account)


def column_map(record_type: Type[Record]) -> Dict[str, str]:
    """camelCase field -> snake_case column for every field of a record type"""
    return {to_camel(f.name): f.name for f in dataclasses.fields(record_type)}


def to_row(
    record_type: Type[Record],
    data: Dict[str, Any],
    account_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Convert a camelCase record dict to a row.

    Args:
        record_type: Record class the dict was produced from
        data: Output of record.to_dict()
        account_id: Owner id, added as user_id when the record has none

    Returns:
        Row dict keyed by column name; missing fields become None
    """
    row = {column: data.get(key) for key, column in column_map(record_type).items()}
    if account_id is not None and OWNER_COLUMN not in row and record_type is not Account:
        row[OWNER_COLUMN] = account_id
    return row


def from_row(record_type: Type[Record], row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert a row back to the camelCase dict shape of record_type.

    Columns that are not fields of the record (e.g. an added user_id or
    server-side timestamps) are ignored.
    """
    return {
        key: row.get(column)
        for key, column in column_map(record_type).items()
        if column in row
    }
