# =============================================================================
# gymtrack_core/models/__init__.py
# Domain Records
# =============================================================================

from .base import Record, to_camel, to_snake
from .domain import (
    FitnessGoal,
    ExperienceLevel,
    UnitSystem,
    SubscriptionPlan,
    SetType,
    MuscleGroup,
    ExerciseCategory,
    PhotoCategory,
    ThemePreference,
    Profile,
    Account,
    SetEntry,
    ExerciseEntry,
    WorkoutSession,
    ExerciseCatalogEntry,
    BodyWeightEntry,
    BodyMeasurement,
    ProgressPhoto,
    PersonalRecord,
    Goal,
    TemplateExercise,
    WorkoutTemplate,
    NotificationSettings,
)
from .catalog import DEFAULT_EXERCISES, MUSCLE_GROUP_LABELS, build_catalog, find_exercise

__all__ = [
    "Record",
    "to_camel",
    "to_snake",
    "FitnessGoal",
    "ExperienceLevel",
    "UnitSystem",
    "SubscriptionPlan",
    "SetType",
    "MuscleGroup",
    "ExerciseCategory",
    "PhotoCategory",
    "ThemePreference",
    "Profile",
    "Account",
    "SetEntry",
    "ExerciseEntry",
    "WorkoutSession",
    "ExerciseCatalogEntry",
    "BodyWeightEntry",
    "BodyMeasurement",
    "ProgressPhoto",
    "PersonalRecord",
    "Goal",
    "TemplateExercise",
    "WorkoutTemplate",
    "NotificationSettings",
    "DEFAULT_EXERCISES",
    "MUSCLE_GROUP_LABELS",
    "build_catalog",
    "find_exercise",
]
