# =============================================================================
# gymtrack_core/models/domain.py
# Domain Records for Workout Tracking
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from gymtrack_core.models.base import Record


# =============================================================================
# ENUMS
# =============================================================================

class FitnessGoal(Enum):
    WEIGHT_LOSS = "weight_loss"
    MUSCLE_GAIN = "muscle_gain"
    MAINTENANCE = "maintenance"
    CUSTOM = "custom"


class ExperienceLevel(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class UnitSystem(Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"


class SubscriptionPlan(Enum):
    FREE = "free"
    PREMIUM_MONTHLY = "premium_monthly"
    PREMIUM_YEARLY = "premium_yearly"


class SetType(Enum):
    NORMAL = "normal"
    WARMUP = "warmup"
    DROPSET = "dropset"
    FAILURE = "failure"


class MuscleGroup(Enum):
    CHEST = "chest"
    BACK = "back"
    SHOULDERS = "shoulders"
    BICEPS = "biceps"
    TRICEPS = "triceps"
    LEGS = "legs"
    GLUTES = "glutes"
    ABS = "abs"
    CARDIO = "cardio"
    FULL_BODY = "full_body"
    OTHER = "other"


class ExerciseCategory(Enum):
    BARBELL = "barbell"
    DUMBBELL = "dumbbell"
    MACHINE = "machine"
    CABLE = "cable"
    BODYWEIGHT = "bodyweight"
    CARDIO = "cardio"
    OTHER = "other"


class PhotoCategory(Enum):
    FRONT = "front"
    SIDE = "side"
    BACK = "back"


class ThemePreference(Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


# =============================================================================
# ACCOUNT
# =============================================================================

@dataclass
class Profile(Record):
    """Body and preference data embedded in an account"""
    name: str = ""
    age: Optional[int] = None
    height: Optional[float] = None  # cm
    weight: Optional[float] = None  # kg, kept in sync with the latest weigh-in
    goal: FitnessGoal = FitnessGoal.MUSCLE_GAIN
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER
    units: UnitSystem = UnitSystem.METRIC


@dataclass
class Account(Record):
    """An authenticated end-user and their profile"""
    id: str
    email: str
    display_name: str
    created_at: str
    updated_at: str
    profile: Profile = field(default_factory=Profile)
    subscription: SubscriptionPlan = SubscriptionPlan.FREE
    photo_url: Optional[str] = None


# =============================================================================
# WORKOUTS
# =============================================================================

@dataclass
class SetEntry(Record):
    """One set of an exercise; set_number is 1-based and contiguous"""
    id: str
    set_number: int
    weight: Optional[float] = None  # kg
    reps: Optional[int] = None
    is_completed: bool = False
    type: SetType = SetType.NORMAL
    rpe: Optional[float] = None  # 1-10


@dataclass
class ExerciseEntry(Record):
    """
    An exercise performed within a session.

    Name and muscle group are copied from the catalog so history stays
    readable if the catalog entry is edited later.
    """
    id: str
    exercise_id: str
    exercise_name: str
    muscle_group: MuscleGroup
    sets: List[SetEntry] = field(default_factory=list)
    rest_timer_seconds: int = 90
    order: int = 0
    notes: Optional[str] = None


@dataclass
class WorkoutSession(Record):
    """One logged gym visit. duration/calories are set only once completed."""
    id: str
    user_id: str
    name: str
    date: str  # YYYY-MM-DD
    start_time: str
    created_at: str
    exercises: List[ExerciseEntry] = field(default_factory=list)
    is_completed: bool = False
    end_time: Optional[str] = None
    duration: Optional[int] = None  # seconds
    notes: Optional[str] = None
    calories_estimate: Optional[int] = None

    @property
    def total_sets(self) -> int:
        return sum(len(ex.sets) for ex in self.exercises)

    def completed_sets(self):
        """Yield (exercise, set) pairs for every completed set"""
        for exercise in self.exercises:
            for set_entry in exercise.sets:
                if set_entry.is_completed:
                    yield exercise, set_entry


# =============================================================================
# EXERCISE CATALOG
# =============================================================================

@dataclass
class ExerciseCatalogEntry(Record):
    id: str
    name: str
    muscle_group: MuscleGroup
    category: ExerciseCategory
    is_custom: bool = False
    description: Optional[str] = None
    instructions: Optional[List[str]] = None


# =============================================================================
# BODY DATA
# =============================================================================

@dataclass
class BodyWeightEntry(Record):
    id: str
    user_id: str
    weight: float  # kg
    date: str
    notes: Optional[str] = None


@dataclass
class BodyMeasurement(Record):
    id: str
    user_id: str
    date: str
    chest: Optional[float] = None  # cm
    arms: Optional[float] = None
    waist: Optional[float] = None
    legs: Optional[float] = None
    notes: Optional[str] = None


@dataclass
class ProgressPhoto(Record):
    """A progress photo; uri points at the uploaded blob"""
    id: str
    user_id: str
    uri: str
    date: str
    category: PhotoCategory = PhotoCategory.FRONT
    notes: Optional[str] = None


# =============================================================================
# RECORDS, GOALS, TEMPLATES, SETTINGS
# =============================================================================

@dataclass
class PersonalRecord(Record):
    """Best known lift for one exercise. At most one per exercise."""
    id: str
    user_id: str
    exercise_id: str
    exercise_name: str
    weight: float
    reps: int
    date: str
    one_rep_max: Optional[float] = None


@dataclass
class Goal(Record):
    id: str
    user_id: str
    type: FitnessGoal
    title: str
    created_at: str
    is_completed: bool = False
    description: Optional[str] = None
    target_value: Optional[float] = None
    current_value: Optional[float] = None
    unit: Optional[str] = None
    deadline: Optional[str] = None


@dataclass
class TemplateExercise(Record):
    exercise_id: str
    exercise_name: str
    muscle_group: MuscleGroup
    target_sets: int = 3
    target_reps: int = 10
    rest_timer_seconds: int = 90
    order: int = 0


@dataclass
class WorkoutTemplate(Record):
    id: str
    user_id: str
    name: str
    created_at: str
    exercises: List[TemplateExercise] = field(default_factory=list)
    times_used: int = 0
    last_used: Optional[str] = None


@dataclass
class NotificationSettings(Record):
    """Reminder preferences; reminder_days are 0-6 (Sun-Sat)"""
    workout_reminders: bool = True
    reminder_time: str = "09:00"
    reminder_days: List[int] = field(default_factory=lambda: [1, 2, 3, 4, 5])
    goal_progress_alerts: bool = True
    personal_record_alerts: bool = True
