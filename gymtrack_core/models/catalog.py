# =============================================================================
# gymtrack_core/models/catalog.py
# Built-in Exercise Library
# =============================================================================

from typing import Dict, List, Tuple

from gymtrack_core.models.domain import ExerciseCatalogEntry, ExerciseCategory, MuscleGroup

# (name, muscle group, category, description); ids are ex_1..ex_N in order
_SEED: List[Tuple[str, str, str, str]] = [
    # Chest
    ("Bench Press", "chest", "barbell", "Classic chest exercise with barbell"),
    ("Incline Bench Press", "chest", "barbell", "Upper chest focused press"),
    ("Dumbbell Chest Press", "chest", "dumbbell", "Dumbbell variation of bench press"),
    ("Incline Dumbbell Press", "chest", "dumbbell", "Incline dumbbell chest press"),
    ("Cable Chest Fly", "chest", "cable", "Cable crossover fly for chest"),
    ("Dumbbell Fly", "chest", "dumbbell", "Flat dumbbell fly for chest isolation"),
    ("Push-Ups", "chest", "bodyweight", "Bodyweight chest exercise"),
    ("Chest Dips", "chest", "bodyweight", "Dips targeting chest muscles"),
    ("Machine Chest Press", "chest", "machine", "Machine based chest press"),
    ("Pec Deck", "chest", "machine", "Machine fly for chest isolation"),
    # Back
    ("Deadlift", "back", "barbell", "Full body compound lift"),
    ("Barbell Row", "back", "barbell", "Bent over barbell row"),
    ("Pull-Ups", "back", "bodyweight", "Bodyweight pull-up exercise"),
    ("Lat Pulldown", "back", "cable", "Cable lat pulldown"),
    ("Seated Cable Row", "back", "cable", "Seated cable row for back"),
    ("Dumbbell Row", "back", "dumbbell", "One arm dumbbell row"),
    ("T-Bar Row", "back", "barbell", "T-bar row for mid back"),
    ("Face Pulls", "back", "cable", "Cable face pulls for rear delts/upper back"),
    ("Chin-Ups", "back", "bodyweight", "Underhand grip pull-ups"),
    # Shoulders
    ("Overhead Press", "shoulders", "barbell", "Standing barbell overhead press"),
    ("Dumbbell Shoulder Press", "shoulders", "dumbbell", "Seated dumbbell shoulder press"),
    ("Lateral Raises", "shoulders", "dumbbell", "Dumbbell lateral raises"),
    ("Front Raises", "shoulders", "dumbbell", "Dumbbell front raises"),
    ("Rear Delt Fly", "shoulders", "dumbbell", "Rear deltoid fly"),
    ("Arnold Press", "shoulders", "dumbbell", "Rotating dumbbell press"),
    ("Cable Lateral Raise", "shoulders", "cable", "Cable lateral raises"),
    # Biceps
    ("Barbell Curl", "biceps", "barbell", "Standing barbell bicep curl"),
    ("Dumbbell Curl", "biceps", "dumbbell", "Standing dumbbell bicep curl"),
    ("Hammer Curl", "biceps", "dumbbell", "Neutral grip dumbbell curl"),
    ("Preacher Curl", "biceps", "barbell", "Preacher bench bicep curl"),
    ("Cable Curl", "biceps", "cable", "Cable bicep curl"),
    ("Incline Dumbbell Curl", "biceps", "dumbbell", "Incline bench dumbbell curl"),
    # Triceps
    ("Tricep Pushdown", "triceps", "cable", "Cable tricep pushdown"),
    ("Overhead Tricep Extension", "triceps", "dumbbell", "Overhead dumbbell tricep extension"),
    ("Skull Crushers", "triceps", "barbell", "Lying tricep extension"),
    ("Close Grip Bench Press", "triceps", "barbell", "Close grip barbell bench press"),
    ("Tricep Dips", "triceps", "bodyweight", "Bodyweight tricep dips"),
    ("Cable Overhead Extension", "triceps", "cable", "Cable overhead tricep extension"),
    # Legs
    ("Squat", "legs", "barbell", "Barbell back squat"),
    ("Front Squat", "legs", "barbell", "Barbell front squat"),
    ("Leg Press", "legs", "machine", "Machine leg press"),
    ("Romanian Deadlift", "legs", "barbell", "Romanian deadlift for hamstrings"),
    ("Leg Extension", "legs", "machine", "Machine leg extension"),
    ("Leg Curl", "legs", "machine", "Machine leg curl"),
    ("Lunges", "legs", "dumbbell", "Walking or stationary lunges"),
    ("Bulgarian Split Squat", "legs", "dumbbell", "Bulgarian split squat"),
    ("Calf Raises", "legs", "machine", "Machine calf raises"),
    ("Hack Squat", "legs", "machine", "Machine hack squat"),
    # Glutes
    ("Hip Thrust", "glutes", "barbell", "Barbell hip thrust"),
    ("Glute Bridge", "glutes", "bodyweight", "Bodyweight glute bridge"),
    ("Cable Kickback", "glutes", "cable", "Cable glute kickback"),
    ("Sumo Deadlift", "glutes", "barbell", "Sumo stance deadlift"),
    # Abs
    ("Crunches", "abs", "bodyweight", "Basic crunches"),
    ("Plank", "abs", "bodyweight", "Plank hold for core stability"),
    ("Hanging Leg Raise", "abs", "bodyweight", "Hanging leg raises for lower abs"),
    ("Cable Crunch", "abs", "cable", "Cable crunch for abs"),
    ("Russian Twist", "abs", "bodyweight", "Russian twist for obliques"),
    ("Ab Wheel Rollout", "abs", "other", "Ab wheel rollout"),
    # Cardio
    ("Treadmill Running", "cardio", "cardio", "Running on treadmill"),
    ("Cycling", "cardio", "cardio", "Stationary bike cycling"),
    ("Rowing Machine", "cardio", "cardio", "Rowing machine cardio"),
    ("Stair Climber", "cardio", "cardio", "Stair climber machine"),
    ("Jump Rope", "cardio", "cardio", "Jump rope cardio"),
    ("Elliptical", "cardio", "cardio", "Elliptical trainer"),
]

DEFAULT_EXERCISES: Tuple[ExerciseCatalogEntry, ...] = tuple(
    ExerciseCatalogEntry(
        id=f"ex_{i}",
        name=name,
        muscle_group=MuscleGroup(group),
        category=ExerciseCategory(category),
        is_custom=False,
        description=description,
    )
    for i, (name, group, category, description) in enumerate(_SEED, start=1)
)

MUSCLE_GROUP_LABELS: Dict[MuscleGroup, str] = {
    MuscleGroup.CHEST: "Chest",
    MuscleGroup.BACK: "Back",
    MuscleGroup.SHOULDERS: "Shoulders",
    MuscleGroup.BICEPS: "Biceps",
    MuscleGroup.TRICEPS: "Triceps",
    MuscleGroup.LEGS: "Legs",
    MuscleGroup.GLUTES: "Glutes",
    MuscleGroup.ABS: "Abs",
    MuscleGroup.CARDIO: "Cardio",
    MuscleGroup.FULL_BODY: "Full Body",
    MuscleGroup.OTHER: "Other",
}


def build_catalog(custom: List[ExerciseCatalogEntry]) -> List[ExerciseCatalogEntry]:
    """Built-in exercises followed by the account's custom ones"""
    return [*DEFAULT_EXERCISES, *custom]


def find_exercise(
    catalog: List[ExerciseCatalogEntry], exercise_id: str
) -> ExerciseCatalogEntry:
    for entry in catalog:
        if entry.id == exercise_id:
            return entry
    raise KeyError(exercise_id)
