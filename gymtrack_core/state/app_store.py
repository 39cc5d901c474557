# =============================================================================
# gymtrack_core/state/app_store.py
# Application Store: Local-First State and Sync Orchestration
# =============================================================================
"""
AppStore - the single writable copy of account-scoped state.

Lifecycle:
    UNAUTHENTICATED --sign in/up/oauth--> AUTHENTICATING --ok--> AUTHENTICATED
    AUTHENTICATED --sign_out--> UNAUTHENTICATED

On authentication every cache namespace is loaded and published at once,
then a background task pulls all remote collections concurrently. A
collection that comes back non-empty replaces the in-memory and cached copy;
empty or failed collections are left alone. Results that arrive after a
sign-out are dropped.

Mutations follow one pattern:
    1. compute the new value from current state
    2. publish it
    3. write it to the local cache
    4. schedule the remote write (failures are logged, never raised)

Usage:
    store = create_app_store(load_config())
    unsubscribe = store.subscribe(render)
    await store.sign_in("me@example.com", "secret1")
    await store.start_workout("Push Day")
    store.add_exercise_to_workout(bench_press)
    await store.finish_workout()
"""

from __future__ import annotations
import asyncio
import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Type

from gymtrack_core import analytics
from gymtrack_core.analytics import (
    MonthlySummary,
    WeeklySummary,
    estimate_session_calories,
    update_personal_records,
)
from gymtrack_core.auth import (
    AuthSession,
    to_authentication_error,
    validate_email,
    validate_required,
    validate_sign_in,
    validate_sign_up,
)
from gymtrack_core.backends.base import RemoteBackend, RemoteCategory
from gymtrack_core.backends.null_backend import LocalBlobStorage
from gymtrack_core.errors import (
    RemoteBackendError,
    SessionStateError,
    ValidationError,
    log_task_failure,
)
from gymtrack_core.logging import LogContext, get_logger
from gymtrack_core.models import (
    DEFAULT_EXERCISES,
    Account,
    BodyMeasurement,
    BodyWeightEntry,
    ExerciseCatalogEntry,
    ExerciseCategory,
    ExerciseEntry,
    FitnessGoal,
    Goal,
    MuscleGroup,
    NotificationSettings,
    PersonalRecord,
    PhotoCategory,
    Profile,
    ProgressPhoto,
    Record,
    SetEntry,
    SubscriptionPlan,
    TemplateExercise,
    ThemePreference,
    WorkoutSession,
    WorkoutTemplate,
    build_catalog,
)
from gymtrack_core.offline import CacheKey, LocalCache, PullResult, SyncEngine, SyncStatus

logger = get_logger(__name__)

Listener = Callable[["AppState"], None]


class AuthStatus(Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


# =============================================================================
# STATE
# =============================================================================

@dataclass
class AppState:
    """Snapshot of everything the presentation layer renders"""
    auth_status: AuthStatus = AuthStatus.UNAUTHENTICATED
    sync_status: SyncStatus = SyncStatus.IDLE
    account: Optional[Account] = None
    has_onboarded: bool = False
    theme: ThemePreference = ThemePreference.SYSTEM
    workouts: List[WorkoutSession] = field(default_factory=list)
    active_workout: Optional[WorkoutSession] = None
    exercises: List[ExerciseCatalogEntry] = field(default_factory=lambda: list(DEFAULT_EXERCISES))
    body_weights: List[BodyWeightEntry] = field(default_factory=list)
    measurements: List[BodyMeasurement] = field(default_factory=list)
    progress_photos: List[ProgressPhoto] = field(default_factory=list)
    personal_records: List[PersonalRecord] = field(default_factory=list)
    goals: List[Goal] = field(default_factory=list)
    templates: List[WorkoutTemplate] = field(default_factory=list)
    notification_settings: NotificationSettings = field(default_factory=NotificationSettings)
    last_synced_at: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.auth_status is AuthStatus.AUTHENTICATED

    @property
    def custom_exercises(self) -> List[ExerciseCatalogEntry]:
        return [e for e in self.exercises if e.is_custom]


@dataclass(frozen=True)
class CollectionBinding:
    """Ties a remote category to its state attribute and cache namespace"""
    attr: str
    cache_key: CacheKey
    record_type: Type[Record]


COLLECTIONS: Dict[RemoteCategory, CollectionBinding] = {
    RemoteCategory.WORKOUTS: CollectionBinding("workouts", CacheKey.WORKOUTS, WorkoutSession),
    RemoteCategory.CUSTOM_EXERCISES: CollectionBinding(
        "exercises", CacheKey.CUSTOM_EXERCISES, ExerciseCatalogEntry
    ),
    RemoteCategory.BODY_WEIGHTS: CollectionBinding("body_weights", CacheKey.BODY_WEIGHTS, BodyWeightEntry),
    RemoteCategory.MEASUREMENTS: CollectionBinding("measurements", CacheKey.MEASUREMENTS, BodyMeasurement),
    RemoteCategory.PROGRESS_PHOTOS: CollectionBinding(
        "progress_photos", CacheKey.PROGRESS_PHOTOS, ProgressPhoto
    ),
    RemoteCategory.PERSONAL_RECORDS: CollectionBinding(
        "personal_records", CacheKey.PERSONAL_RECORDS, PersonalRecord
    ),
    RemoteCategory.GOALS: CollectionBinding("goals", CacheKey.GOALS, Goal),
    RemoteCategory.TEMPLATES: CollectionBinding("templates", CacheKey.TEMPLATES, WorkoutTemplate),
}

_SET_FIELDS = {"weight", "reps", "is_completed", "type", "rpe"}
_GOAL_FIELDS = {
    "type", "title", "description", "target_value", "current_value",
    "unit", "deadline", "is_completed",
}


def decode_records(record_type: Type[Record], raw: Any) -> List[Any]:
    """Rebuild records from a JSON list, skipping malformed entries"""
    if not isinstance(raw, list):
        return []

    records = []
    for item in raw:
        try:
            records.append(record_type.from_dict(item))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Skipping malformed {record_type.__name__}: {e}")
    return records


def _check_fields(changes: Dict[str, Any], allowed: Set[str], what: str) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(
            f"Cannot update {what} field(s): {', '.join(sorted(unknown))}",
            field=sorted(unknown)[0],
        )


# =============================================================================
# STORE
# =============================================================================

class AppStore:
    """
    Local-first store over a LocalCache and a RemoteBackend.

    One instance is built at startup (see create_app_store) and handed to
    whatever renders it.
    """

    def __init__(
        self,
        backend: RemoteBackend,
        cache: LocalCache,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        photo_root: Optional[Path] = None,
    ):
        self.backend = backend
        self.cache = cache
        self.clock = clock
        self.id_factory = id_factory
        self.sync_engine = SyncEngine(backend)
        self._local_photos = LocalBlobStorage(photo_root)

        self._state = AppState()
        self._listeners: List[Listener] = []
        self._pending_writes: Set[asyncio.Task] = set()
        self._sync_task: Optional[asyncio.Task] = None
        self._auth_epoch = 0

    # =========================================================================
    # OBSERVATION
    # =========================================================================

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with the new state after every publish.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, **changes: Any) -> AppState:
        self._state = dataclasses.replace(self._state, **changes)
        self._notify()
        return self._state

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error(f"Error in state listener: {e}", exc_info=True)

    # =========================================================================
    # AUTHENTICATION
    # =========================================================================

    async def sign_in(self, email: str, password: str) -> None:
        """
        Sign in with email and password.

        Raises:
            ValidationError: malformed input (state untouched)
            AuthenticationError: rejected by the backend
        """
        normalized = validate_sign_in(email, password)
        session = await self._authenticate(
            "Sign in", self.backend.auth.sign_in_with_password(normalized, password)
        )
        self._on_authenticated(session)

    async def sign_up(
        self,
        email: str,
        password: str,
        confirm_password: str,
        name: str,
    ) -> bool:
        """
        Create an account.

        Returns:
            True when the backend requires email confirmation first; the
            store then stays unauthenticated
        """
        normalized, display_name = validate_sign_up(email, password, confirm_password, name)
        result = await self._authenticate(
            "Sign up",
            self.backend.auth.sign_up_with_password(normalized, password, display_name),
        )

        if result.needs_confirmation or result.session is None:
            logger.info(f"Sign up pending email confirmation: {normalized}")
            self._publish(auth_status=AuthStatus.UNAUTHENTICATED)
            return True

        self._on_authenticated(result.session, display_name=display_name, is_new=True)
        return False

    async def start_oauth(self, provider: str) -> str:
        """Return the authorization URL for an OAuth provider."""
        validate_required(provider, "provider")
        try:
            return await self.backend.auth.sign_in_with_oauth_redirect(provider)
        except Exception as e:
            raise to_authentication_error(e, f"{provider} sign in")

    async def complete_oauth(self, callback_url: str) -> None:
        """Install the session carried by an OAuth redirect URI."""
        session = await self._authenticate(
            "OAuth sign in", self.backend.auth.complete_oauth_from_callback_url(callback_url)
        )
        self._on_authenticated(session)

    async def restore_session(self) -> bool:
        """
        Resume the backend's current session, if any.

        Returns:
            True if a session was restored
        """
        try:
            session = await self.backend.auth.get_current_session()
        except Exception as e:
            logger.warning(f"Could not read current session: {e}")
            return False

        if session is None:
            return False

        self._on_authenticated(session)
        return True

    async def sign_out(self) -> None:
        """Clear all local state and cache, then end the remote session."""
        self._reset_local()
        try:
            await self.backend.auth.sign_out()
        except Exception as e:
            logger.warning(f"Remote sign-out failed: {e}")
        logger.info("Signed out")

    async def send_password_reset(self, email: str) -> None:
        normalized = validate_email(email)
        try:
            await self.backend.auth.send_password_reset(normalized)
        except Exception as e:
            raise to_authentication_error(e, "Password reset")

    async def resend_confirmation(self, email: str) -> None:
        normalized = validate_email(email)
        try:
            await self.backend.auth.resend_confirmation(normalized)
        except Exception as e:
            raise to_authentication_error(e, "Resend confirmation")

    async def _authenticate(self, action: str, call: Awaitable[Any]) -> Any:
        """Run a backend auth call inside the AUTHENTICATING state."""
        self._publish(auth_status=AuthStatus.AUTHENTICATING)
        try:
            return await call
        except Exception as e:
            self._publish(auth_status=AuthStatus.UNAUTHENTICATED)
            error = to_authentication_error(e, action)
            logger.warning(f"{action} failed ({error.kind.value}): {e}")
            raise error

    def _on_authenticated(
        self,
        session: AuthSession,
        display_name: Optional[str] = None,
        is_new: bool = False,
    ) -> None:
        """Hydrate from cache, publish, then start the background pull."""
        self._cancel_sync()
        self._auth_epoch += 1

        account = self._cached_account()

        if account is not None and account.id != session.user_id:
            logger.info("Cached data belongs to another account; clearing cache")
            self.cache.clear()
            account = None

        with LogContext(logger, "Hydrating from cache"):
            hydrated = self._read_cache()

        if account is None:
            account = self._new_account(session, display_name)
            self.cache.set(CacheKey.ACCOUNT, account.to_dict())
            if is_new:
                self._schedule(self.backend.upsert_account(account.to_dict()), "upsert-account")

        if is_new:
            hydrated["has_onboarded"] = False
            self.cache.set(CacheKey.HAS_ONBOARDED, False)

        self._publish(
            auth_status=AuthStatus.AUTHENTICATED,
            account=account,
            active_workout=None,
            **hydrated,
        )
        logger.info(f"Authenticated as {account.id}")

        self._sync_task = asyncio.get_running_loop().create_task(
            self._sync_remote(account.id, self._auth_epoch),
            name=f"sync-{account.id}",
        )
        self._sync_task.add_done_callback(log_task_failure)

    def _cached_account(self) -> Optional[Account]:
        raw = self.cache.get(CacheKey.ACCOUNT)
        accounts = decode_records(Account, [raw]) if isinstance(raw, dict) else []
        return accounts[0] if accounts else None

    def _new_account(self, session: AuthSession, display_name: Optional[str]) -> Account:
        now = self.clock().isoformat()
        name = display_name or session.display_name or session.email.split("@")[0]
        return Account(
            id=session.user_id,
            email=session.email,
            display_name=name,
            created_at=now,
            updated_at=now,
            profile=Profile(name=name),
        )

    def _read_cache(self) -> Dict[str, Any]:
        """Load every namespace except the account into state fields."""
        state: Dict[str, Any] = {}

        for category, binding in COLLECTIONS.items():
            records = decode_records(binding.record_type, self.cache.get(binding.cache_key))
            if category is RemoteCategory.CUSTOM_EXERCISES:
                state["exercises"] = build_catalog(records)
            else:
                state[binding.attr] = records

        settings = self.cache.get(CacheKey.NOTIFICATION_SETTINGS)
        state["notification_settings"] = (
            NotificationSettings.from_dict(settings) if isinstance(settings, dict) else NotificationSettings()
        )
        state["has_onboarded"] = bool(self.cache.get(CacheKey.HAS_ONBOARDED))

        theme = self.cache.get(CacheKey.THEME)
        try:
            state["theme"] = ThemePreference(theme) if theme else ThemePreference.SYSTEM
        except ValueError:
            state["theme"] = ThemePreference.SYSTEM

        return state

    def _reset_local(self) -> None:
        self._auth_epoch += 1
        self._cancel_sync()
        self.cache.clear()
        self.sync_engine.reset()
        self._state = AppState()
        self._notify()

    # =========================================================================
    # REMOTE SYNC
    # =========================================================================

    async def _sync_remote(self, account_id: str, epoch: int) -> None:
        self._publish(sync_status=SyncStatus.SYNCING)
        try:
            result = await self.sync_engine.pull_all(account_id)
        except asyncio.CancelledError:
            if epoch == self._auth_epoch:
                self.sync_engine.mark_cancelled()
            raise

        if epoch != self._auth_epoch:
            logger.info("Discarding sync results from a previous session")
            return

        self._apply_pull(result)

    def _apply_pull(self, result: PullResult) -> None:
        """Overwrite every category that came back non-empty."""
        changes: Dict[str, Any] = {}

        for category, raw in result.collections.items():
            binding = COLLECTIONS[category]
            records = decode_records(binding.record_type, raw)
            if not records:
                continue
            if category is RemoteCategory.CUSTOM_EXERCISES:
                changes["exercises"] = build_catalog(records)
            else:
                changes[binding.attr] = records
            self.cache.set(binding.cache_key, [r.to_dict() for r in records])

        if result.account:
            remote_account = decode_records(Account, [result.account])
            if remote_account:
                changes["account"] = remote_account[0]
                self.cache.set(CacheKey.ACCOUNT, remote_account[0].to_dict())

        self._publish(
            sync_status=self.sync_engine.state.status,
            last_synced_at=self.clock().isoformat(),
            **changes,
        )

    async def sync_now(self) -> None:
        """Pull all remote collections now and wait for the result."""
        account = self._require_account()
        await self.wait_for_sync()
        await self._sync_remote(account.id, self._auth_epoch)

    async def wait_for_sync(self) -> None:
        """Wait for the background pull started at sign-in, if any."""
        task = self._sync_task
        if task is not None and not task.done():
            await asyncio.wait([task])

    def _cancel_sync(self) -> None:
        if self._sync_task is not None and not self._sync_task.done():
            self._sync_task.cancel()
        self._sync_task = None

    # =========================================================================
    # REMOTE WRITES
    # =========================================================================

    def _schedule(self, write: Awaitable[Any], label: str) -> asyncio.Task:
        """Fire a remote write without waiting for it."""
        task = asyncio.get_running_loop().create_task(write, name=label)
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)
        task.add_done_callback(log_task_failure)
        return task

    def _push(self, category: RemoteCategory, record: Record, account_id: str) -> None:
        self._schedule(
            self.backend.upsert(category, record.to_dict(), account_id),
            f"upsert-{category.value}",
        )

    def _push_delete(self, category: RemoteCategory, record_id: str, account_id: str) -> None:
        self._schedule(
            self.backend.delete(category, record_id, account_id),
            f"delete-{category.value}",
        )

    async def wait_for_pending_writes(self) -> None:
        """Wait until every scheduled remote write has finished."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    async def close(self) -> None:
        """Stop background work and release resources."""
        self._cancel_sync()
        await self.wait_for_pending_writes()
        await self.backend.close()
        self.cache.close()

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _require_account(self) -> Account:
        if self._state.account is None or not self._state.is_authenticated:
            raise SessionStateError("Sign in required", required="account")
        return self._state.account

    def _require_active(self) -> WorkoutSession:
        if self._state.active_workout is None:
            raise SessionStateError("No workout in progress", required="active_workout")
        return self._state.active_workout

    def _store(self, category: RemoteCategory, records: List[Record], **extra: Any) -> None:
        """Publish and cache a full collection."""
        binding = COLLECTIONS[category]
        if category is RemoteCategory.CUSTOM_EXERCISES:
            extra["exercises"] = build_catalog(records)
        else:
            extra[binding.attr] = records
        self._publish(**extra)
        self.cache.set(binding.cache_key, [r.to_dict() for r in records])

    def _store_account(self, account: Account, **extra: Any) -> None:
        self._publish(account=account, **extra)
        self.cache.set(CacheKey.ACCOUNT, account.to_dict())
        self._schedule(self.backend.upsert_account(account.to_dict()), "upsert-account")

    def _now(self) -> str:
        return self.clock().isoformat()

    # =========================================================================
    # ACTIVE WORKOUT (in memory only)
    # =========================================================================

    async def start_workout(self, name: str, template_id: Optional[str] = None) -> WorkoutSession:
        """
        Begin a new session; replaces any session in progress.

        Args:
            name: Session name
            template_id: Template to pre-populate exercises from; its usage
                counter and last-used time are updated

        Raises:
            ValidationError: empty name or unknown template
        """
        account = self._require_account()
        name = validate_required(name, "name")
        now = self.clock()

        exercises: List[ExerciseEntry] = []
        if template_id is not None:
            template = next((t for t in self._state.templates if t.id == template_id), None)
            if template is None:
                raise ValidationError(f"Unknown template: {template_id}", field="template_id")
            exercises = self._exercises_from_template(template)

            used = template.replace(times_used=template.times_used + 1, last_used=now.isoformat())
            self._store(
                RemoteCategory.TEMPLATES,
                [used if t.id == template_id else t for t in self._state.templates],
            )
            self._push(RemoteCategory.TEMPLATES, used, account.id)

        workout = WorkoutSession(
            id=self.id_factory(),
            user_id=account.id,
            name=name,
            date=now.date().isoformat(),
            start_time=now.isoformat(),
            created_at=now.isoformat(),
            exercises=exercises,
        )
        self._publish(active_workout=workout)
        logger.info(f"Workout started: {name}")
        return workout

    def _exercises_from_template(self, template: WorkoutTemplate) -> List[ExerciseEntry]:
        entries = []
        for position, spec in enumerate(sorted(template.exercises, key=lambda e: e.order)):
            entries.append(ExerciseEntry(
                id=self.id_factory(),
                exercise_id=spec.exercise_id,
                exercise_name=spec.exercise_name,
                muscle_group=spec.muscle_group,
                sets=[
                    SetEntry(id=self.id_factory(), set_number=n, reps=spec.target_reps)
                    for n in range(1, max(spec.target_sets, 1) + 1)
                ],
                rest_timer_seconds=spec.rest_timer_seconds,
                order=position,
            ))
        return entries

    def _replace_exercise(self, entry_id: str, update: Callable[[ExerciseEntry], ExerciseEntry]) -> None:
        workout = self._require_active()
        if not any(e.id == entry_id for e in workout.exercises):
            logger.warning(f"Exercise entry {entry_id} not in active workout")
            return
        exercises = [update(e) if e.id == entry_id else e for e in workout.exercises]
        self._publish(active_workout=workout.replace(exercises=exercises))

    def add_exercise_to_workout(self, exercise: ExerciseCatalogEntry) -> ExerciseEntry:
        """Append a catalog exercise with one empty set."""
        workout = self._require_active()
        entry = ExerciseEntry(
            id=self.id_factory(),
            exercise_id=exercise.id,
            exercise_name=exercise.name,
            muscle_group=exercise.muscle_group,
            sets=[SetEntry(id=self.id_factory(), set_number=1)],
            order=len(workout.exercises),
        )
        self._publish(active_workout=workout.replace(exercises=[*workout.exercises, entry]))
        return entry

    def remove_exercise_from_workout(self, entry_id: str) -> None:
        """Drop an exercise; remaining positions are renumbered from 0."""
        workout = self._require_active()
        remaining = [e for e in workout.exercises if e.id != entry_id]
        exercises = [e.replace(order=i) for i, e in enumerate(remaining)]
        self._publish(active_workout=workout.replace(exercises=exercises))

    def add_set_to_exercise(self, entry_id: str) -> None:
        """Append a set pre-filled with the previous set's weight and reps."""
        def add(entry: ExerciseEntry) -> ExerciseEntry:
            last = entry.sets[-1] if entry.sets else None
            new_set = SetEntry(
                id=self.id_factory(),
                set_number=len(entry.sets) + 1,
                weight=last.weight if last else None,
                reps=last.reps if last else None,
            )
            return entry.replace(sets=[*entry.sets, new_set])

        self._replace_exercise(entry_id, add)

    def remove_set_from_exercise(self, entry_id: str, set_id: str) -> None:
        """Delete a set; the rest are renumbered 1..N-1 in their original order."""
        def remove(entry: ExerciseEntry) -> ExerciseEntry:
            kept = [s for s in entry.sets if s.id != set_id]
            return entry.replace(sets=[s.replace(set_number=i) for i, s in enumerate(kept, start=1)])

        self._replace_exercise(entry_id, remove)

    def update_set(self, entry_id: str, set_id: str, **changes: Any) -> None:
        """
        Edit a set in place.

        Accepted fields: weight, reps, is_completed, type, rpe.
        """
        _check_fields(changes, _SET_FIELDS, "set")

        def update(entry: ExerciseEntry) -> ExerciseEntry:
            return entry.replace(
                sets=[s.replace(**changes) if s.id == set_id else s for s in entry.sets]
            )

        self._replace_exercise(entry_id, update)

    def update_workout_notes(self, notes: str) -> None:
        workout = self._require_active()
        self._publish(active_workout=workout.replace(notes=notes))

    def cancel_workout(self) -> None:
        """Discard the session in progress without saving it."""
        if self._state.active_workout is not None:
            logger.info(f"Workout cancelled: {self._state.active_workout.name}")
        self._publish(active_workout=None)

    def active_elapsed_seconds(self) -> int:
        """Seconds since the active session started (0 if none)."""
        workout = self._state.active_workout
        if workout is None:
            return 0
        start = datetime.fromisoformat(workout.start_time)
        return max(0, int((self.clock() - start).total_seconds()))

    # =========================================================================
    # WORKOUT HISTORY
    # =========================================================================

    async def finish_workout(self) -> WorkoutSession:
        """
        Finalize the active session.

        Sets end time, duration and calorie estimate, prepends it to the
        history and folds its completed sets into the personal records.
        """
        account = self._require_account()
        workout = self._require_active()

        now = self.clock()
        duration = round((now - datetime.fromisoformat(workout.start_time)).total_seconds())
        finished = workout.replace(
            end_time=now.isoformat(),
            duration=duration,
            is_completed=True,
            calories_estimate=estimate_session_calories(workout, duration),
        )

        records, changed = update_personal_records(
            self._state.personal_records, finished, account.id, self.id_factory
        )

        self._store(
            RemoteCategory.WORKOUTS,
            [finished, *self._state.workouts],
            active_workout=None,
            personal_records=records,
        )
        if changed:
            self.cache.set(CacheKey.PERSONAL_RECORDS, [r.to_dict() for r in records])
            logger.info(f"New personal records: {[r.exercise_name for r in changed]}")

        self._push(RemoteCategory.WORKOUTS, finished, account.id)
        for record in changed:
            self._push(RemoteCategory.PERSONAL_RECORDS, record, account.id)

        return finished

    async def delete_workout(self, workout_id: str) -> None:
        account = self._require_account()
        self._store(RemoteCategory.WORKOUTS, [w for w in self._state.workouts if w.id != workout_id])
        self._push_delete(RemoteCategory.WORKOUTS, workout_id, account.id)

    # =========================================================================
    # EXERCISE CATALOG
    # =========================================================================

    async def add_custom_exercise(
        self,
        name: str,
        muscle_group: MuscleGroup,
        category: ExerciseCategory,
        description: Optional[str] = None,
        instructions: Optional[List[str]] = None,
    ) -> ExerciseCatalogEntry:
        account = self._require_account()
        exercise = ExerciseCatalogEntry(
            id=self.id_factory(),
            name=validate_required(name, "name"),
            muscle_group=muscle_group,
            category=category,
            is_custom=True,
            description=description,
            instructions=instructions,
        )
        self._store(RemoteCategory.CUSTOM_EXERCISES, [*self._state.custom_exercises, exercise])
        self._push(RemoteCategory.CUSTOM_EXERCISES, exercise, account.id)
        return exercise

    # =========================================================================
    # BODY DATA
    # =========================================================================

    async def add_body_weight(self, weight: float, notes: Optional[str] = None) -> BodyWeightEntry:
        """Log a weigh-in; the profile weight follows the latest entry."""
        account = self._require_account()
        if weight is None or weight <= 0:
            raise ValidationError("Weight must be positive", field="weight")

        entry = BodyWeightEntry(
            id=self.id_factory(),
            user_id=account.id,
            weight=float(weight),
            date=self._now(),
            notes=notes,
        )
        self._store(RemoteCategory.BODY_WEIGHTS, [entry, *self._state.body_weights])
        self._push(RemoteCategory.BODY_WEIGHTS, entry, account.id)

        updated = account.replace(
            profile=account.profile.replace(weight=float(weight)),
            updated_at=self._now(),
        )
        self._store_account(updated)
        return entry

    async def delete_body_weight(self, entry_id: str) -> None:
        account = self._require_account()
        self._store(
            RemoteCategory.BODY_WEIGHTS,
            [e for e in self._state.body_weights if e.id != entry_id],
        )
        self._push_delete(RemoteCategory.BODY_WEIGHTS, entry_id, account.id)

    async def add_measurement(
        self,
        chest: Optional[float] = None,
        arms: Optional[float] = None,
        waist: Optional[float] = None,
        legs: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> BodyMeasurement:
        account = self._require_account()
        if all(v is None for v in (chest, arms, waist, legs)):
            raise ValidationError("Enter at least one measurement", field="measurement")

        entry = BodyMeasurement(
            id=self.id_factory(),
            user_id=account.id,
            date=self._now(),
            chest=chest,
            arms=arms,
            waist=waist,
            legs=legs,
            notes=notes,
        )
        self._store(RemoteCategory.MEASUREMENTS, [entry, *self._state.measurements])
        self._push(RemoteCategory.MEASUREMENTS, entry, account.id)
        return entry

    async def delete_measurement(self, entry_id: str) -> None:
        account = self._require_account()
        self._store(
            RemoteCategory.MEASUREMENTS,
            [m for m in self._state.measurements if m.id != entry_id],
        )
        self._push_delete(RemoteCategory.MEASUREMENTS, entry_id, account.id)

    async def add_progress_photo(
        self,
        data: bytes,
        category: PhotoCategory = PhotoCategory.FRONT,
        notes: Optional[str] = None,
    ) -> ProgressPhoto:
        """
        Upload a photo and record it.

        The image goes to the backend's blob storage first; if that fails it
        is kept on device and the record points at the local copy.

        Raises:
            RemoteBackendError: the photo could not be stored anywhere
        """
        account = self._require_account()
        photo_id = self.id_factory()

        try:
            uri = await self.backend.storage.upload(account.id, data, photo_id)
        except RemoteBackendError as e:
            logger.warning(f"Photo upload failed, keeping local copy: {e}")
            uri = await self._local_photos.upload(account.id, data, photo_id)

        photo = ProgressPhoto(
            id=photo_id,
            user_id=account.id,
            uri=uri,
            date=self._now(),
            category=category,
            notes=notes,
        )
        self._store(RemoteCategory.PROGRESS_PHOTOS, [photo, *self._state.progress_photos])
        self._push(RemoteCategory.PROGRESS_PHOTOS, photo, account.id)
        return photo

    async def delete_progress_photo(self, photo_id: str) -> None:
        """Remove the record and its blob (remote or on-device)."""
        account = self._require_account()
        photo = next((p for p in self._state.progress_photos if p.id == photo_id), None)
        self._store(
            RemoteCategory.PROGRESS_PHOTOS,
            [p for p in self._state.progress_photos if p.id != photo_id],
        )
        self._push_delete(RemoteCategory.PROGRESS_PHOTOS, photo_id, account.id)

        if photo is not None and photo.uri.startswith("file://"):
            storage = self._local_photos
        else:
            storage = self.backend.storage
        self._schedule(storage.delete(account.id, photo_id), "delete-photo-blob")

    # =========================================================================
    # GOALS
    # =========================================================================

    async def add_goal(
        self,
        type: FitnessGoal,
        title: str,
        description: Optional[str] = None,
        target_value: Optional[float] = None,
        current_value: Optional[float] = None,
        unit: Optional[str] = None,
        deadline: Optional[str] = None,
    ) -> Goal:
        account = self._require_account()
        goal = Goal(
            id=self.id_factory(),
            user_id=account.id,
            type=type,
            title=validate_required(title, "title"),
            created_at=self._now(),
            description=description,
            target_value=target_value,
            current_value=current_value,
            unit=unit,
            deadline=deadline,
        )
        self._store(RemoteCategory.GOALS, [goal, *self._state.goals])
        self._push(RemoteCategory.GOALS, goal, account.id)
        return goal

    async def update_goal(self, goal_id: str, **changes: Any) -> Optional[Goal]:
        """Apply a partial update; returns the updated goal (None if unknown)."""
        account = self._require_account()
        _check_fields(changes, _GOAL_FIELDS, "goal")

        current = next((g for g in self._state.goals if g.id == goal_id), None)
        if current is None:
            logger.warning(f"Goal {goal_id} not found")
            return None

        updated = current.replace(**changes)
        self._store(RemoteCategory.GOALS, [updated if g.id == goal_id else g for g in self._state.goals])
        self._push(RemoteCategory.GOALS, updated, account.id)
        return updated

    async def delete_goal(self, goal_id: str) -> None:
        account = self._require_account()
        self._store(RemoteCategory.GOALS, [g for g in self._state.goals if g.id != goal_id])
        self._push_delete(RemoteCategory.GOALS, goal_id, account.id)

    # =========================================================================
    # TEMPLATES
    # =========================================================================

    async def save_template(self, name: str, exercises: List[TemplateExercise]) -> WorkoutTemplate:
        account = self._require_account()
        template = WorkoutTemplate(
            id=self.id_factory(),
            user_id=account.id,
            name=validate_required(name, "name"),
            created_at=self._now(),
            exercises=[e.replace(order=i) for i, e in enumerate(exercises)],
        )
        self._store(RemoteCategory.TEMPLATES, [template, *self._state.templates])
        self._push(RemoteCategory.TEMPLATES, template, account.id)
        return template

    async def delete_template(self, template_id: str) -> None:
        account = self._require_account()
        self._store(RemoteCategory.TEMPLATES, [t for t in self._state.templates if t.id != template_id])
        self._push_delete(RemoteCategory.TEMPLATES, template_id, account.id)

    # =========================================================================
    # SETTINGS AND PROFILE
    # =========================================================================

    async def update_notification_settings(self, **changes: Any) -> NotificationSettings:
        """Partial update of reminder preferences (device-local)."""
        allowed = {f.name for f in dataclasses.fields(NotificationSettings)}
        _check_fields(changes, allowed, "notification settings")

        settings = self._state.notification_settings.replace(**changes)
        self._publish(notification_settings=settings)
        self.cache.set(CacheKey.NOTIFICATION_SETTINGS, settings.to_dict())
        return settings

    async def update_profile(self, **changes: Any) -> Account:
        """Partial profile update; a new name also becomes the display name."""
        account = self._require_account()
        allowed = {f.name for f in dataclasses.fields(Profile)}
        _check_fields(changes, allowed, "profile")

        updated = account.replace(
            profile=account.profile.replace(**changes),
            display_name=changes.get("name") or account.display_name,
            updated_at=self._now(),
        )
        self._store_account(updated)
        return updated

    async def update_subscription(self, plan: SubscriptionPlan) -> Account:
        account = self._require_account()
        updated = account.replace(subscription=plan, updated_at=self._now())
        self._store_account(updated)
        return updated

    async def complete_onboarding(self, **profile: Any) -> Account:
        """Merge onboarding answers into the profile and mark onboarding done."""
        account = self._require_account()
        allowed = {f.name for f in dataclasses.fields(Profile)}
        _check_fields(profile, allowed, "profile")

        updated = account.replace(
            profile=account.profile.replace(**profile),
            updated_at=self._now(),
        )
        self._store_account(updated, has_onboarded=True)
        self.cache.set(CacheKey.HAS_ONBOARDED, True)
        return updated

    async def set_theme(self, theme: ThemePreference) -> None:
        self._publish(theme=theme)
        self.cache.set(CacheKey.THEME, theme.value)

    # =========================================================================
    # DERIVED DATA
    # =========================================================================

    def weekly_summary(self) -> WeeklySummary:
        return analytics.weekly_summary(self._state.workouts, self.clock())

    def monthly_summary(self) -> MonthlySummary:
        return analytics.monthly_summary(self._state.workouts, self.clock(), self._state.personal_records)

    def current_streak(self) -> int:
        return analytics.calculate_streak(self._state.workouts, self.clock(), allow_empty_today=True)
