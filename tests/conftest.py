# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import asyncio
import itertools
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Set

import pytest

from gymtrack_core.auth import AuthEvent, AuthSession, SignUpResult
from gymtrack_core.backends.base import AuthProvider, BlobStorage, RemoteBackend, RemoteCategory
from gymtrack_core.errors import AuthenticationError, RemoteBackendError
from gymtrack_core.models import (
    ExerciseEntry,
    MuscleGroup,
    SetEntry,
    WorkoutSession,
)
from gymtrack_core.offline import LocalCache
from gymtrack_core.state import AppStore

# Friday
FIXED_NOW = datetime(2024, 6, 14, 18, 30, 0)
ACCOUNT_ID = "user-123"
EMAIL = "lifter@example.com"


# =============================================================================
# FAKE BACKEND
# =============================================================================

class FakeAuthProvider(AuthProvider):
    """Scriptable auth: returns a fixed session unless `error` is set."""

    def __init__(self):
        super().__init__()
        self.session = AuthSession(user_id=ACCOUNT_ID, email=EMAIL, display_name="Lifter")
        self.current: Optional[AuthSession] = None
        self.error: Optional[Exception] = None
        self.needs_confirmation = False
        self.calls: List[tuple] = []

    def _maybe_fail(self):
        if self.error is not None:
            raise self.error

    async def sign_in_with_password(self, email, password):
        self.calls.append(("sign_in", email))
        self._maybe_fail()
        self.current = self.session
        self._emit(AuthEvent.SIGNED_IN, self.current)
        return self.current

    async def sign_up_with_password(self, email, password, display_name=None):
        self.calls.append(("sign_up", email, display_name))
        self._maybe_fail()
        if self.needs_confirmation:
            return SignUpResult(session=None, needs_confirmation=True)
        self.current = self.session
        return SignUpResult(session=self.current, needs_confirmation=False)

    async def sign_in_with_oauth_redirect(self, provider):
        self.calls.append(("oauth", provider))
        self._maybe_fail()
        return f"https://auth.test/authorize?provider={provider}"

    async def complete_oauth_from_callback_url(self, url):
        self.calls.append(("oauth_callback", url))
        if "access_token" not in url:
            raise AuthenticationError("No tokens found in redirect URL")
        self.current = self.session
        return self.current

    async def sign_out(self):
        self.calls.append(("sign_out",))
        self.current = None
        self._emit(AuthEvent.SIGNED_OUT, None)

    async def send_password_reset(self, email):
        self.calls.append(("reset", email))
        self._maybe_fail()

    async def resend_confirmation(self, email):
        self.calls.append(("resend", email))
        self._maybe_fail()

    async def get_current_session(self):
        return self.current


class FakeBlobStorage(BlobStorage):
    def __init__(self):
        self.blobs: Dict[str, bytes] = {}
        self.deleted: List[str] = []
        self.fail = False

    async def upload(self, account_id, data, blob_id):
        if self.fail:
            raise RemoteBackendError("storage unavailable", backend="fake", operation="upload")
        path = self.blob_path(account_id, blob_id)
        self.blobs[path] = data
        return f"https://blobs.test/{path}"

    async def delete(self, account_id, blob_id):
        self.deleted.append(self.blob_path(account_id, blob_id))


class FakeBackend(RemoteBackend):
    """
    In-memory backend.

    Set `gate` to an asyncio.Event to hold every fetch until it is set, and
    add categories to `failing` to make their fetch raise.
    """

    name = "fake"

    def __init__(self):
        super().__init__(auth=FakeAuthProvider(), storage=FakeBlobStorage())
        self.collections: Dict[RemoteCategory, List[Dict[str, Any]]] = {}
        self.account: Optional[Dict[str, Any]] = None
        self.failing: Set[RemoteCategory] = set()
        self.fail_writes = False
        self.gate: Optional[asyncio.Event] = None
        self.upserts: List[tuple] = []
        self.deletes: List[tuple] = []
        self.account_upserts: List[Dict[str, Any]] = []
        self.list_calls: List[RemoteCategory] = []

    async def _wait(self):
        if self.gate is not None:
            await self.gate.wait()

    async def _list(self, category, account_id):
        self.list_calls.append(category)
        await self._wait()
        if category in self.failing:
            raise ConnectionError("network down")
        return [dict(r) for r in self.collections.get(category, [])]

    async def _get_account(self, account_id):
        await self._wait()
        return self.account

    async def _upsert(self, category, record, account_id):
        if self.fail_writes:
            raise ConnectionError("write refused")
        self.upserts.append((category, record, account_id))

    async def _delete(self, category, record_id, account_id):
        if self.fail_writes:
            raise ConnectionError("write refused")
        self.deletes.append((category, record_id, account_id))

    async def _upsert_account(self, account):
        if self.fail_writes:
            raise ConnectionError("write refused")
        self.account_upserts.append(account)


class FakeClock:
    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def sequential_ids(prefix: str = "id"):
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def cache(tmp_path):
    """SQLite cache in a temporary directory"""
    local_cache = LocalCache(tmp_path / "cache.db")
    yield local_cache
    local_cache.close()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(backend, cache, clock, tmp_path):
    """App store over the fake backend with a fixed clock"""
    return AppStore(
        backend=backend,
        cache=cache,
        clock=clock,
        id_factory=sequential_ids(),
        photo_root=tmp_path / "photos",
    )


@pytest.fixture
async def signed_in_store(store):
    """Store signed in with the initial pull finished"""
    await store.sign_in(EMAIL, "secret1")
    await store.wait_for_sync()
    return store


# =============================================================================
# SAMPLE DATA
# =============================================================================

def make_set(set_id: str, number: int, weight=None, reps=None, completed=True) -> SetEntry:
    return SetEntry(id=set_id, set_number=number, weight=weight, reps=reps, is_completed=completed)


def make_workout(
    workout_id: str,
    day: str,
    sets: Optional[List[SetEntry]] = None,
    completed: bool = True,
    exercise_id: str = "ex_1",
    muscle_group: MuscleGroup = MuscleGroup.CHEST,
    duration: int = 3600,
    calories: int = 300,
) -> WorkoutSession:
    """One-exercise session on `day` (YYYY-MM-DD)"""
    entry = ExerciseEntry(
        id=f"{workout_id}-e1",
        exercise_id=exercise_id,
        exercise_name="Bench Press",
        muscle_group=muscle_group,
        sets=sets if sets is not None else [make_set(f"{workout_id}-s1", 1, 100, 5)],
    )
    return WorkoutSession(
        id=workout_id,
        user_id=ACCOUNT_ID,
        name="Session",
        date=day,
        start_time=f"{day}T10:00:00",
        created_at=f"{day}T10:00:00",
        exercises=[entry],
        is_completed=completed,
        duration=duration if completed else None,
        calories_estimate=calories if completed else None,
    )


@pytest.fixture
def sample_workouts():
    """Completed sessions on 06-10, 06-11 and 06-12 (Mon-Wed)"""
    return [
        make_workout("w3", "2024-06-12"),
        make_workout("w2", "2024-06-11", exercise_id="ex_11", muscle_group=MuscleGroup.BACK),
        make_workout("w1", "2024-06-10"),
    ]


@pytest.fixture
def workout_factory():
    return make_workout


@pytest.fixture
def set_factory():
    return make_set
