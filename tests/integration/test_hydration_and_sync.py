# =============================================================================
# tests/integration/test_hydration_and_sync.py
# Integration Tests for Sign-In Hydration, Remote Pull and Sign-Out
# =============================================================================

import asyncio

import pytest

from gymtrack_core.backends import RemoteCategory
from gymtrack_core.config import AppConfig, CacheConfig
from gymtrack_core.errors import AuthenticationError
from gymtrack_core.models import DEFAULT_EXERCISES, Account, FitnessGoal, Goal
from gymtrack_core.offline import CacheKey, SyncStatus
from gymtrack_core.state import AuthStatus, create_app_store

EMAIL = "lifter@example.com"


async def _let_tasks_start():
    await asyncio.sleep(0)
    await asyncio.sleep(0)


class TestHydrationOrder:
    """
    Cached data is published at sign-in, before the remote pull resolves.

    Flow:
    1. Seed the cache as a previous run would have left it
    2. Sign in while every remote fetch is held
    3. Release the fetches and let the pull apply
    """

    @pytest.fixture
    def seeded_cache(self, cache, workout_factory):
        cache.set(CacheKey.ACCOUNT, Account(
            id="user-123", email=EMAIL, display_name="Cached Name",
            created_at="2024-01-01T00:00:00", updated_at="2024-01-01T00:00:00",
        ).to_dict())
        cache.set(CacheKey.WORKOUTS, [workout_factory("cached", "2024-06-10").to_dict()])
        cache.set(CacheKey.GOALS, [Goal(
            id="g1", user_id="user-123", type=FitnessGoal.MUSCLE_GAIN, title="Bench 120",
            created_at="2024-01-01T00:00:00",
        ).to_dict()])
        cache.set(CacheKey.HAS_ONBOARDED, True)
        cache.set(CacheKey.THEME, "dark")
        return cache

    async def test_cached_state_visible_while_pull_in_flight(self, store, backend, seeded_cache, workout_factory):
        backend.gate = asyncio.Event()
        backend.collections[RemoteCategory.WORKOUTS] = [workout_factory("remote", "2024-06-12").to_dict()]

        await store.sign_in(EMAIL, "secret1")
        await _let_tasks_start()

        assert store.state.auth_status is AuthStatus.AUTHENTICATED
        assert store.state.sync_status is SyncStatus.SYNCING
        assert [w.id for w in store.state.workouts] == ["cached"]
        assert store.state.account.display_name == "Cached Name"
        assert store.state.has_onboarded
        assert store.state.theme.value == "dark"

        backend.gate.set()
        await store.wait_for_sync()

        assert [w.id for w in store.state.workouts] == ["remote"]
        assert seeded_cache.get(CacheKey.WORKOUTS)[0]["id"] == "remote"
        assert store.state.sync_status is SyncStatus.COMPLETED
        assert store.state.last_synced_at == "2024-06-14T18:30:00"

    async def test_empty_remote_keeps_local(self, store, backend, seeded_cache):
        """A category that comes back empty leaves the local copy alone"""
        backend.collections[RemoteCategory.GOALS] = []

        await store.sign_in(EMAIL, "secret1")
        await store.wait_for_sync()

        assert [g.id for g in store.state.goals] == ["g1"]
        assert seeded_cache.get(CacheKey.GOALS)[0]["id"] == "g1"

    async def test_failed_remote_keeps_local(self, store, backend, seeded_cache):
        backend.failing.add(RemoteCategory.WORKOUTS)
        backend.collections[RemoteCategory.GOALS] = [{"id": "g2", "userId": "user-123", "type": "custom",
                                                       "title": "Run", "createdAt": "2024-06-01"}]

        await store.sign_in(EMAIL, "secret1")
        await store.wait_for_sync()

        assert [w.id for w in store.state.workouts] == ["cached"]
        assert [g.id for g in store.state.goals] == ["g2"]
        assert store.state.sync_status is SyncStatus.COMPLETED
        assert store.sync_engine.state.failed_categories == ["workouts"]

    async def test_remote_account_replaces_cached(self, store, backend, seeded_cache):
        backend.account = {
            "id": "user-123", "email": EMAIL, "displayName": "Remote Name",
            "createdAt": "2024-01-01T00:00:00", "updatedAt": "2024-06-01T00:00:00",
            "subscription": "premium_monthly",
        }

        await store.sign_in(EMAIL, "secret1")
        await store.wait_for_sync()

        assert store.state.account.display_name == "Remote Name"
        assert seeded_cache.get(CacheKey.ACCOUNT)["displayName"] == "Remote Name"

    async def test_remote_custom_exercises_join_catalog(self, store, backend, seeded_cache):
        backend.collections[RemoteCategory.CUSTOM_EXERCISES] = [{
            "id": "c1", "name": "Sled Push", "muscleGroup": "legs",
            "category": "other", "isCustom": True,
        }]

        await store.sign_in(EMAIL, "secret1")
        await store.wait_for_sync()

        assert len(store.state.exercises) == len(DEFAULT_EXERCISES) + 1
        assert [e.id for e in store.state.custom_exercises] == ["c1"]

    async def test_malformed_cached_records_skipped(self, store, cache, workout_factory):
        cache.set(CacheKey.WORKOUTS, [{"unexpected": True}, workout_factory("ok", "2024-06-10").to_dict()])

        await store.sign_in(EMAIL, "secret1")

        assert [w.id for w in store.state.workouts] == ["ok"]

    async def test_sync_now_pulls_again(self, signed_in_store, backend):
        backend.collections[RemoteCategory.GOALS] = [{"id": "g9", "userId": "user-123", "type": "custom",
                                                       "title": "Plank 3 min", "createdAt": "2024-06-14"}]

        await signed_in_store.sync_now()

        assert [g.id for g in signed_in_store.state.goals] == ["g9"]
        assert signed_in_store.sync_engine.state.total_pulled == 1


class TestAccountIsolation:
    """Data never leaks between accounts"""

    async def test_other_accounts_cache_is_cleared(self, store, cache, workout_factory):
        cache.set(CacheKey.ACCOUNT, {"id": "someone-else", "email": "x@example.com", "displayName": "X",
                                     "createdAt": "2024-01-01", "updatedAt": "2024-01-01"})
        cache.set(CacheKey.WORKOUTS, [workout_factory("theirs", "2024-06-10").to_dict()])

        await store.sign_in(EMAIL, "secret1")

        assert store.state.account.id == "user-123"
        assert store.state.workouts == []
        assert cache.get(CacheKey.WORKOUTS) is None

    async def test_sign_out_clears_everything(self, signed_in_store, cache, backend):
        await signed_in_store.add_body_weight(80.0)
        await signed_in_store.update_notification_settings(workout_reminders=False)
        await signed_in_store.start_workout("Legs")

        await signed_in_store.sign_out()

        assert signed_in_store.state.auth_status is AuthStatus.UNAUTHENTICATED
        assert signed_in_store.state.account is None
        assert signed_in_store.state.active_workout is None
        assert signed_in_store.state.body_weights == []
        assert cache.keys() == []
        assert ("sign_out",) in backend.auth.calls

    async def test_late_pull_results_discarded_after_sign_out(self, store, backend, cache, workout_factory):
        backend.gate = asyncio.Event()
        backend.collections[RemoteCategory.WORKOUTS] = [workout_factory("late", "2024-06-12").to_dict()]

        await store.sign_in(EMAIL, "secret1")
        await _let_tasks_start()
        await store.sign_out()

        backend.gate.set()
        await _let_tasks_start()
        await store.wait_for_sync()

        assert store.state.workouts == []
        assert store.state.sync_status is SyncStatus.IDLE
        assert cache.get(CacheKey.WORKOUTS) is None

    async def test_remote_sign_out_failure_still_clears_locally(self, signed_in_store, backend, cache):
        async def broken_sign_out():
            raise ConnectionError("offline")

        backend.auth.sign_out = broken_sign_out

        await signed_in_store.sign_out()

        assert signed_in_store.state.account is None
        assert cache.keys() == []


class TestLocalBackendEndToEnd:
    """
    Full round trip on the offline backend.

    A second store opened on the same cache file sees the first store's
    history after signing in with the same email.
    """

    @pytest.fixture
    def config(self, tmp_path):
        return AppConfig(backend="local", cache=CacheConfig(path=tmp_path / "gymtrack.db"))

    async def test_history_survives_restart(self, config):
        first = create_app_store(config, configure_logging=False)
        await first.sign_up(EMAIL, "secret1", "secret1", "Lifter")
        await first.start_workout("Push Day")
        entry = first.add_exercise_to_workout(DEFAULT_EXERCISES[0])
        first.update_set(entry.id, entry.sets[0].id, weight=60.0, reps=10, is_completed=True)
        finished = await first.finish_workout()
        await first.add_body_weight(79.4)
        await first.close()

        second = create_app_store(config, configure_logging=False)
        assert await second.restore_session() is False

        await second.sign_in(EMAIL, "secret1")
        await second.wait_for_sync()

        assert [w.id for w in second.state.workouts] == [finished.id]
        assert second.state.personal_records[0].weight == 60.0
        assert second.state.account.profile.weight == 79.4
        assert second.state.sync_status is SyncStatus.COMPLETED
        await second.close()

    async def test_photos_stay_on_device(self, config, tmp_path):
        store = create_app_store(config, configure_logging=False)
        await store.sign_in(EMAIL, "secret1")

        photo = await store.add_progress_photo(b"\xff\xd8jpeg")

        assert photo.uri.startswith("file://")
        assert list((tmp_path / "photos").rglob("*.jpg"))
        await store.close()

    async def test_oauth_unavailable_offline(self, config):
        store = create_app_store(config, configure_logging=False)

        with pytest.raises(AuthenticationError) as exc_info:
            await store.start_oauth("google")

        assert "not available offline" in str(exc_info.value)
        await store.close()
