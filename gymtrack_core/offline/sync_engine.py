# =============================================================================
# gymtrack_core/offline/sync_engine.py
# Remote Pull Engine
# =============================================================================
"""
SyncEngine - pulls every per-account collection from the remote backend.

Features:
- All category fetches plus the account fetch run concurrently
- Per-category failure isolation (a failed fetch is logged and skipped)
- Non-empty filtering: only categories that returned records are reported
- Sync status tracking with state-change callbacks

The engine never touches the cache or in-memory state itself; the app store
applies a PullResult.
"""

from __future__ import annotations
import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from gymtrack_core.backends.base import RemoteBackend, RemoteCategory
from gymtrack_core.logging import LogContext, get_logger

logger = get_logger(__name__)


class SyncStatus(Enum):
    """Sync operation status."""
    IDLE = "idle"
    SYNCING = "syncing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class SyncState:
    """Current sync state."""
    status: SyncStatus = SyncStatus.IDLE
    last_sync: Optional[datetime] = None
    last_sync_success: Optional[datetime] = None
    updated_categories: List[str] = field(default_factory=list)
    failed_categories: List[str] = field(default_factory=list)
    total_pulled: int = 0

    @property
    def is_syncing(self) -> bool:
        return self.status is SyncStatus.SYNCING


@dataclass
class PullResult:
    """Outcome of one pull. Only non-empty collections are present."""
    account: Optional[Dict[str, Any]] = None
    collections: Dict[RemoteCategory, List[Dict[str, Any]]] = field(default_factory=dict)
    failed: List[str] = field(default_factory=list)

    @property
    def record_count(self) -> int:
        return sum(len(records) for records in self.collections.values())

    @property
    def is_empty(self) -> bool:
        return self.account is None and not self.collections


class SyncEngine:
    """
    Concurrent pull from a remote backend.

    Usage:
        engine = SyncEngine(backend)
        result = await engine.pull_all(account_id)
        for category, records in result.collections.items():
            ...
    """

    ACCOUNT = "account"

    def __init__(self, backend: RemoteBackend):
        self.backend = backend
        self._state = SyncState()
        self._callbacks: List[Callable[[SyncState], None]] = []

    @property
    def state(self) -> SyncState:
        """Get current sync state."""
        return self._state

    @property
    def is_syncing(self) -> bool:
        return self._state.is_syncing

    async def pull_all(self, account_id: str) -> PullResult:
        """
        Fetch the account and every category concurrently.

        Args:
            account_id: Account whose data to pull

        Returns:
            PullResult with the account (if found) and non-empty collections
        """
        categories = list(RemoteCategory)

        self._state.status = SyncStatus.SYNCING
        self._state.last_sync = datetime.now()
        self._notify_callbacks()

        with LogContext(logger, f"Remote pull ({self.backend.name})"):
            outcomes = await asyncio.gather(
                self.backend.get_account(account_id),
                *(self.backend.list(category, account_id) for category in categories),
                return_exceptions=True,
            )

        result = PullResult()
        account_outcome, list_outcomes = outcomes[0], outcomes[1:]

        if isinstance(account_outcome, Exception):
            logger.warning(f"Account fetch failed: {account_outcome}")
            result.failed.append(self.ACCOUNT)
        elif isinstance(account_outcome, BaseException):
            raise account_outcome
        elif account_outcome:
            result.account = account_outcome

        for category, outcome in zip(categories, list_outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"Fetch of {category.value} failed: {outcome}")
                result.failed.append(category.value)
            elif isinstance(outcome, BaseException):
                raise outcome
            elif outcome:
                result.collections[category] = list(outcome)
            else:
                logger.debug(f"Remote {category.value} is empty; keeping local copy")

        self._record(result, attempted=len(categories) + 1)
        return result

    def _record(self, result: PullResult, attempted: int) -> None:
        """Update sync state after a pull."""
        self._state.updated_categories = [c.value for c in result.collections]
        self._state.failed_categories = list(result.failed)
        self._state.total_pulled += result.record_count

        if len(result.failed) == attempted:
            self._state.status = SyncStatus.FAILED
        else:
            self._state.status = SyncStatus.COMPLETED
            self._state.last_sync_success = datetime.now()

        logger.info(
            f"Pull complete: {len(result.collections)} categories updated, "
            f"{result.record_count} records, {len(result.failed)} failed"
        )
        self._notify_callbacks()

    def mark_cancelled(self) -> None:
        """Reset status when an in-flight pull is abandoned."""
        if self._state.is_syncing:
            self._state.status = SyncStatus.IDLE
            self._notify_callbacks()

    def reset(self) -> None:
        """Forget all sync history (sign-out)."""
        self._state = SyncState()
        self._notify_callbacks()

    def register_callback(self, callback: Callable[[SyncState], None]) -> None:
        """Register a callback for sync state changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[SyncState], None]) -> None:
        """Remove a registered callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        """Notify all registered callbacks."""
        for callback in self._callbacks:
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Error in sync callback: {e}")

    def get_status_display(self) -> Dict[str, Any]:
        """Get sync status for UI display."""
        return {
            "status": self._state.status.value,
            "last_sync": self._state.last_sync.isoformat() if self._state.last_sync else None,
            "last_success": (
                self._state.last_sync_success.isoformat() if self._state.last_sync_success else None
            ),
            "updated_categories": list(self._state.updated_categories),
            "failed_categories": list(self._state.failed_categories),
            "total_pulled": self._state.total_pulled,
        }
