# =============================================================================
# gymtrack_core/offline/local_cache.py
# On-Device Key/Value Cache
# =============================================================================
"""
LocalCache - SQLite-backed key/value store of JSON documents.

One key per data category (see CacheKey). Values are JSON-serialized on
write and parsed on read. There are no transactions across keys, no expiry
and no size limits.

Failure policy: any I/O or decode error is logged and the call behaves as if
the cache were empty (get -> None, set -> False, remove -> no-op).
"""

from __future__ import annotations
import json
import sqlite3
import threading
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from gymtrack_core.errors import CacheError
from gymtrack_core.logging import get_logger

logger = get_logger(__name__)


class CacheKey(Enum):
    """Cache namespaces, one JSON document each."""
    ACCOUNT = "gymtrack.account"
    WORKOUTS = "gymtrack.workouts"
    CUSTOM_EXERCISES = "gymtrack.custom_exercises"
    BODY_WEIGHTS = "gymtrack.body_weights"
    MEASUREMENTS = "gymtrack.measurements"
    PROGRESS_PHOTOS = "gymtrack.progress_photos"
    PERSONAL_RECORDS = "gymtrack.personal_records"
    GOALS = "gymtrack.goals"
    TEMPLATES = "gymtrack.templates"
    NOTIFICATION_SETTINGS = "gymtrack.notification_settings"
    HAS_ONBOARDED = "gymtrack.has_onboarded"
    THEME = "gymtrack.theme"


Namespace = Union[CacheKey, str]


def _key(namespace: Namespace) -> str:
    return namespace.value if isinstance(namespace, CacheKey) else str(namespace)


class LocalCache:
    """
    Durable key/value cache for the app's private storage area.

    Usage:
        cache = LocalCache(Path("local_data/gymtrack.db"))
        cache.set(CacheKey.WORKOUTS, [w.to_dict() for w in workouts])
        raw = cache.get(CacheKey.WORKOUTS) or []
    """

    DEFAULT_DB_PATH = Path("local_data") / "gymtrack.db"

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """

    def __init__(self, db_path: Optional[Union[Path, str]] = None):
        """
        Initialize the cache.

        Args:
            db_path: Path to the SQLite file, or ":memory:" for a throwaway cache
        """
        self.db_path = str(db_path) if db_path is not None else str(self.DEFAULT_DB_PATH)
        self._lock = threading.Lock()
        self._connection: Optional[sqlite3.Connection] = None

    def _get_connection(self) -> sqlite3.Connection:
        """Open the database on first use and ensure the schema exists."""
        if self._connection is None:
            try:
                if self.db_path != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                connection = sqlite3.connect(self.db_path, check_same_thread=False)
                connection.execute(self.SCHEMA)
                connection.commit()
            except (sqlite3.Error, OSError) as e:
                raise CacheError(f"Could not open cache: {e}") from e
            self._connection = connection
            logger.info(f"Local cache opened at: {self.db_path}")
        return self._connection

    # =========================================================================
    # KEY/VALUE OPERATIONS
    # =========================================================================

    def get(self, namespace: Namespace) -> Optional[Any]:
        """
        Read and parse the document stored under a namespace.

        Returns:
            Parsed JSON value, or None when absent or unreadable
        """
        key = _key(namespace)
        try:
            with self._lock:
                row = self._get_connection().execute(
                    "SELECT value FROM kv_store WHERE key = ?", (key,)
                ).fetchone()
            if row is None:
                return None
            return json.loads(row[0])
        except (CacheError, sqlite3.Error, json.JSONDecodeError) as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

    def set(self, namespace: Namespace, value: Any) -> bool:
        """
        Serialize and store a document under a namespace.

        Returns:
            True if the value was written
        """
        key = _key(namespace)
        try:
            payload = json.dumps(value)
            with self._lock:
                conn = self._get_connection()
                conn.execute(
                    "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
                    (key, payload, datetime.now().isoformat()),
                )
                conn.commit()
            return True
        except (CacheError, sqlite3.Error, TypeError, ValueError) as e:
            logger.warning(f"Cache write failed for {key}: {e}")
            return False

    def remove(self, namespaces: Iterable[Namespace]) -> None:
        """Delete the documents stored under the given namespaces."""
        keys = [(_key(ns),) for ns in namespaces]
        if not keys:
            return
        try:
            with self._lock:
                conn = self._get_connection()
                conn.executemany("DELETE FROM kv_store WHERE key = ?", keys)
                conn.commit()
        except (CacheError, sqlite3.Error) as e:
            logger.warning(f"Cache remove failed for {[k[0] for k in keys]}: {e}")

    def clear(self) -> None:
        """Remove every known namespace."""
        self.remove(list(CacheKey))
        logger.info("Local cache cleared")

    def keys(self) -> list:
        """Namespaces that currently hold a value."""
        try:
            with self._lock:
                rows = self._get_connection().execute("SELECT key FROM kv_store").fetchall()
            return [row[0] for row in rows]
        except (CacheError, sqlite3.Error) as e:
            logger.warning(f"Cache key listing failed: {e}")
            return []

    def close(self) -> None:
        """Close the underlying connection."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
