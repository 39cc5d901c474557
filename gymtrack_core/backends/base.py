# =============================================================================
# gymtrack_core/backends/base.py
# Remote Backend Contract
# =============================================================================
"""
Abstract contract shared by every remote backend variant.

A backend exposes three surfaces:
- data: list/upsert/delete per RemoteCategory plus account documents
- auth: AuthProvider (password, OAuth redirect, session listener)
- storage: BlobStorage (progress photo upload/delete)

Records cross this boundary as camelCase dicts (Record.to_dict()). Variants
translate to their own storage format internally.

Failure semantics:
- list / get_account raise RemoteBackendError; the caller decides what
  "unavailable" means (the sync engine keeps the cached value).
- upsert / delete / upsert_account log the failure and return False.
- BlobStorage.upload raises RemoteBackendError; BlobStorage.delete only logs.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from gymtrack_core.auth import AuthEvent, AuthListener, AuthSession, SignUpResult, Unsubscribe
from gymtrack_core.errors import RemoteBackendError
from gymtrack_core.logging import get_logger

if TYPE_CHECKING:
    from gymtrack_core.config import AppConfig

logger = get_logger(__name__)


class RemoteCategory(Enum):
    """Per-account collections synced with the remote backend."""
    WORKOUTS = "workouts"
    CUSTOM_EXERCISES = "custom_exercises"
    BODY_WEIGHTS = "body_weights"
    MEASUREMENTS = "measurements"
    PROGRESS_PHOTOS = "progress_photos"
    PERSONAL_RECORDS = "personal_records"
    GOALS = "goals"
    TEMPLATES = "templates"


# camelCase field each category is listed by, newest first. None = unordered.
ORDER_FIELDS: Dict[RemoteCategory, Optional[str]] = {
    RemoteCategory.WORKOUTS: "createdAt",
    RemoteCategory.CUSTOM_EXERCISES: None,
    RemoteCategory.BODY_WEIGHTS: "date",
    RemoteCategory.MEASUREMENTS: "date",
    RemoteCategory.PROGRESS_PHOTOS: "date",
    RemoteCategory.PERSONAL_RECORDS: None,
    RemoteCategory.GOALS: "createdAt",
    RemoteCategory.TEMPLATES: "createdAt",
}


# =============================================================================
# AUTH SUB-CONTRACT
# =============================================================================

class AuthProvider(ABC):
    """Authentication surface of a backend."""

    def __init__(self):
        self._listeners: List[AuthListener] = []

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Raises AuthenticationError on rejection."""

    @abstractmethod
    async def sign_up_with_password(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> SignUpResult:
        """Create an account; reports whether email confirmation is pending."""

    @abstractmethod
    async def sign_in_with_oauth_redirect(self, provider: str) -> str:
        """Return the provider authorization URL to open in a browser."""

    @abstractmethod
    async def complete_oauth_from_callback_url(self, url: str) -> AuthSession:
        """Extract tokens from the redirect URI and install them as the session."""

    @abstractmethod
    async def sign_out(self) -> None:
        ...

    @abstractmethod
    async def send_password_reset(self, email: str) -> None:
        ...

    @abstractmethod
    async def resend_confirmation(self, email: str) -> None:
        ...

    @abstractmethod
    async def get_current_session(self) -> Optional[AuthSession]:
        ...

    def subscribe_to_auth_changes(self, callback: AuthListener) -> Unsubscribe:
        """
        Register a listener for auth state changes.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        """Notify listeners; a failing listener does not stop the others."""
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception as e:
                logger.error(f"Error in auth listener: {e}")


# =============================================================================
# BLOB STORAGE SUB-CONTRACT
# =============================================================================

class BlobStorage(ABC):
    """Image storage addressed by {account_id}/{blob_id}.jpg"""

    @staticmethod
    def blob_path(account_id: str, blob_id: str) -> str:
        return f"{account_id}/{blob_id}.jpg"

    @abstractmethod
    async def upload(self, account_id: str, data: bytes, blob_id: str) -> str:
        """
        Store image bytes.

        Returns:
            Public URI of the stored blob

        Raises:
            RemoteBackendError: if the upload fails
        """

    @abstractmethod
    async def delete(self, account_id: str, blob_id: str) -> None:
        """Remove a blob. Failures are logged, never raised."""


# =============================================================================
# BACKEND
# =============================================================================

class RemoteBackend(ABC):
    """
    Base class for remote backends.

    Subclasses implement the underscore methods; the public wrappers apply
    the failure semantics described in the module docstring.
    """

    name = "base"

    def __init__(self, auth: AuthProvider, storage: BlobStorage):
        self.auth = auth
        self.storage = storage

    @classmethod
    def from_config(cls, config: "AppConfig") -> "RemoteBackend":
        """Build the backend from application configuration."""
        raise NotImplementedError(f"{cls.__name__} cannot be built from configuration")

    # === LIST / FETCH (raise) ===

    async def list(self, category: RemoteCategory, account_id: str) -> List[Dict[str, Any]]:
        """
        Fetch every record of a category owned by an account.

        Returns:
            camelCase dicts, newest first where the category is ordered

        Raises:
            RemoteBackendError: on any failure
        """
        try:
            return await self._list(category, account_id)
        except RemoteBackendError:
            raise
        except Exception as e:
            raise RemoteBackendError(
                f"Failed to list {category.value}: {e}",
                backend=self.name,
                operation="list",
                category=category.value,
            ) from e

    async def get_account(self, account_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch the account document.

        Raises:
            RemoteBackendError: on any failure
        """
        try:
            return await self._get_account(account_id)
        except RemoteBackendError:
            raise
        except Exception as e:
            raise RemoteBackendError(
                f"Failed to fetch account: {e}",
                backend=self.name,
                operation="get_account",
            ) from e

    # === WRITES (log, return success flag) ===

    async def upsert(
        self,
        category: RemoteCategory,
        record: Dict[str, Any],
        account_id: str,
    ) -> bool:
        """Insert or replace a record by id. Returns False on failure."""
        try:
            await self._upsert(category, record, account_id)
            return True
        except Exception as e:
            logger.warning(
                f"[{self.name}] upsert {category.value}/{record.get('id')} failed: {e}"
            )
            return False

    async def delete(self, category: RemoteCategory, record_id: str, account_id: str) -> bool:
        """Delete a record by id. Returns False on failure."""
        try:
            await self._delete(category, record_id, account_id)
            return True
        except Exception as e:
            logger.warning(f"[{self.name}] delete {category.value}/{record_id} failed: {e}")
            return False

    async def upsert_account(self, account: Dict[str, Any]) -> bool:
        """Insert or replace the account document. Returns False on failure."""
        try:
            await self._upsert_account(account)
            return True
        except Exception as e:
            logger.warning(f"[{self.name}] upsert account {account.get('id')} failed: {e}")
            return False

    async def close(self) -> None:
        """Release SDK resources."""

    # === VARIANT HOOKS ===

    @abstractmethod
    async def _list(self, category: RemoteCategory, account_id: str) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def _upsert(
        self,
        category: RemoteCategory,
        record: Dict[str, Any],
        account_id: str,
    ) -> None:
        ...

    @abstractmethod
    async def _delete(self, category: RemoteCategory, record_id: str, account_id: str) -> None:
        ...

    @abstractmethod
    async def _get_account(self, account_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def _upsert_account(self, account: Dict[str, Any]) -> None:
        ...
