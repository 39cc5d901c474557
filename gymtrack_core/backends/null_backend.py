# =============================================================================
# gymtrack_core/backends/null_backend.py
# Local-Only Backend
# =============================================================================
"""
NullBackend - persists nothing remotely.

Used for offline-only builds. Sign-in fabricates a session from the email
address (any well-formed password is accepted), lists are always empty and
writes succeed without effect. Photos stay on device: upload returns a
local URI under the photo directory.
"""

from __future__ import annotations
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from gymtrack_core.auth import AuthEvent, AuthSession, SignUpResult
from gymtrack_core.backends.base import AuthProvider, BlobStorage, RemoteBackend, RemoteCategory
from gymtrack_core.config import AppConfig
from gymtrack_core.errors import AuthenticationError, RemoteBackendError
from gymtrack_core.logging import get_logger

logger = get_logger(__name__)


def local_account_id(email: str) -> str:
    """Stable account id derived from the email address"""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"mailto:{email.strip().lower()}"))


class NullAuthProvider(AuthProvider):
    """Accepts any credentials and keeps the session in memory."""

    def __init__(self):
        super().__init__()
        self._session: Optional[AuthSession] = None

    def _start_session(self, email: str, display_name: Optional[str] = None) -> AuthSession:
        self._session = AuthSession(
            user_id=local_account_id(email),
            email=email,
            display_name=display_name or email.split("@")[0],
        )
        self._emit(AuthEvent.SIGNED_IN, self._session)
        return self._session

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        return self._start_session(email)

    async def sign_up_with_password(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> SignUpResult:
        return SignUpResult(
            session=self._start_session(email, display_name),
            needs_confirmation=False,
        )

    async def sign_in_with_oauth_redirect(self, provider: str) -> str:
        raise AuthenticationError(
            f"OAuth sign-in with {provider} is not available offline",
            details={"provider": provider},
        )

    async def complete_oauth_from_callback_url(self, url: str) -> AuthSession:
        raise AuthenticationError("OAuth sign-in is not available offline")

    async def sign_out(self) -> None:
        self._session = None
        self._emit(AuthEvent.SIGNED_OUT, None)

    async def send_password_reset(self, email: str) -> None:
        logger.info("Password reset requested on local backend; nothing to send")

    async def resend_confirmation(self, email: str) -> None:
        logger.info("Confirmation resend requested on local backend; nothing to send")

    async def get_current_session(self) -> Optional[AuthSession]:
        return self._session


class LocalBlobStorage(BlobStorage):
    """Writes photos under a local directory and returns file:// URIs."""

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root else Path("local_data") / "photos"

    async def upload(self, account_id: str, data: bytes, blob_id: str) -> str:
        path = self.root / self.blob_path(account_id, blob_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise RemoteBackendError(
                f"Could not store photo locally: {e}",
                backend="local",
                operation="upload",
            ) from e
        return path.resolve().as_uri()

    async def delete(self, account_id: str, blob_id: str) -> None:
        path = self.root / self.blob_path(account_id, blob_id)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not delete local photo {path}: {e}")


class NullBackend(RemoteBackend):
    """Remote backend that stores nothing."""

    name = "local"

    def __init__(self, photo_root: Optional[Path] = None):
        super().__init__(auth=NullAuthProvider(), storage=LocalBlobStorage(photo_root))

    @classmethod
    def from_config(cls, config: AppConfig) -> NullBackend:
        """Photos are kept next to the cache database"""
        return cls(photo_root=Path(config.cache.path).parent / "photos")

    async def _list(self, category: RemoteCategory, account_id: str) -> List[Dict[str, Any]]:
        return []

    async def _upsert(
        self,
        category: RemoteCategory,
        record: Dict[str, Any],
        account_id: str,
    ) -> None:
        return None

    async def _delete(self, category: RemoteCategory, record_id: str, account_id: str) -> None:
        return None

    async def _get_account(self, account_id: str) -> Optional[Dict[str, Any]]:
        return None

    async def _upsert_account(self, account: Dict[str, Any]) -> None:
        return None
