# =============================================================================
# gymtrack_core/backends/supabase_backend.py
# Relational Backend (Supabase Postgres + Auth + Storage)
# =============================================================================
"""
SupabaseBackend - one table per category, keyed by id with a user_id owner
column. Rows are translated with field_mapping.to_row / from_row.

Expected tables:
    profiles, workouts, custom_exercises, body_weights, measurements,
    progress_photos, personal_records, goals, workout_templates

The supabase client is synchronous; every call is pushed to a worker thread
with asyncio.to_thread so the event loop never blocks on the network.
"""

from __future__ import annotations
import asyncio
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from gymtrack_core.auth import (
    AuthEvent,
    AuthListener,
    AuthSession,
    SignUpResult,
    Unsubscribe,
    parse_oauth_callback,
    to_authentication_error,
)
from gymtrack_core.backends.base import AuthProvider, BlobStorage, RemoteBackend, RemoteCategory
from gymtrack_core.backends.field_mapping import ACCOUNT_TABLE, OWNER_COLUMN, TABLES, from_row, to_row
from gymtrack_core.config import AppConfig
from gymtrack_core.errors import AuthenticationError, AuthErrorKind, RemoteBackendError
from gymtrack_core.logging import get_logger

logger = get_logger(__name__)


def _session_from_supabase(session: Any) -> Optional[AuthSession]:
    """Convert a gotrue Session into an AuthSession"""
    if session is None or getattr(session, "user", None) is None:
        return None

    user = session.user
    metadata = getattr(user, "user_metadata", None) or {}
    return AuthSession(
        user_id=user.id,
        email=user.email or "",
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        display_name=metadata.get("display_name") or metadata.get("full_name") or metadata.get("name"),
        expires_at=getattr(session, "expires_at", None),
    )


# =============================================================================
# AUTH
# =============================================================================

class SupabaseAuthProvider(AuthProvider):
    """Supabase Auth (gotrue) wrapper."""

    def __init__(
        self,
        client: Client,
        redirect_uri: str,
        reset_redirect_uri: str,
    ):
        super().__init__()
        self._client = client
        self.redirect_uri = redirect_uri
        self.reset_redirect_uri = reset_redirect_uri

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        try:
            response = await asyncio.to_thread(
                self._client.auth.sign_in_with_password,
                {"email": email, "password": password},
            )
        except Exception as e:
            raise to_authentication_error(e, "Sign in") from e

        session = _session_from_supabase(response.session)
        if session is None:
            raise AuthenticationError("Sign in returned no session")
        return session

    async def sign_up_with_password(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> SignUpResult:
        credentials = {
            "email": email,
            "password": password,
            "options": {
                "data": {"display_name": display_name or ""},
                "email_redirect_to": self.redirect_uri,
            },
        }
        try:
            response = await asyncio.to_thread(self._client.auth.sign_up, credentials)
        except Exception as e:
            raise to_authentication_error(e, "Sign up") from e

        user = response.user
        if user is None:
            raise AuthenticationError("Sign up returned no user")

        # Supabase answers an existing address with an identity-less user
        if getattr(user, "identities", None) == []:
            raise AuthenticationError(
                "An account with this email already exists",
                kind=AuthErrorKind.INVALID_CREDENTIALS,
                details={"email": email},
            )

        session = _session_from_supabase(response.session)
        return SignUpResult(session=session, needs_confirmation=session is None)

    async def sign_in_with_oauth_redirect(self, provider: str) -> str:
        try:
            response = await asyncio.to_thread(
                self._client.auth.sign_in_with_oauth,
                {
                    "provider": provider,
                    "options": {
                        "redirect_to": self.redirect_uri,
                        "skip_browser_redirect": True,
                    },
                },
            )
        except Exception as e:
            raise to_authentication_error(e, f"{provider} sign in") from e

        if not response.url:
            raise AuthenticationError(f"No authorization URL returned for {provider}")
        return response.url

    async def complete_oauth_from_callback_url(self, url: str) -> AuthSession:
        access_token, refresh_token = parse_oauth_callback(url)
        try:
            response = await asyncio.to_thread(
                self._client.auth.set_session, access_token, refresh_token
            )
        except Exception as e:
            raise to_authentication_error(e, "OAuth sign in") from e

        session = _session_from_supabase(response.session)
        if session is None:
            raise AuthenticationError("Could not install OAuth session")
        return session

    async def sign_out(self) -> None:
        await asyncio.to_thread(self._client.auth.sign_out)

    async def send_password_reset(self, email: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.auth.reset_password_for_email,
                email,
                {"redirect_to": self.reset_redirect_uri},
            )
        except Exception as e:
            raise to_authentication_error(e, "Password reset") from e

    async def resend_confirmation(self, email: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.auth.resend,
                {
                    "type": "signup",
                    "email": email,
                    "options": {"email_redirect_to": self.redirect_uri},
                },
            )
        except Exception as e:
            raise to_authentication_error(e, "Resend confirmation") from e

    async def get_current_session(self) -> Optional[AuthSession]:
        session = await asyncio.to_thread(self._client.auth.get_session)
        return _session_from_supabase(session)

    def subscribe_to_auth_changes(self, callback: AuthListener) -> Unsubscribe:
        def forward(event: Any, session: Any) -> None:
            name = getattr(event, "value", event)
            try:
                kind = AuthEvent(str(name))
            except ValueError:
                logger.debug(f"Ignoring auth event: {name}")
                return
            callback(kind, _session_from_supabase(session))

        subscription = self._client.auth.on_auth_state_change(forward)
        return subscription.unsubscribe


# =============================================================================
# STORAGE
# =============================================================================

class SupabaseBlobStorage(BlobStorage):
    """Supabase Storage bucket for progress photos."""

    def __init__(self, client: Client, bucket: str = "progress-photos"):
        self._client = client
        self.bucket = bucket

    async def upload(self, account_id: str, data: bytes, blob_id: str) -> str:
        path = self.blob_path(account_id, blob_id)
        bucket = self._client.storage.from_(self.bucket)

        def _upload() -> str:
            bucket.upload(path, data, {"content-type": "image/jpeg", "upsert": "true"})
            return bucket.get_public_url(path)

        try:
            return await asyncio.to_thread(_upload)
        except Exception as e:
            raise RemoteBackendError(
                f"Photo upload failed: {e}",
                backend="supabase",
                operation="upload",
                details={"path": path},
            ) from e

    async def delete(self, account_id: str, blob_id: str) -> None:
        path = self.blob_path(account_id, blob_id)
        try:
            await asyncio.to_thread(self._client.storage.from_(self.bucket).remove, [path])
        except Exception as e:
            logger.warning(f"Could not delete photo {path}: {e}")


# =============================================================================
# BACKEND
# =============================================================================

class SupabaseBackend(RemoteBackend):
    """
    Relational backend over Supabase.

    Usage:
        backend = SupabaseBackend.from_config(config)
        rows = await backend.list(RemoteCategory.WORKOUTS, account_id)
    """

    name = "supabase"

    def __init__(
        self,
        client: Client,
        redirect_uri: str,
        reset_redirect_uri: str,
        photo_bucket: str = "progress-photos",
    ):
        super().__init__(
            auth=SupabaseAuthProvider(client, redirect_uri, reset_redirect_uri),
            storage=SupabaseBlobStorage(client, photo_bucket),
        )
        self.client = client

    @classmethod
    def from_config(cls, config: AppConfig) -> SupabaseBackend:
        client = create_client(config.supabase.url, config.supabase.key)
        logger.info("Supabase client initialized")
        return cls(
            client,
            redirect_uri=config.oauth_redirect_uri,
            reset_redirect_uri=config.password_reset_redirect_uri,
            photo_bucket=config.supabase.photo_bucket,
        )

    async def _list(self, category: RemoteCategory, account_id: str) -> List[Dict[str, Any]]:
        spec = TABLES[category]

        def _fetch() -> List[Dict[str, Any]]:
            query = self.client.table(spec.table).select("*").eq(OWNER_COLUMN, account_id)
            if spec.order_column:
                query = query.order(spec.order_column, desc=True)
            return query.execute().data or []

        rows = await asyncio.to_thread(_fetch)
        logger.debug(f"Fetched {len(rows)} rows from {spec.table}")
        return [from_row(spec.record_type, row) for row in rows]

    async def _upsert(
        self,
        category: RemoteCategory,
        record: Dict[str, Any],
        account_id: str,
    ) -> None:
        spec = TABLES[category]
        row = to_row(spec.record_type, record, account_id)
        await asyncio.to_thread(
            lambda: self.client.table(spec.table).upsert(row, on_conflict="id").execute()
        )

    async def _delete(self, category: RemoteCategory, record_id: str, account_id: str) -> None:
        spec = TABLES[category]
        await asyncio.to_thread(
            lambda: self.client.table(spec.table).delete().eq("id", record_id).execute()
        )

    async def _get_account(self, account_id: str) -> Optional[Dict[str, Any]]:
        def _fetch() -> List[Dict[str, Any]]:
            return (
                self.client.table(ACCOUNT_TABLE.table)
                .select("*")
                .eq("id", account_id)
                .limit(1)
                .execute()
                .data
            ) or []

        rows = await asyncio.to_thread(_fetch)
        return from_row(ACCOUNT_TABLE.record_type, rows[0]) if rows else None

    async def _upsert_account(self, account: Dict[str, Any]) -> None:
        row = to_row(ACCOUNT_TABLE.record_type, account)
        await asyncio.to_thread(
            lambda: self.client.table(ACCOUNT_TABLE.table).upsert(row, on_conflict="id").execute()
        )
