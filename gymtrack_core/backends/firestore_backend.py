# =============================================================================
# gymtrack_core/backends/firestore_backend.py
# Document-Store Backend (Cloud Firestore + Firebase Auth + Cloud Storage)
# =============================================================================
"""
FirestoreBackend - one document per account plus a sub-collection per
category:

    users/{accountId}                       account document
    users/{accountId}/workouts/{id}
    users/{accountId}/body_weights/{id}
    ...

Documents are stored in the same camelCase shape the local cache uses, so
no column mapping is needed.

Password and email flows go through the Identity Toolkit REST API (the
Admin SDK cannot sign users in). OAuth completion verifies the returned ID
token with the Admin SDK.
"""

from __future__ import annotations
import asyncio
import time
from typing import Any, Dict, List, Optional

import firebase_admin
import requests
from firebase_admin import auth as fb_auth
from firebase_admin import credentials, firestore, storage

from gymtrack_core.auth import AuthEvent, AuthSession, SignUpResult, parse_oauth_callback, to_authentication_error
from gymtrack_core.backends.base import ORDER_FIELDS, AuthProvider, BlobStorage, RemoteBackend, RemoteCategory
from gymtrack_core.config import AppConfig
from gymtrack_core.errors import AuthenticationError, RemoteBackendError
from gymtrack_core.logging import get_logger

logger = get_logger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
USERS_COLLECTION = "users"

# OAuth provider name -> Firebase provider id
OAUTH_PROVIDERS = {
    "google": "google.com",
    "apple": "apple.com",
    "facebook": "facebook.com",
    "github": "github.com",
}


def initialize_firebase_app(config: AppConfig) -> firebase_admin.App:
    """Initialize (once) and return the default Firebase app"""
    if firebase_admin._apps:
        return firebase_admin.get_app()

    if config.firebase.credentials_path:
        cred = credentials.Certificate(config.firebase.credentials_path)
    else:
        cred = credentials.ApplicationDefault()

    options = {}
    if config.firebase.storage_bucket:
        options["storageBucket"] = config.firebase.storage_bucket

    app = firebase_admin.initialize_app(cred, options)
    logger.info("Firebase app initialized")
    return app


# =============================================================================
# AUTH
# =============================================================================

class FirebaseAuthProvider(AuthProvider):
    """Firebase Authentication via the Identity Toolkit REST API."""

    def __init__(
        self,
        api_key: str,
        redirect_uri: str,
        reset_redirect_uri: str,
        timeout: int = 30,
        http: Optional[requests.Session] = None,
    ):
        super().__init__()
        self.api_key = api_key
        self.redirect_uri = redirect_uri
        self.reset_redirect_uri = reset_redirect_uri
        self.timeout = timeout
        self._http = http or requests.Session()
        self._session: Optional[AuthSession] = None

    def _post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Call an Identity Toolkit endpoint.

        Raises:
            RemoteBackendError: transport failure or error response
        """
        url = f"{IDENTITY_TOOLKIT_URL}/{endpoint}"
        try:
            response = self._http.post(
                url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RemoteBackendError(
                f"Identity Toolkit request failed: {e}",
                backend="firestore",
                operation=endpoint,
            ) from e

        body = response.json() if response.content else {}
        if not response.ok:
            error = body.get("error", {}) if isinstance(body, dict) else {}
            raise RemoteBackendError(
                error.get("message") or f"HTTP {response.status_code}",
                backend="firestore",
                operation=endpoint,
                details={"status": response.status_code},
            )
        return body

    async def _call(self, endpoint: str, payload: Dict[str, Any], action: str) -> Dict[str, Any]:
        try:
            return await asyncio.to_thread(self._post, endpoint, payload)
        except RemoteBackendError as e:
            raise to_authentication_error(e, action) from e

    def _install(self, body: Dict[str, Any]) -> AuthSession:
        expires_in = int(body.get("expiresIn", 3600))
        self._session = AuthSession(
            user_id=body["localId"],
            email=body.get("email", ""),
            access_token=body.get("idToken"),
            refresh_token=body.get("refreshToken"),
            display_name=body.get("displayName") or None,
            expires_at=int(time.time()) + expires_in,
        )
        self._emit(AuthEvent.SIGNED_IN, self._session)
        return self._session

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        body = await self._call(
            "accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
            "Sign in",
        )
        return self._install(body)

    async def sign_up_with_password(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> SignUpResult:
        body = await self._call(
            "accounts:signUp",
            {"email": email, "password": password, "returnSecureToken": True},
            "Sign up",
        )

        if display_name:
            await self._call(
                "accounts:update",
                {"idToken": body["idToken"], "displayName": display_name, "returnSecureToken": True},
                "Sign up",
            )
            body["displayName"] = display_name

        # Firebase lets unverified users sign in; verification mail is informational
        try:
            await self._call(
                "accounts:sendOobCode",
                {"requestType": "VERIFY_EMAIL", "idToken": body["idToken"]},
                "Sign up",
            )
        except AuthenticationError as e:
            logger.warning(f"Could not send verification email: {e}")

        return SignUpResult(session=self._install(body), needs_confirmation=False)

    async def sign_in_with_oauth_redirect(self, provider: str) -> str:
        provider_id = OAUTH_PROVIDERS.get(provider.lower())
        if provider_id is None:
            raise AuthenticationError(
                f"Unsupported OAuth provider: {provider}",
                details={"supported": sorted(OAUTH_PROVIDERS)},
            )

        body = await self._call(
            "accounts:createAuthUri",
            {"providerId": provider_id, "continueUri": self.redirect_uri},
            f"{provider} sign in",
        )
        if not body.get("authUri"):
            raise AuthenticationError(f"No authorization URL returned for {provider}")
        return body["authUri"]

    async def complete_oauth_from_callback_url(self, url: str) -> AuthSession:
        id_token, refresh_token = parse_oauth_callback(url)
        try:
            claims = await asyncio.to_thread(fb_auth.verify_id_token, id_token)
        except Exception as e:
            raise to_authentication_error(e, "OAuth sign in") from e

        exp = claims.get("exp")
        self._session = AuthSession(
            user_id=claims["uid"],
            email=claims.get("email", ""),
            access_token=id_token,
            refresh_token=refresh_token,
            display_name=claims.get("name"),
            expires_at=int(exp) if exp is not None else None,
        )
        self._emit(AuthEvent.SIGNED_IN, self._session)
        return self._session

    async def sign_out(self) -> None:
        session, self._session = self._session, None
        self._emit(AuthEvent.SIGNED_OUT, None)
        if session is not None:
            await asyncio.to_thread(fb_auth.revoke_refresh_tokens, session.user_id)

    async def send_password_reset(self, email: str) -> None:
        await self._call(
            "accounts:sendOobCode",
            {"requestType": "PASSWORD_RESET", "email": email, "continueUrl": self.reset_redirect_uri},
            "Password reset",
        )

    async def resend_confirmation(self, email: str) -> None:
        session = self._session
        if session is None or session.email.lower() != email.lower():
            raise AuthenticationError("Sign in to resend the confirmation email")
        await self._call(
            "accounts:sendOobCode",
            {"requestType": "VERIFY_EMAIL", "idToken": session.access_token},
            "Resend confirmation",
        )

    async def get_current_session(self) -> Optional[AuthSession]:
        return self._session


# =============================================================================
# STORAGE
# =============================================================================

class FirebaseBlobStorage(BlobStorage):
    """Default Cloud Storage bucket of the Firebase project."""

    def __init__(self, bucket: Any = None):
        self._bucket = bucket

    @property
    def bucket(self):
        if self._bucket is None:
            self._bucket = storage.bucket()
        return self._bucket

    async def upload(self, account_id: str, data: bytes, blob_id: str) -> str:
        path = f"progress_photos/{self.blob_path(account_id, blob_id)}"

        def _upload() -> str:
            blob = self.bucket.blob(path)
            blob.upload_from_string(data, content_type="image/jpeg")
            blob.make_public()
            return blob.public_url

        try:
            return await asyncio.to_thread(_upload)
        except Exception as e:
            raise RemoteBackendError(
                f"Photo upload failed: {e}",
                backend="firestore",
                operation="upload",
                details={"path": path},
            ) from e

    async def delete(self, account_id: str, blob_id: str) -> None:
        path = f"progress_photos/{self.blob_path(account_id, blob_id)}"
        try:
            await asyncio.to_thread(lambda: self.bucket.blob(path).delete())
        except Exception as e:
            logger.warning(f"Could not delete photo {path}: {e}")


# =============================================================================
# BACKEND
# =============================================================================

class FirestoreBackend(RemoteBackend):
    """Document-store backend over Cloud Firestore."""

    name = "firestore"

    def __init__(self, db: Any, auth: FirebaseAuthProvider, blob_storage: FirebaseBlobStorage):
        super().__init__(auth=auth, storage=blob_storage)
        self.db = db

    @classmethod
    def from_config(cls, config: AppConfig) -> FirestoreBackend:
        initialize_firebase_app(config)
        return cls(
            db=firestore.client(),
            auth=FirebaseAuthProvider(
                api_key=config.firebase.api_key,
                redirect_uri=config.oauth_redirect_uri,
                reset_redirect_uri=config.password_reset_redirect_uri,
                timeout=config.firebase.request_timeout,
            ),
            blob_storage=FirebaseBlobStorage(),
        )

    def _user_doc(self, account_id: str):
        return self.db.collection(USERS_COLLECTION).document(account_id)

    def _collection(self, category: RemoteCategory, account_id: str):
        return self._user_doc(account_id).collection(category.value)

    async def _list(self, category: RemoteCategory, account_id: str) -> List[Dict[str, Any]]:
        query = self._collection(category, account_id)
        order_field = ORDER_FIELDS[category]
        if order_field:
            query = query.order_by(order_field, direction=firestore.Query.DESCENDING)

        docs = await asyncio.to_thread(lambda: list(query.stream()))
        return [doc.to_dict() for doc in docs]

    async def _upsert(
        self,
        category: RemoteCategory,
        record: Dict[str, Any],
        account_id: str,
    ) -> None:
        doc = self._collection(category, account_id).document(record["id"])
        await asyncio.to_thread(doc.set, record)

    async def _delete(self, category: RemoteCategory, record_id: str, account_id: str) -> None:
        doc = self._collection(category, account_id).document(record_id)
        await asyncio.to_thread(doc.delete)

    async def _get_account(self, account_id: str) -> Optional[Dict[str, Any]]:
        snapshot = await asyncio.to_thread(self._user_doc(account_id).get)
        return snapshot.to_dict() if snapshot.exists else None

    async def _upsert_account(self, account: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._user_doc(account["id"]).set, account)

    async def close(self) -> None:
        close = getattr(self.db, "close", None)
        if callable(close):
            await asyncio.to_thread(close)
