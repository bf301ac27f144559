"""Supabase-backed authentication, session lookup and per-module history."""

import logging
from typing import Any, Callable, Dict, List, Optional

from supabase import AuthError as SupabaseAuthError
from supabase import Client, create_client

from aione.config import Settings, is_backend_configured
from aione.errors import AuthFailure, BackendNotConfigured
from aione.models.auth import AuthSession, HistoryRecord, UserInfo

logger = logging.getLogger(__name__)

HISTORY_TABLE = "history"

ClientFactory = Callable[[str, str], Client]


def _to_session(response: Any) -> AuthSession:
    user = response.user
    if user is None:
        raise AuthFailure("The backend did not return a user.")
    session = response.session
    return AuthSession(
        user_id=str(user.id),
        email=user.email,
        access_token=session.access_token if session else None,
        refresh_token=session.refresh_token if session else None,
        expires_at=session.expires_at if session else None,
    )


class AuthService:
    """Thin wrapper around the Supabase auth and table APIs.

    A new client is created for every operation so that no user's session is
    ever held by a shared client.
    """

    def __init__(self, settings: Settings, client_factory: ClientFactory = create_client) -> None:
        self.settings = settings
        self._client_factory = client_factory

    @property
    def configured(self) -> bool:
        return is_backend_configured(self.settings)

    def _get_client(self) -> Client:
        if not self.configured:
            logger.error("Supabase is not properly configured. Check SUPABASE_URL and SUPABASE_KEY.")
            raise BackendNotConfigured("The authentication backend is not properly configured.")
        return self._client_factory(self.settings.supabase_url, self.settings.supabase_key)

    # -- auth ----------------------------------------------------------------

    def sign_up(self, email: str, password: str) -> AuthSession:
        client = self._get_client()
        try:
            response = client.auth.sign_up({"email": email, "password": password})
        except SupabaseAuthError as exc:
            logger.warning("Sign up failed for %s: %s", email, exc)
            raise AuthFailure(str(exc))
        logger.info("Signed up %s", email)
        return _to_session(response)

    def sign_in(self, email: str, password: str) -> AuthSession:
        client = self._get_client()
        try:
            response = client.auth.sign_in_with_password({"email": email, "password": password})
        except SupabaseAuthError as exc:
            logger.warning("Sign in failed for %s: %s", email, exc)
            raise AuthFailure(str(exc))
        logger.info("Signed in %s", email)
        return _to_session(response)

    def get_user(self, access_token: str) -> UserInfo:
        """Resolve *access_token* to the user it belongs to.

        Raises:
            AuthFailure: if the token is missing, expired or unknown.
        """
        if not access_token:
            raise AuthFailure("Missing access token.")
        client = self._get_client()
        try:
            response = client.auth.get_user(access_token)
        except SupabaseAuthError as exc:
            logger.warning("Session lookup failed: %s", exc)
            raise AuthFailure(str(exc))
        if response is None or response.user is None:
            raise AuthFailure("No active session for this token.")
        return UserInfo(user_id=str(response.user.id), email=response.user.email)

    def sign_out(self, access_token: str, refresh_token: str) -> None:
        client = self._get_client()
        try:
            client.auth.set_session(access_token, refresh_token)
            client.auth.sign_out()
        except SupabaseAuthError as exc:
            logger.warning("Sign out failed: %s", exc)
            raise AuthFailure(str(exc))
        logger.info("Signed out session")

    # -- history -------------------------------------------------------------

    def add_history(
        self,
        access_token: str,
        module: str,
        action: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> HistoryRecord:
        user = self.get_user(access_token)
        client = self._get_client()
        client.postgrest.auth(access_token)
        record = {
            "user_id": user.user_id,
            "module": module,
            "action": action,
            "details": details or {},
        }
        result = client.table(HISTORY_TABLE).insert(record).execute()
        row = result.data[0] if result.data else record
        logger.info("Recorded %s history entry for user %s", module, user.user_id)
        return HistoryRecord.model_validate(row)

    def list_history(
        self,
        access_token: str,
        module: Optional[str] = None,
        limit: int = 20,
    ) -> List[HistoryRecord]:
        user = self.get_user(access_token)
        client = self._get_client()
        client.postgrest.auth(access_token)
        query = client.table(HISTORY_TABLE).select("*").eq("user_id", user.user_id)
        if module:
            query = query.eq("module", module)
        result = query.order("created_at", desc=True).limit(limit).execute()
        return [HistoryRecord.model_validate(row) for row in result.data or []]
