"""
Client for the platform's authentication REST API.

One ``AuthClient`` lives per workspace (one per browser), the same way the
platform's browser SDK keeps one session per tab. Sign-in and sign-out are
pushed to subscribers through ``on_auth_state_change``.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional
import logging
import time

import httpx
from pydantic import BaseModel, Field

from motoshop.core.errors import GatewayError

logger = logging.getLogger(__name__)


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


class AuthUser(BaseModel):
    """The platform's user record, trimmed to what the screens use."""
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)


class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    user: AuthUser

    @property
    def expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= int(time.time())


AuthListener = Callable[[AuthEvent, Optional[AuthSession]], None]


class AuthSubscription:
    """Handle returned by ``on_auth_state_change``."""

    def __init__(self, listeners: List[AuthListener], callback: AuthListener):
        self._listeners = listeners
        self.callback = callback

    def unsubscribe(self) -> None:
        if self.callback in self._listeners:
            self._listeners.remove(self.callback)


def error_message(response: httpx.Response) -> str:
    """Pull the platform's own error text out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return response.text or response.reason_phrase


class AuthClient:
    """Sign in / sign up / sign out against the platform's auth endpoints."""

    def __init__(self, http: httpx.Client, base_url: Optional[str], api_key: Optional[str]):
        self._http = http
        self._base_url = f"{(base_url or '').rstrip('/')}/auth/v1"
        self._api_key = api_key or ""
        self._session: Optional[AuthSession] = None
        self._listeners: List[AuthListener] = []

    # Subscriptions

    def on_auth_state_change(self, callback: AuthListener) -> AuthSubscription:
        self._listeners.append(callback)
        return AuthSubscription(self._listeners, callback)

    def _emit(self, event: AuthEvent) -> None:
        logger.info(f"Auth state change: {event.value}")
        for listener in list(self._listeners):
            listener(event, self._session)

    # HTTP plumbing

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {access_token or self._api_key}",
        }

    def _request(self, method: str, path: str, *, access_token: Optional[str] = None,
                 **kwargs) -> httpx.Response:
        try:
            response = self._http.request(
                method, f"{self._base_url}{path}", headers=self._headers(access_token), **kwargs
            )
        except httpx.HTTPError as e:
            raise GatewayError(str(e)) from e
        if response.is_error:
            raise GatewayError(error_message(response), response.status_code)
        return response

    @staticmethod
    def _session_from(body: Dict[str, Any]) -> AuthSession:
        expires_at = body.get("expires_at")
        if expires_at is None and body.get("expires_in"):
            expires_at = int(time.time()) + int(body["expires_in"])
        return AuthSession(
            access_token=body["access_token"],
            refresh_token=body.get("refresh_token"),
            expires_at=expires_at,
            user=AuthUser.model_validate(body["user"]),
        )

    # Public API

    @property
    def current_session(self) -> Optional[AuthSession]:
        """The in-memory session without any expiry check or network call."""
        return self._session

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        response = self._request(
            "POST", "/token", params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        self._session = self._session_from(response.json())
        self._emit(AuthEvent.SIGNED_IN)
        return self._session

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> AuthUser:
        """
        Create an account. With e-mail confirmation enabled the platform
        returns only the user and no session; a returned session signs in.
        """
        response = self._request(
            "POST", "/signup",
            json={"email": email, "password": password, "data": metadata or {}},
        )
        body = response.json()
        if body.get("access_token"):
            self._session = self._session_from(body)
            self._emit(AuthEvent.SIGNED_IN)
            return self._session.user
        return AuthUser.model_validate(body.get("user") or body)

    def sign_out(self) -> None:
        """Revoke the session on the platform and drop it locally."""
        session = self._session
        self._session = None
        if session is not None:
            try:
                self._request("POST", "/logout", access_token=session.access_token)
            finally:
                self._emit(AuthEvent.SIGNED_OUT)

    def get_user(self, access_token: Optional[str] = None) -> Optional[AuthUser]:
        token = access_token or (self._session.access_token if self._session else None)
        if token is None:
            return None
        response = self._request("GET", "/user", access_token=token)
        return AuthUser.model_validate(response.json())

    def refresh_session(self) -> AuthSession:
        if self._session is None or not self._session.refresh_token:
            raise GatewayError("No refresh token available")
        response = self._request(
            "POST", "/token", params={"grant_type": "refresh_token"},
            json={"refresh_token": self._session.refresh_token},
        )
        self._session = self._session_from(response.json())
        return self._session

    def get_session(self) -> Optional[AuthSession]:
        """
        Current session, refreshed when expired. A refresh that fails ends
        the session and notifies subscribers with SIGNED_OUT.
        """
        if self._session is None or not self._session.expired:
            return self._session
        try:
            return self.refresh_session()
        except GatewayError as e:
            logger.warning(f"Session refresh failed: {e.message}")
            self._session = None
            self._emit(AuthEvent.SIGNED_OUT)
            return None

    def restore(self, access_token: str, refresh_token: Optional[str] = None) -> Optional[AuthSession]:
        """Re-derive the session from tokens persisted in the browser."""
        try:
            user = self.get_user(access_token)
        except GatewayError as e:
            logger.warning(f"Could not restore session: {e.message}")
            return None
        self._session = AuthSession(access_token=access_token, refresh_token=refresh_token, user=user)
        return self._session
