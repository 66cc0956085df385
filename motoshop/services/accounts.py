"""
Login, legacy username login, registration and logout.

Screen changes after sign-in / sign-out are not made here: the auth
client pushes SIGNED_IN / SIGNED_OUT and the router reacts.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import logging

from motoshop.core.errors import GatewayError
from motoshop.core.security import check_legacy_credentials, create_legacy_token
from motoshop.gateway.auth import AuthClient, AuthSession, AuthUser
from motoshop.schemas.auth import (
    LEGACY_LOGIN_FORM_DEFAULTS,
    LOGIN_FORM_DEFAULTS,
    REGISTER_FORM_DEFAULTS,
)
from motoshop.services.forms import FormState
from motoshop.services.router import Screen, ViewRouter
from motoshop.services.validation import LEGACY_LOGIN_RULES, LOGIN_RULES, REGISTER_RULES

logger = logging.getLogger(__name__)

LOGIN_SUCCESS = "Login successful! Redirecting..."
LEGACY_LOGIN_FAILED = "Invalid username or password"
REGISTER_SUCCESS = "Registration successful! Please check your email to confirm your account."


@dataclass
class LegacyLogin:
    username: str
    token: str
    remember_me: bool


class AccountController:
    def __init__(self, auth: AuthClient, router: ViewRouter):
        self.auth = auth
        self.router = router
        self.login_form = FormState(
            "login", LOGIN_FORM_DEFAULTS, LOGIN_RULES,
            submit_label="Sign In", busy_label="Signing in...", clears_banner_on_edit=True,
        )
        self.legacy_login_form = FormState(
            "legacy_login", LEGACY_LOGIN_FORM_DEFAULTS, LEGACY_LOGIN_RULES,
            submit_label="Sign In", busy_label="Signing in...", clears_banner_on_edit=True,
        )
        self.register_form = FormState(
            "register", REGISTER_FORM_DEFAULTS, REGISTER_RULES,
            submit_label="Create Account", busy_label="Creating account...",
            clears_banner_on_edit=True,
        )

    def prefill_login(self, remembered_email: Optional[str] = None,
                      remembered_username: Optional[str] = None) -> None:
        """Restore the identifiers saved by "remember me"."""
        if remembered_email and not self.login_form.values["email"]:
            self.login_form.values.update(email=remembered_email, remember_me=True)
        if remembered_username and not self.legacy_login_form.values["username"]:
            self.legacy_login_form.values.update(username=remembered_username, remember_me=True)

    def login(self, now: Optional[datetime] = None) -> AuthSession:
        remember_me = bool(self.login_form.values.get("remember_me"))

        def sign_in(values) -> AuthSession:
            return self.auth.sign_in_with_password(values["email"].strip(), values["password"])

        session = self.login_form.submit(sign_in, success_message=LOGIN_SUCCESS, now=now)
        if remember_me and session.user.email:
            # Keep the identifier in the form for the next visit
            self.login_form.values.update(email=session.user.email, remember_me=True)
        return session

    def legacy_login(self, now: Optional[datetime] = None) -> LegacyLogin:
        """Username login from the first version of the site; issues a signed token."""
        remember_me = bool(self.legacy_login_form.values.get("remember_me"))

        def authenticate(values) -> LegacyLogin:
            username = values["username"].strip()
            if not check_legacy_credentials(username, values["password"]):
                raise GatewayError(LEGACY_LOGIN_FAILED, 401)
            return LegacyLogin(username=username, token=create_legacy_token(username),
                               remember_me=remember_me)

        return self.legacy_login_form.submit(authenticate, success_message=LOGIN_SUCCESS, now=now)

    def register(self, now: Optional[datetime] = None) -> AuthUser:
        def sign_up(values) -> AuthUser:
            return self.auth.sign_up(
                values["email"].strip(),
                values["password"],
                {"full_name": values["full_name"].strip()},
            )

        user = self.register_form.submit(sign_up, success_message=REGISTER_SUCCESS, now=now)
        if self.router.screen is Screen.REGISTER:
            self.router.navigate(Screen.LOGIN)
        return user

    def logout(self) -> None:
        try:
            self.auth.sign_out()
        except GatewayError as e:
            # The local session is gone either way
            logger.error(f"Error signing out: {e.message}")
