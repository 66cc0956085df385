from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from motoshop.api.deps import (
    LEGACY_TOKEN_COOKIE,
    REMEMBERED_EMAIL_COOKIE,
    REMEMBERED_USERNAME_COOKIE,
    get_workspace,
    persist_session,
    remember,
    require_legacy_user,
    require_session,
)
from motoshop.core.security import TokenPayload
from motoshop.gateway.auth import AuthSession
from motoshop.schemas.auth import (
    LegacyLoginForm,
    LegacyLoginResponse,
    LegacySessionInfo,
    LoginForm,
    RegisterForm,
    SessionInfo,
)
from motoshop.schemas.view import ViewState
from motoshop.services.accounts import LOGIN_SUCCESS
from motoshop.services.workspace import Workspace

router = APIRouter()


@router.get("/login-form")
def login_form(request: Request, workspace: Workspace = Depends(get_workspace)):
    """Both login forms, pre-filled from the "remember me" cookies."""
    workspace.accounts.prefill_login(
        request.cookies.get(REMEMBERED_EMAIL_COOKIE),
        request.cookies.get(REMEMBERED_USERNAME_COOKIE),
    )
    return {
        "form": workspace.accounts.login_form.render(),
        "legacy_form": workspace.accounts.legacy_login_form.render(),
    }


@router.post("/login", response_model=ViewState)
def login(
    response: Response,
    form: Optional[LoginForm] = None,
    workspace: Workspace = Depends(get_workspace),
) -> ViewState:
    """
    Sign in with e-mail and password.

    Values sent in the body replace what was typed so far; without a body
    the form is submitted as it stands.
    """
    if form is not None:
        workspace.accounts.login_form.update(form.model_dump())
    remember_me = bool(workspace.accounts.login_form.values.get("remember_me"))
    session = workspace.accounts.login()

    persist_session(response, session)
    remember(response, workspace.config, REMEMBERED_EMAIL_COOKIE,
             session.user.email if remember_me else None)
    return ViewState(**workspace.render())


@router.post("/legacy-login", response_model=LegacyLoginResponse)
def legacy_login(
    response: Response,
    form: Optional[LegacyLoginForm] = None,
    workspace: Workspace = Depends(get_workspace),
) -> LegacyLoginResponse:
    """Username login kept from the first version of the site."""
    if form is not None:
        workspace.accounts.legacy_login_form.update(form.model_dump())
    result = workspace.accounts.legacy_login()

    # No max_age: the token lives as long as the browser session
    response.set_cookie(LEGACY_TOKEN_COOKIE, result.token, httponly=True, samesite="lax")
    remember(response, workspace.config, REMEMBERED_USERNAME_COOKIE,
             result.username if result.remember_me else None)
    return LegacyLoginResponse(success=True, message=LOGIN_SUCCESS, token=result.token)


@router.post("/register", response_model=ViewState)
def register(
    response: Response,
    form: Optional[RegisterForm] = None,
    workspace: Workspace = Depends(get_workspace),
) -> ViewState:
    if form is not None:
        workspace.accounts.register_form.update(form.model_dump())
    workspace.accounts.register()
    persist_session(response, workspace.auth.current_session)

    view = workspace.render()
    # The confirmation banner belongs to the register form; show it on login too
    view["state"]["message"] = workspace.accounts.register_form.success
    return ViewState(**view)


@router.post("/logout", response_model=ViewState)
def logout(response: Response, workspace: Workspace = Depends(get_workspace)) -> ViewState:
    workspace.accounts.logout()
    persist_session(response, None)
    response.delete_cookie(LEGACY_TOKEN_COOKIE)
    return ViewState(**workspace.render())


@router.get("/me", response_model=SessionInfo)
def me(session: AuthSession = Depends(require_session)) -> SessionInfo:
    """The signed-in rider."""
    return SessionInfo(
        user_id=session.user.id,
        email=session.user.email,
        full_name=session.user.user_metadata.get("full_name"),
    )


@router.get("/legacy-session", response_model=LegacySessionInfo)
def legacy_session(token: TokenPayload = Depends(require_legacy_user)) -> LegacySessionInfo:
    """The username behind the ``authToken`` cookie, once its signature and expiry check out."""
    return LegacySessionInfo(username=token.sub, expires_at=token.exp)
