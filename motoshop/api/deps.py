from typing import Optional
import logging

from fastapi import Depends, Request, Response

from motoshop.core.config import Settings
from motoshop.core.errors import NotAuthenticated
from motoshop.core.security import InvalidToken, TokenPayload, verify_legacy_token
from motoshop.gateway.auth import AuthSession
from motoshop.services.workspace import Workspace, WorkspaceRegistry

logger = logging.getLogger(__name__)

WORKSPACE_COOKIE = "workspace_id"
ACCESS_TOKEN_COOKIE = "sb-access-token"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"
REMEMBERED_EMAIL_COOKIE = "rememberedEmail"
REMEMBERED_USERNAME_COOKIE = "rememberedUsername"
LEGACY_TOKEN_COOKIE = "authToken"


def get_registry(request: Request) -> WorkspaceRegistry:
    return request.app.state.workspaces


def persist_session(response: Response, session: Optional[AuthSession]) -> None:
    """Keep the platform tokens in cookies so a new workspace can restore them."""
    if session is None:
        response.delete_cookie(ACCESS_TOKEN_COOKIE)
        response.delete_cookie(REFRESH_TOKEN_COOKIE)
        return
    response.set_cookie(ACCESS_TOKEN_COOKIE, session.access_token, httponly=True, samesite="lax")
    if session.refresh_token:
        response.set_cookie(REFRESH_TOKEN_COOKIE, session.refresh_token, httponly=True, samesite="lax")


def remember(response: Response, config: Settings, cookie: str, value: Optional[str]) -> None:
    """Durable "remember me" cookie; cleared when ``value`` is empty."""
    if value:
        response.set_cookie(cookie, value, max_age=config.REMEMBER_ME_MAX_AGE, samesite="lax")
    else:
        response.delete_cookie(cookie)


def get_workspace(
    request: Request,
    response: Response,
    registry: WorkspaceRegistry = Depends(get_registry),
) -> Workspace:
    """
    The calling browser's workspace. Unknown or missing workspace cookies
    get a fresh workspace booted from the persisted token cookies.
    """
    workspace = registry.get(request.cookies.get(WORKSPACE_COOKIE))
    if workspace is None:
        workspace = registry.create(
            request.cookies.get(ACCESS_TOKEN_COOKIE),
            request.cookies.get(REFRESH_TOKEN_COOKIE),
        )
        response.set_cookie(WORKSPACE_COOKIE, workspace.id, httponly=True, samesite="lax")
        persist_session(response, workspace.auth.current_session)

    # Exception handlers render the workspace's view alongside the error
    request.state.workspace = workspace
    return workspace


def require_session(workspace: Workspace = Depends(get_workspace)) -> AuthSession:
    session = workspace.auth.current_session
    if session is None:
        raise NotAuthenticated("You must be logged in")
    return session


def require_legacy_user(request: Request) -> TokenPayload:
    """The username signed in through the legacy login, read from its token cookie."""
    token = request.cookies.get(LEGACY_TOKEN_COOKIE)
    if not token:
        raise NotAuthenticated("You must be logged in")
    try:
        return verify_legacy_token(token)
    except InvalidToken as e:
        logger.warning(f"Rejected legacy token: {e}")
        raise NotAuthenticated("Your session has expired, please log in again") from e
