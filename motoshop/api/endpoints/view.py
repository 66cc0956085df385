from fastapi import APIRouter, Depends

from motoshop.api.deps import get_workspace
from motoshop.schemas.view import NavigateRequest, ViewState
from motoshop.services.workspace import Workspace

router = APIRouter()


@router.get("/", response_model=ViewState)
def current_view(workspace: Workspace = Depends(get_workspace)) -> ViewState:
    """The screen this browser is on and everything it renders."""
    return ViewState(**workspace.render())


@router.post("/navigate", response_model=ViewState)
def navigate(
    request: NavigateRequest,
    workspace: Workspace = Depends(get_workspace),
) -> ViewState:
    """
    Show another screen. Screens behind login resolve to the login screen
    when there is no session.
    """
    workspace.router.navigate(request.screen, request.motorcycle_id)
    return ViewState(**workspace.render())


@router.post("/back", response_model=ViewState)
def back(workspace: Workspace = Depends(get_workspace)) -> ViewState:
    workspace.router.back()
    return ViewState(**workspace.render())
