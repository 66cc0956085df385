from fastapi import APIRouter, Depends, HTTPException, status

from motoshop.api.deps import get_workspace
from motoshop.schemas.view import FormEdit
from motoshop.services.workspace import Workspace

router = APIRouter()


@router.get("/{name}")
def get_form(name: str, workspace: Workspace = Depends(get_workspace)):
    form = workspace.forms().get(name)
    if form is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Form '{name}' is not open"
        )
    return form.render()


@router.patch("/{name}")
def edit_form(name: str, edit: FormEdit, workspace: Workspace = Depends(get_workspace)):
    """
    Apply keystrokes to an open form.

    Each edited field's error clears immediately; the form leaves idle
    for editing.
    """
    form = workspace.forms().get(name)
    if form is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Form '{name}' is not open"
        )
    try:
        for field, value in edit.values.items():
            form.edit(field, value)
    except KeyError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e.args[0])
        )
    return form.render()
