from typing import Optional

from fastapi import APIRouter, Depends, status

from motoshop.api.deps import get_workspace
from motoshop.schemas.motorcycle import GarageView, MotorcycleForm, MotorcycleResponse
from motoshop.services.garage import GarageController
from motoshop.services.router import Screen
from motoshop.services.workspace import Workspace

router = APIRouter()


def get_garage(workspace: Workspace = Depends(get_workspace)) -> GarageController:
    return workspace.require(Screen.PROFILE)


@router.get("/", response_model=GarageView)
def list_motorcycles(garage: GarageController = Depends(get_garage)) -> GarageView:
    """The rider's motorcycles, newest first."""
    return garage.render()


@router.get("/{motorcycle_id}", response_model=MotorcycleResponse)
def get_motorcycle(
    motorcycle_id: str,
    garage: GarageController = Depends(get_garage),
) -> MotorcycleResponse:
    return garage.find(motorcycle_id)


@router.post("/form", response_model=GarageView)
def open_add_form(garage: GarageController = Depends(get_garage)) -> GarageView:
    garage.start_add()
    return garage.render()


@router.post("/{motorcycle_id}/edit", response_model=GarageView)
def open_edit_form(
    motorcycle_id: str,
    garage: GarageController = Depends(get_garage),
) -> GarageView:
    """Open the form pre-filled with the record."""
    garage.start_edit(motorcycle_id)
    return garage.render()


@router.post("/form/cancel", response_model=GarageView)
def cancel_form(garage: GarageController = Depends(get_garage)) -> GarageView:
    garage.cancel_form()
    return garage.render()


@router.post("/submit", response_model=MotorcycleResponse)
def submit_form(garage: GarageController = Depends(get_garage)) -> MotorcycleResponse:
    """Submit the open form as typed so far, adding or updating."""
    return garage.submit()


@router.post("/", response_model=MotorcycleResponse, status_code=status.HTTP_201_CREATED)
def add_motorcycle(
    form: Optional[MotorcycleForm] = None,
    garage: GarageController = Depends(get_garage),
) -> MotorcycleResponse:
    """
    Add a motorcycle to the garage.

    Brand, model and a year between 1900 and next year are required.
    Blank optional fields are left unset on the row.
    """
    garage.start_add()
    if form is not None:
        garage.form.update(form.model_dump(exclude_unset=True))
    return garage.submit()


@router.put("/{motorcycle_id}", response_model=MotorcycleResponse)
def update_motorcycle(
    motorcycle_id: str,
    form: Optional[MotorcycleForm] = None,
    garage: GarageController = Depends(get_garage),
) -> MotorcycleResponse:
    """Update a motorcycle. Fields left out of the body keep their stored value."""
    garage.start_edit(motorcycle_id)
    if form is not None:
        garage.form.update(form.model_dump(exclude_unset=True))
    return garage.submit()


@router.delete("/{motorcycle_id}", response_model=GarageView)
def delete_motorcycle(
    motorcycle_id: str,
    confirm: bool = False,
    garage: GarageController = Depends(get_garage),
) -> GarageView:
    """Delete a motorcycle; its booking requests go with it. Needs ``confirm=true``."""
    garage.delete(motorcycle_id, confirmed=confirm)
    return garage.render()
