from typing import Optional

from fastapi import APIRouter, Depends, status

from motoshop.api.deps import get_workspace
from motoshop.schemas.booking import BookingForm, BookingResponse, BookingView
from motoshop.services.garage import BookingController
from motoshop.services.router import Screen
from motoshop.services.workspace import Workspace

router = APIRouter()


def get_bookings(workspace: Workspace = Depends(get_workspace)) -> BookingController:
    return workspace.require(Screen.BOOKING_REQUEST)


@router.get("/", response_model=BookingView)
def list_bookings(bookings: BookingController = Depends(get_bookings)) -> BookingView:
    """Booking requests with their motorcycle details, newest first."""
    return bookings.render()


@router.post("/form", response_model=BookingView)
def open_form(bookings: BookingController = Depends(get_bookings)) -> BookingView:
    bookings.open_form()
    return bookings.render()


@router.post("/form/close", response_model=BookingView)
def close_form(bookings: BookingController = Depends(get_bookings)) -> BookingView:
    bookings.close_form()
    return bookings.render()


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    form: Optional[BookingForm] = None,
    bookings: BookingController = Depends(get_bookings),
) -> BookingResponse:
    """
    Submit a booking request.

    The preferred date and time must be in the future, and phone contact
    needs a contact phone number. New requests start as pending.
    """
    bookings.open_form()
    if form is not None:
        bookings.form.update(form.model_dump(exclude_unset=True))
    return bookings.submit()


@router.post("/{booking_id}/cancel", response_model=BookingView)
def cancel_booking(
    booking_id: str,
    confirm: bool = False,
    bookings: BookingController = Depends(get_bookings),
) -> BookingView:
    """Cancel a pending request. Needs ``confirm=true``."""
    bookings.cancel(booking_id, confirmed=confirm)
    return bookings.render()


@router.delete("/{booking_id}", response_model=BookingView)
def delete_booking(
    booking_id: str,
    confirm: bool = False,
    bookings: BookingController = Depends(get_bookings),
) -> BookingView:
    """Delete a pending request. Needs ``confirm=true``."""
    bookings.delete(booking_id, confirmed=confirm)
    return bookings.render()
