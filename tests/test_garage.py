from datetime import datetime

import pytest

from conftest import motorcycle_values

from motoshop.core.errors import (
    ConfirmationRequired,
    FormValidationError,
    InvalidTransition,
    NotAuthenticated,
    NotFoundError,
)
from motoshop.models.booking import BookingRequest
from motoshop.models.motorcycle import BikerMotorcycle
from motoshop.schemas.booking import BookingStatus
from motoshop.services.garage import (
    BOOKING_SUBMITTED,
    BookingController,
    GarageController,
    current_user_id,
)

NOW = datetime(2026, 5, 1, 12, 0)


@pytest.fixture
def garage(signed_in, tables):
    controller = GarageController(signed_in.auth, tables)
    controller.mount()
    return controller


def add(garage, **overrides):
    garage.start_add()
    garage.form.update(motorcycle_values(**overrides))
    return garage.submit(NOW)


def test_mount_shows_the_riders_email(garage):
    assert garage.user_email == "rider@example.com"
    assert garage.motorcycles == []
    assert garage.loading is False


def test_add_leaves_blank_optional_fields_unset(garage, rider):
    motorcycle = add(garage, color="", vin="")
    assert motorcycle.user_id == rider["id"]
    assert motorcycle.year == 2021
    assert motorcycle.engine_size == 937
    assert motorcycle.color is None
    assert motorcycle.vin is None
    assert [m.id for m in garage.motorcycles] == [motorcycle.id]
    assert garage.show_form is False


def test_invalid_motorcycle_is_not_saved(garage, tables):
    garage.start_add()
    garage.form.update(motorcycle_values(year="1850"))
    with pytest.raises(FormValidationError):
        garage.submit(NOW)
    assert tables.count(BikerMotorcycle) == 0
    assert garage.form.field_errors == {"year": "Please enter a valid year"}
    assert garage.show_form is True


def test_edit_prefills_and_clears_removed_fields(garage):
    motorcycle = add(garage, color="Red")
    garage.start_edit(motorcycle.id)
    assert garage.form.values["color"] == "Red"
    assert garage.form.submit_label == "Update Motorcycle"

    garage.form.edit("color", "")
    garage.form.edit("mileage", "15000")
    updated = garage.submit(NOW)
    assert updated.id == motorcycle.id
    assert updated.color is None
    assert updated.mileage == 15000
    assert garage.editing_id is None


def test_delete_needs_confirmation(garage, tables):
    motorcycle = add(garage)
    with pytest.raises(ConfirmationRequired):
        garage.delete(motorcycle.id)
    assert tables.count(BikerMotorcycle) == 1
    garage.delete(motorcycle.id, confirmed=True)
    assert garage.motorcycles == []


def test_other_riders_motorcycles_are_invisible(garage, tables):
    other = tables.insert(BikerMotorcycle, {"brand": "BMW", "model": "R 1250 GS", "year": 2022,
                                            "user_id": "someone-else"})
    garage.load_motorcycles()
    assert garage.motorcycles == []
    with pytest.raises(NotFoundError):
        garage.start_edit(other["id"])
    with pytest.raises(NotFoundError):
        garage.delete(other["id"], confirmed=True)


def test_signed_out_rider_has_no_user_id(backend):
    with pytest.raises(NotAuthenticated):
        current_user_id(backend.auth)


@pytest.fixture
def bookings(signed_in, tables, garage):
    motorcycle = add(garage)
    controller = BookingController(signed_in.auth, tables)
    controller.mount()
    assert [m.id for m in controller.motorcycles] == [motorcycle.id]
    return controller


def request_service(bookings, **overrides):
    bookings.open_form()
    values = {
        "motorcycle_id": bookings.motorcycles[0].id,
        "service_type": "oil_change",
        "description": "Oil and filter change please",
        "preferred_date": "2026-05-04",
        "preferred_time": "10:00",
        "contact_method": "email",
    }
    values.update(overrides)
    bookings.form.update(values)
    return bookings.submit(NOW)


def test_booking_is_pending_with_motorcycle_details(bookings):
    booking = request_service(bookings, estimated_budget="150")
    assert booking.status is BookingStatus.PENDING
    assert booking.status_label == "Pending Review"
    assert booking.brand == "Ducati"
    assert booking.estimated_budget == 150.0
    assert bookings.success == BOOKING_SUBMITTED
    assert bookings.show_form is False
    assert [b.id for b in bookings.bookings] == [booking.id]


def test_phone_contact_needs_a_number(bookings, tables):
    with pytest.raises(FormValidationError) as exc_info:
        request_service(bookings, contact_method="phone")
    assert exc_info.value.message == "Please provide a contact phone number"
    assert tables.count(BookingRequest) == 0


def test_past_slot_is_rejected(bookings):
    with pytest.raises(FormValidationError) as exc_info:
        request_service(bookings, preferred_date="2026-04-30")
    assert exc_info.value.field_errors == {
        "preferred_date": "Preferred date and time must be in the future"
    }


def test_cancel_only_from_pending(bookings):
    booking = request_service(bookings)
    with pytest.raises(ConfirmationRequired):
        bookings.cancel(booking.id)
    bookings.cancel(booking.id, confirmed=True)
    assert bookings.bookings[0].status is BookingStatus.CANCELLED

    with pytest.raises(InvalidTransition):
        bookings.cancel(booking.id, confirmed=True)
    with pytest.raises(InvalidTransition):
        bookings.delete(booking.id, confirmed=True)


def test_delete_pending_booking(bookings, tables):
    booking = request_service(bookings)
    bookings.delete(booking.id, confirmed=True)
    assert bookings.bookings == []
    assert tables.count(BookingRequest) == 0


def test_unknown_condition_is_a_validation_error(garage, tables):
    garage.start_add()
    garage.form.update(motorcycle_values(condition="mint", purchase_date="31/12/2020"))
    with pytest.raises(FormValidationError):
        garage.submit(NOW)
    assert garage.form.field_errors == {
        "purchase_date": "Purchase date must be a valid date",
        "condition": "Please select a valid condition",
    }
    assert tables.count(BikerMotorcycle) == 0


def test_unknown_urgency_is_a_validation_error(bookings, tables):
    with pytest.raises(FormValidationError) as exc_info:
        request_service(bookings, urgency="whenever")
    assert exc_info.value.field_errors == {"urgency": "Please select a valid urgency level"}
    assert tables.count(BookingRequest) == 0
