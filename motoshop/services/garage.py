"""
The rider's garage (profile screen) and booking requests.

Both screens reload their lists from the platform every time they are
mounted and after every successful write.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from motoshop.core.errors import (
    ConfirmationRequired,
    GatewayError,
    InvalidTransition,
    NotAuthenticated,
)
from motoshop.gateway.auth import AuthClient
from motoshop.gateway.tables import OrderBy, TableStore
from motoshop.models.booking import BookingRequest
from motoshop.models.motorcycle import BikerMotorcycle
from motoshop.schemas.booking import (
    BOOKING_FORM_DEFAULTS,
    BookingRecord,
    BookingResponse,
    BookingStatus,
    BookingView,
)
from motoshop.schemas.motorcycle import (
    MOTORCYCLE_FORM_DEFAULTS,
    GarageView,
    MotorcycleRecord,
    MotorcycleResponse,
)
from motoshop.services.forms import FormState
from motoshop.services.validation import BOOKING_RULES, MOTORCYCLE_RULES

logger = logging.getLogger(__name__)

NEWEST_FIRST = (OrderBy("created_at", descending=True),)

BOOKING_SUBMITTED = "Booking request submitted successfully! We will contact you soon."
BOOKING_CANCELLED = "Booking request cancelled successfully"
BOOKING_DELETED = "Booking request deleted successfully"


def current_user_id(auth: AuthClient) -> str:
    session = auth.current_session
    if session is None:
        raise NotAuthenticated("You must be logged in")
    return session.user.id


class GarageController:
    """Add, edit and delete the rider's motorcycles."""

    def __init__(self, auth: AuthClient, tables: TableStore):
        self.auth = auth
        self.tables = tables
        self.motorcycles: List[MotorcycleResponse] = []
        self.user_email = ""
        self.loading = True
        self.error: Optional[str] = None
        self.show_form = False
        self.editing_id: Optional[str] = None
        self.form = FormState(
            "motorcycle",
            MOTORCYCLE_FORM_DEFAULTS,
            MOTORCYCLE_RULES,
            submit_label="Add Motorcycle",
            busy_label="Saving...",
        )

    def mount(self) -> None:
        self.load_user()
        self.load_motorcycles()

    def load_user(self) -> None:
        try:
            user = self.auth.get_user()
        except GatewayError as e:
            logger.error(f"Error loading user: {e.message}")
            return
        if user is not None and user.email:
            self.user_email = user.email

    def load_motorcycles(self) -> None:
        self.loading = True
        try:
            rows = self.tables.select(
                BikerMotorcycle,
                eq={"user_id": current_user_id(self.auth)},
                order_by=NEWEST_FIRST,
            )
            self.motorcycles = [MotorcycleResponse.model_validate(row) for row in rows]
            self.error = None
        except GatewayError as e:
            logger.error(f"Error loading motorcycles: {e.message}")
            self.error = e.message
        finally:
            self.loading = False

    def find(self, motorcycle_id: str) -> MotorcycleResponse:
        row = self.tables.get(
            BikerMotorcycle, motorcycle_id, eq={"user_id": current_user_id(self.auth)}
        )
        return MotorcycleResponse.model_validate(row)

    def start_add(self) -> None:
        self.form.reset()
        self.form.submit_label_idle = "Add Motorcycle"
        self.editing_id = None
        self.show_form = True

    def start_edit(self, motorcycle_id: str) -> None:
        motorcycle = self.find(motorcycle_id)
        self.form.load(motorcycle.form_values())
        self.form.submit_label_idle = "Update Motorcycle"
        self.editing_id = motorcycle.id
        self.show_form = True

    def cancel_form(self) -> None:
        self.form.reset()
        self.editing_id = None
        self.show_form = False

    def _save(self, values: Dict[str, Any]) -> Dict[str, Any]:
        user_id = current_user_id(self.auth)
        record = MotorcycleRecord.from_form(values)
        if self.editing_id:
            return self.tables.update(
                BikerMotorcycle, self.editing_id, record.update_values(), eq={"user_id": user_id}
            )
        return self.tables.insert(BikerMotorcycle, {**record.insert_values(), "user_id": user_id})

    def submit(self, now: Optional[datetime] = None) -> MotorcycleResponse:
        self.error = None
        try:
            row = self.form.submit(self._save, on_success=self.load_motorcycles, now=now)
        except GatewayError as e:
            self.error = e.message
            raise
        self.cancel_form()
        return MotorcycleResponse.model_validate(row)

    def delete(self, motorcycle_id: str, confirmed: bool = False) -> None:
        if not confirmed:
            raise ConfirmationRequired("Are you sure you want to delete this motorcycle?")
        try:
            self.tables.delete(BikerMotorcycle, motorcycle_id, eq={"user_id": current_user_id(self.auth)})
        except GatewayError as e:
            logger.error(f"Error deleting motorcycle: {e.message}")
            self.error = e.message
            raise
        self.load_motorcycles()

    def render(self) -> GarageView:
        return GarageView(
            user_email=self.user_email,
            motorcycles=self.motorcycles,
            show_form=self.show_form,
            editing_id=self.editing_id,
            form=self.form.render(),
            loading=self.loading,
            error=self.error,
        )


class BookingController:
    """Create, cancel and delete booking requests."""

    def __init__(self, auth: AuthClient, tables: TableStore):
        self.auth = auth
        self.tables = tables
        self.motorcycles: List[MotorcycleResponse] = []
        self.bookings: List[BookingResponse] = []
        self.loading = True
        self.error: Optional[str] = None
        self.success: Optional[str] = None
        self.show_form = False
        self.form = FormState(
            "booking",
            BOOKING_FORM_DEFAULTS,
            BOOKING_RULES,
            submit_label="Submit Booking Request",
            busy_label="Submitting...",
            clears_banner_on_edit=True,
        )

    def mount(self) -> None:
        self.load()

    def load(self) -> None:
        self.loading = True
        try:
            if self.auth.current_session is None:
                self.error = "You must be logged in to view booking requests"
                return
            user_id = current_user_id(self.auth)
            rows = self.tables.select(BikerMotorcycle, eq={"user_id": user_id}, order_by=NEWEST_FIRST)
            self.motorcycles = [MotorcycleResponse.model_validate(row) for row in rows]
            by_id = {m.id: m for m in self.motorcycles}
            rows = self.tables.select(BookingRequest, eq={"user_id": user_id}, order_by=NEWEST_FIRST)
            self.bookings = [
                BookingResponse.with_details(row, by_id.get(row["motorcycle_id"])) for row in rows
            ]
            self.error = None
        except GatewayError as e:
            logger.error(f"Error loading data: {e.message}")
            self.error = e.message
        finally:
            self.loading = False

    def open_form(self) -> None:
        self.show_form = True

    def close_form(self) -> None:
        self.form.reset()
        self.form.dismiss()
        self.show_form = False

    def _create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        record = BookingRecord.from_form(current_user_id(self.auth), values)
        return self.tables.insert(BookingRequest, record.insert_values())

    def submit(self, now: Optional[datetime] = None) -> BookingResponse:
        self.error = None
        self.success = None
        try:
            row = self.form.submit(self._create, now=now)
        except GatewayError as e:
            self.error = e.message
            raise
        self.show_form = False
        self.success = BOOKING_SUBMITTED
        self.load()
        motorcycle = next((m for m in self.motorcycles if m.id == row["motorcycle_id"]), None)
        return BookingResponse.with_details(row, motorcycle)

    def _pending(self, booking_id: str) -> Dict[str, Any]:
        row = self.tables.get(BookingRequest, booking_id, eq={"user_id": current_user_id(self.auth)})
        if row["status"] != BookingStatus.PENDING.value:
            raise InvalidTransition(f"Only pending booking requests can be changed (status: {row['status']})")
        return row

    def cancel(self, booking_id: str, confirmed: bool = False) -> None:
        if not confirmed:
            raise ConfirmationRequired("Are you sure you want to cancel this booking request?")
        self._pending(booking_id)
        try:
            self.tables.update(
                BookingRequest, booking_id, {"status": BookingStatus.CANCELLED.value},
                eq={"user_id": current_user_id(self.auth)},
            )
        except GatewayError as e:
            logger.error(f"Error cancelling booking: {e.message}")
            self.error = e.message
            raise
        self.success = BOOKING_CANCELLED
        self.load()

    def delete(self, booking_id: str, confirmed: bool = False) -> None:
        if not confirmed:
            raise ConfirmationRequired(
                "Are you sure you want to delete this booking request? This cannot be undone."
            )
        self._pending(booking_id)
        try:
            self.tables.delete(BookingRequest, booking_id, eq={"user_id": current_user_id(self.auth)})
        except GatewayError as e:
            logger.error(f"Error deleting booking: {e.message}")
            self.error = e.message
            raise
        self.success = BOOKING_DELETED
        self.load()

    def render(self) -> BookingView:
        return BookingView(
            motorcycles=self.motorcycles,
            bookings=self.bookings,
            show_form=self.show_form,
            form=self.form.render(),
            loading=self.loading,
            error=self.error,
            success=self.success,
        )
