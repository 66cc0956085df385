from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, List, Literal, Mapping, Optional
from pydantic import BaseModel, Field

from motoshop.schemas.motorcycle import MotorcycleResponse
from motoshop.services.validation import is_blank, parse_date, parse_number, parse_time


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ContactMethod = Literal["email", "phone", "both"]
UrgencyLevel = Literal["low", "normal", "high", "emergency"]

SERVICE_TYPE_LABELS: Dict[str, str] = {
    "oil_change": "Oil Change",
    "tire_replacement": "Tire Replacement",
    "brake_service": "Brake Service",
    "chain_maintenance": "Chain Maintenance",
    "engine_repair": "Engine Repair",
    "electrical": "Electrical Work",
    "bodywork": "Bodywork/Paint",
    "general_maintenance": "General Maintenance",
    "inspection": "Inspection",
    "custom_modification": "Custom Modification",
    "annual_service": "Annual Service",
    "emergency_repair": "Emergency Repair",
    "other": "Other",
}

URGENCY_LABELS: Dict[str, str] = {
    "low": "Low - Can wait a few weeks",
    "normal": "Normal - Within a week",
    "high": "High - Within a few days",
    "emergency": "Emergency - ASAP",
}

CONTACT_METHOD_LABELS: Dict[str, str] = {
    "email": "Email",
    "phone": "Phone",
    "both": "Email & Phone",
}

STATUS_LABELS: Dict[str, str] = {
    BookingStatus.PENDING.value: "Pending Review",
    BookingStatus.CONFIRMED.value: "Confirmed",
    BookingStatus.IN_PROGRESS.value: "In Progress",
    BookingStatus.COMPLETED.value: "Completed",
    BookingStatus.CANCELLED.value: "Cancelled",
}

BOOKING_FORM_DEFAULTS: Dict[str, Any] = {
    "motorcycle_id": "",
    "service_type": "",
    "description": "",
    "preferred_date": "",
    "preferred_time": "",
    "contact_phone": "",
    "contact_method": "email",
    "urgency": "normal",
    "estimated_budget": "",
    "currency": "EUR",
}


class BookingForm(BaseModel):
    """Raw booking request form input."""
    motorcycle_id: str = ""
    service_type: str = ""
    description: str = ""
    preferred_date: str = Field("", description="ISO date, e.g. 2026-11-02")
    preferred_time: str = Field("", description="HH:MM")
    contact_phone: str = ""
    contact_method: ContactMethod = "email"
    urgency: UrgencyLevel = "normal"
    estimated_budget: str = ""
    currency: str = "EUR"


class BookingRecord(BaseModel):
    """Typed row for booking_requests; phone and budget only when given."""
    user_id: str
    motorcycle_id: str
    service_type: str
    description: str
    preferred_date: date
    preferred_time: time
    contact_method: ContactMethod
    urgency: UrgencyLevel
    currency: str
    status: BookingStatus = BookingStatus.PENDING
    contact_phone: Optional[str] = None
    estimated_budget: Optional[float] = None

    @classmethod
    def from_form(cls, user_id: str, values: Mapping[str, Any]) -> "BookingRecord":
        fields: Dict[str, Any] = {
            "user_id": user_id,
            "motorcycle_id": values["motorcycle_id"],
            "service_type": values["service_type"],
            "description": values["description"].strip(),
            "preferred_date": parse_date(values["preferred_date"]),
            "preferred_time": parse_time(values["preferred_time"]),
            "contact_method": values["contact_method"],
            "urgency": values["urgency"],
            "currency": values.get("currency") or "EUR",
            "status": BookingStatus.PENDING,
        }
        if not is_blank(values.get("contact_phone")):
            fields["contact_phone"] = values["contact_phone"].strip()
        if not is_blank(values.get("estimated_budget")):
            fields["estimated_budget"] = parse_number(values["estimated_budget"])
        return cls(**fields)

    def insert_values(self) -> Dict[str, Any]:
        values = self.model_dump(exclude_unset=True)
        values["status"] = self.status.value
        return values


class BookingResponse(BaseModel):
    """A booking request with the booked motorcycle's details."""
    id: str
    user_id: str
    motorcycle_id: str
    service_type: str
    description: str
    preferred_date: date
    preferred_time: time
    contact_phone: Optional[str] = None
    contact_method: str
    urgency: str
    estimated_budget: Optional[float] = None
    currency: str = "EUR"
    status: BookingStatus
    admin_notes: Optional[str] = None
    confirmed_date: Optional[date] = None
    confirmed_time: Optional[time] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Motorcycle details
    brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    license_plate: Optional[str] = None
    mileage: Optional[int] = None

    @classmethod
    def with_details(cls, row: Mapping[str, Any],
                     motorcycle: Optional[MotorcycleResponse]) -> "BookingResponse":
        details: Dict[str, Any] = {}
        if motorcycle is not None:
            details = {
                "brand": motorcycle.brand,
                "model": motorcycle.model,
                "year": motorcycle.year,
                "license_plate": motorcycle.license_plate,
                "mileage": motorcycle.mileage,
            }
        return cls(**{**row, **details})

    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self.status.value]


class BookingView(BaseModel):
    """Everything the booking request screen renders."""
    motorcycles: List[MotorcycleResponse]
    bookings: List[BookingResponse]
    show_form: bool
    form: Dict[str, Any]
    service_types: Dict[str, str] = SERVICE_TYPE_LABELS
    urgency_levels: Dict[str, str] = URGENCY_LABELS
    contact_methods: Dict[str, str] = CONTACT_METHOD_LABELS
    statuses: Dict[str, str] = STATUS_LABELS
    loading: bool
    error: Optional[str] = None
    success: Optional[str] = None
