"""
Field validation for every form in the application.

A check takes the field's raw value, the whole form and the current time,
and returns ``None`` when the value is acceptable or the message to show.
Rules are declared per form as a list of ``FieldRule`` so that conditional
requirements (e.g. a phone number only when the rider wants a call) are
data, not branches.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence
import math
import re

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_YEAR = 1900
MIN_PASSWORD_LENGTH = 6
MIN_USERNAME_LENGTH = 3
MIN_FULL_NAME_LENGTH = 2
MIN_DESCRIPTION_LENGTH = 10

PHONE_CONTACT_METHODS = ("phone", "both")

CONTACT_METHODS = ("email", "phone", "both")
URGENCY_LEVELS = ("low", "normal", "high", "emergency")
CONDITIONS = ("excellent", "good", "fair", "poor")
MILEAGE_UNITS = ("km", "miles")
DOCUMENT_TYPES = ("photo", "invoice", "receipt", "report", "warranty", "other")

Check = Callable[[Any, Mapping[str, Any], datetime], Optional[str]]


@dataclass(frozen=True)
class FieldRule:
    field: str
    check: Check
    applies: Optional[Callable[[Mapping[str, Any]], bool]] = None

    def evaluate(self, values: Mapping[str, Any], now: datetime) -> Optional[str]:
        if self.applies is not None and not self.applies(values):
            return None
        return self.check(values.get(self.field), values, now)


def validate_fields(
    rules: Sequence[FieldRule],
    values: Mapping[str, Any],
    now: Optional[datetime] = None,
) -> Dict[str, str]:
    """Run every rule; keep the first failure per field, in rule order."""
    now = now or datetime.now()
    errors: Dict[str, str] = {}
    for rule in rules:
        if rule.field in errors:
            continue
        message = rule.evaluate(values, now)
        if message:
            errors[rule.field] = message
    return errors


def first_error(
    rules: Sequence[FieldRule],
    values: Mapping[str, Any],
    now: Optional[datetime] = None,
) -> Optional[str]:
    errors = validate_fields(rules, values, now)
    return next(iter(errors.values()), None)


# Parsing helpers shared with the record builders

def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def parse_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except (TypeError, ValueError):
        return None


def parse_time(value: Any) -> Optional[time]:
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value).strip())
    except (TypeError, ValueError):
        return None


# Individual checks

def required(message: str) -> Check:
    def check(value, values, now):
        return message if is_blank(value) else None
    return check


def min_length(length: int, message: str, strip: bool = False) -> Check:
    def check(value, values, now):
        text = (value or "").strip() if strip else (value or "")
        return message if len(text) < length else None
    return check


def email_shape(message: str = "Please enter a valid email address") -> Check:
    def check(value, values, now):
        return None if EMAIL_PATTERN.match((value or "").strip()) else message
    return check


def matches(other_field: str, message: str) -> Check:
    def check(value, values, now):
        return None if value == values.get(other_field) else message
    return check


def year_in_range(message: str = "Please enter a valid year") -> Check:
    """Accepts whole years from 1900 up to next year."""
    def check(value, values, now):
        year = parse_int(value)
        if year is None or year < MIN_YEAR or year > now.year + 1:
            return message
        return None
    return check


def optional_int(minimum: int, message: str, invalid_message: str) -> Check:
    """Blank is fine; otherwise a whole number ``>= minimum``."""
    def check(value, values, now):
        if is_blank(value):
            return None
        number = parse_int(value)
        if number is None:
            return invalid_message
        return message if number < minimum else None
    return check


def optional_number(message: str) -> Check:
    def check(value, values, now):
        if is_blank(value):
            return None
        return message if parse_number(value) is None else None
    return check


def in_choices(choices: Sequence[str], message: str) -> Check:
    def check(value, values, now):
        return None if value in choices else message
    return check


def optional_choice(choices: Sequence[str], message: str) -> Check:
    def check(value, values, now):
        if is_blank(value):
            return None
        return None if value in choices else message
    return check


def optional_date(message: str) -> Check:
    """Blank is fine; otherwise an ISO date such as ``2026-04-20``."""
    def check(value, values, now):
        if is_blank(value):
            return None
        return message if parse_date(value) is None else None
    return check


def future_datetime(date_field: str, time_field: str, message: str) -> Check:
    """The combined date and time must be strictly after ``now``."""
    def check(value, values, now):
        # Missing parts are reported by the required rules
        if is_blank(values.get(date_field)) or is_blank(values.get(time_field)):
            return None
        day = parse_date(values.get(date_field))
        moment = parse_time(values.get(time_field))
        if day is None or moment is None:
            return message
        return None if datetime.combine(day, moment) > now else message
    return check


def wants_phone_contact(values: Mapping[str, Any]) -> bool:
    return values.get("contact_method") in PHONE_CONTACT_METHODS


# Rule sets

LOGIN_RULES: List[FieldRule] = [
    FieldRule("email", required("Please enter your email")),
    FieldRule("email", email_shape()),
    FieldRule("password", required("Please enter your password")),
    FieldRule("password", min_length(MIN_PASSWORD_LENGTH, "Password must be at least 6 characters")),
]

LEGACY_LOGIN_RULES: List[FieldRule] = [
    FieldRule("username", required("Please enter your username")),
    FieldRule("username", min_length(MIN_USERNAME_LENGTH, "Username must be at least 3 characters", strip=True)),
    FieldRule("password", required("Please enter your password")),
    FieldRule("password", min_length(MIN_PASSWORD_LENGTH, "Password must be at least 6 characters")),
]

REGISTER_RULES: List[FieldRule] = [
    FieldRule("full_name", required("Please enter your full name")),
    FieldRule("full_name", min_length(MIN_FULL_NAME_LENGTH, "Full name must be at least 2 characters", strip=True)),
    FieldRule("email", required("Please enter your email")),
    FieldRule("email", email_shape()),
    FieldRule("password", required("Please enter a password")),
    FieldRule("password", min_length(MIN_PASSWORD_LENGTH, "Password must be at least 6 characters")),
    FieldRule("confirm_password", required("Please confirm your password")),
    FieldRule("confirm_password", matches("password", "Passwords do not match")),
]

MOTORCYCLE_RULES: List[FieldRule] = [
    FieldRule("brand", required("Brand is required")),
    FieldRule("model", required("Model is required")),
    FieldRule("year", required("Year is required")),
    FieldRule("year", year_in_range()),
    FieldRule("mileage", optional_int(0, "Mileage cannot be negative", "Mileage must be a whole number")),
    FieldRule("engine_size", optional_int(1, "Engine size must be positive", "Engine size must be a whole number")),
    FieldRule("mileage_unit", in_choices(MILEAGE_UNITS, "Mileage unit must be km or miles")),
    FieldRule("purchase_date", optional_date("Purchase date must be a valid date")),
    FieldRule("condition", optional_choice(CONDITIONS, "Please select a valid condition")),
]

BOOKING_RULES: List[FieldRule] = [
    FieldRule("motorcycle_id", required("Please select a motorcycle")),
    FieldRule("service_type", required("Please select a service type")),
    FieldRule("description", required("Please provide a description of what you need")),
    FieldRule("description", min_length(MIN_DESCRIPTION_LENGTH, "Description must be at least 10 characters", strip=True)),
    FieldRule("preferred_date", required("Please select a preferred date")),
    FieldRule("preferred_time", required("Please select a preferred time")),
    FieldRule("preferred_date", future_datetime(
        "preferred_date", "preferred_time", "Preferred date and time must be in the future")),
    FieldRule("contact_method", in_choices(CONTACT_METHODS, "Please select a valid contact method")),
    FieldRule("contact_phone", required("Please provide a contact phone number"), applies=wants_phone_contact),
    FieldRule("urgency", in_choices(URGENCY_LEVELS, "Please select a valid urgency level")),
    FieldRule("estimated_budget", optional_number("Estimated budget must be a valid number")),
]

DOCUMENT_RULES: List[FieldRule] = [
    FieldRule("title", required("Please enter a title")),
    FieldRule("document_type", required("Please select a document type")),
    FieldRule("document_type", in_choices(DOCUMENT_TYPES, "Please select a valid document type")),
    FieldRule("service_date", optional_date("Service date must be a valid date")),
    FieldRule("service_mileage", optional_int(
        0, "Service mileage cannot be negative", "Service mileage must be a whole number")),
    FieldRule("cost", optional_number("Cost must be a valid number")),
]
