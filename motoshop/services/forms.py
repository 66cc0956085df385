"""
Per-screen form state: field values, per-field errors, the in-flight flag
and the top-level success / error banners.

Lifecycle::

    idle -> editing -> submitting -> success -> idle
                                  -> error   -> editing
"""

from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, TypeVar
import logging
import threading

from motoshop.core.errors import FormBusyError, FormValidationError, GatewayError
from motoshop.services.validation import FieldRule, validate_fields

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Values never echoed back when a form is rendered
SECRET_FIELDS = frozenset({"password", "confirm_password"})


class FormStatus(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


class FormState:
    """Mutable state of one form on one screen."""

    def __init__(
        self,
        name: str,
        defaults: Mapping[str, Any],
        rules: Sequence[FieldRule] = (),
        submit_label: str = "Submit",
        busy_label: str = "Submitting...",
        clears_banner_on_edit: bool = False,
    ):
        self.name = name
        self.defaults = dict(defaults)
        self.rules = list(rules)
        self.submit_label_idle = submit_label
        self.busy_label = busy_label
        self.clears_banner_on_edit = clears_banner_on_edit

        self.values: Dict[str, Any] = dict(defaults)
        self.field_errors: Dict[str, str] = {}
        self.status = FormStatus.IDLE
        self.error: Optional[str] = None
        self.success: Optional[str] = None
        # Guards the move into SUBMITTING; requests run on a thread pool
        self._submit_lock = threading.Lock()

    @property
    def submitting(self) -> bool:
        return self.status is FormStatus.SUBMITTING

    @property
    def submit_label(self) -> str:
        return self.busy_label if self.submitting else self.submit_label_idle

    def edit(self, field: str, value: Any) -> None:
        """Store a keystroke. The field's own error flag clears at once."""
        if field not in self.defaults:
            raise KeyError(f"Unknown field '{field}' on form '{self.name}'")
        self.values[field] = value
        self.field_errors.pop(field, None)
        if self.clears_banner_on_edit:
            self.error = None
            self.success = None
        if self.status in (FormStatus.IDLE, FormStatus.ERROR, FormStatus.SUCCESS):
            self.status = FormStatus.EDITING

    def update(self, values: Mapping[str, Any], fields: Optional[Iterable[str]] = None) -> None:
        """Apply several edits, e.g. a whole submitted payload."""
        for field in fields if fields is not None else values.keys():
            if field in self.defaults and values.get(field) != self.values.get(field):
                self.edit(field, values.get(field))

    def load(self, values: Mapping[str, Any]) -> None:
        """Replace every value, e.g. to edit an existing record."""
        self.values = {**self.defaults, **{k: v for k, v in values.items() if k in self.defaults}}
        self.field_errors = {}
        self.error = None
        self.status = FormStatus.EDITING

    def reset(self) -> None:
        self.values = dict(self.defaults)
        self.field_errors = {}
        self.status = FormStatus.IDLE

    def dismiss(self) -> None:
        """Close the banners."""
        self.error = None
        self.success = None

    def validate(self, now: Optional[datetime] = None) -> Dict[str, str]:
        return validate_fields(self.rules, self.values, now)

    def submit(
        self,
        action: Callable[[Dict[str, Any]], T],
        *,
        on_success: Optional[Callable[[], Any]] = None,
        success_message: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> T:
        """
        Validate, then run ``action`` with the current values.

        Invalid input never reaches ``action``. A backend failure keeps the
        values for another try and re-raises the ``GatewayError``.
        """
        with self._submit_lock:
            if self.submitting:
                raise FormBusyError(f"Form '{self.name}' is already being submitted")

            self.error = None
            self.success = None
            errors = self.validate(now)
            if errors:
                self.field_errors = errors
                self.error = next(iter(errors.values()))
                self.status = FormStatus.EDITING
                raise FormValidationError(errors)

            self.field_errors = {}
            self.status = FormStatus.SUBMITTING
            values = dict(self.values)
        try:
            result = action(values)
        except GatewayError as e:
            logger.error(f"Error submitting {self.name}: {e.message}")
            self.fail(e.message)
            raise
        except Exception:
            # Unexpected errors go to the application-level fallback
            self.status = FormStatus.EDITING
            raise

        self.status = FormStatus.SUCCESS
        self.success = success_message
        if on_success is not None:
            on_success()
        self.reset()
        return result

    def fail(self, message: str) -> None:
        """Show a backend error; the form goes back to editing with values kept."""
        self.status = FormStatus.ERROR
        self.error = message
        self.status = FormStatus.EDITING

    def render(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "values": {k: ("" if k in SECRET_FIELDS else v) for k, v in self.values.items()},
            "field_errors": dict(self.field_errors),
            "error": self.error,
            "success": self.success,
            "submit_label": self.submit_label,
            "submit_disabled": self.submitting,
        }
