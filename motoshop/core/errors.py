"""
Exceptions shared by the gateway, the screen controllers and the API layer.
"""

from typing import Dict, Optional


class GatewayError(Exception):
    """A backend platform call failed. ``message`` is the platform's own text."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class FormValidationError(Exception):
    """Client-side field validation rejected a submission."""

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = field_errors
        message = next(iter(field_errors.values()), "Invalid form")
        super().__init__(message)
        self.message = message


class FormBusyError(Exception):
    """A submit arrived while the previous one is still in flight."""


class ConfirmationRequired(Exception):
    """A destructive action was requested without the user confirming it."""

    def __init__(self, prompt: str):
        super().__init__(prompt)
        self.prompt = prompt


class InvalidTransition(Exception):
    """The requested screen or record transition is not allowed from the current state."""


class NotFoundError(Exception):
    pass


class NotAuthenticated(Exception):
    pass
