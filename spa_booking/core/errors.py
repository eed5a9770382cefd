"""
Error taxonomy for the booking pipeline.

Every error carries the HTTP status it maps to and a message that is safe
to show to the client. Internal detail (exception text from Google, SMTP...)
travels separately in ``detail`` and is only exposed in development.
"""
from typing import Optional


class SpaError(Exception):
    status_code: int = 500
    message: str = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        if message:
            self.message = message
        self.detail = detail
        super().__init__(self.message)


# --- Validation (400) ---

class InputValidationError(SpaError):
    status_code = 400
    message = "Invalid input."


class MissingFieldsError(InputValidationError):
    message = "Please fill all required fields."

    def __init__(self, fields, message: Optional[str] = None):
        self.fields = list(fields)
        super().__init__(message)


class InvalidEmailError(InputValidationError):
    message = "Invalid email format."


class InvalidPhoneError(InputValidationError):
    message = "Invalid phone number format."


# --- Auth (401 / 403) ---

class AuthError(SpaError):
    status_code = 401
    message = "Unauthorized"


class MissingCredentialError(AuthError):
    message = "No token provided"


class InvalidCredentialError(AuthError):
    message = "Invalid or expired token"


class ForbiddenError(AuthError):
    status_code = 403
    message = "Forbidden"


class IncorrectPasswordError(AuthError):
    message = "Incorrect password"


# --- Side effects ---

class PersistenceError(SpaError):
    """Ledger append or read failed. Fatal to the request."""


class NotificationError(SpaError):
    """A notification channel failed. Logged by the pipeline, never surfaced."""


class RenderError(SpaError):
    """Visit slip could not be produced; no partial document is returned."""


class NoDataError(SpaError):
    status_code = 404
    message = "No data found."
