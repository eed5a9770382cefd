import re
from typing import Optional

from spa_booking.core.errors import InvalidEmailError, InvalidPhoneError, MissingFieldsError
from spa_booking.models.booking_models import (
    EMAIL_NOT_PROVIDED,
    AdminVisitRequest,
    BookingRequest,
    NormalizedAdminVisit,
    NormalizedBooking,
)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[\d\s\-+()]+$", re.ASCII)

BOOKING_REQUIRED = ("service", "date", "time", "firstName", "phone")
ADMIN_REQUIRED = ("name", "therapyName", "date", "price", "paymentMode")

MISSING_BOOKING_MSG = "Please fill all required fields (service, date, time, name, phone)."
MISSING_ADMIN_MSG = "Please fill all required fields (name, therapy name, date, price, payment mode)."


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _missing(data: dict, required) -> list:
    return [field for field in required if not data.get(field)]


def validate_booking(request: BookingRequest, timestamp: str) -> NormalizedBooking:
    """
    Check a customer booking and return the record as it will be stored.
    Presence is checked before formats.
    """
    data = {field: _clean(value) for field, value in request.model_dump().items()}

    missing = _missing(data, BOOKING_REQUIRED)
    if missing:
        raise MissingFieldsError(missing, MISSING_BOOKING_MSG)

    if data["email"] and not EMAIL_RE.match(data["email"]):
        raise InvalidEmailError()

    if not PHONE_RE.match(data["phone"]):
        raise InvalidPhoneError()

    return NormalizedBooking(
        timestamp=timestamp,
        service=data["service"],
        date=data["date"],
        time=data["time"],
        firstName=data["firstName"],
        email=data["email"] or EMAIL_NOT_PROVIDED,
        phone=data["phone"],
        message=data["message"],
    )


def validate_admin_visit(request: AdminVisitRequest) -> NormalizedAdminVisit:
    """Only the five required fields are checked; the rest are free text."""
    data = {field: _clean(value) for field, value in request.model_dump().items()}

    missing = _missing(data, ADMIN_REQUIRED)
    if missing:
        raise MissingFieldsError(missing, MISSING_ADMIN_MSG)

    return NormalizedAdminVisit(**data)
