from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict

# --- Incoming Request Models ---
# Every field is optional here; presence and format are checked by the validator
# so the client gets our own error messages instead of FastAPI's 422.

class BookingRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    service: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    firstName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None

class AdminVisitRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: Optional[str] = None
    roomNo: Optional[str] = None
    address: Optional[str] = None
    contact: Optional[str] = None
    paymentMode: Optional[str] = None
    timeIn: Optional[str] = None
    timeOut: Optional[str] = None
    therapyName: Optional[str] = None
    duration: Optional[str] = None
    therapist: Optional[str] = None
    date: Optional[str] = None
    membership: Optional[str] = None
    price: Optional[str] = None

class PasswordCheckRequest(BaseModel):
    password: Optional[str] = None

# --- Normalized Records (what goes to the ledger) ---

EMAIL_NOT_PROVIDED = "N/A"

BOOKING_COLUMNS = ["timestamp", "service", "date", "time", "firstName", "email", "phone", "message"]

ADMIN_VISIT_COLUMNS = [
    "name", "roomNo", "address", "contact", "paymentMode", "timeIn", "timeOut",
    "therapyName", "duration", "therapist", "date", "membership", "price",
]

class NormalizedBooking(BaseModel):
    timestamp: str
    service: str
    date: str
    time: str
    firstName: str
    email: str = EMAIL_NOT_PROVIDED
    phone: str
    message: str = ""

    def as_row(self) -> List[str]:
        return [getattr(self, column) for column in BOOKING_COLUMNS]

class NormalizedAdminVisit(BaseModel):
    name: str
    roomNo: str = ""
    address: str = ""
    contact: str = ""
    paymentMode: str
    timeIn: str = ""
    timeOut: str = ""
    therapyName: str
    duration: str = ""
    therapist: str = ""
    date: str
    membership: str = ""
    price: str

    def as_row(self) -> List[str]:
        return [getattr(self, column) for column in ADMIN_VISIT_COLUMNS]

# --- Ledger ---

class LedgerKind(str, Enum):
    BOOKINGS = "bookings"
    ADMIN = "admin"

class LedgerScope(str, Enum):
    TODAY = "today"
    ALL = "all"
    ADMIN = "admin"

class AppendResult(BaseModel):
    success: bool
    row_number: Optional[int] = None
    error: Optional[str] = None

# --- Outgoing ---

class SubmissionReceipt(BaseModel):
    id: Optional[int] = None
    timestamp: str
