from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from spa_booking.api.dependencies import get_booking_service
from spa_booking.core.config import Settings, get_settings
from spa_booking.core.errors import IncorrectPasswordError, PersistenceError
from spa_booking.core.logger import logger
from spa_booking.core.security import issue_credential
from spa_booking.models.booking_models import BookingRequest, PasswordCheckRequest
from spa_booking.services.booking_service import BookingService, iso_timestamp

router = APIRouter()


@router.post("/submit")
async def submit_booking(
    req: BookingRequest,
    booking_service: BookingService = Depends(get_booking_service),
    settings: Settings = Depends(get_settings),
):
    try:
        receipt = await booking_service.submit_booking(req)
    except PersistenceError as e:
        content = {"success": False, "error": "Something went wrong. Please try again."}
        if settings.is_development:
            content["details"] = e.detail
        return JSONResponse(status_code=500, content=content)

    return {
        "success": True,
        "message": "Appointment request submitted! We'll contact you soon.",
        "data": {"id": receipt.id, "timestamp": receipt.timestamp},
    }


@router.post("/admin/check-password")
async def check_password(req: PasswordCheckRequest, settings: Settings = Depends(get_settings)):
    try:
        token = issue_credential(req.password, settings)
    except IncorrectPasswordError as e:
        return JSONResponse(status_code=401, content={"ok": False, "error": e.message})
    return {"ok": True, "token": token}


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    logger.debug("🩺 Health check")
    return {
        "success": True,
        "status": "healthy",
        "timestamp": iso_timestamp(datetime.now(timezone.utc)),
        "sheetId": "configured" if settings.SHEET_ID else "missing",
        "adminEmail": "configured" if settings.ADMIN_EMAIL else "missing",
    }
