from fastapi import Depends

from spa_booking.core.config import Settings, get_settings
from spa_booking.services.booking_service import BookingService


def get_booking_service(settings: Settings = Depends(get_settings)) -> BookingService:
    # Built per request; nothing is shared between requests
    return BookingService(settings)
