from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from spa_booking.api.dependencies import get_booking_service
from spa_booking.core.config import Settings, get_settings
from spa_booking.core.errors import NoDataError, PersistenceError, RenderError
from spa_booking.core.logger import logger
from spa_booking.core.security import require_admin
from spa_booking.models.booking_models import AdminVisitRequest, LedgerScope
from spa_booking.services.booking_service import BookingService
from spa_booking.services.sheets_service import utc_today

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Every route here requires an admin bearer token
router = APIRouter(dependencies=[Depends(require_admin)])


def _xlsx_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _export_failure(error: str, exc: Exception, settings: Settings) -> JSONResponse:
    content = {"success": False, "error": error}
    if settings.is_development:
        content["details"] = getattr(exc, "detail", None) or str(exc)
    return JSONResponse(status_code=500, content=content)


@router.post("/admin/submit")
async def submit_admin_visit(
    req: AdminVisitRequest,
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        pdf_bytes = await booking_service.submit_admin_visit(req)
    except (PersistenceError, RenderError) as e:
        logger.error(f"❌ Admin submission failed: {e.detail or e.message}")
        return JSONResponse(status_code=500, content={"success": False})

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": 'inline; filename="therapy-form.pdf"'},
    )


@router.get("/admin/export")
async def export_admin_visits(
    booking_service: BookingService = Depends(get_booking_service),
    settings: Settings = Depends(get_settings),
):
    try:
        content = await booking_service.export_report(LedgerScope.ADMIN)
    except NoDataError:
        return JSONResponse(status_code=404, content={"success": False, "message": "No admin data found"})
    except PersistenceError as e:
        logger.error(f"❌ Error exporting admin excel: {e.detail}")
        return _export_failure("Failed to export admin data", e, settings)

    return _xlsx_response(content, "customervisits.xlsx")


@router.get("/export")
async def export_today(
    booking_service: BookingService = Depends(get_booking_service),
    settings: Settings = Depends(get_settings),
):
    try:
        content = await booking_service.export_report(LedgerScope.TODAY)
    except NoDataError:
        return {"success": False, "message": "No submissions found for today."}
    except PersistenceError as e:
        logger.error(f"❌ Error exporting data: {e.detail}")
        return _export_failure("Failed to export data.", e, settings)

    return _xlsx_response(content, f"relax-thai-spa-bookings-{utc_today()}.xlsx")


@router.get("/export-all")
async def export_all(
    booking_service: BookingService = Depends(get_booking_service),
    settings: Settings = Depends(get_settings),
):
    try:
        content = await booking_service.export_report(LedgerScope.ALL)
    except NoDataError:
        return JSONResponse(status_code=404, content={"success": False, "message": "No data found in the sheet."})
    except PersistenceError as e:
        logger.error(f"❌ Error exporting ALL data: {e.detail}")
        return _export_failure("Failed to export all data.", e, settings)

    return _xlsx_response(content, "relax-thai-spa-bookings-all.xlsx")


@router.get("/stats")
async def get_stats(booking_service: BookingService = Depends(get_booking_service)):
    try:
        count = await booking_service.get_stats()
    except PersistenceError as e:
        logger.error(f"❌ Error fetching stats: {e.detail}")
        return JSONResponse(status_code=500, content={"success": False, "error": "Failed to fetch statistics."})

    return {"success": True, "today": utc_today(), "bookings": count}


API_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


@router.api_route("", methods=API_METHODS, include_in_schema=False)
@router.api_route("/{path:path}", methods=API_METHODS, include_in_schema=False)
async def unknown_api_route(path: str = ""):
    # Only reached after the admin check
    return JSONResponse(status_code=404, content={"success": False, "error": "Not found"})
