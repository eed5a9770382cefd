import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from spa_booking.api import admin, public
from spa_booking.core.config import settings
from spa_booking.core.errors import AuthError, InputValidationError, SpaError
from spa_booking.core.logger import logger, setup_logging

setup_logging(settings.LOG_DIR)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"🚀 Starting {settings.PROJECT_NAME} backend on port {settings.PORT}")
    if not settings.JWT_SECRET:
        logger.warning("⚠️ JWT_SECRET not set! Admin login and all admin routes are disabled")
    if not settings.ADMIN_PASSWORD:
        logger.warning("⚠️ ADMIN_PASSWORD not set! Admin login is disabled")
    yield
    # Shutdown
    logger.info("🛑 Shutting down backend")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(InputValidationError)
async def input_validation_handler(request: Request, exc: InputValidationError):
    logger.info(f"⚠️ Rejected {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Malformed JSON bodies get the same shape as our own validation errors
    return JSONResponse(status_code=400, content={"success": False, "error": "Invalid request body."})

@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(SpaError)
async def spa_error_handler(request: Request, exc: SpaError):
    logger.error(f"❌ {type(exc).__name__} on {request.url.path}: {exc.detail or exc.message}")
    content = {"success": False, "error": exc.message}
    if settings.is_development and exc.detail:
        content["details"] = exc.detail
    return JSONResponse(status_code=exc.status_code, content=content)

# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"🔥 UNHANDLED ERROR: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"}
    )

# Public routes first; the admin router ends with an /api catch-all
app.include_router(public.router, prefix=settings.API_V1_STR, tags=["Public"])
app.include_router(admin.router, prefix=settings.API_V1_STR, tags=["Admin"])


def _static_file(relative_path: str):
    """Resolve a path inside STATIC_DIR, refusing anything that escapes it."""
    root = os.path.realpath(settings.STATIC_DIR)
    candidate = os.path.realpath(os.path.join(root, relative_path))
    if not candidate.startswith(root + os.sep) or not os.path.isfile(candidate):
        return None
    return candidate

@app.get("/robots.txt", include_in_schema=False)
async def robots_txt():
    path = _static_file("robots.txt")
    if not path:
        return JSONResponse(status_code=404, content={"success": False, "error": "Not found"})
    return FileResponse(path, media_type="text/plain")

@app.get("/{full_path:path}", include_in_schema=False)
async def spa_fallback(full_path: str):
    path = _static_file(full_path) if full_path else None
    if path:
        return FileResponse(path)

    index = _static_file("index.html")
    if not index:
        return JSONResponse(status_code=404, content={"success": False, "error": "Frontend build not found"})
    return FileResponse(index)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("spa_booking.main:app", host="0.0.0.0", port=settings.PORT, reload=settings.is_development)
