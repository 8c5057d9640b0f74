import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from booking_engine.api.errors import scheduling_error_handler
from booking_engine.api.routes import appointments, schedules, slots
from booking_engine.core.config import _ENV_FILE, settings
from booking_engine.core.db import init_db
from booking_engine.domain.errors import SchedulingError

if not settings.is_production:
    logging.basicConfig(level=logging.DEBUG)
else:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Loading .env from: %s (exists: %s)", _ENV_FILE, _ENV_FILE.exists())
    logger.info("Cancellation window for customers: %s hours", settings.cancel_min_hours)
    if settings.create_tables_on_startup:
        logger.info("Creating missing tables")
        await init_db()
    yield


app = FastAPI(
    title="Booking Engine API",
    description="Appointment scheduling and availability",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(schedules.router, prefix="/api/v1")
app.include_router(slots.router, prefix="/api/v1")
app.include_router(appointments.router, prefix="/api/v1")

app.add_exception_handler(SchedulingError, scheduling_error_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return the error as JSON instead of a bare 500 page."""
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "detail": f"{type(exc).__name__}: {exc}"},
    )


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
