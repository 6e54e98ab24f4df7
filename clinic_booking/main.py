# clinic_booking/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from clinic_booking.core.config import settings
from clinic_booking.core.logging import configure_logging
from clinic_booking.db.sql import engine, init_db
from clinic_booking.errors import http_exception_handler, validation_exception_handler
from clinic_booking.routers import appointments, health

configure_logging()
logger = logging.getLogger(__name__)


# Define lifespan event
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    The lifespan function is used to manage the FastAPI application lifecycle.
    """
    logger.info("Starting %s (%s)", settings.APP_NAME, settings.APP_ENV)
    # Initialize database (create tables if they don't exist)
    await init_db()
    yield
    await engine.dispose()
    logger.info("Shutting down %s", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)

# Routing
app.include_router(health.router, prefix=settings.API_PREFIX, tags=["health"])
app.include_router(appointments.router, prefix=settings.API_PREFIX, tags=["appointments"])


@app.get("/")
def root():
    return {"message": "Appointment Booking API running successfully"}
