# type: ignore
# pyright: reportGeneralTypeIssues=false
# pyright: reportOptionalMemberAccess=false
"""
Club Scheduling Service
=======================
Schedules training sessions and club events for a sports club, and keeps
enrollment consistent with capacity, coach eligibility and status.

Training lifecycle:
    Scheduled ─► Completed
    Scheduled ─► Cancelled
Event lifecycle:
    Upcoming ─► Ongoing ─► Completed
    Upcoming / Ongoing ─► Cancelled

Port: 8020
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from scheduling.controllers import (
    discipline_controller, event_controller, system_controller, training_controller,
)
from scheduling.core.config import settings
from scheduling.core.database import engine, init_schema
from scheduling.core.errors import InfrastructureError, SchedulingError
from scheduling.core.logging import get_logger
from scheduling.middleware import MetricsMiddleware, RequestIDMiddleware

logger = get_logger(settings.SERVICE_NAME)


@asynccontextmanager
async def lifespan(application: FastAPI):
    if settings.INIT_SCHEMA:
        try:
            init_schema(engine)
        except SQLAlchemyError:
            logger.warning("Could not initialise schema, DB may not be ready yet")
    yield
    engine.dispose()
    logger.info("Shutting down, connection pool disposed")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Club Scheduling Service",
    description="Training sessions, events, enrollment and coach eligibility.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


def _request_id(request: Request):
    return getattr(request.state, "request_id", None)


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    logger.info("Request rejected kind=%s detail=%s", exc.kind, exc.message,
                extra={"request_id": _request_id(request)})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(InfrastructureError)
async def infrastructure_error_handler(request: Request, exc: InfrastructureError):
    logger.error("Infrastructure failure kind=%s: %s", exc.kind, exc,
                 extra={"request_id": _request_id(request)})
    return JSONResponse(status_code=503, content={"error": exc.kind, "detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception", extra={"request_id": _request_id(request)})
    return JSONResponse(status_code=500, content={"error": "internal_server_error", "detail": str(exc)})


# ── Routers ───────────────────────────────────────────────────────────────
app.include_router(system_controller.router)
app.include_router(training_controller.router)
app.include_router(event_controller.router)
app.include_router(discipline_controller.router)
