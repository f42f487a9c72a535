"""FastAPI application entrypoint for the table reservation engine."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import settings
from core.exceptions import ReservationEngineError
from core.logging import setup_logging
from db.session import close_db, init_db
from apps.api.routers import feedback, orders, reservations


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    setup_logging(settings)
    logger.info(f"Starting {settings.app_name}...")

    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    logger.info("Application startup complete")

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    close_db()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Restaurant table reservation scheduling and conflict resolution",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ReservationEngineError)
async def engine_error_handler(request: Request, exc: ReservationEngineError):
    """Map engine errors to their HTTP status."""
    logger.warning(
        f"{exc.kind} on {request.method} {request.url.path}: {exc.message}",
        extra={"error_kind": exc.kind, "status_code": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed requests are reported as 400 with field-level errors."""
    errors = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body")
        errors.setdefault(field or "body", []).append(error["msg"])

    logger.warning(f"Invalid request on {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content={
            "title": "One or more validation errors occurred.",
            "status": 400,
            "type": "BadRequest",
            "errors": errors,
        },
    )


# Include routers
app.include_router(reservations.router, prefix=settings.api_v1_prefix)
app.include_router(orders.router, prefix=settings.api_v1_prefix)
app.include_router(feedback.router, prefix=settings.api_v1_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "app": settings.app_name,
        "status": "healthy",
        "environment": settings.app_env,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "apps.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
