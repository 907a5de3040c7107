"""
Club Ledger API - Main Application Entry Point

Booking and revenue ledger for the club website and admin console:
- Server-priced ticket bookings with collision-safe unique references
- Manual revenue entries and once-rounded aggregate reports
- Atomic multi-key configuration (ticket prices, membership fee)
- Structured logging with request correlation and Prometheus metrics
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from club_ledger.api.middleware import RequestLoggingMiddleware
from club_ledger.api.router import api_router
from club_ledger.core.config import get_settings
from club_ledger.core.exceptions import LedgerError
from club_ledger.core.logging import get_logger, setup_logging
from club_ledger.core.metrics import metrics_endpoint
from club_ledger.db.session import init_models
from club_ledger.services.idempotency_service import close_redis, get_redis, get_redis_status

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    if settings.DB_CREATE_ALL:
        await init_models()
        logger.info("database_initialized", url=settings.DATABASE_URL.split("@")[-1])

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        settle_on_create=settings.BOOKING_SETTLE_ON_CREATE,
    )

    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Idempotency keys disabled")

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Ticket booking and revenue ledger for the club backend",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


# ---------- error envelope ----------

def _envelope(status_code: int, message: str, data=None, headers=None) -> JSONResponse:
    content = {"success": False, "message": message}
    if data is not None:
        content["data"] = data
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    if exc.status_code >= 500:
        logger.error(
            "ledger_error",
            error_type=type(exc).__name__,
            error=exc.message,
            cause=repr(exc.__cause__) if exc.__cause__ else None,
        )
        message = exc.public_message if settings.is_production else exc.message
        return _envelope(exc.status_code, message)

    logger.info("request_rejected", error_type=type(exc).__name__, error=exc.message)
    return _envelope(exc.status_code, exc.message, exc.to_data())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        item = {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]) or "body",
            "message": error.get("msg", "Invalid value"),
        }
        expected = (error.get("ctx") or {}).get("expected")
        if expected:
            item["allowed"] = str(expected)
        errors.append(item)

    logger.info("request_rejected", error_type="RequestValidationError", errors=errors)
    return _envelope(400, "Validation failed", {"errors": errors})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", error_type=type(exc).__name__)
    return _envelope(500, "Internal server error")


# ---------- operational endpoints ----------

@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "redis": await get_redis_status(),
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
