# ruff: noqa: E402
# E402 disabled: load_dotenv() must run before other imports for Sentry DSN

import os
import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

import sentry_sdk
from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from core.correlation import (
    CORRELATION_HEADER,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from core.logging_config import configure_logging
from core.sentry_config import init_sentry
from helpers.rate_limiter import limiter
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    BusinessRuleException,
    DomainException,
    MergeFailedException,
    NotFoundException,
    PermissionDeniedException,
    ResetCodeExpiredException,
    ResetCodeInvalidException,
    ValidationException,
)
from repositories.database import Base, engine
from routers import admin_router, identity_router, password_router
from services.merge_session_store import merge_session_store

# Initialize Sentry BEFORE app creation
init_sentry()

configure_logging(os.getenv("ENVIRONMENT", "development"), settings.LOG_DIR)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables when AUTO_CREATE_DB is set; report pending merges on exit."""
    if settings.AUTO_CREATE_DB:
        logger.info("AUTO_CREATE_DB enabled; creating account store tables")
        Base.metadata.create_all(bind=engine)

    try:
        yield
    finally:
        purged = merge_session_store.purge_expired()
        logger.info(
            f"Shutting down with {len(merge_session_store)} pending merge sessions "
            f"({purged} expired purged)"
        )


app = FastAPI(title="Crew Identity API", lifespan=lifespan)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Adopt or mint the request correlation ID and echo it back."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = (
            request.headers.get(CORRELATION_HEADER) or generate_correlation_id()
        )
        set_correlation_id(correlation_id)
        sentry_sdk.set_tag("correlation_id", correlation_id)

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration; warn on slow requests."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        # Paths can hold account ids (phone numbers), so only the route is logged
        route = request.scope.get("route")
        path = getattr(route, "path", request.url.path)
        logger.info(
            "Request handled",
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration=f"{duration:.3f}s",
        )
        if duration > settings.SLOW_REQUEST_THRESHOLD:
            logger.warning(
                f"Slow request: {request.method} {path} took {duration:.2f}s"
            )

        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response


# Middleware runs in reverse order of registration
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(RequestLoggingMiddleware)

development = settings.ENVIRONMENT == "development"
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if development else settings.CORS_ORIGINS,
    allow_credentials=not development,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Generic 500 for anything unexpected, with full Sentry capture."""
    correlation_id = get_correlation_id() or generate_correlation_id()

    sentry_sdk.set_tag("correlation_id", correlation_id)
    sentry_sdk.capture_exception(exc)

    logger.opt(exception=exc).error(
        "Unhandled exception",
        error=repr(exc),
        correlation_id=correlation_id,
        path=str(request.url.path),
        method=request.method,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "correlation_id": correlation_id},
    )


# Domain exception -> (status code, log label, captured in Sentry).
# Starlette picks the handler of the closest class in the MRO, so the
# specific reset-code and merge entries win over DomainException.
DOMAIN_ERROR_STATUS: dict[type[DomainException], tuple[int, str, bool]] = {
    NotFoundException: (status.HTTP_404_NOT_FOUND, "Not found", False),
    ValidationException: (
        status.HTTP_422_UNPROCESSABLE_CONTENT,
        "Validation error",
        False,
    ),
    PermissionDeniedException: (status.HTTP_403_FORBIDDEN, "Permission denied", False),
    AuthenticationException: (
        status.HTTP_401_UNAUTHORIZED,
        "Authentication failed",
        False,
    ),
    BusinessRuleException: (
        status.HTTP_400_BAD_REQUEST,
        "Business rule violation",
        False,
    ),
    ResetCodeExpiredException: (status.HTTP_410_GONE, "Reset code expired", False),
    ResetCodeInvalidException: (
        status.HTTP_400_BAD_REQUEST,
        "Reset code invalid",
        False,
    ),
    MergeFailedException: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Merge failed",
        True,
    ),
    DomainException: (status.HTTP_400_BAD_REQUEST, "Domain exception", True),
}


async def domain_exception_handler(
    request: Request, exc: DomainException
) -> JSONResponse:
    """Map a domain exception to its status and the shared JSON error body."""
    status_code, label, capture = next(
        DOMAIN_ERROR_STATUS[cls]
        for cls in type(exc).__mro__
        if cls in DOMAIN_ERROR_STATUS
    )

    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)
    if capture:
        sentry_sdk.capture_exception(exc)

    logger.warning(
        label,
        detail=exc.message,
        correlation_id=exc.correlation_id,
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    )

    headers = (
        {"WWW-Authenticate": "Bearer"}
        if status_code == status.HTTP_401_UNAUTHORIZED
        else None
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "correlation_id": exc.correlation_id},
        headers=headers,
    )


for exception_class in DOMAIN_ERROR_STATUS:
    app.add_exception_handler(exception_class, domain_exception_handler)  # type: ignore[arg-type]

app.include_router(identity_router.router, prefix="/api")
app.include_router(password_router.router, prefix="/api")
app.include_router(admin_router.router, prefix="/api")


@app.get("/health")
def health_check() -> dict:
    return {"status": "ok"}
