"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from audit.presentation import router as audit_router
from iam.dependencies.authentication import get_replay_store_purger
from iam.dependencies.authorization import get_permission_policy
from iam.presentation import router as iam_router
from infrastructure.database import DatabaseConnectionError, install_row_isolation
from infrastructure.database.dependencies import (
    check_database_connection,
    close_database_connections,
)
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.version import __version__
from projects.presentation import router as projects_router
from shared_kernel.auth import ReplayStoreUnavailableError
from shared_kernel.authorization import ResourceType, Role
from shared_kernel.exceptions import (
    AuthenticationFailedError,
    ConfigurationFaultError,
    ForbiddenError,
    RateLimitedError,
    ResourceNotFoundError,
    ShieldedError,
)

_probe = DefaultStartupProbe()


@asynccontextmanager
async def shielded_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Permission table validation (an incomplete table stops startup)
    - Row isolation listener installation
    - Replay store purge worker (started after startup, stopped first)
    - Database engine lifecycle (created lazily, closed on shutdown)
    """
    configure_logging()

    get_permission_policy()
    _probe.permission_table_validated(
        roles=len(Role), resource_types=len(ResourceType)
    )

    install_row_isolation()
    _probe.row_isolation_installed()

    purger = get_replay_store_purger()
    await purger.start()

    _probe.application_started(version=__version__)
    yield

    await purger.stop()
    await close_database_connections()
    _probe.application_stopped()


app = FastAPI(
    title="Shielded API",
    description="Tenant isolation and authorization decision engine",
    version=__version__,
    lifespan=shielded_lifespan,
)


def _error_response(
    request: Request,
    exc: ShieldedError,
    status_code: int,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build an error body from the error's fixed public message and code."""
    _probe.request_rejected(
        error_code=exc.error_code,
        status_code=status_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.public_message, "error_code": exc.error_code},
        headers=headers,
    )


@app.exception_handler(AuthenticationFailedError)
async def authentication_failed_handler(
    request: Request, exc: AuthenticationFailedError
) -> JSONResponse:
    """Missing, invalid, expired, revoked and replayed credentials alike."""
    return _error_response(
        request,
        exc,
        status.HTTP_401_UNAUTHORIZED,
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(ForbiddenError)
async def forbidden_handler(request: Request, exc: ForbiddenError) -> JSONResponse:
    """The caller's role categorically lacks the action."""
    return _error_response(request, exc, status.HTTP_403_FORBIDDEN)


@app.exception_handler(ResourceNotFoundError)
async def not_found_handler(
    request: Request, exc: ResourceNotFoundError
) -> JSONResponse:
    """Absent, cross-tenant and not-visible resources alike."""
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND)


@app.exception_handler(RateLimitedError)
async def rate_limited_handler(request: Request, exc: RateLimitedError) -> JSONResponse:
    """The client IP, user or tenant is throttled."""
    return _error_response(
        request,
        exc,
        status.HTTP_429_TOO_MANY_REQUESTS,
        headers={"Retry-After": str(exc.retry_after_seconds)},
    )


@app.exception_handler(ConfigurationFaultError)
async def configuration_fault_handler(
    request: Request, exc: ConfigurationFaultError
) -> JSONResponse:
    """Wiring faults; the body never carries internal detail."""
    _probe.request_faulted(
        error_code=exc.error_code, path=request.url.path, error=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": ConfigurationFaultError.public_message,
            "error_code": ConfigurationFaultError.error_code,
        },
    )


@app.exception_handler(ShieldedError)
async def shielded_error_handler(request: Request, exc: ShieldedError) -> JSONResponse:
    """Any other taxonomy error is an internal fault."""
    _probe.request_faulted(
        error_code=exc.error_code, path=request.url.path, error=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "error_code": "error"},
    )


@app.exception_handler(ReplayStoreUnavailableError)
async def replay_store_unavailable_handler(
    request: Request, exc: ReplayStoreUnavailableError
) -> JSONResponse:
    """Token revocation could not be recorded; the client may retry."""
    _probe.request_faulted(
        error_code="replay_store_unavailable", path=request.url.path, error=exc
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": "Service temporarily unavailable",
            "error_code": "replay_store_unavailable",
        },
    )


app.include_router(iam_router)
app.include_router(projects_router)
app.include_router(audit_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.get("/health/db")
async def health_db() -> JSONResponse:
    """Check database connection health.

    The failure reason is logged by the connection probe, never returned.
    """
    try:
        await check_database_connection()
    except DatabaseConnectionError:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "connected": False},
        )
    return JSONResponse(content={"status": "ok", "connected": True})
