"""
Domain Exceptions
Raised by services and repositories, mapped to HTTP responses in one place
"""

from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger()


class TimeTrackerError(Exception):
    """Base class for domain errors"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_detail = "Internal server error"

    def __init__(self, message: Optional[str] = None, **context: Any):
        super().__init__(message or self.public_detail)
        self.message = message or self.public_detail
        self.context = context

    @property
    def detail(self) -> str:
        return self.public_detail


class NotAuthenticated(TimeTrackerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    public_detail = "Not authenticated"

    @property
    def detail(self) -> str:
        return self.message


class AccessDenied(TimeTrackerError):
    """Role or permission gate refused the operation; reported as not found"""

    status_code = status.HTTP_404_NOT_FOUND
    public_detail = "Not found"


class ScopeViolation(AccessDenied):
    """Record is visible to the actor but outside its mutation scope"""


class RecordNotFound(TimeTrackerError):
    status_code = status.HTTP_404_NOT_FOUND
    public_detail = "Not found"

    def __init__(self, entity: str = "Record", record_id: Any = None):
        super().__init__(f"{entity} not found", entity=entity, record_id=record_id)
        self.entity = entity
        self.record_id = record_id

    @property
    def detail(self) -> str:
        return f"{self.entity} not found"


class InvalidRole(TimeTrackerError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_detail = "Invalid role"

    def __init__(self, value: Any = None):
        super().__init__(f"Invalid role: {value!r}", value=value)
        self.value = value

    @property
    def detail(self) -> str:
        return "Invalid role. Must be one of: admin, manager, project_manager, employee, viewer"


class ValidationFailed(TimeTrackerError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_detail = "Invalid request"

    @property
    def detail(self) -> str:
        return self.message


class Conflict(TimeTrackerError):
    status_code = status.HTTP_409_CONFLICT
    public_detail = "Conflict"

    @property
    def detail(self) -> str:
        return self.message


async def timetracker_error_handler(request: Request, exc: TimeTrackerError) -> JSONResponse:
    """Translate a domain error into its HTTP response"""
    log_kwargs = {
        "path": request.url.path,
        "method": request.method,
        "error_type": type(exc).__name__,
        "error": exc.message,
    }
    if exc.status_code >= 500:
        logger.error("Domain error", **log_kwargs)
    else:
        logger.info("Request rejected", status_code=exc.status_code, **log_kwargs)

    headers = None
    if isinstance(exc, NotAuthenticated):
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers,
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler"""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred",
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TimeTrackerError, timetracker_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
