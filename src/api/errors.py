"""Maps the domain error taxonomy onto HTTP responses."""
import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.domain.exceptions import (
    ConflictError,
    DomainError,
    NotFoundError,
    PermissionDeniedError,
    UpstreamError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ConflictError, status.HTTP_409_CONFLICT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY),
]


def status_for(exc: DomainError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, DomainError)
    status_code = status_for(exc)
    body: dict = {"detail": str(exc)}  # type: ignore[type-arg]

    if isinstance(exc, UpstreamError):
        body["service"] = exc.service
        logger.error(
            "upstream_error",
            path=request.url.path,
            service=exc.service,
            error=str(exc),
            detail=exc.detail,
        )
    elif status_code >= 500:
        logger.error("unhandled_domain_error", path=request.url.path, error=str(exc))
    else:
        logger.info(
            "request_rejected",
            path=request.url.path,
            status_code=status_code,
            error_type=type(exc).__name__,
            error=str(exc),
        )

    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
