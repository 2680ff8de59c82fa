"""Render domain errors as ``{"error": message}`` JSON responses."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from walletdesk.modules.common.exceptions import (
    DomainError,
    NotFoundError,
    StoreWriteError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first: module errors inherit from more than one base.
_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (StoreWriteError, status.HTTP_409_CONFLICT),
)


def status_for(exc: DomainError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("Unhandled domain error on %s %s: %s", request.method, request.url.path, exc)
    elif status_code == status.HTTP_409_CONFLICT:
        logger.warning("Write rejected on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"error": exc.message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
