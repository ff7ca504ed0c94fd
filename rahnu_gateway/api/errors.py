"""Map domain exceptions to HTTP responses"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rahnu_gateway.domain.exceptions import (
    ConflictError,
    DomainException,
    InvalidTransitionError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    ValidationError: 400,
    NotFoundError: 404,
    InvalidTransitionError: 409,
    ConflictError: 409,
    StorageError: 503,
}


def status_code_for(exc: DomainException) -> int:
    for exc_type in type(exc).__mro__:
        if exc_type in STATUS_CODES:
            return STATUS_CODES[exc_type]
    return 500


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status_code = status_code_for(exc)
    request_id = getattr(request.state, "request_id", "unknown")
    body = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, ValidationError) and exc.fields:
        body["fields"] = exc.fields

    if status_code >= 500:
        logger.error(f"Storage failure: {exc}", extra={"request_id": request_id, "path": request.url.path})
    else:
        logger.warning(
            f"Request rejected: {exc}",
            extra={"request_id": request_id, "path": request.url.path, "error": type(exc).__name__},
        )
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
