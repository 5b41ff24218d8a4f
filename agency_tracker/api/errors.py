"""Map domain exceptions onto JSON error responses"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from agency_tracker.domain.exceptions import (
    ConfigurationError,
    ConflictError,
    DomainException,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)

# Checked in order; subclasses before their parents
STATUS_CODES = (
    (InvalidInputError, 400),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ConfigurationError, 500),
)


def status_code_for(exc: DomainException) -> int:
    for exc_type, status_code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status_code = status_code_for(exc)
    request_id = getattr(request.state, "request_id", "unknown")

    body = {"status": "error", "kind": exc.kind, "message": exc.message}
    field = getattr(exc, "field", None)
    if field:
        body["field"] = field

    log = logging.error if status_code >= 500 else logging.warning
    log(
        f"Request failed: {exc.message}",
        extra={"request_id": request_id, "kind": exc.kind, "status_code": status_code, "path": request.url.path},
    )

    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
