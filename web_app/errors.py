"""Map engine exceptions to HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shortlink.errors import (
    CodeTakenError,
    ExpiredError,
    NotFoundError,
    ShortLinkError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger("shortlink.web")

STATUS_CODES = [
    (ValidationError, status.HTTP_400_BAD_REQUEST, "invalid_request"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "not_found"),
    (ExpiredError, status.HTTP_410_GONE, "expired"),
    (CodeTakenError, status.HTTP_409_CONFLICT, "code_taken"),
    (StoreError, status.HTTP_503_SERVICE_UNAVAILABLE, "store_unavailable"),
]


async def handle_shortlink_error(request: Request, exc: ShortLinkError) -> JSONResponse:
    for exc_type, status_code, kind in STATUS_CODES:
        if isinstance(exc, exc_type):
            break
    else:
        status_code, kind = status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error"

    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")

    return JSONResponse(status_code=status_code, content={"error": kind, "detail": str(exc)})


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    detail = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:])}: {error['msg']}" for error in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "invalid_request", "detail": detail},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShortLinkError, handle_shortlink_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
