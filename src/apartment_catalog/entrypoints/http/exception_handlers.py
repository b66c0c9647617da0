"""Error → JSON response translation for the listing service.

Every error body has ``detail`` and ``code`` (plus ``errors`` for field
problems) and is sent with ``Cache-Control: no-store``.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from apartment_catalog.domain.errors import DomainError

logger = logging.getLogger(__name__)

HTTP_422 = 422

STATUS_CODE_MAP: dict[str, int] = {
    "VALIDATION_ERROR": HTTP_422,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INTERNAL_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Listing responses are cacheable; error bodies must never be reused
ERROR_HEADERS = {"Cache-Control": "no-store"}


def _request_extra(request: Request, **extra: Any) -> dict[str, Any]:
    return {"path": request.url.path, "method": request.method, **extra}


def error_response(status_code: int, detail: str, code: str, errors: list | None = None) -> JSONResponse:
    content: dict[str, Any] = {"detail": detail, "code": code}
    if errors is not None:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content, headers=ERROR_HEADERS)


async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    """Unmapped codes (e.g. ``NETWORK_ERROR``) are answered with 400."""
    status_code = STATUS_CODE_MAP.get(exc.error_code, status.HTTP_400_BAD_REQUEST)
    extra = _request_extra(request, error_code=exc.error_code, error_message=exc.message)

    if status_code >= 500:
        logger.error("Catalog request failed", extra={**extra, "context": exc.context})
    else:
        logger.info("Catalog request rejected", extra=extra)

    body = exc.to_dict()
    return error_response(status_code, body["message"], body["code"], body.get("errors"))


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # priceMin=abc, limit=500, floorMin=2.5 ...
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"] if loc not in ("body", "query")),
            "message": error["msg"],
            "code": error["type"],
        }
        for error in exc.errors()
    ]
    logger.info("Listing query rejected", extra=_request_extra(request, errors=errors))

    return error_response(HTTP_422, "Invalid request parameters", "VALIDATION_ERROR", errors)


async def handle_value_error(request: Request, exc: ValueError) -> JSONResponse:
    logger.info("Value error", extra=_request_extra(request, error_message=str(exc)))
    return error_response(HTTP_422, str(exc), "INVALID_VALUE")


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unexpected error occurred",
        exc_info=exc,
        extra=_request_extra(request, error_type=type(exc).__name__, error_message=str(exc)),
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred", "INTERNAL_ERROR"
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(ValueError, handle_value_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)

    logger.info("Exception handlers registered")
