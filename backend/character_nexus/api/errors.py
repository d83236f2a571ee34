"""
Exception handlers mapping application errors onto the wire error shape.

Every error response is ``{"message": ..., "kind": ...}``; validation errors
also carry ``"fields": [{"field": ..., "message": ...}]``.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from character_nexus.core.exceptions import ErrorKind, NexusError
from character_nexus.services.validation import REQUEST_LOCATIONS, field_errors_from_pydantic

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DATABASE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.SCRAPING: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.IMAGE_PROCESSING: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

INTERNAL_ERROR_MESSAGE = "Internal server error"


def error_response(kind: ErrorKind, message: str, fields: Optional[list] = None) -> JSONResponse:
    content = {"message": message, "kind": kind.value}
    if fields is not None:
        content["fields"] = fields
    return JSONResponse(status_code=STATUS_BY_KIND[kind], content=content)


async def nexus_error_handler(request: Request, exc: NexusError) -> JSONResponse:
    kind = exc.kind
    if kind is ErrorKind.INTERNAL:
        logger.error("Unclassified application error on %s", request.url.path, exc_info=exc)
        return error_response(kind, INTERNAL_ERROR_MESSAGE)

    fields = exc.details.get("fields") if kind is ErrorKind.VALIDATION else None
    return error_response(kind, exc.message, fields)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = field_errors_from_pydantic(exc.errors(), strip_locations=REQUEST_LOCATIONS)
    return error_response(
        ErrorKind.VALIDATION,
        "Validation failed",
        [field.to_dict() for field in fields],
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        kind = ErrorKind.NOT_FOUND
    elif exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
        kind = ErrorKind.BAD_REQUEST
    else:
        kind = ErrorKind.INTERNAL
    content = {"message": str(exc.detail), "kind": kind.value}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(ErrorKind.INTERNAL, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NexusError, nexus_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
