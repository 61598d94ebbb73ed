"""
app/api/error_handlers.py

Translate classified connector failures into structured HTTP errors.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.exceptions import (
    ApiConfigurationNotFoundError,
    ApplicationError,
    ExternalApiError,
    FieldMappingError,
)
from app.schemas.user_integration import ErrorResponse

logger = logging.getLogger(__name__)

_GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


def _error_response(request: Request, status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(
        status=status_code,
        error=error,
        message=message,
        path=request.url.path,
        timestamp=datetime.now(timezone.utc),
        correlation_id=str(uuid.uuid4()),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return ", ".join(messages)


async def _handle_configuration_not_found(request: Request, exc: ApiConfigurationNotFoundError) -> JSONResponse:
    logger.error("API configuration not found path=%s error=%s", request.url.path, exc)
    return _error_response(request, status.HTTP_404_NOT_FOUND, "Not Found", str(exc))


async def _handle_external_api_error(request: Request, exc: ExternalApiError) -> JSONResponse:
    logger.error("External API error path=%s error=%s", request.url.path, exc, exc_info=exc)
    return _error_response(request, status.HTTP_502_BAD_GATEWAY, "Bad Gateway", str(exc))


async def _handle_field_mapping_error(request: Request, exc: FieldMappingError) -> JSONResponse:
    logger.error("Field mapping error path=%s error=%s", request.url.path, exc, exc_info=exc)
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", str(exc))


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _format_validation_errors(exc)
    logger.error("Validation error path=%s error=%s", request.url.path, message)
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "Bad Request",
        f"Validation failed: {message}",
    )


async def _handle_application_error(request: Request, exc: ApplicationError) -> JSONResponse:
    logger.error("Application error path=%s error=%s", request.url.path, exc, exc_info=exc)
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", str(exc))


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error path=%s", request.url.path, exc_info=exc)
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        _GENERIC_ERROR_MESSAGE,
    )


def register_exception_handlers(application: FastAPI) -> None:
    """
    Install the error translation used by every router.
    """

    application.add_exception_handler(ApiConfigurationNotFoundError, _handle_configuration_not_found)
    application.add_exception_handler(ExternalApiError, _handle_external_api_error)
    application.add_exception_handler(FieldMappingError, _handle_field_mapping_error)
    application.add_exception_handler(RequestValidationError, _handle_validation_error)
    application.add_exception_handler(ApplicationError, _handle_application_error)
    application.add_exception_handler(Exception, _handle_unexpected_error)
