"""
Exception handlers rendering every error as ``{"status": "error", "message"}``.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from profile_api.api.validation import format_validation_errors
from profile_api.core.exceptions import AppError, ServerError, ValidationError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, headers=None, **extra) -> JSONResponse:
    content = {"status": "error", "message": message}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return error_response(exc.status_code, exc.message, headers=exc.headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Starlette raises these for paths or methods no route serves
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return error_response(
            status.HTTP_404_NOT_FOUND,
            f"Route {request.url.path} not found",
        )
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(format_validation_errors(exc.errors()))
    logger.debug(f"Rejected {request.method} {request.url.path}: {error.message}")
    return error_response(error.status_code, error.message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    error = ServerError()
    extra = {}
    if request.app.state.settings.debug:
        extra["error"] = str(exc)
    return error_response(error.status_code, error.message, **extra)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
