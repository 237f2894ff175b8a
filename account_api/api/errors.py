"""Exception handlers: translate errors into the JSON error envelope."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from account_api.core.errors import AccountServiceError, InternalError, MissingTokenError
from account_api.schemas.auth import ErrorResponse

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Internal Server Error"


def _error_response(
    status_code: int,
    message: str,
    errors: list[str] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, errors=errors)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def _format_validation_error(error: dict) -> str:
    loc = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    msg = error.get("msg", "Invalid value")
    return f"{loc}: {msg}" if loc else msg


async def account_service_error_handler(request: Request, exc: AccountServiceError) -> JSONResponse:
    """Map a domain error kind to its status code."""
    if isinstance(exc, InternalError):
        logger.error(
            "Internal error",
            exc_info=exc.cause or exc,
            extra={"path": request.url.path, "error_message": exc.message},
        )
        return _error_response(exc.status_code, GENERIC_ERROR_MESSAGE)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, MissingTokenError) else None
    return _error_response(exc.status_code, exc.message, exc.errors, headers)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Request bodies that fail schema validation are answered with 400, one message per field."""
    messages = [_format_validation_error(error) for error in exc.errors()]
    return _error_response(400, "Invalid request.", messages)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log with traceback, answer 500 without internal detail."""
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return _error_response(500, GENERIC_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AccountServiceError, account_service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
