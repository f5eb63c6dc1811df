# app/core/exceptions.py
from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """
    Base class for errors that map onto an HTTP response.

    Every subclass carries the status it surfaces as and a user-facing
    message; validation errors additionally carry field-level details.
    """

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"message": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class ValidationError(AppError):
    status_code = HTTPStatus.BAD_REQUEST
    default_message = "Validation failed"


class Unauthorized(AppError):
    status_code = HTTPStatus.UNAUTHORIZED
    default_message = "Unauthorized. Please log in."


class Forbidden(AppError):
    status_code = HTTPStatus.FORBIDDEN
    default_message = "You do not have the necessary permissions to perform this action"


class NotFound(AppError):
    status_code = HTTPStatus.NOT_FOUND
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = HTTPStatus.CONFLICT
    default_message = "Resource already exists"


class OwnershipMismatch(AppError):
    status_code = HTTPStatus.BAD_REQUEST
    default_message = "Event does not belong to this workspace"


class UpdateFailed(AppError):
    status_code = HTTPStatus.BAD_REQUEST
    default_message = "Failed to update event"


class StoreError(AppError):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "Database operation failed"


def _field_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """
    Flatten FastAPI/pydantic error entries into `{field, message}` pairs.

    The leading location segment ("body", "query", "path") is dropped.
    """
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "")})
    return errors


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=int(exc.status_code), content=exc.to_payload())


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    error = ValidationError(errors=_field_errors(exc))
    return JSONResponse(status_code=int(error.status_code), content=error.to_payload())


async def _store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Unhandled database error on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    error = StoreError()
    return JSONResponse(status_code=int(error.status_code), content=error.to_payload())


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the error taxonomy onto JSON responses of the shape `{message, errors?}`.
    """
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, _store_error_handler)
