"""Domain error taxonomy and the handlers that map it onto HTTP responses."""

from __future__ import annotations

import logging
from contextvars import Token
from http import HTTPStatus
from typing import Any, Mapping

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from .core.context import REQUEST_ID_HEADER, bind_request_id, reset_request_id
from .schemas.system import ErrorResponse

logger = logging.getLogger(__name__)


class ApplicationError(Exception):
    """Base class for domain-specific errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "application_error",
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Any | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        self.headers = dict(headers) if headers else None


class ValidationError(ApplicationError):
    """Missing or malformed input."""

    def __init__(
        self,
        message: str = "Validation failed.",
        *,
        code: str = "validation_error",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class ConflictError(ApplicationError):
    """A unique value (username, email) collides with another record."""

    def __init__(
        self,
        message: str = "Resource already exists.",
        *,
        code: str = "conflict",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class AuthenticationError(ApplicationError):
    """Bad credentials or an invalid, expired or unknown bearer token."""

    def __init__(
        self,
        message: str = "Could not validate credentials.",
        *,
        code: str = "unauthorized",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(ApplicationError):
    """The actor is known but lacks the role or ownership required."""

    def __init__(
        self,
        message: str = "You do not have permission to perform this action.",
        *,
        code: str = "forbidden",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class NotFoundError(ApplicationError):
    """Error representing missing resources, or resources hidden from the actor."""

    def __init__(
        self,
        message: str = "Resource not found.",
        *,
        code: str = "not_found",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class ServerError(ApplicationError):
    """Error representing unexpected server failures."""

    def __init__(
        self,
        message: str = "Internal server error.",
        *,
        code: str = "server_error",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
        )


_HTTP_STATUS_CODE_MAP: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
}


def _bind_request_context(request: Request) -> Token[str] | None:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        return None
    return bind_request_id(request_id)


def _reset_request_context(token: Token[str] | None) -> None:
    if token is not None:
        reset_request_id(token)


def _merge_details_with_request(request: Request, details: Any | None) -> Any | None:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        return details
    if details is None:
        return {"request_id": request_id}
    if isinstance(details, dict):
        if "request_id" not in details:
            return {**details, "request_id": request_id}
        return details
    return {"request_id": request_id, "detail": details}


def _error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Any | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(
        code=code,
        message=message,
        details=_merge_details_with_request(request, details),
    )
    response = JSONResponse(status_code=status_code, content=payload.model_dump())
    if headers:
        response.headers.update(headers)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


def _http_exception_details(status_code: int, detail: Any) -> tuple[str, Any | None]:
    if isinstance(detail, str):
        return detail, None
    try:
        status_phrase = HTTPStatus(status_code).phrase
    except ValueError:
        status_phrase = "Error"
    if detail is None:
        return status_phrase, None
    if isinstance(detail, list):
        return status_phrase, {"errors": detail}
    return status_phrase, detail


def _summarise_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    return [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": str(error.get("msg", "")),
            "type": str(error.get("type", "")),
        }
        for error in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the provided FastAPI app."""

    @app.exception_handler(ApplicationError)
    async def _handle_application_error(
        request: Request,
        exc: ApplicationError,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
            log(
                "Application error encountered",
                extra={"code": exc.code, "status_code": exc.status_code, "path": str(request.url.path)},
            )
            return _error_response(
                request,
                status_code=exc.status_code,
                code=exc.code,
                message=exc.message,
                details=exc.details,
                headers=exc.headers,
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            errors = _summarise_validation_errors(exc)
            logger.warning("Request validation failed", extra={"errors": errors})
            return _error_response(
                request,
                status_code=status.HTTP_400_BAD_REQUEST,
                code="validation_error",
                message="Request validation failed.",
                details={"errors": errors},
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(IntegrityError)
    async def _handle_integrity_error(
        request: Request,
        exc: IntegrityError,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            logger.error("Database integrity error encountered.", exc_info=exc)
            return _error_response(
                request,
                status_code=status.HTTP_400_BAD_REQUEST,
                code="conflict",
                message="The change conflicts with an existing record.",
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_exception(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            code = _HTTP_STATUS_CODE_MAP.get(exc.status_code, "http_error")
            message, extra_details = _http_exception_details(exc.status_code, exc.detail)
            log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
            log(
                "HTTP exception raised",
                extra={"code": code, "status_code": exc.status_code, "path": str(request.url.path)},
            )
            return _error_response(
                request,
                status_code=exc.status_code,
                code=code,
                message=message,
                details=extra_details,
                headers=exc.headers or None,
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(Exception)
    async def _handle_unhandled_exception(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            logger.exception("Unhandled application error.")
            return _error_response(
                request,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                code="server_error",
                message="Internal server error.",
            )
        finally:
            _reset_request_context(token)


__all__ = [
    "ApplicationError",
    "AuthenticationError",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "ServerError",
    "ValidationError",
    "register_exception_handlers",
]
