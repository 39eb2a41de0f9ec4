"""
API error taxonomy and the handlers that render it.

Every error leaves the service as ``{"error": "<message>"}``; validation
failures add an ``"errors"`` list of field-level problems.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from utils.schemas import FieldError

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for errors surfaced to the client"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_body(self) -> dict:
        return {"error": self.message}


class ValidationFailed(APIError):
    """Raised when the request payload breaks one or more field rules"""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation failed"

    def __init__(self, errors: List[FieldError], message: Optional[str] = None) -> None:
        super().__init__(message)
        self.errors = errors

    def to_body(self) -> dict:
        body = super().to_body()
        body["errors"] = [e.model_dump() for e in self.errors]
        return body


class Unauthorized(APIError):
    """Raised when no credential was supplied"""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Access denied"


class InvalidToken(APIError):
    """Raised when the bearer token has a bad signature or has expired"""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid token"


class InvalidCredentials(APIError):
    """Raised when the password does not match the stored hash"""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid password"


class NotFound(APIError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class Conflict(APIError):
    """Raised when a unique field is already taken"""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Conflict"


class InternalError(APIError):
    pass


def _field_from_loc(loc) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the handlers that turn exceptions into JSON error bodies."""

    @app.exception_handler(APIError)
    async def handle_api_error(request: Request, exc: APIError):
        return JSONResponse(exc.to_body(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            FieldError(
                field=_field_from_loc(err.get("loc", ())),
                message=err.get("msg", "Invalid value"),
                location=str((err.get("loc") or ("body",))[0]),
            )
            for err in exc.errors()
        ]
        logger.debug("%s %s rejected: %s", request.method, request.url.path, errors)
        failed = ValidationFailed(errors)
        return JSONResponse(failed.to_body(), status_code=failed.status_code)
