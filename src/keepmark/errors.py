"""Error taxonomy and its HTTP rendering.

Learn: Services raise these instead of HTTPException so the business
logic stays HTTP-agnostic. One exception handler turns every
KeepmarkError into the same body shape:

    {"error": "<category>", "message": "<human text>"}

Each observable category has exactly one class. When two different
causes must look identical to the caller (unknown email vs wrong
password, missing bookmark vs someone else's bookmark) the service
raises the same class with the same message and logs the real cause.
"""

from typing import Any, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger()


class KeepmarkError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "internal_error"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message}


class ValidationFailure(KeepmarkError):
    """Malformed or missing input fields."""

    code = "validation_failure"
    status_code = 400
    default_message = "Request validation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        fields: Optional[list[dict[str, str]]] = None,
    ):
        super().__init__(message)
        self.fields = fields or []

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["fields"] = self.fields
        return body


class EmailTaken(KeepmarkError):
    code = "email_taken"
    status_code = 403
    default_message = "Email is already registered"


class InvalidCredentials(KeepmarkError):
    """Sign-in failed. Deliberately silent about which half was wrong."""

    code = "invalid_credentials"
    status_code = 403
    default_message = "Invalid email or password"


class AuthenticationFailure(KeepmarkError):
    code = "authentication_failure"
    status_code = 401
    default_message = "Authentication required"


class NotFound(KeepmarkError):
    """Resource absent or owned by someone else — same signal for both."""

    code = "not_found"
    status_code = 404
    default_message = "Not found"


class InternalInconsistency(KeepmarkError):
    """Server-side fault, e.g. a verified token whose user no longer exists."""

    code = "internal_error"
    status_code = 500
    default_message = "Internal server error"


async def keepmark_error_handler(request: Request, exc: KeepmarkError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthenticationFailure):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=headers,
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render pydantic validation errors as a 400 ValidationFailure."""
    fields = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", "invalid value"),
        }
        for err in exc.errors()
    ]
    logger.info(
        "request.validation_failed",
        path=request.url.path,
        fields=[f["field"] for f in fields],
    )
    return await keepmark_error_handler(
        request, ValidationFailure(fields=fields)
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(KeepmarkError, keepmark_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
