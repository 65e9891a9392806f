"""
Error taxonomy and API exception handlers.

Every failure a screen can see is one of these. The handlers turn them into
a notification body the client shows as a transient toast:

    {"title": "...", "detail": "...", "code": "...", "field": null}

Usage:
    from campconnect.core.errors import ValidationError

    if not text.strip():
        raise ValidationError("Question is required", "Please enter your question", field="question")
"""

import logging
from typing import Optional, Dict, Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class CampConnectError(Exception):
    """Base exception for all CampConnect errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        title: str = "Something went wrong",
        code: str = "INTERNAL_ERROR",
        field: Optional[str] = None,
    ):
        self.message = message
        self.title = title
        self.code = code
        self.field = field
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "detail": self.message,
            "code": self.code,
            "field": self.field,
        }


class AuthenticationError(CampConnectError):
    """No session, or the token is no longer valid"""

    status_code = 401

    def __init__(self, message: str = "Authentication expired. Please log in again."):
        super().__init__(message, title="Authentication error", code="UNAUTHENTICATED")


class PermissionDeniedError(CampConnectError):
    """Backend refused the operation, or the caller's role does not allow it"""

    status_code = 403

    def __init__(self, message: str = "Permission denied.", title: str = "Permission denied"):
        super().__init__(message, title=title, code="PERMISSION_DENIED")


class BackendUnavailableError(CampConnectError):
    """Database unreachable or failing. Not retried."""

    status_code = 503

    def __init__(self, message: str = "The database is temporarily unavailable. Please try again.",
                 title: str = "Request failed"):
        super().__init__(message, title=title, code="UNAVAILABLE")


class ValidationError(CampConnectError):
    """Form input rejected before any backend call"""

    status_code = 400

    def __init__(self, title: str, message: str, field: Optional[str] = None):
        super().__init__(message, title=title, code="VALIDATION_ERROR", field=field)


class NotFoundError(CampConnectError):
    status_code = 404

    def __init__(self, resource: str, message: Optional[str] = None):
        super().__init__(
            message or f"{resource} not found",
            title=f"{resource} not found",
            code=f"{resource.upper()}_NOT_FOUND",
        )


class ProfileRequiredError(NotFoundError):
    """Signed in, but no profile document yet"""

    def __init__(self):
        super().__init__("Profile", "Profile not found. Create profile first.")


class ConflictError(CampConnectError):
    status_code = 400

    def __init__(self, message: str, title: str = "Request failed"):
        super().__init__(message, title=title, code="CONFLICT")


async def campconnect_error_handler(request: Request, exc: CampConnectError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "title": "Something went wrong",
            "detail": "Please try again",
            "code": "INTERNAL_ERROR",
            "field": None,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CampConnectError, campconnect_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
