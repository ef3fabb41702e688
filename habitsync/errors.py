"""
errors.py — Request-scoped failure taxonomy
Every failure a service can raise carries a kind and a readable message and is
rendered by the handlers below as {"status": "error", "kind", "message"}.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    kind = "AppError"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"status": "error", "kind": self.kind, "message": self.message}


class ValidationError(AppError):
    """Malformed or missing upload fields. The whole batch is rejected."""
    kind = "ValidationError"
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthenticatedError(AppError):
    kind = "UnauthenticatedError"
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(AppError):
    kind = "ForbiddenError"
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    kind = "NotFoundError"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    kind = "ConflictError"
    status_code = status.HTTP_409_CONFLICT


class TransientStoreError(AppError):
    """Store unreachable or contended. No partial write is visible, so the caller may retry."""
    kind = "TransientStoreError"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, TransientStoreError):
        logger.warning(f"{request.method} {request.url.path} -> {exc.kind}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    error = ValidationError("; ".join(problems) or "Invalid request")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
