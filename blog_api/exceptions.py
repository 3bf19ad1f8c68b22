import logging
from typing import Any, List, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""
    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(AppError):
    status_code = 400
    default_detail = "Invalid request"


class AuthenticationError(AppError):
    status_code = 401
    default_detail = "Authentication required"


class AuthorizationError(AppError):
    status_code = 403
    default_detail = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = 404
    default_detail = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_detail = "Resource already exists"


class StorageError(AppError):
    """I/O or persistence failure. The detail is logged, never returned."""
    status_code = 500
    default_detail = "Storage failure"

    def __init__(self, detail: Optional[str] = None, errors: Optional[List[str]] = None):
        super().__init__(detail)
        self.errors = list(errors or [])


def create_error_response(error_message: str, status_code: int = 400) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }

def create_success_response(data: Any) -> dict:
    """Create a standardized success response"""
    return {
        "success": True,
        "data": data,
        "error": None
    }

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, StorageError):
        logger.error(f"Storage error on {request.method} {request.url.path}: {exc.detail} {exc.errors}")
        message = "Internal server error"
    else:
        message = exc.detail
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(message, exc.status_code),
        headers=headers,
    )

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )

async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content=create_error_response(message, 400))
