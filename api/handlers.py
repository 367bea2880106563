"""Exception handlers for the FastAPI application."""

import logging

from fastapi import Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse

from verification.exceptions import VerificationException

logger = logging.getLogger(__name__)


def create_error_response(
    status_code: int,
    reason: str,
    message: str | None = None,
    data: dict | None = None,
    headers: dict | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    content = {"ok": False, "reason": reason}
    if message:
        content["message"] = message
    content.update(data or {})
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def verification_exception_handler(request: Request, exc: VerificationException) -> JSONResponse:
    headers = None
    retry_after = exc.data.get("retryAfter")
    if retry_after:
        headers = {"Retry-After": str(retry_after)}
    return create_error_response(exc.status_code, exc.reason, exc.message, exc.data, headers)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with standardized response format."""
    return create_error_response(exc.status_code, "http_error", str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are reported as invalid input."""
    error_details = []
    for error in exc.errors():
        field = error["loc"][-1] if error.get("loc") else "unknown"
        message = error.get("msg", "")
        # Remove "Value error, " prefix if present
        if message.startswith("Value error, "):
            message = message[13:]
        error_details.append({"field": field, "message": message})

    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        reason="invalid_input",
        message="Invalid request body.",
        data={"errors": error_details},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other unhandled exceptions with error logging."""
    logger.exception(
        "Unhandled exception occurred",
        extra={"path": request.url.path, "method": request.method},
    )
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        reason="internal_error",
        message="Internal server error",
    )
