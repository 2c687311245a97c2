"""
Custom exceptions and error handlers for the File Tools API.
Provides consistent error handling across all endpoints.
"""

import asyncio
import logging
import traceback
from functools import wraps
from typing import Dict, List, Optional

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

logger = logging.getLogger(__name__)


# Custom exception classes
class ToolException(Exception):
    """Base exception for File Tools."""

    def __init__(self, message: str, status_code: int = 500, details: Optional[Dict] = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class InvalidInputTypeException(ToolException):
    """Exception raised when an uploaded file type is not accepted by the tool."""

    def __init__(self, mime_type: str, accepted: List[str]):
        super().__init__(
            message=f"Unsupported file type: {mime_type or 'unknown'}",
            status_code=415,
            details={"mime_type": mime_type, "accepted": accepted},
        )


class DecodeFailureException(ToolException):
    """Exception raised when an uploaded file cannot be decoded."""

    def __init__(self, filename: str, reason: str):
        super().__init__(
            message=f"Failed to decode {filename}: {reason}",
            status_code=422,
            details={"filename": filename, "reason": reason},
        )


class EncodeFailureException(ToolException):
    """Exception raised when the encoder produces no output."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            message=f"Failed to encode result of {operation}: {reason}",
            status_code=500,
            details={"operation": operation, "reason": reason},
        )


class SessionNotFoundException(ToolException):
    """Exception raised when a session is not found."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session not found: {session_id}",
            status_code=404,
            details={"session_id": session_id},
        )


class BlobNotFoundException(ToolException):
    """Exception raised when a blob handle is unknown or released."""

    def __init__(self, handle: str):
        super().__init__(
            message=f"Blob not found: {handle}", status_code=404, details={"handle": handle}
        )


class FileTooLargeException(ToolException):
    """Exception raised when an upload exceeds the size limit."""

    def __init__(self, filename: str, size: int, limit: int):
        super().__init__(
            message=f"File too large: {filename} ({size} bytes, limit {limit} bytes)",
            status_code=413,
            details={"filename": filename, "size": size, "limit": limit},
        )


class NoSourceException(ToolException):
    """Exception raised when an operation needs a source file that was not uploaded."""

    def __init__(self, session_id: str, what: str = "source image"):
        super().__init__(
            message=f"Session {session_id} has no {what}",
            status_code=400,
            details={"session_id": session_id, "missing": what},
        )


class SessionBusyException(ToolException):
    """Exception raised when a session is already processing."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session {session_id} is already processing",
            status_code=409,
            details={"session_id": session_id},
        )


class StorageException(ToolException):
    """Exception raised when no session slot can be freed."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            message=f"Storage operation failed: {operation} - {reason}",
            status_code=507,  # Insufficient Storage
            details={"operation": operation, "reason": reason},
        )


# Exception handlers for FastAPI
async def tool_exception_handler(request: Request, exc: ToolException) -> JSONResponse:
    """
    Handler for custom File Tools exceptions.

    Args:
        request: FastAPI request
        exc: ToolException instance

    Returns:
        JSON response with error details
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__}: {exc.message}", extra={"details": exc.details})
    else:
        logger.warning(f"{exc.__class__.__name__}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details, "type": exc.__class__.__name__},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handler for request validation errors.

    Args:
        request: FastAPI request
        exc: Validation exception

    Returns:
        JSON response with validation error details
    """
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "field": ".".join(str(loc) for loc in error["loc"][1:]),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    logger.warning(f"Validation error: {errors}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "Validation failed", "details": errors, "type": "ValidationError"},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler for unexpected exceptions.

    Args:
        request: FastAPI request
        exc: Any exception

    Returns:
        JSON response with generic error message
    """
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    # Internal details are only exposed in debug mode
    debug_mode = getattr(request.app.state, "debug", False)

    if debug_mode:
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "details": {
                    "exception": str(exc),
                    "type": exc.__class__.__name__,
                    "traceback": traceback.format_exc(),
                },
                "type": "InternalError",
            },
        )

    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": {}, "type": "InternalError"},
    )


# Exception mapping for safe_endpoint decorator
# Maps exception types to (status_code, error_message, log_level, detail_builder)
EXCEPTION_MAPPING = {
    ValidationError: (
        400,
        "Validation failed",
        "warning",
        lambda e: {"details": e.errors(include_url=False, include_context=False)},
    ),
    KeyError: (400, "Missing required field", "error", lambda e: {"field": str(e)}),
    ValueError: (400, "Invalid value", "warning", lambda e: {"details": str(e)}),
    MemoryError: (507, "Storage exhausted", "error", lambda e: {"details": str(e)}),
    TimeoutError: (504, "Operation timed out", "error", lambda e: {"details": str(e)}),
}


# Decorator for safe endpoint execution
def safe_endpoint(func):
    """
    Decorator to wrap endpoint functions with error handling.

    Automatically catches and handles common exceptions using EXCEPTION_MAPPING.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            if asyncio.iscoroutinefunction(func):
                return await func(*args, **kwargs)
            else:
                return func(*args, **kwargs)

        except (ToolException, HTTPException):
            # Handled by the registered exception handlers
            raise

        except Exception as e:
            exception_type = type(e)

            if exception_type in EXCEPTION_MAPPING:
                status_code, error_msg, log_level, detail_builder = EXCEPTION_MAPPING[
                    exception_type
                ]

                log_message = f"{exception_type.__name__} in {func.__name__}: {e}"
                if log_level == "warning":
                    logger.warning(log_message)
                else:
                    logger.error(log_message)

                detail = {"error": error_msg}
                detail.update(detail_builder(e))

                raise HTTPException(status_code=status_code, detail=detail)

            logger.error(f"Unexpected error in {func.__name__}: {e}", exc_info=True)
            raise HTTPException(
                status_code=500, detail={"error": "Internal server error", "details": str(e)}
            )

    return wrapper


# Helper function to register all exception handlers
def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(ToolException, tool_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
