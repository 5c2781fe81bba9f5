"""
Application Exception Handling

Single AppException class for every surfaced scanner error, plus the
BackendFailure raised inside decode backends, with FastAPI integration.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Unified application exception for all surfaced error scenarios.

    Provides consistent error response format across the CLI and the API.

    Usage:
        raise AppException("Frame sequence not started", "SESSION_NOT_ACTIVE", 409)
        raise AppException("Unknown preset", "UNKNOWN_PRESET", 400, {"preset": "x"})

    Error Codes:
        Scanning:
            - SESSION_NOT_ACTIVE (409)
            - INVALID_IMAGE (422)
            - IMAGE_NOT_READABLE (400)

        Configuration:
            - UNKNOWN_PRESET (400)

        General:
            - INTERNAL_ERROR (500)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "INVALID_IMAGE")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


class BackendFailure(Exception):
    """
    A decode backend failed or timed out on one image variant.

    Always recovered inside the orchestrator: the (backend, variant) pair
    contributes zero detections and the frame carries on.
    """

    def __init__(self, backend_id: str, reason: str):
        self.backend_id = backend_id
        self.reason = reason
        super().__init__(f"{backend_id}: {reason}")


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    FastAPI exception handler for AppException.

    Converts AppException to consistent JSON error response.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Call this in main.py after creating the FastAPI instance.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def session_not_active() -> AppException:
    """Create frame sequence not started exception."""
    return AppException(
        "Frame sequence not started",
        "SESSION_NOT_ACTIVE",
        409
    )


def invalid_image(reason: str = "Invalid image data") -> AppException:
    """Create invalid image exception."""
    return AppException(
        f"Invalid image: {reason}",
        "INVALID_IMAGE",
        422,
        {"reason": reason}
    )


def image_not_readable(source: str) -> AppException:
    """Create unreadable image exception."""
    return AppException(
        f"Could not read the image: {source}",
        "IMAGE_NOT_READABLE",
        400,
        {"source": source}
    )


def unknown_preset(name: str) -> AppException:
    """Create unknown scanner preset exception."""
    return AppException(
        f"Unknown scanner preset '{name}'",
        "UNKNOWN_PRESET",
        400,
        {"preset": name}
    )


def internal_error(message: str = "Internal server error") -> AppException:
    """Create internal server error exception."""
    return AppException(message, "INTERNAL_ERROR", 500)
