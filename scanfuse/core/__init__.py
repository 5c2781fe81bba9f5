"""
==============================================================================
Core Package
==============================================================================

Core infrastructure shared by the scanner, the CLI and the API.

This package provides:
- Custom exception handling with consistent error responses
- BackendFailure for recoverable decode-backend errors
- Exception factory functions for common error scenarios

Usage:
------
    from scanfuse.core import AppException

    # Or use exception factory functions via module
    from scanfuse.core import exceptions
    raise exceptions.session_not_active()

==============================================================================
"""

from .exceptions import (
    AppException,
    BackendFailure,
    register_exception_handlers,
)

__all__ = [
    "AppException",
    "BackendFailure",
    "register_exception_handlers",
]
