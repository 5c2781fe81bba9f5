"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Common: Shared response schemas
- Scan: Scan request, result and preset schemas

==============================================================================
"""

from .common import MessageResponse
from .scan import (
    BarcodeResultSchema,
    LocationSchema,
    PresetListResponse,
    PresetSchema,
    ScanRequest,
    ScanResponse,
)

__all__ = [
    # Common
    "MessageResponse",
    # Scan
    "BarcodeResultSchema",
    "LocationSchema",
    "PresetListResponse",
    "PresetSchema",
    "ScanRequest",
    "ScanResponse",
]
