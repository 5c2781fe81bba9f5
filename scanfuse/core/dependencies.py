"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection for the scan endpoints.

Dependency Hierarchy:
--------------------
    get_settings() ──► get_backends() ──► ScanController

Tests replace the decode backends with in-memory fakes through
app.dependency_overrides[get_backends].

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import Depends

from scanfuse.config import Settings, get_settings
from scanfuse.scanner.backends import DecodeBackend, default_backends


# Module logger
logger = logging.getLogger(__name__)


def get_backends(settings: Settings = Depends(get_settings)) -> List[DecodeBackend]:
    """Decode backends configured from the service settings."""
    return default_backends(
        matrix_timeout_ms=settings.matrix_timeout_ms,
        matrix_region_cap=settings.matrix_region_cap,
    )
