"""
==============================================================================
Utilities Package
==============================================================================

Utility classes and functions for the application.

Modules:
--------
- report: Plain-text scan report formatting

==============================================================================
"""

from .report import ScanReportFormatter

__all__ = [
    "ScanReportFormatter",
]
