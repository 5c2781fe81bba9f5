"""
==============================================================================
Scanner Package - Barcode Detection
==============================================================================

Multi-backend barcode scanning with OpenCV, zxing-cpp, pylibdmtx and pyzbar.

Classes:
--------
- BarcodeScanner: Main scanner class with frame processing
- ScannerConfiguration: Symbology table and presets
- FrameSession: Frame-sequence gate
- FormatParser: GTIN / QR / DataMatrix payload interpretation

==============================================================================
"""

from .configuration import EnhancementProfile, ScannerConfiguration, preset_names
from .core import BarcodeScanner
from .models import BarcodeResult, ImageFrame, ScanOutcome, ScanStatus
from .parsers import FormatParser
from .session import FrameSession
from .symbology import Symbology

__all__ = [
    "BarcodeScanner",
    "BarcodeResult",
    "EnhancementProfile",
    "FormatParser",
    "FrameSession",
    "ImageFrame",
    "ScanOutcome",
    "ScanStatus",
    "ScannerConfiguration",
    "Symbology",
    "preset_names",
]
