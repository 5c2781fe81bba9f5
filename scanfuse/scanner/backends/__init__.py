"""
==============================================================================
Decode Backends Package
==============================================================================

One DecodeBackend implementation per native decoder library.

Backends:
---------
- ZXingBackend: general matrix + linear decoder (zxing-cpp)
- DmtxBackend: specialised DataMatrix decoder (pylibdmtx)
- ZBarBackend: specialised linear decoder (pyzbar)

The native libraries are imported on first use, so a missing shared
library shows up as a recovered backend failure rather than an import
error of the whole package.

==============================================================================
"""

from __future__ import annotations

from importlib.util import find_spec
from typing import Dict, List

from .base import DecodeBackend, NativeHit
from .dmtx_backend import DmtxBackend
from .zbar_backend import ZBarBackend
from .zxing_backend import ZXingBackend


_BACKEND_MODULES = {
    ZXingBackend.backend_id: "zxingcpp",
    DmtxBackend.backend_id: "pylibdmtx",
    ZBarBackend.backend_id: "pyzbar",
}


def default_backends(
    matrix_timeout_ms: int = DmtxBackend.DEFAULT_TIMEOUT_MS,
    matrix_region_cap: int = DmtxBackend.DEFAULT_REGION_CAP,
) -> List[DecodeBackend]:
    """The three backends in registration order."""
    return [
        ZXingBackend(),
        DmtxBackend(timeout_ms=matrix_timeout_ms, region_cap=matrix_region_cap),
        ZBarBackend(),
    ]


def backend_availability() -> Dict[str, bool]:
    """backend_id -> whether its Python binding is installed."""
    return {
        backend_id: find_spec(module) is not None
        for backend_id, module in _BACKEND_MODULES.items()
    }


__all__ = [
    "DecodeBackend",
    "NativeHit",
    "ZXingBackend",
    "DmtxBackend",
    "ZBarBackend",
    "default_backends",
    "backend_availability",
]
