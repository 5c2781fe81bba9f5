"""
==============================================================================
libdmtx Backend Module
==============================================================================

Specialised DataMatrix decoder backed by pylibdmtx.

Bounded scanning:
-----------------
- Wall-clock budget per call (default 2000 ms)
- Region cap: min(region cap, max codes per frame) regions inspected

pylibdmtx acquires the native image, decoder, region and message handles
inside nested context managers, so every handle is released on all exit
paths: timeout, region cap, or an exception raised mid-scan.

==============================================================================
"""

from __future__ import annotations

import logging
import time
from typing import FrozenSet, List

import numpy as np

from ..models import polygon_from_rect
from ..symbology import MATRIX_SYMBOLOGIES, Symbology
from .base import DecodeBackend, NativeHit


# Module logger
logger = logging.getLogger(__name__)


class DmtxBackend(DecodeBackend):
    """
    pylibdmtx adapter, applicable whenever a matrix symbology is enabled.

    Attributes:
        timeout_ms: Wall-clock budget for one variant
        region_cap: Hard cap on inspected regions
    """

    backend_id = "libdmtx"
    domain = MATRIX_SYMBOLOGIES
    format_tags = {"DataMatrix": Symbology.DATAMATRIX}

    DEFAULT_TIMEOUT_MS = 2000
    DEFAULT_REGION_CAP = 10

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        region_cap: int = DEFAULT_REGION_CAP,
    ) -> None:
        self.timeout_ms = timeout_ms
        self.region_cap = region_cap

    def region_limit(self, max_symbols: int) -> int:
        return max(1, min(self.region_cap, max_symbols))

    def _read(
        self,
        pixels: np.ndarray,
        formats: FrozenSet[Symbology],
        max_symbols: int,
        try_harder: bool,
    ) -> List[NativeHit]:
        from pylibdmtx.pylibdmtx import decode as dmtx_decode  # type: ignore

        height, width = pixels.shape[:2]
        started = time.monotonic()

        decoded = dmtx_decode(
            (np.ascontiguousarray(pixels).tobytes(), width, height),
            timeout=self.timeout_ms,
            max_count=self.region_limit(max_symbols),
        )

        elapsed_ms = (time.monotonic() - started) * 1000
        if elapsed_ms >= self.timeout_ms:
            logger.warning(
                f"libdmtx exhausted its {self.timeout_ms} ms budget "
                f"on a {width}x{height} variant"
            )

        hits = []
        for symbol in decoded:
            left, top, rect_width, rect_height = symbol.rect
            # libdmtx measures y from the bottom edge
            polygon = polygon_from_rect(left, height - top - rect_height, rect_width, rect_height)
            hits.append(NativeHit(
                payload=symbol.data,
                format_tag="DataMatrix",
                polygon=polygon,
            ))

        logger.debug(f"libdmtx found {len(hits)} DataMatrix code(s)")
        return hits
