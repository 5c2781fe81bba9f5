"""
==============================================================================
ZBar Backend Module
==============================================================================

Specialised linear-code decoder backed by pyzbar.

Invoked only when a linear (1D) symbology is enabled.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import FrozenSet, List

import numpy as np

from ..models import Point, polygon_from_rect
from ..symbology import LINEAR_SYMBOLOGIES, Symbology
from .base import DecodeBackend, NativeHit


# Module logger
logger = logging.getLogger(__name__)


class ZBarBackend(DecodeBackend):
    """
    pyzbar adapter.

    ZBar has no try-harder mode; the flag is ignored. Results are
    truncated to max_symbols.
    """

    backend_id = "zbar"
    domain = LINEAR_SYMBOLOGIES
    format_tags = {
        "CODE128": Symbology.CODE128,
        "CODE39": Symbology.CODE39,
        "CODE93": Symbology.CODE93,
        "EAN13": Symbology.EAN13,
        "EAN8": Symbology.EAN8,
        "UPCA": Symbology.UPCA,
        "UPCE": Symbology.UPCE,
    }

    def _read(
        self,
        pixels: np.ndarray,
        formats: FrozenSet[Symbology],
        max_symbols: int,
        try_harder: bool,
    ) -> List[NativeHit]:
        from pyzbar.pyzbar import ZBarSymbol, decode  # type: ignore

        symbols = [
            getattr(ZBarSymbol, tag)
            for tag, symbology in self.format_tags.items()
            if symbology in formats
        ]

        hits = []
        for barcode in decode(pixels, symbols=symbols):
            hits.append(NativeHit(
                payload=barcode.data,
                format_tag=barcode.type,
                polygon=self._polygon(barcode),
            ))
            if len(hits) >= max_symbols:
                break

        logger.debug(f"ZBar found {len(hits)} barcode(s)")
        return hits

    @staticmethod
    def _polygon(barcode) -> List[Point]:
        points = list(getattr(barcode, "polygon", None) or [])
        if len(points) >= 4:
            return [Point(x=p.x, y=p.y) for p in points]
        rect = barcode.rect
        return polygon_from_rect(rect.left, rect.top, rect.width, rect.height)
