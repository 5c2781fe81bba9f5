"""
==============================================================================
ZXing Backend Module
==============================================================================

General matrix + linear decoder backed by zxing-cpp.

Invoked for every variant whenever any symbology is enabled.

==============================================================================
"""

from __future__ import annotations

import functools
import logging
import operator
from typing import FrozenSet, List

import numpy as np

from ..configuration import ConfigurationSnapshot
from ..models import Point
from ..symbology import Symbology
from .base import DecodeBackend, NativeHit


# Module logger
logger = logging.getLogger(__name__)


class ZXingBackend(DecodeBackend):
    """
    zxing-cpp adapter.

    try_harder enables zxing's downscale search; rotation search is always
    on. zxing-cpp has no symbol cap, so results are truncated to
    max_symbols.
    """

    backend_id = "zxing"
    domain = frozenset(Symbology)
    format_tags = {
        "QRCode": Symbology.QR,
        "DataMatrix": Symbology.DATAMATRIX,
        "Aztec": Symbology.AZTEC,
        "PDF417": Symbology.PDF417,
        "EAN13": Symbology.EAN13,
        "EAN8": Symbology.EAN8,
        "UPCA": Symbology.UPCA,
        "UPCE": Symbology.UPCE,
        "Code39": Symbology.CODE39,
        "Code93": Symbology.CODE93,
        "Code128": Symbology.CODE128,
    }

    def applies_to(self, config: ConfigurationSnapshot) -> bool:
        return config.any_enabled

    def _read(
        self,
        pixels: np.ndarray,
        formats: FrozenSet[Symbology],
        max_symbols: int,
        try_harder: bool,
    ) -> List[NativeHit]:
        import zxingcpp  # type: ignore

        tags = [tag for tag, symbology in self.format_tags.items() if symbology in formats]
        mask = functools.reduce(
            operator.or_, (getattr(zxingcpp.BarcodeFormat, tag) for tag in tags)
        )

        barcodes = zxingcpp.read_barcodes(
            pixels,
            formats=mask,
            try_rotate=True,
            try_downscale=try_harder,
        )

        hits = []
        for barcode in barcodes:
            if not barcode.valid or not barcode.text:
                continue
            hits.append(NativeHit(
                payload=barcode.text,
                format_tag=barcode.format.name,
                polygon=self._polygon(barcode.position),
            ))
            if len(hits) >= max_symbols:
                break

        logger.debug(f"ZXing found {len(hits)} barcode(s)")
        return hits

    @staticmethod
    def _polygon(position) -> List[Point]:
        if position is None:
            return []
        corners = (
            position.top_left,
            position.top_right,
            position.bottom_right,
            position.bottom_left,
        )
        return [Point(x=corner.x, y=corner.y) for corner in corners]
