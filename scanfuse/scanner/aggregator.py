"""
==============================================================================
Result Aggregator Module
==============================================================================

Deduplicates and bounds raw detections into the final result list.

Rules:
------
- Detections with the same (symbology, normalized payload) are one code,
  whichever variant or backend produced them
- Representative: a detection with real geometry first, then one from a
  non-inverted variant, then the first encountered
- Groups keep first-encountered order
- Output is truncated to max_codes_per_frame

==============================================================================
"""

from __future__ import annotations

import logging
import string
from typing import Dict, List, Optional, Sequence, Tuple

from .configuration import ConfigurationSnapshot
from .models import BarcodeResult, RawDetection, Rect
from .symbology import Symbology


# Module logger
logger = logging.getLogger(__name__)


GroupKey = Tuple[Symbology, str]

_STRIP_CHARS = string.whitespace + "\x00"


class ResultAggregator:
    """
    Collapses detections from every (variant, backend) pair.

    Example:
        >>> aggregator = ResultAggregator()
        >>> results = aggregator.aggregate(detections, config.snapshot())
        >>> len(results) <= config.max_codes_per_frame
        True
    """

    CONFIDENCE = 1.0

    @staticmethod
    def normalize(payload: str) -> str:
        """Grouping form of a payload: surrounding whitespace and NULs removed."""
        return payload.strip(_STRIP_CHARS)

    def group(self, detections: Sequence[RawDetection]) -> Dict[GroupKey, List[RawDetection]]:
        """Group detections by (symbology, normalized payload), insertion ordered."""
        groups: Dict[GroupKey, List[RawDetection]] = {}
        for detection in detections:
            key = (detection.symbology, self.normalize(detection.payload))
            groups.setdefault(key, []).append(detection)
        return groups

    @staticmethod
    def representative(group: Sequence[RawDetection]) -> RawDetection:
        """Pick the detection whose geometry and inversion flag are reported."""
        ranked = sorted(
            enumerate(group),
            key=lambda item: (not item[1].has_geometry, item[1].variant.inverted, item[0]),
        )
        return ranked[0][1]

    def aggregate(
        self,
        detections: Sequence[RawDetection],
        config: ConfigurationSnapshot,
        frame_size: Optional[Tuple[int, int]] = None,
    ) -> List[BarcodeResult]:
        """
        Build the ordered, de-duplicated result list.

        Args:
            detections: Concatenated raw detections
            config: Frozen configuration (enabled set, result cap)
            frame_size: (width, height) of the input frame, used as the
                location of codes that carry no geometry

        Returns:
            At most max_codes_per_frame results; empty for empty input
        """
        if not detections:
            return []

        enabled = config.enabled_symbologies
        results: List[BarcodeResult] = []

        for (symbology, _), group in self.group(detections).items():
            if symbology not in enabled:
                continue

            chosen = self.representative(group)
            results.append(BarcodeResult(
                data=chosen.payload,
                symbology=symbology,
                location=self._location(chosen, frame_size),
                confidence=self.CONFIDENCE,
                color_inverted=chosen.variant.inverted,
            ))

            if len(results) >= config.max_codes_per_frame:
                break

        logger.debug(
            f"Aggregated {len(detections)} detection(s) into {len(results)} result(s)"
        )
        return results

    @staticmethod
    def _location(detection: RawDetection, frame_size: Optional[Tuple[int, int]]) -> Rect:
        if detection.has_geometry:
            return detection.bounding_rect
        if frame_size:
            width, height = frame_size
            return Rect(x=0, y=0, width=width, height=height)
        return Rect()
