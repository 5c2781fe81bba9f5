"""
==============================================================================
Decode Backend Base Module
==============================================================================

Capability interface shared by every decode backend.

A backend adapter only implements `_read`, the call into its native
library:

    _read(pixels, formats, max_symbols, try_harder) -> List[NativeHit]

The base class handles everything around it: restricting the enabled
symbologies to the backend's domain, mapping native format tags to
Symbology, dropping unknown or disabled formats, decoding byte payloads
and mapping geometry back to input-frame coordinates.

==============================================================================
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, FrozenSet, List, NamedTuple, Sequence, Union

import numpy as np

from ..configuration import ConfigurationSnapshot
from ..models import ImageVariant, Point, RawDetection
from ..symbology import Symbology


# Module logger
logger = logging.getLogger(__name__)


class NativeHit(NamedTuple):
    """One decode reported by a native library, in variant coordinates."""

    payload: Union[str, bytes]
    format_tag: str
    polygon: Sequence[Point] = ()


class DecodeBackend(ABC):
    """
    Converts an image variant plus configuration into raw detections.

    Attributes:
        backend_id: Stable identifier recorded on every RawDetection
        domain: Symbologies whose enablement makes this backend applicable
        format_tags: Native format tag -> Symbology
    """

    backend_id: str = "backend"
    domain: FrozenSet[Symbology] = frozenset()
    format_tags: Dict[str, Symbology] = {}

    @property
    def supported(self) -> FrozenSet[Symbology]:
        """Symbologies this backend can actually decode."""
        return frozenset(self.format_tags.values())

    def applies_to(self, config: ConfigurationSnapshot) -> bool:
        """True when a symbology of this backend's domain is enabled."""
        return bool(config.enabled_symbologies & self.domain)

    def formats_for(self, config: ConfigurationSnapshot) -> FrozenSet[Symbology]:
        return config.enabled_symbologies & self.supported

    def decode(
        self,
        variant: ImageVariant,
        config: ConfigurationSnapshot,
    ) -> List[RawDetection]:
        """
        Decode one variant.

        Args:
            variant: Single-channel image plus tags
            config: Frozen configuration

        Returns:
            Detections in input-frame coordinates; may be empty

        Raises:
            BackendFailure or any library error; the orchestrator recovers
        """
        formats = self.formats_for(config)
        if not formats:
            return []

        hits = self._read(
            variant.image,
            formats,
            config.max_codes_per_frame,
            config.try_harder,
        )

        detections = []
        for hit in hits:
            symbology = self.format_tags.get(hit.format_tag)
            if symbology is None or symbology not in formats:
                logger.debug(f"{self.backend_id}: skipping format {hit.format_tag!r}")
                continue

            payload = self._payload_text(hit.payload)
            if not payload:
                continue

            detection = RawDetection(
                payload=payload,
                symbology=symbology,
                polygon=tuple(hit.polygon),
                source_backend=self.backend_id,
                variant=variant.tag,
            )
            detections.append(detection.rescaled(variant.source_scale))

        return detections

    @staticmethod
    def _payload_text(payload: Union[str, bytes]) -> str:
        if isinstance(payload, bytes):
            return payload.decode("utf-8", errors="replace")
        return payload

    @abstractmethod
    def _read(
        self,
        pixels: np.ndarray,
        formats: FrozenSet[Symbology],
        max_symbols: int,
        try_harder: bool,
    ) -> List[NativeHit]:
        """Call the native library on a uint8 single-channel image."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(backend_id={self.backend_id!r})"
