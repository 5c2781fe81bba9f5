"""
==============================================================================
Barcode Scanner Core Module
==============================================================================

Multi-backend barcode scanner: the single entry point of the pipeline.

Features:
---------
- Frame-sequence discipline (decoding only inside an active FrameSession)
- Configuration-driven backend selection
- Multi-variant retry (scale x colour inversion)
- Deduplication across backends and variants
- Symbology-specific payload parsing (GTIN, QR, DataMatrix GS1)

Pipeline:
---------
    FrameSession gate -> image check -> configuration snapshot
    -> PreprocessingPipeline -> DecodeOrchestrator -> ResultAggregator
    -> FormatParser -> ScanOutcome(status, results)

==============================================================================
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

import cv2
import numpy as np

from scanfuse.core import exceptions

from .aggregator import ResultAggregator
from .backends import DecodeBackend, default_backends
from .configuration import ScannerConfiguration
from .models import BarcodeResult, ImageFrame, ScanOutcome, ScanStatus
from .orchestrator import DecodeOrchestrator
from .parsers import FormatParser
from .preprocessing import PreprocessingPipeline
from .session import FrameSession


# Module logger
logger = logging.getLogger(__name__)


class BarcodeScanner:
    """
    Barcode scanner fusing several decode backends.

    Attributes:
        configuration: Live settings; changes apply from the next frame
        orchestrator: Backend fan-out used for every frame
        last_results: Results of the most recent successful frame

    Example:
        >>> scanner = BarcodeScanner(ScannerConfiguration.shipping_label())
        >>> with FrameSession() as session:
        ...     outcome = scanner.process_frame(ImageFrame.from_array(image), session)
        >>> outcome.status
        <ScanStatus.SUCCESS: 0>
    """

    def __init__(
        self,
        configuration: Optional[ScannerConfiguration] = None,
        backends: Optional[Sequence[DecodeBackend]] = None,
        pipeline: Optional[PreprocessingPipeline] = None,
        aggregator: Optional[ResultAggregator] = None,
        parser: Optional[FormatParser] = None,
        workers: int = 1,
    ) -> None:
        """
        Initialize scanner instance.

        Args:
            configuration: Scanner settings (default: nothing enabled)
            backends: Decode backends in invocation order
                (default: zxing, libdmtx, zbar)
            pipeline: Preprocessing chain
            aggregator: Deduplication stage
            parser: Payload parser
            workers: Threads for the variant x backend matrix
        """
        self.configuration = configuration or ScannerConfiguration.default()
        self.orchestrator = DecodeOrchestrator(
            backends if backends is not None else default_backends(),
            workers=workers,
        )
        self._pipeline = pipeline or PreprocessingPipeline()
        self._aggregator = aggregator or ResultAggregator()
        self._parser = parser or FormatParser()
        self.last_results: List[BarcodeResult] = []

        logger.debug(
            f"Scanner created with backends "
            f"{[b.backend_id for b in self.orchestrator.backends]}"
        )

    # =========================================================================
    # FRAME PROCESSING METHODS
    # =========================================================================

    def process_frame(self, frame: ImageFrame, session: FrameSession) -> ScanOutcome:
        """
        Decode every enabled symbology in one frame.

        The session is checked before the image, so an idle session reports
        SESSION_NOT_ACTIVE whatever the frame holds. Failing statuses are
        returned before any decode runs.

        Args:
            frame: Input image (not mutated)
            session: Frame sequence that must be active

        Returns:
            ScanOutcome with SUCCESS, NO_CODES_FOUND, SESSION_NOT_ACTIVE or
            INVALID_IMAGE
        """
        if not session.is_active:
            logger.error("Frame sequence not started")
            return ScanOutcome(status=ScanStatus.SESSION_NOT_ACTIVE)

        if frame is None or frame.is_empty:
            logger.error("Invalid image data")
            return ScanOutcome(status=ScanStatus.INVALID_IMAGE)

        config = self.configuration.snapshot()

        variants = self._pipeline.enhance(frame, config)
        detections = self.orchestrator.run(variants, config)
        aggregated = self._aggregator.aggregate(
            detections, config, frame_size=(frame.width, frame.height)
        )
        results = [self._parser.annotate(result) for result in aggregated]

        self.last_results = results
        logger.info(f"Scanning completed. Found {len(results)} barcode(s)")

        status = ScanStatus.SUCCESS if results else ScanStatus.NO_CODES_FOUND
        return ScanOutcome(status=status, results=tuple(results))

    def process_array(self, image: Optional[np.ndarray], session: FrameSession) -> ScanOutcome:
        """Convenience wrapper taking an OpenCV image."""
        return self.process_frame(ImageFrame.from_array(image), session)

    # =========================================================================
    # IMAGE METHODS
    # =========================================================================

    @staticmethod
    def load_image(image_path: Path) -> np.ndarray:
        """
        Read an image file with OpenCV.

        Raises:
            AppException: IMAGE_NOT_READABLE if missing or undecodable
        """
        if not image_path.exists():
            logger.error(f"Image not found: {image_path}")
            raise exceptions.image_not_readable(str(image_path))

        image = cv2.imread(str(image_path))
        if image is None:
            logger.error(f"Could not read image: {image_path}")
            raise exceptions.image_not_readable(str(image_path))

        logger.info(f"Image loaded: {image.shape[1]}x{image.shape[0]}")
        return image

    def scan_image(self, image_path: Path) -> ScanOutcome:
        """Scan barcodes from a static image file inside its own frame sequence."""
        image = self.load_image(image_path)
        with FrameSession() as session:
            return self.process_array(image, session)
