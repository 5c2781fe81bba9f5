"""
==============================================================================
Scan Endpoints
==============================================================================

Endpoints for decoding barcodes from an uploaded image.

Every request runs inside its own FrameSession; failing scan statuses
are returned as AppException responses.

==============================================================================
"""

import base64
import binascii
import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np
from fastapi import APIRouter, Depends

from scanfuse.config import Settings, get_settings
from scanfuse.core import exceptions
from scanfuse.core.dependencies import get_backends
from scanfuse.scanner import BarcodeScanner, FrameSession, ScannerConfiguration, preset_names
from scanfuse.scanner.backends import DecodeBackend
from scanfuse.schemas.scan import (
    PresetListResponse,
    PresetSchema,
    ScanRequest,
    ScanResponse,
)


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scan", tags=["Scan"])


class ScanController:
    """Controller for scan operations."""

    def __init__(self, settings: Settings, backends: List[DecodeBackend]):
        self._settings = settings
        self._backends = backends

    def resolve_configuration(
        self,
        preset: Optional[str],
        max_codes: Optional[int] = None
    ) -> Tuple[str, ScannerConfiguration]:
        """Build the scanner configuration for a request."""
        name = preset or self._settings.default_preset
        try:
            config = ScannerConfiguration.from_preset(name)
        except KeyError:
            raise exceptions.unknown_preset(name)

        if max_codes is not None:
            config.set_max_codes_per_frame(max_codes)

        return name, config

    def decode_image(self, encoded: str) -> np.ndarray:
        """Decode a base64 image file into an OpenCV image."""
        try:
            raw = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            raise exceptions.invalid_image("Image is not valid base64")

        if not raw:
            raise exceptions.invalid_image("Empty image upload")

        if len(raw) > self._settings.max_upload_bytes:
            raise exceptions.invalid_image(
                f"Image exceeds {self._settings.max_upload_bytes} bytes"
            )

        image = cv2.imdecode(np.frombuffer(raw, dtype=np.uint8), cv2.IMREAD_COLOR)
        if image is None:
            raise exceptions.image_not_readable("upload")

        return image

    def scan(self, request: ScanRequest) -> ScanResponse:
        """Scan one uploaded image."""
        name, config = self.resolve_configuration(request.preset, request.max_codes_per_frame)
        image = self.decode_image(request.image)

        scanner = BarcodeScanner(
            config,
            backends=self._backends,
            workers=self._settings.decode_workers,
        )

        try:
            with FrameSession() as session:
                outcome = scanner.process_array(image, session)
        except Exception as e:
            logger.error(f"Scan with preset '{name}' failed: {e}", exc_info=True)
            raise exceptions.internal_error("Scan failed") from e

        outcome.raise_for_status()
        logger.info(f"Scan with preset '{name}': {outcome.status.name}, {len(outcome.results)} code(s)")
        return ScanResponse.from_outcome(outcome, preset=name)

    def list_presets(self) -> PresetListResponse:
        """Describe every preset."""
        return PresetListResponse(
            default=self._settings.default_preset,
            presets=[
                PresetSchema.from_configuration(name, ScannerConfiguration.from_preset(name))
                for name in preset_names()
            ],
        )


@router.get("/presets", response_model=PresetListResponse)
def list_presets(settings: Settings = Depends(get_settings)):
    """List the scanner presets and their configuration."""
    controller = ScanController(settings, backends=[])
    return controller.list_presets()


@router.post("", response_model=ScanResponse)
def scan_image(
    request: ScanRequest,
    settings: Settings = Depends(get_settings),
    backends: List[DecodeBackend] = Depends(get_backends),
):
    """
    Decode every barcode in an uploaded image.

    The image is a base64-encoded file (PNG, JPEG, ...). NO_CODES_FOUND is
    a successful response with an empty result list.
    """
    controller = ScanController(settings, backends)
    return controller.scan(request)
