"""
==============================================================================
Preprocessing Pipeline Module
==============================================================================

Deterministic image-enhancement chain producing the variants fed to the
decode backends.

Chain (LOW_RESOLUTION profile):
-------------------------------
1. Grayscale conversion
2. Bicubic upscale x2
3. CLAHE (clip limit 3.0, 8x8 tiles)
4. Non-local-means denoise
5. Unsharp mask: denoised + 0.7 * (denoised - gaussian(denoised, sigma=3))
6. Adaptive gaussian threshold (block 21, C 5) + 3x3 closing
7. Re-sample at scales 1.0 / 1.5 / 2.0, plus an inverted copy of the
   pre-threshold image per scale when an enabled symbology asks for it

The PASSTHROUGH profile skips steps 2-6: the grayscale image is both the
decoded image and the pre-threshold image.

Every step is a pure OpenCV call on the previous step's output, so the
same frame and configuration always yield bit-identical variants.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .configuration import ConfigurationSnapshot, EnhancementProfile
from .models import ImageFrame, ImageVariant, VariantTag, to_uint8


# Module logger
logger = logging.getLogger(__name__)


class OpenCVImageOps:
    """
    Primitive image operations consumed by the pipeline.

    Thin wrappers over OpenCV so the pipeline reads as a list of steps and
    tests can substitute a recording implementation.
    """

    def to_gray(self, pixels: np.ndarray, channels: int) -> np.ndarray:
        if pixels.dtype != np.uint8:
            pixels = to_uint8(pixels)
        if channels == 3:
            return cv2.cvtColor(pixels, cv2.COLOR_BGR2GRAY)
        if channels == 4:
            return cv2.cvtColor(pixels, cv2.COLOR_BGRA2GRAY)
        if pixels.ndim == 3:
            return pixels[:, :, 0].copy()
        return pixels.copy()

    def resize(self, image: np.ndarray, factor: float, interpolation: int) -> np.ndarray:
        if factor == 1.0:
            return image.copy()
        return cv2.resize(image, None, fx=factor, fy=factor, interpolation=interpolation)

    def equalize(self, image: np.ndarray, clip_limit: float, tiles: Tuple[int, int]) -> np.ndarray:
        clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=tiles)
        return clahe.apply(image)

    def denoise(self, image: np.ndarray) -> np.ndarray:
        return cv2.fastNlMeansDenoising(image, None, 10, 7, 21)

    def unsharp(self, image: np.ndarray, sigma: float, amount: float) -> np.ndarray:
        blurred = cv2.GaussianBlur(image, (0, 0), sigma)
        # uint8 subtraction saturates at 0
        mask = cv2.subtract(image, blurred)
        return cv2.addWeighted(image, 1.0, mask, amount, 0)

    def threshold(self, image: np.ndarray, block_size: int, offset: int) -> np.ndarray:
        return cv2.adaptiveThreshold(
            image, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C, cv2.THRESH_BINARY,
            block_size, offset,
        )

    def close(self, image: np.ndarray, kernel_size: int) -> np.ndarray:
        kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (kernel_size, kernel_size))
        return cv2.morphologyEx(image, cv2.MORPH_CLOSE, kernel)

    def invert(self, image: np.ndarray) -> np.ndarray:
        return cv2.bitwise_not(image)


class PreprocessingPipeline:
    """
    Stateless enhancement chain: enhance(frame, config) -> variants.

    Never fails on a non-empty frame; emptiness is rejected by the scanner
    before the pipeline runs.

    Example:
        >>> pipeline = PreprocessingPipeline()
        >>> variants = pipeline.enhance(frame, config.snapshot())
        >>> [str(v.tag) for v in variants]
        ['x1', 'x1.5', 'x2', 'x1 inverted', 'x1.5 inverted', 'x2 inverted']
    """

    UPSCALE_FACTOR = 2.0
    CLAHE_CLIP_LIMIT = 3.0
    CLAHE_TILES = (8, 8)
    UNSHARP_SIGMA = 3.0
    UNSHARP_AMOUNT = 0.7
    THRESHOLD_BLOCK_SIZE = 21
    THRESHOLD_OFFSET = 5
    CLOSE_KERNEL_SIZE = 3
    SCALES: Sequence[float] = (1.0, 1.5, 2.0)

    def __init__(self, ops: Optional[OpenCVImageOps] = None) -> None:
        self._ops = ops or OpenCVImageOps()

    def enhance(
        self,
        frame: ImageFrame,
        config: ConfigurationSnapshot,
    ) -> List[ImageVariant]:
        """
        Produce the variant matrix for one frame.

        Args:
            frame: Input frame (not mutated)
            config: Frozen configuration selecting profile and inversion

        Returns:
            Non-inverted variants for every scale, followed by the inverted
            variants when any enabled symbology requests inversion
        """
        ops = self._ops
        gray = ops.to_gray(frame.pixels, frame.channels)

        if config.profile is EnhancementProfile.LOW_RESOLUTION:
            pre_threshold, decoded = self._enhance_low_resolution(gray)
            upscale = self.UPSCALE_FACTOR
        else:
            pre_threshold, decoded = gray, gray
            upscale = 1.0

        variants = [
            ImageVariant(
                image=ops.resize(decoded, scale, cv2.INTER_LINEAR),
                tag=VariantTag(scale=scale, inverted=False),
                source_scale=upscale * scale,
            )
            for scale in self.SCALES
        ]

        if config.any_inversion:
            variants.extend(
                ImageVariant(
                    image=ops.invert(ops.resize(pre_threshold, scale, cv2.INTER_LINEAR)),
                    tag=VariantTag(scale=scale, inverted=True),
                    source_scale=upscale * scale,
                )
                for scale in self.SCALES
            )

        logger.debug(
            f"Preprocessing ({config.profile.value}) produced {len(variants)} variant(s) "
            f"from {frame.width}x{frame.height}"
        )
        return variants

    def _enhance_low_resolution(self, gray: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Steps 2-6; returns (pre-threshold image, closed binary image)."""
        ops = self._ops
        upscaled = ops.resize(gray, self.UPSCALE_FACTOR, cv2.INTER_CUBIC)
        equalized = ops.equalize(upscaled, self.CLAHE_CLIP_LIMIT, self.CLAHE_TILES)
        denoised = ops.denoise(equalized)
        sharpened = ops.unsharp(denoised, self.UNSHARP_SIGMA, self.UNSHARP_AMOUNT)
        binary = ops.threshold(sharpened, self.THRESHOLD_BLOCK_SIZE, self.THRESHOLD_OFFSET)
        closed = ops.close(binary, self.CLOSE_KERNEL_SIZE)
        return sharpened, closed
