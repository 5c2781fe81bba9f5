"""
==============================================================================
Scanner Models Module
==============================================================================

Pydantic models flowing through the scan pipeline.

Data Flow:
----------
    ImageFrame -> ImageVariant -> RawDetection -> BarcodeResult -> ScanOutcome

All models except ImageFrame are frozen; ImageFrame is never mutated by
the pipeline (clones are taken instead).

==============================================================================
"""

from __future__ import annotations

from enum import IntEnum
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from scanfuse.core import exceptions

from .symbology import Symbology


# =============================================================================
# GEOMETRY
# =============================================================================

class Point(BaseModel):
    """Pixel coordinate."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Rect(BaseModel):
    """Axis-aligned rectangle in input-image pixels."""

    model_config = ConfigDict(frozen=True)

    x: int = 0
    y: int = 0
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)

    @classmethod
    def from_points(cls, points: Sequence[Point]) -> "Rect":
        """Bounding box of a polygon; empty rect for no points."""
        if not points:
            return cls()
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        left, top = int(round(min(xs))), int(round(min(ys)))
        return cls(
            x=left,
            y=top,
            width=int(round(max(xs))) - left,
            height=int(round(max(ys))) - top,
        )

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return self.x, self.y, self.width, self.height


# =============================================================================
# IMAGES
# =============================================================================

class ImageFrame(BaseModel):
    """
    Input image handed to the scanner.

    Attributes:
        width: Pixel columns
        height: Pixel rows
        channels: 1 (grayscale), 3 (BGR) or 4 (BGRA)
        pixels: uint8 buffer shaped (height, width[, channels])
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    width: int = Field(ge=0)
    height: int = Field(ge=0)
    channels: int = Field(ge=1, le=4)
    pixels: np.ndarray

    @classmethod
    def from_array(cls, image: Optional[np.ndarray]) -> "ImageFrame":
        """
        Describe an OpenCV image, cloning its buffer.

        A None or zero-sized array produces an empty frame, which the
        scanner reports as INVALID_IMAGE. Buffers of any other depth
        (uint16, float, bool) are stretched to the full uint8 range.
        """
        if image is None:
            image = np.zeros((0, 0), dtype=np.uint8)

        pixels = np.array(image, copy=True)
        if pixels.dtype != np.uint8 and pixels.size:
            pixels = to_uint8(pixels)
        height = pixels.shape[0] if pixels.ndim >= 1 else 0
        width = pixels.shape[1] if pixels.ndim >= 2 else 0
        channels = pixels.shape[2] if pixels.ndim == 3 else 1

        return cls(width=width, height=height, channels=channels, pixels=pixels)

    @property
    def row_bytes(self) -> int:
        return self.channels * self.width

    @property
    def memory_size(self) -> int:
        return self.row_bytes * self.height

    @property
    def is_empty(self) -> bool:
        return self.pixels.size == 0 or self.width == 0 or self.height == 0

    def __repr__(self) -> str:
        return (
            f"ImageFrame({self.width}x{self.height}, "
            f"channels={self.channels}, bytes={self.memory_size})"
        )


class VariantTag(BaseModel):
    """Identifies how a variant was derived from the input frame."""

    model_config = ConfigDict(frozen=True)

    scale: float = 1.0
    inverted: bool = False

    def __str__(self) -> str:
        return f"x{self.scale:g}{' inverted' if self.inverted else ''}"


class ImageVariant(BaseModel):
    """
    Single-channel image fed to the decode backends.

    Attributes:
        image: uint8 grayscale/binary pixels
        tag: Scale and inversion tags
        source_scale: Factor from input-frame pixels to variant pixels
            (enhancement upscale times the variant scale)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    image: np.ndarray
    tag: VariantTag
    source_scale: float = Field(default=1.0, gt=0)

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])


# =============================================================================
# DETECTIONS AND RESULTS
# =============================================================================

class RawDetection(BaseModel):
    """
    One backend hit, before aggregation.

    The polygon is expressed in input-frame coordinates; an empty polygon
    means the backend reported no usable geometry.
    """

    model_config = ConfigDict(frozen=True)

    payload: str
    symbology: Symbology
    polygon: Tuple[Point, ...] = ()
    source_backend: str
    variant: VariantTag = Field(default_factory=VariantTag)

    @property
    def bounding_rect(self) -> Rect:
        return Rect.from_points(self.polygon)

    @property
    def has_geometry(self) -> bool:
        return len(self.polygon) >= 2 and not self.bounding_rect.is_empty

    def rescaled(self, factor: float) -> "RawDetection":
        """Copy with every polygon point divided by factor."""
        if factor == 1.0 or not self.polygon:
            return self
        polygon = tuple(Point(x=p.x / factor, y=p.y / factor) for p in self.polygon)
        return self.model_copy(update={"polygon": polygon})


class BarcodeResult(BaseModel):
    """Final, de-duplicated code reported to the caller."""

    model_config = ConfigDict(frozen=True)

    data: str
    symbology: Symbology
    location: Rect = Field(default_factory=Rect)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    color_inverted: bool = False
    format_details: str = ""

    @property
    def symbology_name(self) -> str:
        return self.symbology.display_name

    @property
    def is_2d(self) -> bool:
        return self.symbology.is_matrix


class ScanStatus(IntEnum):
    """Outcome of BarcodeScanner.process_frame."""

    SUCCESS = 0
    NO_CODES_FOUND = 1
    SESSION_NOT_ACTIVE = 2
    INVALID_IMAGE = 3

    @property
    def is_failure(self) -> bool:
        return self in (ScanStatus.SESSION_NOT_ACTIVE, ScanStatus.INVALID_IMAGE)


class ScanOutcome(BaseModel):
    """Status code plus the results of one frame."""

    model_config = ConfigDict(frozen=True)

    status: ScanStatus
    results: Tuple[BarcodeResult, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.status.is_failure

    def raise_for_status(self) -> "ScanOutcome":
        """
        Raise the AppException matching a failing status.

        Returns:
            self, for chaining, when the status is not a failure
        """
        if self.status is ScanStatus.SESSION_NOT_ACTIVE:
            raise exceptions.session_not_active()
        if self.status is ScanStatus.INVALID_IMAGE:
            raise exceptions.invalid_image("Empty or zero-sized pixel buffer")
        return self

    def counts(self) -> dict:
        """1D / 2D / inverted tallies used by reports and overlays."""
        count_2d = sum(1 for r in self.results if r.is_2d)
        return {
            "total": len(self.results),
            "1d": len(self.results) - count_2d,
            "2d": count_2d,
            "inverted": sum(1 for r in self.results if r.color_inverted),
        }


def to_uint8(pixels: np.ndarray) -> np.ndarray:
    """Min-max stretch of a non-uint8 buffer into 0..255; NaN and inf become 0."""
    values = np.nan_to_num(pixels.astype(np.float32), nan=0.0, posinf=0.0, neginf=0.0)
    return cv2.normalize(values, None, 0, 255, cv2.NORM_MINMAX, dtype=cv2.CV_8U)


def polygon_from_rect(
    left: float, top: float, width: float, height: float
) -> List[Point]:
    """Corner points (clockwise from top-left) of a rectangle."""
    return [
        Point(x=left, y=top),
        Point(x=left + width, y=top),
        Point(x=left + width, y=top + height),
        Point(x=left, y=top + height),
    ]
