"""
==============================================================================
Scan Overlay Module
==============================================================================

Draws scan results onto a copy of the input image.

Visual feedback:
----------------
- GREEN: 1D (linear) barcode
- ORANGE: 2D (matrix) barcode
- MAGENTA: barcode decoded from a colour-inverted variant
- Numbered marker next to each code, truncated "1D: Code128: ..." label
- Header with the total count and the 1D / 2D / inverted split

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Sequence, Tuple

import cv2
import numpy as np

from .models import BarcodeResult


# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# COLOR CONSTANTS (BGR format for OpenCV)
# =============================================================================

class ScannerColors:
    """
    Color constants for barcode detection visualization.

    All colors are in BGR format (OpenCV standard).
    """

    # Linear codes
    GREEN = (0, 255, 0)

    # Matrix codes
    ORANGE = (0, 165, 255)

    # Decoded from an inverted variant
    MAGENTA = (255, 0, 255)

    # Header and labels
    HEADER_BG = (40, 40, 40)
    TEXT_BLACK = (0, 0, 0)
    TEXT_WHITE = (255, 255, 255)
    TEXT_GREY = (200, 200, 200)


LABEL_MAX_LENGTH = 30
HEADER_HEIGHT = 80
CORNER_SIZE = 15
MARKER_RADIUS = 20


def overlay_style(result: BarcodeResult) -> Tuple[Tuple[int, int, int], str]:
    """Color and label prefix for one result."""
    if result.is_2d:
        color, prefix = ScannerColors.ORANGE, "2D: "
    else:
        color, prefix = ScannerColors.GREEN, "1D: "

    if result.color_inverted:
        color, prefix = ScannerColors.MAGENTA, prefix + "[INV] "

    return color, prefix


def truncate_label(text: str, limit: int = LABEL_MAX_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


def draw_overlays(image: np.ndarray, results: Sequence[BarcodeResult]) -> np.ndarray:
    """
    Render results onto a BGR copy of image.

    Results whose location is empty or falls outside the image are skipped.

    Args:
        image: Input image (grayscale, BGR or BGRA); not modified
        results: Scan results in report order

    Returns:
        New BGR image with boxes, labels, markers and the summary header
    """
    if image.ndim == 2:
        canvas = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    elif image.shape[2] == 4:
        canvas = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    else:
        canvas = image.copy()

    height, width = canvas.shape[:2]

    for number, result in enumerate(results, start=1):
        x, y, w, h = result.location.as_tuple()
        if w <= 0 or h <= 0:
            logger.debug(f"Skipping barcode {number} with invalid location")
            continue
        if x < 0 or y < 0 or x + w > width or y + h > height:
            logger.debug(f"Skipping barcode {number} with out-of-bounds location")
            continue

        color, prefix = overlay_style(result)
        label = truncate_label(f"{prefix}{result.symbology_name}: {result.data}")
        _draw_colored_box(canvas, (x, y, w, h), label, color)
        _draw_marker(canvas, (x, y), number, color)

    _draw_summary_header(canvas, results)
    return canvas


def _draw_colored_box(
    frame: np.ndarray,
    rect: Tuple[int, int, int, int],
    label: str,
    color: tuple,
    thickness: int = 3
) -> None:
    """
    Draw a colored bounding box with corner accents and a label.

    Args:
        frame: OpenCV image to draw on
        rect: (x, y, width, height) of the barcode
        label: Text label to display
        color: BGR color tuple (e.g., ScannerColors.GREEN)
        thickness: Line thickness for the box
    """
    x, y, w, h = rect
    height, width = frame.shape[:2]

    cv2.rectangle(frame, (x, y), (x + w, y + h), color, thickness)

    # Corner accents
    for cx, cy, dx, dy in (
        (x, y, 1, 1), (x + w, y, -1, 1), (x, y + h, 1, -1), (x + w, y + h, -1, -1)
    ):
        cv2.line(frame, (cx, cy), (cx + dx * CORNER_SIZE, cy), color, 5)
        cv2.line(frame, (cx, cy), (cx, cy + dy * CORNER_SIZE), color, 5)

    font = cv2.FONT_HERSHEY_SIMPLEX
    font_scale = 0.7
    font_thickness = 2

    label_size, _ = cv2.getTextSize(label, font, font_scale, font_thickness)
    text_w, text_h = label_size

    # Above the box, or below it when too close to the top
    label_y = y - 10 if y > text_h + 10 else y + h + text_h + 10
    label_x = max(0, min(x, width - text_w))
    label_y = max(text_h, min(label_y, height - 10))

    top = max(0, label_y - text_h - 5)
    left = max(0, label_x - 5)
    bottom = min(height, label_y + 5)
    right = min(width, label_x + text_w + 5)
    if bottom > top and right > left:
        region = frame[top:bottom, left:right]
        tint = np.full_like(region, color, dtype=np.uint8)
        frame[top:bottom, left:right] = cv2.addWeighted(region, 0.7, tint, 0.3, 0)

    cv2.putText(
        frame, label,
        (label_x, label_y),
        font, font_scale, ScannerColors.TEXT_WHITE, font_thickness
    )


def _draw_marker(frame: np.ndarray, origin: Tuple[int, int], number: int, color: tuple) -> None:
    """Filled numbered circle up-left of the box, clamped inside the frame."""
    height, width = frame.shape[:2]
    margin = MARKER_RADIUS + 5
    cx = max(margin, min(origin[0] - MARKER_RADIUS, width - margin))
    cy = max(margin, min(origin[1] - MARKER_RADIUS, height - margin))

    cv2.circle(frame, (cx, cy), MARKER_RADIUS, color, cv2.FILLED)
    cv2.circle(frame, (cx, cy), MARKER_RADIUS, ScannerColors.TEXT_BLACK, 2)

    text = str(number)
    (text_w, text_h), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, 0.8, 2)
    cv2.putText(
        frame, text,
        (cx - text_w // 2, cy + text_h // 2),
        cv2.FONT_HERSHEY_SIMPLEX, 0.8, ScannerColors.TEXT_BLACK, 2
    )


def _draw_summary_header(frame: np.ndarray, results: Sequence[BarcodeResult]) -> None:
    count_2d = sum(1 for r in results if r.is_2d)
    count_1d = len(results) - count_2d
    count_inverted = sum(1 for r in results if r.color_inverted)

    band = frame[0:min(HEADER_HEIGHT, frame.shape[0]), :]
    dark = np.full_like(band, ScannerColors.HEADER_BG, dtype=np.uint8)
    frame[0:band.shape[0], :] = cv2.addWeighted(band, 0.3, dark, 0.7, 0)

    cv2.putText(
        frame, f"SCANFUSE | Found: {len(results)} codes",
        (10, 25), cv2.FONT_HERSHEY_SIMPLEX, 0.8, ScannerColors.TEXT_WHITE, 2
    )
    cv2.putText(
        frame, f"1D: {count_1d} | 2D: {count_2d} | Inverted: {count_inverted}",
        (10, 55), cv2.FONT_HERSHEY_SIMPLEX, 0.6, ScannerColors.TEXT_GREY, 1
    )
