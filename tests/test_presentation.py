"""
==============================================================================
Presentation Tests
==============================================================================

Tests for the text report and the image overlays.

==============================================================================
"""

import numpy as np

from scanfuse.scanner.models import BarcodeResult, Rect, ScanOutcome, ScanStatus
from scanfuse.scanner.overlay import ScannerColors, draw_overlays, overlay_style, truncate_label
from scanfuse.scanner.symbology import Symbology
from scanfuse.utils.report import ScanReportFormatter


def results():
    return (
        BarcodeResult(
            data="ABC-123",
            symbology=Symbology.CODE128,
            location=Rect(x=20, y=100, width=60, height=30),
            format_details="Standard format",
        ),
        BarcodeResult(
            data="https://example.com",
            symbology=Symbology.QR,
            location=Rect(x=120, y=100, width=50, height=50),
            color_inverted=True,
            format_details="QR Code Data:\nType: URL\nURL: https://example.com",
        ),
    )


class TestScanReport:
    """Tests for ScanReportFormatter."""

    def test_success_report(self):
        """Every barcode and the summary are listed."""
        report = ScanReportFormatter().format(
            ScanOutcome(status=ScanStatus.SUCCESS, results=results())
        )

        assert "Successfully found 2 barcode(s):" in report
        assert "Barcode 1:" in report and "Barcode 2:" in report
        assert "Symbology:       Code128" in report
        assert "Location:        (120,100) 50x50" in report
        assert "Color Inverted:  Yes" in report
        assert "Confidence:      1.00" in report
        assert "1D Barcodes found:    1" in report
        assert "2D Barcodes found:    1" in report

    def test_multiline_details_indented(self):
        """Continuation lines of format details stay inside the entry."""
        report = ScanReportFormatter().format(
            ScanOutcome(status=ScanStatus.SUCCESS, results=results())
        )
        assert "Format Details:  QR Code Data:" in report
        assert "                     URL: https://example.com" in report

    def test_no_codes_report(self):
        """NO_CODES_FOUND prints the status line only."""
        report = ScanReportFormatter().format(ScanOutcome(status=ScanStatus.NO_CODES_FOUND))
        assert "No barcodes found in the image" in report
        assert "SUMMARY" not in report

    def test_status_messages(self):
        """Failing statuses have their own message."""
        formatter = ScanReportFormatter()
        assert formatter.status_message(ScanStatus.INVALID_IMAGE) == "Invalid image data"
        assert formatter.status_message(ScanStatus.SESSION_NOT_ACTIVE) == "Frame sequence not started"


class TestOverlay:
    """Tests for draw_overlays."""

    def test_styles(self):
        """1D green, 2D orange, inverted magenta."""
        linear, matrix = results()
        assert overlay_style(linear) == (ScannerColors.GREEN, "1D: ")
        assert overlay_style(matrix) == (ScannerColors.MAGENTA, "2D: [INV] ")

    def test_truncate_label(self):
        """Labels longer than 30 characters end in an ellipsis."""
        label = truncate_label("2D: QR: " + "x" * 40)
        assert len(label) == 30
        assert label.endswith("...")
        assert truncate_label("short") == "short"

    def test_returns_new_image(self):
        """The input image is not modified."""
        image = np.full((240, 320), 200, dtype=np.uint8)
        before = image.copy()

        annotated = draw_overlays(image, results())

        assert np.array_equal(image, before)
        assert annotated.shape == (240, 320, 3)
        assert not np.array_equal(annotated[:, :, 0], before)

    def test_box_drawn_in_result_color(self):
        """The bounding box edge carries the overlay color."""
        image = np.zeros((240, 320, 3), dtype=np.uint8)
        annotated = draw_overlays(image, results()[:1])
        assert tuple(annotated[115, 20]) == ScannerColors.GREEN

    def test_out_of_bounds_skipped(self):
        """Results outside the image are not drawn."""
        image = np.zeros((240, 320, 3), dtype=np.uint8)
        outside = BarcodeResult(
            data="X", symbology=Symbology.CODE39, location=Rect(x=300, y=200, width=100, height=100)
        )
        annotated = draw_overlays(image, [outside])
        assert not annotated[100:, :].any()
