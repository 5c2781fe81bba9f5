"""
==============================================================================
Barcode Scanner Tests
==============================================================================

End-to-end tests of process_frame with in-memory decode backends.

==============================================================================
"""

import cv2
import numpy as np
import pytest

from scanfuse.core import AppException
from scanfuse.scanner import (
    BarcodeScanner,
    FrameSession,
    ImageFrame,
    ScannerConfiguration,
    ScanStatus,
    Symbology,
)

from conftest import FakeBackend, hit


@pytest.fixture
def scanner(general_backend) -> BarcodeScanner:
    return BarcodeScanner(ScannerConfiguration.shipping_label(), backends=[general_backend])


class TestStatusGates:
    """Tests for the early, failing statuses."""

    def test_session_not_active(self, scanner, frame, general_backend):
        """An idle session is refused before any decode."""
        outcome = scanner.process_frame(frame, FrameSession())

        assert outcome.status is ScanStatus.SESSION_NOT_ACTIVE
        assert outcome.results == ()
        assert general_backend.calls == []

    def test_session_checked_before_image(self, scanner, empty_frame):
        """An idle session wins over an invalid image."""
        outcome = scanner.process_frame(empty_frame, FrameSession())
        assert outcome.status is ScanStatus.SESSION_NOT_ACTIVE

    def test_ended_session(self, scanner, frame):
        """A session that was started and ended is idle again."""
        session = FrameSession()
        session.start()
        session.end()
        assert scanner.process_frame(frame, session).status is ScanStatus.SESSION_NOT_ACTIVE

    def test_invalid_image(self, scanner, empty_frame, active_session, general_backend):
        """An empty pixel buffer is refused even inside a session."""
        outcome = scanner.process_frame(empty_frame, active_session)

        assert outcome.status is ScanStatus.INVALID_IMAGE
        assert general_backend.calls == []

    def test_none_image(self, scanner, active_session):
        """A missing image maps to INVALID_IMAGE."""
        assert scanner.process_array(None, active_session).status is ScanStatus.INVALID_IMAGE

    def test_raise_for_status(self, scanner, frame, empty_frame, active_session):
        """Failing statuses convert into AppException codes."""
        with pytest.raises(AppException) as not_active:
            scanner.process_frame(frame, FrameSession()).raise_for_status()
        assert not_active.value.code == "SESSION_NOT_ACTIVE"

        with pytest.raises(AppException) as invalid:
            scanner.process_frame(empty_frame, active_session).raise_for_status()
        assert invalid.value.code == "INVALID_IMAGE"


class TestProcessFrame:
    """Tests for successful frames."""

    def test_success(self, scanner, frame, active_session):
        """Codes found on every variant are reported once each."""
        outcome = scanner.process_frame(frame, active_session)

        assert outcome.status is ScanStatus.SUCCESS
        assert outcome.ok
        assert [r.symbology for r in outcome.results] == [Symbology.QR, Symbology.EAN13]
        assert outcome.results[0].location.as_tuple() == (20, 30, 50, 50)
        assert outcome.results[0].color_inverted is False

    def test_results_are_parsed(self, scanner, frame, active_session):
        """Format details are filled in per symbology."""
        qr, ean = scanner.process_frame(frame, active_session).results

        assert "Type: URL" in qr.format_details
        assert "Validation: Valid" in ean.format_details
        assert ean.data == "036000291452"

    def test_counts(self, scanner, frame, active_session):
        """The outcome tallies 1D, 2D and inverted codes."""
        counts = scanner.process_frame(frame, active_session).counts()
        assert counts == {"total": 2, "1d": 1, "2d": 1, "inverted": 0}

    def test_no_codes_found(self, frame, active_session):
        """A clean run without detections is a status, not an error."""
        scanner = BarcodeScanner(
            ScannerConfiguration.shipping_label(), backends=[FakeBackend()]
        )
        outcome = scanner.process_frame(frame, active_session)

        assert outcome.status is ScanStatus.NO_CODES_FOUND
        assert outcome.ok
        outcome.raise_for_status()

    def test_nothing_enabled(self, frame, active_session, general_backend):
        """With no symbology enabled no backend runs."""
        scanner = BarcodeScanner(ScannerConfiguration.default(), backends=[general_backend])
        outcome = scanner.process_frame(frame, active_session)

        assert outcome.status is ScanStatus.NO_CODES_FOUND
        assert general_backend.calls == []

    def test_configuration_changes_apply_next_frame(self, scanner, frame, active_session):
        """Changing the configuration between frames changes the results."""
        assert len(scanner.process_frame(frame, active_session).results) == 2

        scanner.configuration.set_symbology_enabled(Symbology.QR, False)
        results = scanner.process_frame(frame, active_session).results

        assert [r.symbology for r in results] == [Symbology.EAN13]

    def test_result_cap(self, frame, active_session):
        """Results are capped by max_codes_per_frame."""
        config = ScannerConfiguration.shipping_label()
        config.set_max_codes_per_frame(1)
        scanner = BarcodeScanner(config, backends=[FakeBackend(
            hits=_many_hits(5)
        )])
        assert len(scanner.process_frame(frame, active_session).results) == 1

    def test_failing_backend_does_not_abort(self, general_backend, frame, active_session):
        """A crashing backend degrades to fewer detections."""
        scanner = BarcodeScanner(
            ScannerConfiguration.shipping_label(),
            backends=[FakeBackend(backend_id="broken", error=OSError("libdmtx missing")), general_backend],
        )
        assert scanner.process_frame(frame, active_session).status is ScanStatus.SUCCESS

    def test_threaded_scanner(self, general_backend, frame, active_session):
        """A worker pool gives the same results."""
        scanner = BarcodeScanner(
            ScannerConfiguration.low_resolution(), backends=[general_backend], workers=3
        )
        outcome = scanner.process_frame(frame, active_session)
        assert [r.data for r in outcome.results] == ["https://example.com", "036000291452"]

    def test_low_resolution_geometry_in_input_pixels(self, general_backend, frame, active_session):
        """Geometry from the x2 enhanced image maps back to input pixels."""
        scanner = BarcodeScanner(ScannerConfiguration.low_resolution(), backends=[general_backend])
        qr = scanner.process_frame(frame, active_session).results[0]
        assert qr.location.as_tuple() == (10, 15, 25, 25)

    @pytest.mark.parametrize("dtype", [np.uint16, np.float32, np.float64])
    def test_non_uint8_buffer(self, general_backend, active_session, dtype):
        """Deep or floating-point images run through the full enhancement chain."""
        scanner = BarcodeScanner(ScannerConfiguration.low_resolution(), backends=[general_backend])
        image = np.full((40, 40, 3), 100, dtype=dtype)
        image[10:30, 10:30] = 4000 if dtype is np.uint16 else 0.5

        outcome = scanner.process_array(image, active_session)
        assert outcome.status is ScanStatus.SUCCESS
        assert general_backend.calls
        assert general_backend.calls[0]["shape"] == (80, 80)

    def test_last_results(self, scanner, frame, active_session):
        """The scanner remembers the last result list."""
        outcome = scanner.process_frame(frame, active_session)
        assert scanner.last_results == list(outcome.results)

    def test_frame_not_mutated(self, scanner, frame, active_session):
        """process_frame never writes to the input pixels."""
        before = frame.pixels.copy()
        scanner.process_frame(frame, active_session)
        assert np.array_equal(frame.pixels, before)


class TestScanImage:
    """Tests for file-based scanning."""

    def test_scan_image(self, scanner, bgr_image, tmp_path):
        """Images are read with OpenCV and scanned in their own session."""
        path = tmp_path / "label.png"
        cv2.imwrite(str(path), bgr_image)

        outcome = scanner.scan_image(path)
        assert outcome.status is ScanStatus.SUCCESS

    def test_missing_image(self, scanner, tmp_path):
        """Missing files raise IMAGE_NOT_READABLE."""
        with pytest.raises(AppException) as error:
            scanner.scan_image(tmp_path / "missing.png")
        assert error.value.code == "IMAGE_NOT_READABLE"

    def test_undecodable_image(self, scanner, tmp_path):
        """Files OpenCV cannot decode raise IMAGE_NOT_READABLE."""
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image")
        with pytest.raises(AppException):
            scanner.scan_image(path)


class TestImageFrame:
    """Tests for ImageFrame derivation."""

    def test_from_array(self, bgr_image):
        """Dimensions, stride and size come from the array."""
        frame = ImageFrame.from_array(bgr_image)
        assert (frame.width, frame.height, frame.channels) == (160, 120, 3)
        assert frame.row_bytes == 480
        assert frame.memory_size == 480 * 120

    def test_from_array_clones(self, gray_image):
        """The frame owns a copy of the buffer."""
        frame = ImageFrame.from_array(gray_image)
        gray_image[0, 0] = 7
        assert not np.shares_memory(frame.pixels, gray_image)

    def test_empty(self):
        """None and zero-sized arrays are empty frames."""
        assert ImageFrame.from_array(None).is_empty
        assert ImageFrame.from_array(np.zeros((10, 0), dtype=np.uint8)).is_empty


def _many_hits(count):
    return [hit(f"CODE-{i}", "Code128", rect=(i * 10, 0, 8, 8)) for i in range(count)]

    def test_non_uint8_stretched(self):
        """Other depths are min-max stretched into uint8."""
        image = np.array([[0, 1000], [2000, 4000]], dtype=np.uint16)
        frame = ImageFrame.from_array(image)
        assert frame.pixels.dtype == np.uint8
        assert frame.pixels[0, 0] == 0
        assert frame.pixels[1, 1] == 255

    def test_nan_pixels(self):
        """NaN and infinite samples become zero before stretching."""
        image = np.array([[np.nan, 1.0], [np.inf, 0.5]], dtype=np.float64)
        frame = ImageFrame.from_array(image)
        assert frame.pixels.dtype == np.uint8
        assert frame.pixels[0, 0] == 0
        assert frame.pixels[0, 1] == 255
