"""
==============================================================================
CLI Tests
==============================================================================

Tests for the scanfuse-scan command.

==============================================================================
"""

import json

import cv2
import pytest

from scanfuse.cli import main

from conftest import FakeBackend


@pytest.fixture
def image_path(bgr_image, tmp_path):
    path = tmp_path / "label.png"
    cv2.imwrite(str(path), bgr_image)
    return path


class TestCli:
    """Tests for exit codes and output."""

    def test_report(self, image_path, general_backend, capsys):
        """A successful scan prints the report and exits 0."""
        code = main([str(image_path)], backends=[general_backend])

        out = capsys.readouterr().out
        assert code == 0
        assert "SCAN RESULTS" in out
        assert "https://example.com" in out

    def test_json_output(self, image_path, general_backend, capsys):
        """--json prints the API response shape."""
        code = main([str(image_path), "--json", "--preset", "low-resolution"], backends=[general_backend])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["preset"] == "low-resolution"
        assert data["count"] == 2

    def test_no_codes_exit_zero(self, image_path, capsys):
        """NO_CODES_FOUND is still a successful run."""
        assert main([str(image_path)], backends=[FakeBackend()]) == 0
        assert "No barcodes found" in capsys.readouterr().out

    def test_overlay_written(self, image_path, general_backend, tmp_path):
        """--output writes the annotated image."""
        output = tmp_path / "annotated.png"
        assert main([str(image_path), "--output", str(output)], backends=[general_backend]) == 0
        assert cv2.imread(str(output)) is not None

    def test_missing_argument(self, capsys):
        """No image path exits with 1."""
        with pytest.raises(SystemExit) as exit_info:
            main([])
        assert exit_info.value.code == 1

    def test_unreadable_image(self, tmp_path, general_backend, capsys):
        """Missing files exit with 1."""
        assert main([str(tmp_path / "missing.png")], backends=[general_backend]) == 1
        assert "Could not read the image" in capsys.readouterr().err

    def test_unknown_preset(self, image_path, general_backend, capsys):
        """Unknown presets exit with 1."""
        assert main([str(image_path), "--preset", "warehouse"], backends=[general_backend]) == 1
        assert "Unknown preset" in capsys.readouterr().err
