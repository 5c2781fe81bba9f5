"""
==============================================================================
Command-Line Scanner
==============================================================================

Scan one image file and print the report.

Usage:
------
    scanfuse-scan label.png
    scanfuse-scan label.png --preset low-resolution --output annotated.jpg
    scanfuse-scan label.png --json

Exit Codes:
-----------
    0  pipeline ran (codes found or not)
    1  missing argument, unreadable image, unknown preset, failing status

==============================================================================
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import cv2

from scanfuse import __version__
from scanfuse.config import configure_logging, get_settings
from scanfuse.core import AppException
from scanfuse.scanner import BarcodeScanner, FrameSession, ScannerConfiguration, preset_names
from scanfuse.scanner.backends import DecodeBackend, default_backends
from scanfuse.scanner.overlay import draw_overlays
from scanfuse.schemas.scan import ScanResponse
from scanfuse.utils.report import ScanReportFormatter


# Module logger
logger = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser exiting with status 1 on usage errors."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="scanfuse-scan",
        description="Decode barcodes and 2D codes from an image file.",
    )
    parser.add_argument("image", type=Path, help="Path of the image to scan")
    parser.add_argument(
        "--preset",
        help=f"Scanner preset ({', '.join(preset_names())}); "
             "defaults to the DEFAULT_PRESET setting",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Write an annotated copy of the image to this path",
    )
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    backends: Optional[List[DecodeBackend]] = None,
) -> int:
    """
    Run one scan.

    Args:
        argv: Command-line arguments (default: sys.argv[1:])
        backends: Decode backends (default: configured from settings)

    Returns:
        Process exit code
    """
    settings = get_settings()
    configure_logging(settings)

    args = build_parser().parse_args(argv)

    preset = args.preset or settings.default_preset
    try:
        config = ScannerConfiguration.from_preset(preset)
    except KeyError:
        print(f"Unknown preset '{preset}'. Choose from: {', '.join(preset_names())}", file=sys.stderr)
        return 1

    try:
        image = BarcodeScanner.load_image(args.image)
    except AppException as e:
        print(e.message, file=sys.stderr)
        return 1

    if backends is None:
        backends = default_backends(
            matrix_timeout_ms=settings.matrix_timeout_ms,
            matrix_region_cap=settings.matrix_region_cap,
        )

    scanner = BarcodeScanner(config, backends=backends, workers=settings.decode_workers)

    with FrameSession() as session:
        outcome = scanner.process_array(image, session)

    if args.json:
        print(json.dumps(ScanResponse.from_outcome(outcome, preset=preset).model_dump(), indent=2))
    else:
        print(ScanReportFormatter().format(outcome))

    if args.output:
        annotated = draw_overlays(image, outcome.results)
        if not cv2.imwrite(str(args.output), annotated):
            logger.error(f"Failed to save output image: {args.output}")
            return 1
        logger.info(f"Output image with overlays saved: {args.output}")

    return 0 if outcome.ok else 1


if __name__ == "__main__":
    sys.exit(main())
