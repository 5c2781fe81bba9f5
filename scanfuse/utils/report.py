"""
==============================================================================
Scan Report Module
==============================================================================

Plain-text report for one scanned frame.

Report Contents:
----------------
- Status line
- Per barcode: number, symbology, data, format details, location,
  colour-inverted flag and confidence
- Summary: 1D vs 2D codes, inverted codes

==============================================================================
"""

from __future__ import annotations

from typing import List

from scanfuse.scanner.models import BarcodeResult, ScanOutcome, ScanStatus


STATUS_MESSAGES = {
    ScanStatus.SUCCESS: "Scan completed successfully",
    ScanStatus.NO_CODES_FOUND: "No barcodes found in the image",
    ScanStatus.SESSION_NOT_ACTIVE: "Frame sequence not started",
    ScanStatus.INVALID_IMAGE: "Invalid image data",
}

class ScanReportFormatter:
    """
    Formatter for scan outcomes.

    Example:
        >>> formatter = ScanReportFormatter()
        >>> print(formatter.format(outcome))
        ================================================================
        SCAN RESULTS
        ...
    """

    WIDTH = 64

    def format(self, outcome: ScanOutcome) -> str:
        """Render the full report."""
        separator = "=" * self.WIDTH
        lines = [
            separator,
            "SCAN RESULTS",
            separator,
            "",
            f"Status:          {outcome.status.name} ({self.status_message(outcome.status)})",
            "",
        ]

        if outcome.status is ScanStatus.SUCCESS:
            lines.append(f"Successfully found {len(outcome.results)} barcode(s):")
            lines.append("")
            for number, result in enumerate(outcome.results, start=1):
                lines.extend(self._format_result(number, result))

            counts = outcome.counts()
            lines.extend([
                separator,
                "SUMMARY",
                separator,
                "",
                f"1D Barcodes found:    {counts['1d']}",
                f"2D Barcodes found:    {counts['2d']}",
                f"Color inverted:       {counts['inverted']}",
                "",
            ])

        lines.append(separator)
        return "\n".join(lines)

    @staticmethod
    def status_message(status: ScanStatus) -> str:
        return STATUS_MESSAGES.get(status, "Unknown error occurred")

    @staticmethod
    def _format_result(number: int, result: BarcodeResult) -> List[str]:
        rect = result.location
        lines = [
            f"Barcode {number}:",
            f"    Symbology:       {result.symbology_name}",
            f"    Data:            {result.data}",
        ]

        details = result.format_details.splitlines() or [""]
        lines.append(f"    Format Details:  {details[0]}")
        lines.extend(f"                     {line}" for line in details[1:])

        lines.extend([
            f"    Location:        ({rect.x},{rect.y}) {rect.width}x{rect.height}",
            f"    Color Inverted:  {'Yes' if result.color_inverted else 'No'}",
            f"    Confidence:      {result.confidence:.2f}",
            "",
        ])
        return lines
