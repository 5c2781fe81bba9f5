"""
==============================================================================
Format Parser Module
==============================================================================

Symbology-specific interpretation of decoded payloads.

Parsers:
--------
- GTIN (EAN-13 / EAN-8 / UPC-A): check digit computation and validation
- QR: URL / vCard / WiFi / Text classification
- DataMatrix: GS1 Application Identifier extraction / raw data

Each parser returns a ParsedPayload; its text rendering becomes the
result's format_details. Parsing never changes the decoded data and never
raises: structural problems (e.g. a short GTIN) are reported in the text.

==============================================================================
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .models import BarcodeResult
from .symbology import GTIN_SYMBOLOGIES, Symbology


# Module logger
logger = logging.getLogger(__name__)


GTIN_MIN_LENGTH = 8
_GTIN_DIGITS = re.compile(r"[0-9]+")

# Application Identifiers recognised as the leading group of a GS1 payload
GS1_APPLICATION_IDENTIFIERS: Dict[str, str] = {
    "00": "SSCC",
    "01": "GTIN",
    "02": "Content GTIN",
    "10": "Batch/Lot",
    "11": "Production Date",
    "12": "Due Date",
    "13": "Packaging Date",
    "15": "Best Before",
    "16": "Sell By",
    "17": "Expiry Date",
    "20": "Variant",
    "21": "Serial Number",
    "22": "Consumer Product Variant",
    "30": "Variable Count",
    "37": "Count of Trade Items",
    "90": "Internal",
    "91": "Company Internal",
    "92": "Company Internal",
    "93": "Company Internal",
    "94": "Company Internal",
    "95": "Company Internal",
    "96": "Company Internal",
    "97": "Company Internal",
    "98": "Company Internal",
    "99": "Company Internal",
}

_LEADING_AI = re.compile(r"^\((\d{2})\)")


class ParsedPayload(BaseModel):
    """
    Structured interpretation of one payload.

    Attributes:
        heading: First line of the rendered text
        kind: Classified type (URL, vCard, WiFi, Text, GS1, RawData, GTIN, ...)
        fields: Ordered (label, value) pairs
        valid: Structural validity; None when not applicable
    """

    model_config = ConfigDict(frozen=True)

    heading: str
    kind: str
    fields: Tuple[Tuple[str, str], ...] = ()
    valid: Optional[bool] = None
    error: Optional[str] = Field(default=None, description="Format error, if any")

    def get(self, label: str) -> Optional[str]:
        for key, value in self.fields:
            if key == label:
                return value
        return None

    def to_text(self) -> str:
        if self.error:
            return self.error
        lines = [self.heading, f"Type: {self.kind}"]
        lines.extend(f"{label}: {value}" for label, value in self.fields)
        return "\n".join(lines)


# =============================================================================
# GTIN
# =============================================================================

def gtin_check_digit(digits: str) -> int:
    """
    Check digit over every digit but the last.

    Weights are 3 at even positions and 1 at odd positions, counted from
    the left starting at 0.
    """
    body = digits[:-1]
    weighted = sum(int(d) * (3 if i % 2 == 0 else 1) for i, d in enumerate(body))
    return (10 - weighted % 10) % 10


def parse_gtin(data: str) -> ParsedPayload:
    """Validate an EAN-13 / EAN-8 / UPC-A payload."""
    if len(data) < GTIN_MIN_LENGTH:
        return ParsedPayload(
            heading="GTIN",
            kind="GTIN",
            valid=False,
            error="Invalid GTIN",
        )
    if not _GTIN_DIGITS.fullmatch(data):
        return ParsedPayload(
            heading="GTIN",
            kind="GTIN",
            valid=False,
            error="Invalid GTIN: non-numeric payload",
        )

    computed = gtin_check_digit(data)
    valid = computed == int(data[-1])
    return ParsedPayload(
        heading=f"GTIN: {data}",
        kind="GTIN",
        fields=(
            ("Check Digit", str(computed)),
            ("Validation", "Valid" if valid else "Invalid"),
        ),
        valid=valid,
    )


# =============================================================================
# QR
# =============================================================================

def _vcard_fields(data: str) -> List[Tuple[str, str]]:
    labels = {"FN": "Name", "TEL": "Phone", "EMAIL": "Email"}
    fields = []
    for line in data.splitlines():
        key, sep, value = line.strip().partition(":")
        if not sep:
            continue
        # TEL;TYPE=CELL:... carries parameters after the property name
        name = key.split(";", 1)[0].upper()
        if name in labels:
            fields.append((labels[name], value.strip()))
    return fields


def _wifi_fields(data: str) -> List[Tuple[str, str]]:
    labels = {"S": "SSID", "T": "Security", "P": "Password"}
    fields = []
    for part in data[len("WIFI:"):].split(";"):
        key, sep, value = part.partition(":")
        if sep and key in labels:
            fields.append((labels[key], value))
    return fields


def classify_qr(data: str) -> ParsedPayload:
    """Classify a QR payload: URL, vCard, WiFi, else Text."""
    heading = "QR Code Data:"

    if data.startswith(("http://", "https://")):
        return ParsedPayload(heading=heading, kind="URL", fields=(("URL", data),))

    if "BEGIN:VCARD" in data:
        return ParsedPayload(heading=heading, kind="vCard", fields=tuple(_vcard_fields(data)))

    if data.startswith("WIFI:"):
        return ParsedPayload(heading=heading, kind="WiFi", fields=tuple(_wifi_fields(data)))

    return ParsedPayload(heading=heading, kind="Text", fields=(("Content", data),))


# =============================================================================
# DATAMATRIX
# =============================================================================

def extract_gs1_pairs(data: str) -> List[Tuple[str, str]]:
    """
    Split "(AI)value(AI)value..." into (AI, value) pairs.

    Scanning stops at the first "(" without a matching ")".
    """
    pairs = []
    position = data.find("(")
    while position != -1:
        close = data.find(")", position + 1)
        if close == -1:
            break
        ai = data[position + 1:close]
        following = data.find("(", close + 1)
        value = data[close + 1:] if following == -1 else data[close + 1:following]
        pairs.append((ai, value))
        position = following
    return pairs


def classify_datamatrix(data: str) -> ParsedPayload:
    """Classify a DataMatrix payload as GS1 or raw data."""
    heading = "DataMatrix Content:"
    match = _LEADING_AI.match(data)

    if match and match.group(1) in GS1_APPLICATION_IDENTIFIERS:
        fields = []
        for ai, value in extract_gs1_pairs(data):
            name = GS1_APPLICATION_IDENTIFIERS.get(ai)
            label = f"AI {ai} ({name})" if name else f"AI {ai}"
            fields.append((label, value))
        return ParsedPayload(heading=heading, kind="GS1", fields=tuple(fields))

    return ParsedPayload(heading=heading, kind="RawData", fields=(("Content", data),))


# =============================================================================
# DISPATCH
# =============================================================================

class FormatParser:
    """
    Applies the symbology-specific parser to aggregated results.

    Example:
        >>> parser = FormatParser()
        >>> parser.describe(Symbology.QR, "https://example.com").kind
        'URL'
    """

    STANDARD_FORMAT = "Standard format"

    def describe(self, symbology: Symbology, data: str) -> Optional[ParsedPayload]:
        """Structured interpretation, or None for symbologies without a parser."""
        if symbology in GTIN_SYMBOLOGIES:
            return parse_gtin(data)
        if symbology is Symbology.QR:
            return classify_qr(data)
        if symbology is Symbology.DATAMATRIX:
            return classify_datamatrix(data)
        return None

    def details(self, symbology: Symbology, data: str) -> str:
        parsed = self.describe(symbology, data)
        if parsed is None:
            return self.STANDARD_FORMAT
        if parsed.error:
            logger.debug(f"{symbology.display_name} payload failed validation: {parsed.error}")
        return parsed.to_text()

    def annotate(self, result: BarcodeResult) -> BarcodeResult:
        """Copy of result with format_details filled in; data untouched."""
        return result.model_copy(
            update={"format_details": self.details(result.symbology, result.data)}
        )
