"""
==============================================================================
Symbology Module
==============================================================================

Barcode symbologies understood by the scanner and their families.

Families:
---------
- LINEAR: 1D codes (Code128/39/93, EAN, UPC)
- MATRIX: 2D codes (DataMatrix, QR, PDF417, Aztec)
- GTIN: check-digit protected EAN/UPC codes

==============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet


class Symbology(str, Enum):
    """Supported barcode symbologies."""

    CODE128 = "code128"
    CODE39 = "code39"
    CODE93 = "code93"
    EAN13 = "ean13"
    EAN8 = "ean8"
    UPCA = "upca"
    UPCE = "upce"
    DATAMATRIX = "datamatrix"
    QR = "qr"
    PDF417 = "pdf417"
    AZTEC = "aztec"

    @property
    def display_name(self) -> str:
        """Human readable name used in reports and overlays."""
        return _DISPLAY_NAMES[self]

    @property
    def is_linear(self) -> bool:
        return self in LINEAR_SYMBOLOGIES

    @property
    def is_matrix(self) -> bool:
        return self in MATRIX_SYMBOLOGIES

    @classmethod
    def parse(cls, value: str) -> "Symbology":
        """
        Resolve a symbology from its value or display name.

        Args:
            value: e.g. "ean13", "EAN13", "QR"

        Raises:
            ValueError: If the name is unknown
        """
        key = value.strip().lower()
        for member in cls:
            if key in (member.value, member.display_name.lower()):
                return member
        raise ValueError(f"Unknown symbology: {value}")


_DISPLAY_NAMES = {
    Symbology.CODE128: "Code128",
    Symbology.CODE39: "Code39",
    Symbology.CODE93: "Code93",
    Symbology.EAN13: "EAN13",
    Symbology.EAN8: "EAN8",
    Symbology.UPCA: "UPCA",
    Symbology.UPCE: "UPCE",
    Symbology.DATAMATRIX: "DataMatrix",
    Symbology.QR: "QR",
    Symbology.PDF417: "PDF417",
    Symbology.AZTEC: "Aztec",
}


LINEAR_SYMBOLOGIES: FrozenSet[Symbology] = frozenset({
    Symbology.CODE128,
    Symbology.CODE39,
    Symbology.CODE93,
    Symbology.EAN13,
    Symbology.EAN8,
    Symbology.UPCA,
    Symbology.UPCE,
})

MATRIX_SYMBOLOGIES: FrozenSet[Symbology] = frozenset({
    Symbology.DATAMATRIX,
    Symbology.QR,
    Symbology.PDF417,
    Symbology.AZTEC,
})

GTIN_SYMBOLOGIES: FrozenSet[Symbology] = frozenset({
    Symbology.EAN13,
    Symbology.EAN8,
    Symbology.UPCA,
})
