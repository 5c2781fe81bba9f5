"""
==============================================================================
Scanner Configuration Module
==============================================================================

Declarative scanner settings and named presets.

The per-symbology flags live in a single table keyed by Symbology, so an
unknown symbology key cannot be represented. The table is always complete:
symbologies missing from the input are filled in as disabled.

Presets:
--------
- default: nothing enabled, one code per frame
- shipping-label: common 1D + QR + DataMatrix, inversion on Code128/EAN/UPC
- low-resolution: everything enabled and inverted, full enhancement chain

Usage:
------
    config = ScannerConfiguration.shipping_label()
    config.set_symbology_enabled(Symbology.PDF417, True)

    frozen = config.snapshot()   # what the scanner decodes against

==============================================================================
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .symbology import (
    GTIN_SYMBOLOGIES,
    LINEAR_SYMBOLOGIES,
    MATRIX_SYMBOLOGIES,
    Symbology,
)


# Module logger
logger = logging.getLogger(__name__)


class EnhancementProfile(str, Enum):
    """Which branch of the preprocessing chain runs."""

    PASSTHROUGH = "passthrough"
    LOW_RESOLUTION = "low_resolution"


class SymbologySettings(BaseModel):
    """Flags for one symbology."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    inverted_retry: bool = False


def _complete_table(
    table: Dict[Symbology, SymbologySettings]
) -> Dict[Symbology, SymbologySettings]:
    """Return a table holding one entry per Symbology."""
    return {
        symbology: table.get(symbology, SymbologySettings())
        for symbology in Symbology
    }


class _ConfigurationFields(BaseModel):
    """Fields and read-only queries shared by live and frozen configurations."""

    symbologies: Dict[Symbology, SymbologySettings] = Field(
        default_factory=dict,
        validate_default=True,
        description="Per-symbology enabled / inverted-retry flags"
    )

    max_codes_per_frame: int = Field(
        default=1,
        ge=1,
        description="Upper bound on results returned for one frame"
    )

    search_whole_image: bool = Field(
        default=False,
        description="Search the whole image rather than a scan area"
    )

    try_harder: bool = Field(
        default=False,
        description="Trade latency for recall in the decode backends"
    )

    profile: EnhancementProfile = Field(
        default=EnhancementProfile.PASSTHROUGH,
        description="Preprocessing branch applied before decoding"
    )

    @field_validator("symbologies")
    @classmethod
    def validate_symbologies(
        cls, value: Dict[Symbology, SymbologySettings]
    ) -> Dict[Symbology, SymbologySettings]:
        """Fill in missing symbologies as disabled."""
        return _complete_table(value)

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def enabled_symbologies(self) -> FrozenSet[Symbology]:
        return frozenset(s for s, flags in self.symbologies.items() if flags.enabled)

    @property
    def inverted_symbologies(self) -> FrozenSet[Symbology]:
        return frozenset(
            s for s, flags in self.symbologies.items() if flags.inverted_retry
        )

    def is_enabled(self, symbology: Symbology) -> bool:
        return self.symbologies[symbology].enabled

    def wants_inversion(self, symbology: Symbology) -> bool:
        return self.symbologies[symbology].inverted_retry

    @property
    def any_enabled(self) -> bool:
        return bool(self.enabled_symbologies)

    @property
    def any_inversion(self) -> bool:
        """True when an enabled symbology requests the inverted retry."""
        return any(
            flags.enabled and flags.inverted_retry
            for flags in self.symbologies.values()
        )

    @property
    def any_linear(self) -> bool:
        return bool(self.enabled_symbologies & LINEAR_SYMBOLOGIES)

    @property
    def any_matrix(self) -> bool:
        return bool(self.enabled_symbologies & MATRIX_SYMBOLOGIES)


class ConfigurationSnapshot(_ConfigurationFields):
    """
    Immutable copy of a ScannerConfiguration.

    Handed to the preprocessing pipeline, the backends and the aggregator
    for the duration of one frame.
    """

    model_config = ConfigDict(frozen=True)


class ScannerConfiguration(_ConfigurationFields):
    """
    Mutable scanner settings, changed only between frames.

    Attributes:
        symbologies: Symbology -> SymbologySettings table
        max_codes_per_frame: Result cap for one frame (>= 1)
        search_whole_image: Whole-image search flag
        try_harder: Backend try-harder flag
        profile: Preprocessing branch

    Example:
        >>> config = ScannerConfiguration.low_resolution()
        >>> config.max_codes_per_frame
        20
        >>> config.is_enabled(Symbology.QR)
        True
    """

    model_config = ConfigDict(validate_assignment=True)

    # =========================================================================
    # MUTATORS
    # =========================================================================

    def _update(self, symbology: Symbology, **flags: bool) -> None:
        current = self.symbologies[symbology]
        table = dict(self.symbologies)
        table[symbology] = current.model_copy(update=flags)
        self.symbologies = table

    def set_symbology_enabled(self, symbology: Symbology, enabled: bool) -> None:
        """Enable or disable decoding of a symbology."""
        self._update(symbology, enabled=enabled)
        logger.debug(
            f"Symbology {symbology.display_name} {'ENABLED' if enabled else 'DISABLED'}"
        )

    def set_inverted_retry(self, symbology: Symbology, enabled: bool) -> None:
        """Enable or disable the colour-inverted retry for a symbology."""
        self._update(symbology, inverted_retry=enabled)
        logger.debug(
            f"Color inversion for {symbology.display_name} "
            f"{'ENABLED' if enabled else 'DISABLED'}"
        )

    def set_max_codes_per_frame(self, max_codes: int) -> None:
        self.max_codes_per_frame = max_codes

    def set_search_whole_image(self, search: bool) -> None:
        self.search_whole_image = search

    def set_try_harder(self, try_harder: bool) -> None:
        self.try_harder = try_harder

    def snapshot(self) -> ConfigurationSnapshot:
        """Freeze the current settings for one decode call."""
        return ConfigurationSnapshot(
            symbologies=dict(self.symbologies),
            max_codes_per_frame=self.max_codes_per_frame,
            search_whole_image=self.search_whole_image,
            try_harder=self.try_harder,
            profile=self.profile,
        )

    # =========================================================================
    # PRESETS
    # =========================================================================

    @classmethod
    def _with(
        cls,
        enabled: Iterable[Symbology],
        inverted: Iterable[Symbology],
        **fields,
    ) -> "ScannerConfiguration":
        enabled = set(enabled)
        inverted = set(inverted)
        table = {
            symbology: SymbologySettings(
                enabled=symbology in enabled,
                inverted_retry=symbology in inverted,
            )
            for symbology in Symbology
        }
        return cls(symbologies=table, **fields)

    @classmethod
    def default(cls) -> "ScannerConfiguration":
        """Nothing enabled; one code per frame."""
        return cls()

    @classmethod
    def shipping_label(cls) -> "ScannerConfiguration":
        """Symbologies commonly printed on shipping labels."""
        return cls._with(
            enabled=[
                Symbology.CODE128,
                Symbology.CODE39,
                Symbology.EAN13,
                Symbology.EAN8,
                Symbology.UPCA,
                Symbology.DATAMATRIX,
                Symbology.QR,
            ],
            inverted=[Symbology.CODE128, *GTIN_SYMBOLOGIES],
            max_codes_per_frame=10,
            search_whole_image=True,
            try_harder=True,
            profile=EnhancementProfile.PASSTHROUGH,
        )

    @classmethod
    def low_resolution(cls) -> "ScannerConfiguration":
        """Every symbology, inverted retry on all, full enhancement chain."""
        return cls._with(
            enabled=list(Symbology),
            inverted=list(Symbology),
            max_codes_per_frame=20,
            search_whole_image=True,
            try_harder=True,
            profile=EnhancementProfile.LOW_RESOLUTION,
        )

    @classmethod
    def from_preset(cls, name: str) -> "ScannerConfiguration":
        """
        Build a configuration from a preset name.

        Args:
            name: "default", "shipping-label" or "low-resolution"

        Raises:
            KeyError: If the preset is unknown
        """
        key = name.strip().lower().replace("_", "-")
        factory = PRESETS[key]
        logger.info(f"Applying scanner preset '{key}'")
        return factory()


PRESETS: Dict[str, Callable[[], ScannerConfiguration]] = {
    "default": ScannerConfiguration.default,
    "shipping-label": ScannerConfiguration.shipping_label,
    "low-resolution": ScannerConfiguration.low_resolution,
}


def preset_names() -> List[str]:
    """Names accepted by ScannerConfiguration.from_preset."""
    return list(PRESETS)
