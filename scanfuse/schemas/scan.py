"""
==============================================================================
Scan Schemas Module
==============================================================================

Request and response schemas for scan operations.

Includes:
- Base64 image upload with an optional data-URL prefix
- Preset selection with an optional result-cap override
- Per-barcode results with parsed format details

==============================================================================
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from scanfuse.scanner.configuration import ScannerConfiguration
from scanfuse.scanner.models import BarcodeResult, ScanOutcome


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class ScanRequest(BaseModel):
    """Single image to scan."""
    image: str = Field(..., min_length=1, description="Base64-encoded image file")
    preset: Optional[str] = Field(default=None, max_length=50)
    max_codes_per_frame: Optional[int] = Field(default=None, ge=1, le=100)

    @field_validator("image")
    @classmethod
    def strip_data_url(cls, v: str) -> str:
        # data:image/png;base64,<payload>
        if v.startswith("data:") and "," in v:
            v = v.split(",", 1)[1]
        return v.strip()

    @field_validator("preset")
    @classmethod
    def normalize_preset(cls, v: Optional[str]) -> Optional[str]:
        if v:
            v = v.strip().lower().replace("_", "-")
            return v if v else None
        return None


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class LocationSchema(BaseModel):
    x: int
    y: int
    width: int
    height: int


class BarcodeResultSchema(BaseModel):
    """One decoded barcode."""
    data: str
    symbology: str
    symbology_name: str
    location: LocationSchema
    confidence: float
    color_inverted: bool
    is_2d: bool
    format_details: str

    @classmethod
    def from_result(cls, result: BarcodeResult) -> "BarcodeResultSchema":
        return cls(
            data=result.data,
            symbology=result.symbology.value,
            symbology_name=result.symbology_name,
            location=LocationSchema(**result.location.model_dump()),
            confidence=result.confidence,
            color_inverted=result.color_inverted,
            is_2d=result.is_2d,
            format_details=result.format_details,
        )


class ScanResponse(BaseModel):
    """Scan outcome of one image."""
    success: bool = Field(default=True)
    status: str
    status_code: int
    preset: str
    count: int = Field(ge=0)
    counts: Dict[str, int]
    results: List[BarcodeResultSchema]

    @classmethod
    def from_outcome(cls, outcome: ScanOutcome, preset: str) -> "ScanResponse":
        return cls(
            success=outcome.ok,
            status=outcome.status.name,
            status_code=int(outcome.status),
            preset=preset,
            count=len(outcome.results),
            counts=outcome.counts(),
            results=[BarcodeResultSchema.from_result(r) for r in outcome.results],
        )


class PresetSchema(BaseModel):
    """Named scanner configuration."""
    name: str
    enabled: List[str]
    inverted: List[str]
    max_codes_per_frame: int
    search_whole_image: bool
    try_harder: bool
    profile: str

    @classmethod
    def from_configuration(cls, name: str, config: ScannerConfiguration) -> "PresetSchema":
        return cls(
            name=name,
            enabled=sorted(s.value for s in config.enabled_symbologies),
            inverted=sorted(s.value for s in config.inverted_symbologies),
            max_codes_per_frame=config.max_codes_per_frame,
            search_whole_image=config.search_whole_image,
            try_harder=config.try_harder,
            profile=config.profile.value,
        )


class PresetListResponse(BaseModel):
    success: bool = Field(default=True)
    default: str
    presets: List[PresetSchema]
