"""
AdCarbon Backend — Pydantic Schemas
Value types shared by the estimation pipeline and the HTTP surface.
Wire-facing models accept both snake_case names and the camelCase aliases
used by the estimation service.
"""
import math
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

Confidence = Literal["high", "medium", "low"]
Complexity = Literal["Basic", "Standard", "Premium", "Enterprise"]


# ── Uploads ──────────────────────────────────────────────────────────────────
class ImageUpload(BaseModel):
    """Raw uploaded file as handed over by the caller."""
    filename: str = ""
    content_type: str = ""
    data: bytes = b""

    @property
    def size(self) -> int:
        return len(self.data)


class ValidationResult(BaseModel):
    is_valid: bool
    error: Optional[str] = None


# ── Image Metadata ───────────────────────────────────────────────────────────
class ImageMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    resolution: str
    file_size: int = Field(ge=0, description="Size in bytes")
    file_size_formatted: str
    format: str = Field(description="Uppercase format token, JPEG is reported as JPG")
    file_name: str = ""

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def file_size_mb(self) -> float:
        return self.file_size / (1024 * 1024)


# ── CO2 Estimates ────────────────────────────────────────────────────────────
class ModelInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_gen: Optional[str] = Field(default=None, alias="imageGen")
    prompt_gen: Optional[str] = Field(default=None, alias="promptGen")
    system: Optional[str] = None
    location: Optional[str] = None


class CO2Data(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    generation_co2: float = Field(ge=0, le=1_000_000, alias="generationCO2", description="Grams")
    transmission_co2_per_view: float = Field(
        ge=0, le=10_000, alias="transmissionCO2PerView", description="Grams per view"
    )
    confidence: Confidence = "medium"
    model_info: Optional[ModelInfo] = Field(default=None, alias="modelInfo")


class TraditionalCO2Data(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    design_co2: float = Field(ge=0, le=100_000, alias="designCO2", description="Grams")
    design_time: float = Field(ge=0, le=100, alias="designTime", description="Hours")
    revisions: float = Field(ge=0)
    stock_photos: float = Field(ge=0, alias="stockPhotos")
    photoshoot: bool
    complexity: Complexity
    confidence: Confidence = "medium"


# ── Tiers & Traditional Comparison ───────────────────────────────────────────
class ResolutionTier(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    range: str
    pixel_threshold: float

    @field_serializer("pixel_threshold")
    def _serialize_threshold(self, value: float) -> Optional[float]:
        # JSON has no Infinity, the open-ended top tier is sent as null
        return value if math.isfinite(value) else None


class TraditionalAdData(BaseModel):
    model_config = ConfigDict(frozen=True)

    design_time: float
    revisions: int
    photoshoot: bool = False
    stock_photos: int
    designer_co2_per_hour: float
    photoshoot_co2: float
    stock_photo_co2: float
    computer_usage_co2: float
    total_co2: float = 0.0


class AIGeneratedCost(BaseModel):
    co2: float
    method: str


class CO2Savings(BaseModel):
    co2_grams: float
    percentage: float = Field(ge=0)


class ComparisonData(BaseModel):
    tier: ResolutionTier
    ai_generated: AIGeneratedCost
    traditional: TraditionalAdData
    savings: CO2Savings


# ── Recovery Metrics ─────────────────────────────────────────────────────────
class RecoveryMetricsV1(BaseModel):
    """Trees / bottles / bee hotels / walking weeks, used by the impact panel."""
    variant: Literal["v1"] = "v1"
    trees_to_plant: int
    plastic_bottles: int
    bee_hotels: int
    walking_weeks: int


class RecoveryMetricsV2(BaseModel):
    """Trees / bottles / bike km / ocean hours, used by the offset summary."""
    variant: Literal["v2"] = "v2"
    trees_to_plant: int
    plastic_bottles: int
    bike_kilometers: float
    ocean_absorption_hours: int


class ComparisonItem(BaseModel):
    icon: str
    text: str
    category: Literal["everyday", "digital"]


# ── Analysis ─────────────────────────────────────────────────────────────────
class PathImpact(BaseModel):
    """Totals for one creation pathway at a given view count."""
    creation_co2: float
    transmission_co2: float
    total_co2: float
    total_co2_formatted: str
    creation_percentage: float
    transmission_percentage: float
    recovery: RecoveryMetricsV1


class AnalysisResult(BaseModel):
    metadata: ImageMetadata
    view_count: int
    view_count_label: str
    co2: CO2Data
    traditional: TraditionalCO2Data
    comparison: ComparisonData
    ai_impact: PathImpact
    traditional_impact: PathImpact
    offsets: RecoveryMetricsV2
    comparisons: List[ComparisonItem]


class TotalsRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    generation_co2: float
    transmission_co2_per_view: float
    view_count: int


class TotalsResponse(BaseModel):
    total_co2: float
    total_co2_formatted: str
    recovery: RecoveryMetricsV1
    offsets: RecoveryMetricsV2


class ViewCountOption(BaseModel):
    value: int
    label: str


# ── Reports ──────────────────────────────────────────────────────────────────
class ReportRow(BaseModel):
    file_name: str
    resolution: Optional[str] = None
    file_size: Optional[str] = None
    format: Optional[str] = None
    tier: Optional[str] = None
    ai_total_co2: Optional[float] = None
    traditional_total_co2: Optional[float] = None
    savings_co2: Optional[float] = None
    confidence: Optional[str] = None
    error: Optional[str] = None


class BatchReport(BaseModel):
    view_count: int
    total_images: int
    analyzed: int
    errors: int
    ai_total_co2: float
    traditional_total_co2: float
    total_savings_co2: float
    total_savings_formatted: str
    rows: List[ReportRow]
