"""
AdCarbon — CO2 Estimation Service
Asks the reasoning service for emission estimates and falls back to
closed-form formulas whenever it is unavailable, slow or wrong.
Callers always get an estimate back; nothing here raises.
"""
import logging
import math
from typing import Any, Dict, Optional

from pydantic import ValidationError

from adcarbon.core.config import EstimatorConfig
from adcarbon.core.errors import EstimationServiceError
from adcarbon.schemas.schemas import CO2Data, ImageMetadata, ModelInfo, TraditionalCO2Data
from adcarbon.services.openai_client import (
    EstimationService,
    OpenAIChatService,
    parse_json_content,
    race_with_timeout,
)
from adcarbon.utils.carbon import round_half_up

logger = logging.getLogger(__name__)

MAX_GENERATION_CO2 = 1_000_000
MAX_TRANSMISSION_CO2_PER_VIEW = 10_000
MAX_DESIGN_CO2 = 100_000
MAX_DESIGN_TIME = 100

CONFIDENCE_LEVELS = ("high", "medium", "low")
COMPLEXITY_LEVELS = ("Basic", "Standard", "Premium", "Enterprise")

# Prompt context only, never used in calculations
SYSTEM_PROFILE = {
    "ai_model": "MugenAI Ads 2",
    "image_gen": "GPT-o3",
    "prompt_gen": "Gemini 2.0 Flash-Exp",
    "system": "4GB RAM, 1 CPU, Linux Kernel",
    "location": "Asia-Northeast (Tokyo)",
}

AI_SYSTEM_PROMPT = (
    "You are an environmental AI expert specializing in calculating CO2 emissions for "
    "AI-generated ad banners. You must respond ONLY with valid JSON, no other text."
)

TRADITIONAL_SYSTEM_PROMPT = (
    "You are a design industry expert specializing in traditional ad banner creation "
    "processes and their environmental impact. You must respond ONLY with valid JSON, no other text."
)


def _build_ai_prompt(metadata: ImageMetadata) -> str:
    return f"""Calculate the CO2 emissions for an AI-generated ad banner with the following specifications:

Ad Image Specifications:
- Resolution: {metadata.resolution} ({metadata.pixel_count} pixels)
- File Size: {metadata.file_size_formatted}
- Format: {metadata.format}

AI Generation System Details:
- AI Model: {SYSTEM_PROFILE["ai_model"]}
- Image Generation Model: {SYSTEM_PROFILE["image_gen"]}
- Prompt Generation Model: {SYSTEM_PROFILE["prompt_gen"]}
- System: {SYSTEM_PROFILE["system"]}
- Server Location: {SYSTEM_PROFILE["location"]}

Calculation Guidelines:
1. Generation CO2 (in grams):
   - Consider GPU compute time for image generation (typically 10-60 seconds for high-res images)
   - Factor in prompt processing by Gemini 2.0
   - Account for Tokyo datacenter energy mix (~500g CO2/kWh)
   - Higher resolution = more compute = more CO2
   - Typical range: 5-100g depending on resolution and complexity

2. Transmission CO2 per view (in grams):
   - Based on file size and network transmission
   - Formula: fileSize(MB) x 0.15g per view
   - Includes CDN delivery and end-user download

Respond ONLY with valid JSON in this exact format (no markdown, no code blocks, just raw JSON):
{{
  "generationCO2": <number in grams>,
  "transmissionCO2PerView": <number in grams>,
  "confidence": "high" | "medium" | "low",
  "modelInfo": {{
    "imageGen": "GPT-o3",
    "promptGen": "Gemini 2.0 Flash-Exp",
    "system": "4GB 1CPU Linux",
    "location": "Tokyo"
  }}
}}"""


def _build_traditional_prompt(metadata: ImageMetadata) -> str:
    return f"""Analyze this ad banner image and estimate the traditional design process that would be required to create it:

Image Specifications:
- Resolution: {metadata.resolution} ({metadata.pixel_count} pixels)
- File Size: {metadata.file_size_formatted}
- Format: {metadata.format}

Please estimate the traditional design process requirements:

1. Design Time: Hours needed for a human designer to create this banner
2. Revisions: Number of revision rounds typically needed
3. Stock Photos: Number of stock photos that would be purchased/used
4. Photoshoot: Whether a custom photoshoot would be required (boolean)
5. Complexity: Overall complexity tier (Basic/Standard/Premium/Enterprise)

CO2 Calculation Guidelines:
- Designer work: ~500g CO2 per hour (computer usage, office energy)
- Stock photos: ~100g CO2 per photo (server storage, processing, delivery)
- Photoshoot: ~2000g CO2 (equipment, lighting, travel, processing)
- Revisions: ~200g CO2 per revision (additional designer time, client communication)

Respond ONLY with valid JSON in this exact format (no markdown, no code blocks, just raw JSON):
{{
  "designCO2": <total CO2 in grams>,
  "designTime": <hours as number>,
  "revisions": <number of revisions>,
  "stockPhotos": <number of stock photos>,
  "photoshoot": <true or false>,
  "complexity": "Basic" | "Standard" | "Premium" | "Enterprise",
  "confidence": "high" | "medium" | "low"
}}"""


def build_ai_request(metadata: ImageMetadata, model: str) -> Dict[str, Any]:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": AI_SYSTEM_PROMPT},
            {"role": "user", "content": _build_ai_prompt(metadata)},
        ],
        "temperature": 0.3,
    }


def build_traditional_request(metadata: ImageMetadata, model: str) -> Dict[str, Any]:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": TRADITIONAL_SYSTEM_PROMPT},
            {"role": "user", "content": _build_traditional_prompt(metadata)},
        ],
        "temperature": 0.3,
    }


# ── Fallback Formulas ────────────────────────────────────────────────────────
def calculate_fallback_estimate(metadata: ImageMetadata) -> CO2Data:
    """
    Offline estimate for the AI pathway.

    generation = pixels * 1e-6 + sizeMB * 0.5   (2 decimals, at least 0.01 g)
    transmission = sizeMB * 0.15                 (3 decimals, at least 0.001 g)
    """
    size_mb = metadata.file_size_mb
    generation_co2 = metadata.pixel_count * 0.000001 + size_mb * 0.5
    transmission_co2 = size_mb * 0.15

    return CO2Data(
        generation_co2=max(0.01, round_half_up(generation_co2, 2)),
        transmission_co2_per_view=max(0.001, round_half_up(transmission_co2, 3)),
        confidence="low",
        model_info=ModelInfo(system="Fallback calculation"),
    )


def calculate_fallback_traditional_estimate(metadata: ImageMetadata) -> TraditionalCO2Data:
    """Offline estimate for the traditional pathway, bucketed by pixels and size."""
    pixels = metadata.pixel_count
    size_mb = metadata.file_size_mb

    if pixels < 500_000 or size_mb < 0.5:
        complexity, design_time, revisions, stock_photos, photoshoot = "Basic", 2, 2, 1, False
    elif pixels < 2_000_000 or size_mb < 2:
        complexity, design_time, revisions, stock_photos, photoshoot = "Standard", 4, 3, 2, False
    elif pixels < 8_000_000 or size_mb < 5:
        complexity, design_time, revisions, stock_photos, photoshoot = "Premium", 8, 4, 3, True
    else:
        complexity, design_time, revisions, stock_photos, photoshoot = "Enterprise", 16, 5, 5, True

    # 500 g per designer hour, 100 g per stock photo, 2 kg per shoot, 200 g per revision
    design_co2 = (
        design_time * 500
        + stock_photos * 100
        + (2000 if photoshoot else 0)
        + revisions * 200
    )

    return TraditionalCO2Data(
        design_co2=design_co2,
        design_time=design_time,
        revisions=revisions,
        stock_photos=stock_photos,
        photoshoot=photoshoot,
        complexity=complexity,
        confidence="low",
    )


# ── Response Validation ──────────────────────────────────────────────────────
def _is_number(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # JSON integers wider than a double
        return False


def _normalize_confidence(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in CONFIDENCE_LEVELS:
        return value.strip().lower()
    return "medium"


def validate_co2_response(data: Any) -> bool:
    if not isinstance(data, dict):
        return False
    generation = data.get("generationCO2")
    transmission = data.get("transmissionCO2PerView")
    if not _is_number(generation) or not _is_number(transmission):
        return False
    if generation < 0 or generation > MAX_GENERATION_CO2:
        return False
    if transmission < 0 or transmission > MAX_TRANSMISSION_CO2_PER_VIEW:
        return False
    return True


def validate_traditional_co2_response(data: Any) -> bool:
    if not isinstance(data, dict):
        return False
    for key in ("designCO2", "designTime", "revisions", "stockPhotos"):
        if not _is_number(data.get(key)):
            return False
    if not isinstance(data.get("photoshoot"), bool):
        return False
    if data.get("complexity") not in COMPLEXITY_LEVELS:
        return False
    if data["designCO2"] < 0 or data["designCO2"] > MAX_DESIGN_CO2:
        return False
    if data["designTime"] < 0 or data["designTime"] > MAX_DESIGN_TIME:
        return False
    if data["revisions"] < 0 or data["stockPhotos"] < 0:
        return False
    return True


def _parse_model_info(value: Any) -> Optional[ModelInfo]:
    if not isinstance(value, dict):
        return None
    try:
        return ModelInfo.model_validate(value)
    except ValidationError:
        logger.debug(f"Dropping unparseable modelInfo: {value!r}")
        return None


def _to_co2_data(data: Dict[str, Any]) -> CO2Data:
    return CO2Data(
        generation_co2=data["generationCO2"],
        transmission_co2_per_view=data["transmissionCO2PerView"],
        confidence=_normalize_confidence(data.get("confidence")),
        model_info=_parse_model_info(data.get("modelInfo")),
    )


def _to_traditional_data(data: Dict[str, Any]) -> TraditionalCO2Data:
    return TraditionalCO2Data(
        design_co2=data["designCO2"],
        design_time=data["designTime"],
        revisions=data["revisions"],
        stock_photos=data["stockPhotos"],
        photoshoot=data["photoshoot"],
        complexity=data["complexity"],
        confidence=_normalize_confidence(data.get("confidence")),
    )


# ── Estimators ───────────────────────────────────────────────────────────────
async def _ask_service(
    service: EstimationService, request: Dict[str, Any], timeout: float
) -> Dict[str, Any]:
    content = await race_with_timeout(service.complete(request), timeout)
    return parse_json_content(content)


async def estimate_co2_emissions(
    metadata: ImageMetadata,
    *,
    config: EstimatorConfig,
    service: Optional[EstimationService] = None,
) -> CO2Data:
    """Estimate generation and per-view transmission CO2 for the AI pathway."""
    if not config.has_credentials:
        logger.warning("No OpenAI API key found, using fallback estimation")
        return calculate_fallback_estimate(metadata)

    service = service or OpenAIChatService(config)
    request = build_ai_request(metadata, config.model)

    try:
        parsed = await _ask_service(service, request, config.timeout_seconds)
        if not validate_co2_response(parsed):
            logger.warning("Invalid CO2 data from API, using fallback")
            return calculate_fallback_estimate(metadata)
        estimate = _to_co2_data(parsed)
    except EstimationServiceError as e:
        logger.warning(f"CO2 estimation degraded ({e}), using fallback estimation")
        return calculate_fallback_estimate(metadata)
    except Exception as e:
        logger.error(f"Unexpected error during CO2 estimation with {service.name}: {e}")
        return calculate_fallback_estimate(metadata)

    logger.info(
        f"CO2 estimate for {metadata.resolution}: generation={estimate.generation_co2}g, "
        f"transmission={estimate.transmission_co2_per_view}g/view ({estimate.confidence})"
    )
    return estimate


async def estimate_traditional_co2_emissions(
    metadata: ImageMetadata,
    *,
    config: EstimatorConfig,
    service: Optional[EstimationService] = None,
) -> TraditionalCO2Data:
    """Estimate the CO2 cost of having a human designer produce the same banner."""
    if not config.has_credentials:
        logger.warning("No OpenAI API key found, using fallback traditional estimation")
        return calculate_fallback_traditional_estimate(metadata)

    service = service or OpenAIChatService(config)
    request = build_traditional_request(metadata, config.traditional_model)

    try:
        parsed = await _ask_service(service, request, config.timeout_seconds)
        if not validate_traditional_co2_response(parsed):
            logger.warning("Invalid traditional CO2 data from API, using fallback")
            return calculate_fallback_traditional_estimate(metadata)
        return _to_traditional_data(parsed)
    except EstimationServiceError as e:
        logger.warning(f"Traditional CO2 estimation degraded ({e}), using fallback estimation")
        return calculate_fallback_traditional_estimate(metadata)
    except Exception as e:
        logger.error(f"Unexpected error during traditional estimation with {service.name}: {e}")
        return calculate_fallback_traditional_estimate(metadata)
