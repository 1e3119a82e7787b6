"""
AdCarbon — AI vs Traditional Comparison
Resolution tiers and the synthetic cost model for having a human designer
create an equivalent banner.
"""
import logging
from functools import lru_cache
from typing import Dict, List

from adcarbon.schemas.schemas import (
    AIGeneratedCost,
    CO2Savings,
    ComparisonData,
    ImageMetadata,
    ResolutionTier,
    TraditionalAdData,
)

logger = logging.getLogger(__name__)

AI_GENERATION_METHOD = "MugenAI Ads 2 (GPT-o3 + Gemini 2.0)"

# Each revision costs 30% of the original design time
REVISION_TIME_FACTOR = 0.3

RESOLUTION_TIERS: List[ResolutionTier] = [
    ResolutionTier(name="Low Resolution", range="≤ 1MP (e.g., 1024×768)", pixel_threshold=1_000_000),
    ResolutionTier(name="Medium Resolution", range="1-4MP (e.g., 1920×1080)", pixel_threshold=4_000_000),
    ResolutionTier(name="High Resolution", range="> 4MP (e.g., 4K+)", pixel_threshold=float("inf")),
]

_TRADITIONAL_AD_BASE: Dict[str, TraditionalAdData] = {
    "Low Resolution": TraditionalAdData(
        design_time=3,
        revisions=2,
        photoshoot=False,
        stock_photos=1,
        designer_co2_per_hour=150,
        photoshoot_co2=0,
        stock_photo_co2=50,
        computer_usage_co2=200,
    ),
    "Medium Resolution": TraditionalAdData(
        design_time=6,
        revisions=3,
        photoshoot=False,
        stock_photos=2,
        designer_co2_per_hour=150,
        photoshoot_co2=0,
        stock_photo_co2=50,
        computer_usage_co2=400,
    ),
    "High Resolution": TraditionalAdData(
        design_time=12,
        revisions=4,
        photoshoot=True,
        stock_photos=3,
        designer_co2_per_hour=150,
        photoshoot_co2=2500,
        stock_photo_co2=50,
        computer_usage_co2=800,
    ),
}


def calculate_traditional_co2(data: TraditionalAdData) -> float:
    """Designer hours, revisions, stock photos, optional photoshoot and tool usage, in grams."""
    designer_co2 = data.design_time * data.designer_co2_per_hour
    revision_co2 = data.revisions * (data.design_time * REVISION_TIME_FACTOR) * data.designer_co2_per_hour
    stock_photo_co2 = data.stock_photos * data.stock_photo_co2
    photoshoot_co2 = data.photoshoot_co2 if data.photoshoot else 0

    return designer_co2 + revision_co2 + stock_photo_co2 + photoshoot_co2 + data.computer_usage_co2


@lru_cache(maxsize=None)
def get_traditional_ad_data(tier_name: str) -> TraditionalAdData:
    """Tier cost record with its total filled in. Computed once per tier."""
    base = _TRADITIONAL_AD_BASE[tier_name]
    return base.model_copy(update={"total_co2": calculate_traditional_co2(base)})


def get_resolution_tier(metadata: ImageMetadata) -> ResolutionTier:
    pixel_count = metadata.pixel_count
    for tier in RESOLUTION_TIERS:
        if pixel_count <= tier.pixel_threshold:
            return tier
    return RESOLUTION_TIERS[-1]


def _compare(tier: ResolutionTier, ai_generated_co2: float) -> ComparisonData:
    traditional = get_traditional_ad_data(tier.name)
    co2_savings = traditional.total_co2 - ai_generated_co2
    percentage = co2_savings / traditional.total_co2 * 100

    return ComparisonData(
        tier=tier,
        ai_generated=AIGeneratedCost(co2=ai_generated_co2, method=AI_GENERATION_METHOD),
        traditional=traditional,
        savings=CO2Savings(co2_grams=co2_savings, percentage=max(0.0, percentage)),
    )


def generate_comparison(metadata: ImageMetadata, ai_generated_co2: float) -> ComparisonData:
    """Compare the AI generation cost with the traditional cost for the image's tier."""
    tier = get_resolution_tier(metadata)
    logger.debug(f"{metadata.resolution} classified as {tier.name}")
    return _compare(tier, ai_generated_co2)


def get_all_tier_comparisons(ai_generated_co2: float) -> List[ComparisonData]:
    """Comparison against every tier, for the tier table."""
    return [_compare(tier, ai_generated_co2) for tier in RESOLUTION_TIERS]
