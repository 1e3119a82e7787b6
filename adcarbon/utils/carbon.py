"""
AdCarbon — Carbon Math Utility
Aggregates emission estimates over a view count and converts totals into
offset equivalents and display strings.
"""
import math
from dataclasses import dataclass
from typing import List, Tuple

from adcarbon.core.errors import InvalidArgumentError
from adcarbon.schemas.schemas import RecoveryMetricsV1, RecoveryMetricsV2, ViewCountOption


@dataclass(frozen=True)
class OffsetFactor:
    """Kilograms of CO2 one unit of an offset action compensates."""
    kg_per_unit: float
    description: str


# Averages from published environmental research
OFFSET_FACTORS = {
    "tree": OffsetFactor(21, "One tree absorbs ~21 kg CO2 per year"),
    "plastic_bottle": OffsetFactor(0.03, "Recycling one plastic bottle saves ~0.03 kg CO2"),
    "bee_hotel": OffsetFactor(5, "One bee hotel offsets ~5 kg CO2 through pollination"),
    "walking_week": OffsetFactor(2, "Walking to school instead of driving saves ~2 kg CO2 per week"),
    "bike_km": OffsetFactor(0.21, "Cycling instead of driving saves ~0.21 kg CO2 per km"),
    "ocean_hour": OffsetFactor(0.0001, "Ocean surface absorbs ~0.0001 kg CO2 per hour per m²"),
}

VIEW_COUNT_OPTIONS: Tuple[Tuple[int, str], ...] = (
    (1_000, "1K"),
    (10_000, "10K"),
    (100_000, "100K"),
    (1_000_000, "1M"),
    (10_000_000, "10M"),
    (100_000_000, "100M"),
    (1_000_000_000, "1B"),
)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like JavaScript's Math.round, halves go up."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _units(kg: float, key: str) -> float:
    return kg / OFFSET_FACTORS[key].kg_per_unit


def _is_finite(value: float) -> bool:
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _check_total_kg(total_co2_kg: float) -> None:
    if not _is_finite(total_co2_kg):
        raise InvalidArgumentError(f"Total CO2 must be finite, got {total_co2_kg}")
    if total_co2_kg < 0:
        raise InvalidArgumentError("Total CO2 must be non-negative")
    if not all(_is_finite(_units(total_co2_kg, key)) for key in OFFSET_FACTORS):
        raise InvalidArgumentError("Total CO2 is too large to express in offsets")


# ── Aggregation ──────────────────────────────────────────────────────────────
def calculate_total_co2(generation_co2: float, transmission_co2_per_view: float, view_count: float) -> float:
    """Generation cost plus per-view transmission cost over all views, in grams."""
    if not all(_is_finite(v) for v in (generation_co2, transmission_co2_per_view, view_count)):
        raise InvalidArgumentError("CO2 values and view count must be finite numbers")
    if generation_co2 < 0 or transmission_co2_per_view < 0 or view_count < 0:
        raise InvalidArgumentError("CO2 values and view count must be non-negative")
    total = generation_co2 + transmission_co2_per_view * view_count
    if not _is_finite(total):
        raise InvalidArgumentError("Total CO2 is too large to represent")
    return total


def co2_share_percentages(creation_co2: float, transmission_co2: float) -> Tuple[float, float]:
    total = creation_co2 + transmission_co2
    if total <= 0:
        return 0.0, 0.0
    return creation_co2 / total * 100, transmission_co2 / total * 100


# ── Recovery Metrics ─────────────────────────────────────────────────────────
def calculate_recovery_metrics(total_co2_kg: float) -> RecoveryMetricsV1:
    """Trees, bottles, bee hotels and walking weeks needed to offset a total."""
    _check_total_kg(total_co2_kg)

    return RecoveryMetricsV1(
        trees_to_plant=math.ceil(_units(total_co2_kg, "tree")),
        plastic_bottles=math.ceil(_units(total_co2_kg, "plastic_bottle")),
        bee_hotels=math.ceil(_units(total_co2_kg, "bee_hotel")),
        walking_weeks=math.ceil(_units(total_co2_kg, "walking_week")),
    )


def calculate_recovery_metrics_v2(total_co2_kg: float) -> RecoveryMetricsV2:
    """Trees, bottles, bike kilometres and ocean absorption hours for a total."""
    _check_total_kg(total_co2_kg)

    return RecoveryMetricsV2(
        trees_to_plant=math.ceil(_units(total_co2_kg, "tree")),
        plastic_bottles=math.ceil(_units(total_co2_kg, "plastic_bottle")),
        bike_kilometers=round_half_up(_units(total_co2_kg, "bike_km"), 1),
        ocean_absorption_hours=int(round_half_up(_units(total_co2_kg, "ocean_hour"))),
    )


# ── Display Formatting ───────────────────────────────────────────────────────
def _format_non_negative_co2(co2_grams: float) -> str:
    if co2_grams < 1000:
        return f"{int(round_half_up(co2_grams))}g"

    co2_kg = co2_grams / 1000
    if co2_kg < 10:
        return f"{co2_kg:.2f}kg"
    if co2_kg < 100:
        # 99.96 kg would print as "100.0kg", show it as a whole number instead
        if round_half_up(co2_kg, 1) >= 100:
            return f"{int(round_half_up(co2_kg))}kg"
        return f"{co2_kg:.1f}kg"
    return f"{int(round_half_up(co2_kg))}kg"


def format_co2_value(co2_grams: float) -> str:
    """Format grams for display. NaN and negative values are shown as 0g."""
    if math.isnan(co2_grams) or co2_grams < 0:
        co2_grams = 0
    return _format_non_negative_co2(co2_grams)


def format_co2_value_strict(co2_grams: float) -> str:
    """Same as format_co2_value but rejects negative or NaN input."""
    if math.isnan(co2_grams) or co2_grams < 0:
        raise InvalidArgumentError(f"CO2 value must be non-negative, got {co2_grams}")
    return _format_non_negative_co2(co2_grams)


def format_view_count(count: int) -> str:
    if count >= 1_000_000_000:
        return f"{count / 1_000_000_000:.1f}B"
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)


def view_count_options() -> List[ViewCountOption]:
    return [ViewCountOption(value=value, label=label) for value, label in VIEW_COUNT_OPTIONS]
