"""Tests for resolution tiers and the traditional cost model."""
import pytest

from adcarbon.services.ad_comparison import (
    AI_GENERATION_METHOD,
    RESOLUTION_TIERS,
    calculate_traditional_co2,
    generate_comparison,
    get_all_tier_comparisons,
    get_resolution_tier,
    get_traditional_ad_data,
)
from tests.conftest import make_metadata


@pytest.mark.parametrize("width, height, tier_name", [
    (1, 1, "Low Resolution"),
    (1024, 768, "Low Resolution"),
    (1000, 1000, "Low Resolution"),
    (1000, 1001, "Medium Resolution"),
    (1920, 1080, "Medium Resolution"),
    (2000, 2000, "Medium Resolution"),
    (3840, 2160, "High Resolution"),
    (20000, 20000, "High Resolution"),
])
def test_get_resolution_tier(width, height, tier_name):
    assert get_resolution_tier(make_metadata(width, height)).name == tier_name


def test_tiers_are_ascending_and_open_ended():
    thresholds = [t.pixel_threshold for t in RESOLUTION_TIERS]
    assert thresholds == sorted(thresholds)
    assert thresholds[-1] == float("inf")


@pytest.mark.parametrize("tier_name, total", [
    ("Low Resolution", 970),
    ("Medium Resolution", 2210),
    ("High Resolution", 7410),
])
def test_traditional_totals(tier_name, total):
    assert get_traditional_ad_data(tier_name).total_co2 == pytest.approx(total)


def test_traditional_totals_are_memoized():
    assert get_traditional_ad_data("High Resolution") is get_traditional_ad_data("High Resolution")


def test_calculate_traditional_co2_ignores_photoshoot_cost_without_photoshoot():
    data = get_traditional_ad_data("Low Resolution").model_copy(update={"photoshoot_co2": 9999})
    assert calculate_traditional_co2(data) == pytest.approx(970)


def test_generate_comparison():
    comparison = generate_comparison(make_metadata(1920, 1080), 210)
    assert comparison.tier.name == "Medium Resolution"
    assert comparison.ai_generated.method == AI_GENERATION_METHOD
    assert comparison.savings.co2_grams == pytest.approx(2000)
    assert comparison.savings.percentage == pytest.approx(2000 / 2210 * 100)


def test_savings_percentage_never_negative():
    comparison = generate_comparison(make_metadata(100, 100), 5000)
    assert comparison.savings.co2_grams < 0
    assert comparison.savings.percentage == 0


def test_all_tier_comparisons():
    comparisons = get_all_tier_comparisons(100)
    assert [c.tier.name for c in comparisons] == [t.name for t in RESOLUTION_TIERS]
    assert all(c.ai_generated.co2 == 100 for c in comparisons)


def test_open_ended_tier_serializes_threshold_as_null():
    assert RESOLUTION_TIERS[-1].model_dump(mode="json")["pixel_threshold"] is None
    assert RESOLUTION_TIERS[0].model_dump(mode="json")["pixel_threshold"] == 1_000_000
