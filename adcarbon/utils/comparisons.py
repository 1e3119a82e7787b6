"""
AdCarbon — Environmental Comparisons
Everyday and digital activities with a similar footprint to one generation.
"""
import random
from typing import List, Optional

from adcarbon.schemas.schemas import ComparisonItem

EVERYDAY_COMPARISONS: List[ComparisonItem] = [
    ComparisonItem(icon="🚗", text="Driving a car for 0.5 km", category="everyday"),
    ComparisonItem(icon="💡", text="Running a LED bulb for 24 hours", category="everyday"),
    ComparisonItem(icon="☕", text="Making 2 cups of coffee", category="everyday"),
    ComparisonItem(icon="🍔", text="Eating a small burger", category="everyday"),
    ComparisonItem(icon="🚿", text="Taking a 5-minute hot shower", category="everyday"),
    ComparisonItem(icon="📱", text="Charging your phone 10 times", category="everyday"),
    ComparisonItem(icon="🌳", text="What a tree absorbs in 2 days", category="everyday"),
    ComparisonItem(icon="🔥", text="Burning a candle for 8 hours", category="everyday"),
]

DIGITAL_COMPARISONS: List[ComparisonItem] = [
    ComparisonItem(icon="📧", text="Sending 1,000 emails", category="digital"),
    ComparisonItem(icon="🎬", text="Streaming 30 minutes of HD video", category="digital"),
    ComparisonItem(icon="☁️", text="Storing 100 GB in the cloud for a month", category="digital"),
    ComparisonItem(icon="🎮", text="Gaming online for 2 hours", category="digital"),
    ComparisonItem(icon="💻", text="Running a laptop for 8 hours", category="digital"),
    ComparisonItem(icon="📹", text="A 1-hour Zoom call", category="digital"),
    ComparisonItem(icon="🔍", text="Making 500 Google searches", category="digital"),
    ComparisonItem(icon="📲", text="Scrolling social media for 3 hours", category="digital"),
]


def select_comparisons(rng: Optional[random.Random] = None, per_category: int = 2) -> List[ComparisonItem]:
    """Pick a few everyday items followed by a few digital ones."""
    rng = rng or random.Random()
    per_category = max(0, min(per_category, len(EVERYDAY_COMPARISONS), len(DIGITAL_COMPARISONS)))
    return rng.sample(EVERYDAY_COMPARISONS, per_category) + rng.sample(DIGITAL_COMPARISONS, per_category)
