"""
Colour palette for dropdown values.

18 colours in three rows of intensity (light, medium, strong).
"""
from typing import Optional


COLOR_PALETTE = [
    # Light pastels
    "#fce4ec", "#fff3e0", "#fffde7", "#e8f5e9", "#e3f2fd", "#f3e5f5",
    # Medium pastels
    "#f8bbd0", "#ffcc80", "#fff59d", "#a5d6a7", "#90caf9", "#ce93d8",
    # Strong
    "#f48fb1", "#ffb74d", "#fff176", "#81c784", "#64b5f6", "#ba68c8",
]


def get_auto_color(index: int) -> str:
    """Round-robin colour for the value at position `index`."""
    return COLOR_PALETTE[index % len(COLOR_PALETTE)]


def is_valid_color(color: Optional[str]) -> bool:
    return isinstance(color, str) and len(color) > 0
