"""Flow accent colors, picked by chain color index."""

from __future__ import annotations

from typing import Optional, Sequence

FLOW_ACCENT_COLORS: tuple[str, ...] = (
    "rgba(192, 38, 211, 0.42)",
    "rgba(225, 29, 72, 0.42)",
    "rgba(13, 148, 136, 0.4)",
    "rgba(79, 70, 229, 0.42)",
)


def normalize_index(color_index: int, length: int) -> int:
    return color_index % length


def pick_accent(
    color_index: Optional[int],
    palette: Sequence[str] = FLOW_ACCENT_COLORS,
) -> Optional[str]:
    """Wrap a color index into the palette. Works for negative indexes too."""
    if color_index is None or not palette:
        return None
    return palette[normalize_index(color_index, len(palette))]
