"""Tests for flow accent lookup."""

from blockflow.accents import FLOW_ACCENT_COLORS, pick_accent


def test_index_wraps_around_palette():
    assert pick_accent(0) == FLOW_ACCENT_COLORS[0]
    assert pick_accent(len(FLOW_ACCENT_COLORS)) == FLOW_ACCENT_COLORS[0]
    assert pick_accent(5) == FLOW_ACCENT_COLORS[1]


def test_negative_index():
    assert pick_accent(-1) == FLOW_ACCENT_COLORS[-1]


def test_missing_index_or_palette():
    assert pick_accent(None) is None
    assert pick_accent(2, palette=()) is None


def test_custom_palette():
    assert pick_accent(3, palette=("red", "blue")) == "blue"
