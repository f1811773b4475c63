"""
Connector geometry between cards on the board.

Cards are axis-aligned rectangles of identical size positioned by their
top-left corner. Connectors leave from the midpoint of one card side and
arrive at the midpoint of another, drawn as a cubic Bezier curve whose
control points push out perpendicular to the departure side.
"""

from __future__ import annotations

from typing import Optional

from .config import GeometryConfig
from .schemas import AnchorSide, Block, CubicCurve, Point

DEFAULT_GEOMETRY = GeometryConfig()

_HORIZONTAL = (AnchorSide.LEFT, AnchorSide.RIGHT)


def anchor_point(
    block: Optional[Block],
    side: AnchorSide,
    geometry: GeometryConfig = DEFAULT_GEOMETRY,
) -> Optional[Point]:
    """Midpoint of the requested card side, or None for an unknown card."""
    if block is None:
        return None

    w, h = geometry.card_width, geometry.card_height
    if side == AnchorSide.LEFT:
        return Point(x=block.x, y=block.y + h / 2)
    if side == AnchorSide.RIGHT:
        return Point(x=block.x + w, y=block.y + h / 2)
    if side == AnchorSide.TOP:
        return Point(x=block.x + w / 2, y=block.y)
    return Point(x=block.x + w / 2, y=block.y + h)


def block_center(block: Block, geometry: GeometryConfig = DEFAULT_GEOMETRY) -> Point:
    return Point(x=block.x + geometry.card_width / 2, y=block.y + geometry.card_height / 2)


def choose_sides(
    source: Optional[Block],
    target: Optional[Block],
    geometry: GeometryConfig = DEFAULT_GEOMETRY,
) -> tuple[AnchorSide, AnchorSide]:
    """Pick the (source, target) sides to connect.

    Ties on the dominant axis go horizontal, and a zero offset counts as
    right/below. Unknown cards fall back to right -> left.
    """
    if source is None or target is None:
        return AnchorSide.RIGHT, AnchorSide.LEFT

    a = block_center(source, geometry)
    b = block_center(target, geometry)
    dx = b.x - a.x
    dy = b.y - a.y

    if abs(dx) >= abs(dy):
        if dx >= 0:
            return AnchorSide.RIGHT, AnchorSide.LEFT
        return AnchorSide.LEFT, AnchorSide.RIGHT

    if dy >= 0:
        return AnchorSide.BOTTOM, AnchorSide.TOP
    return AnchorSide.TOP, AnchorSide.BOTTOM


def curve_offset(distance: float, geometry: GeometryConfig = DEFAULT_GEOMETRY) -> float:
    """Control point offset: proportional to the axis distance, clamped."""
    return min(geometry.curve_max, max(geometry.curve_min, abs(distance) * geometry.curve_factor))


def control_points(
    start: Point,
    end: Point,
    start_side: AnchorSide,
    geometry: GeometryConfig = DEFAULT_GEOMETRY,
) -> tuple[Point, Point]:
    if start_side in _HORIZONTAL:
        direction = 1 if start_side == AnchorSide.RIGHT else -1
        offset = curve_offset(end.x - start.x, geometry)
        return (
            Point(x=start.x + direction * offset, y=start.y),
            Point(x=end.x - direction * offset, y=end.y),
        )

    direction = 1 if start_side == AnchorSide.BOTTOM else -1
    offset = curve_offset(end.y - start.y, geometry)
    return (
        Point(x=start.x, y=start.y + direction * offset),
        Point(x=end.x, y=end.y - direction * offset),
    )


def build_curve(
    start: Point,
    end: Point,
    start_side: AnchorSide,
    geometry: GeometryConfig = DEFAULT_GEOMETRY,
) -> CubicCurve:
    c1, c2 = control_points(start, end, start_side, geometry)
    return CubicCurve(start=start, c1=c1, c2=c2, end=end)


def point_at(curve: CubicCurve, t: float) -> Point:
    """Evaluate the curve at parameter ``t`` using the Bernstein weights."""
    mt = 1 - t
    w0 = mt * mt * mt
    w1 = 3 * mt * mt * t
    w2 = 3 * mt * t * t
    w3 = t * t * t
    return Point(
        x=w0 * curve.start.x + w1 * curve.c1.x + w2 * curve.c2.x + w3 * curve.end.x,
        y=w0 * curve.start.y + w1 * curve.c1.y + w2 * curve.c2.y + w3 * curve.end.y,
    )


def curve_midpoint(
    start: Point,
    end: Point,
    start_side: AnchorSide,
    geometry: GeometryConfig = DEFAULT_GEOMETRY,
) -> Point:
    return point_at(build_curve(start, end, start_side, geometry), 0.5)


def _fmt(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return repr(value)


def to_svg_path(curve: CubicCurve) -> str:
    """SVG path data, e.g. ``M 0 0 C 24 0, 76 10, 100 10``."""
    s, c1, c2, e = curve.start, curve.c1, curve.c2, curve.end
    return (
        f"M {_fmt(s.x)} {_fmt(s.y)} "
        f"C {_fmt(c1.x)} {_fmt(c1.y)}, {_fmt(c2.x)} {_fmt(c2.y)}, {_fmt(e.x)} {_fmt(e.y)}"
    )
