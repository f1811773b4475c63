"""
Block-level edge projection.

Merges user-created block edges with edges inferred from cross-block task
dependencies, then routes each one between its two cards. Manual edges win
over inferred ones for the same ordered block pair, and any number of task
dependencies between the same two blocks collapse into one inferred edge.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

import structlog

from .blocking import compute_blocked_blocks, index_tasks, prerequisite_of
from .config import GeometryConfig
from .accents import pick_accent
from .flows import extract_chains
from .geometry import (
    DEFAULT_GEOMETRY,
    anchor_point,
    build_curve,
    choose_sides,
    curve_midpoint,
    to_svg_path,
)
from .metrics import MetricsCollector
from .schemas import (
    AnchorOverride,
    Block,
    EdgeKind,
    FlowInsights,
    ManualEdge,
    ProjectedEdge,
    Task,
    VisualEdge,
)

log = structlog.get_logger()

INFERRED_EDGE_PREFIX = "task-link:"


def inferred_edge_id(source_block_id: str, target_block_id: str) -> str:
    return f"{INFERRED_EDGE_PREFIX}{source_block_id}::{target_block_id}"


def _min_optional(current: Optional[int], value: Optional[int]) -> Optional[int]:
    if current is None:
        return value
    if value is None:
        return current
    return min(current, value)


def merge_edges(
    manual_edges: Sequence[ManualEdge],
    tasks: Sequence[Task],
    insights: FlowInsights,
    blocked_blocks: Optional[Mapping[str, bool]] = None,
) -> list[ProjectedEdge]:
    """Manual edges first, in input order, then one inferred edge per block pair."""
    blocked_blocks = blocked_blocks or {}
    edges = [
        ProjectedEdge(
            id=e.id,
            source_block_id=e.source_block_id,
            target_block_id=e.target_block_id,
            kind=EdgeKind.MANUAL,
            blocked=blocked_blocks.get(e.source_block_id, False),
        )
        for e in manual_edges
    ]
    manual_pairs = {(e.source_block_id, e.target_block_id) for e in manual_edges}

    tasks_by_id = index_tasks(tasks)
    inferred: dict[tuple[str, str], ProjectedEdge] = {}

    for task in tasks:
        prerequisite = prerequisite_of(task, tasks_by_id)
        if prerequisite is None or prerequisite.block_id == task.block_id:
            continue

        # Drawn in flow direction: prerequisite block -> dependent block
        pair = (prerequisite.block_id, task.block_id)
        if pair in manual_pairs:
            continue

        key = (prerequisite.id, task.id)
        step = insights.edge_step.get(key, 1)
        color_index = insights.edge_color_index.get(key)

        existing = inferred.get(pair)
        if existing is None:
            inferred[pair] = ProjectedEdge(
                id=inferred_edge_id(*pair),
                source_block_id=pair[0],
                target_block_id=pair[1],
                kind=EdgeKind.INFERRED,
                step=step,
                color_index=color_index,
                accent=pick_accent(color_index),
            )
            continue

        merged_color = _min_optional(existing.color_index, color_index)
        inferred[pair] = existing.model_copy(
            update={
                "step": _min_optional(existing.step, step),
                "color_index": merged_color,
                "accent": pick_accent(merged_color),
            }
        )

    return edges + list(inferred.values())


def route_edges(
    edges: Sequence[ProjectedEdge],
    blocks: Sequence[Block],
    anchor_overrides: Optional[Mapping[str, AnchorOverride]] = None,
    geometry: GeometryConfig = DEFAULT_GEOMETRY,
    metrics: Optional[MetricsCollector] = None,
) -> list[VisualEdge]:
    """Attach connector geometry. Edges touching an unknown block are dropped."""
    anchor_overrides = anchor_overrides or {}
    blocks_by_id = {b.id: b for b in blocks}
    routed: list[VisualEdge] = []

    for edge in edges:
        source = blocks_by_id.get(edge.source_block_id)
        target = blocks_by_id.get(edge.target_block_id)

        override = anchor_overrides.get(edge.id) if edge.kind == EdgeKind.MANUAL else None
        if override is not None:
            source_side, target_side = override.source_side, override.target_side
        else:
            source_side, target_side = choose_sides(source, target, geometry)

        start = anchor_point(source, source_side, geometry)
        end = anchor_point(target, target_side, geometry)
        if start is None or end is None:
            log.debug(
                "edges.dropped",
                edge_id=edge.id,
                source=edge.source_block_id,
                target=edge.target_block_id,
            )
            if metrics is not None:
                metrics.inc("edges_dropped_total")
            continue

        curve = build_curve(start, end, source_side, geometry)
        routed.append(
            VisualEdge(
                **edge.model_dump(),
                source_side=source_side,
                target_side=target_side,
                curve=curve,
                path=to_svg_path(curve),
                midpoint=curve_midpoint(start, end, source_side, geometry),
            )
        )

    return routed


def project_edges(
    manual_edges: Sequence[ManualEdge],
    tasks: Sequence[Task],
    blocks: Sequence[Block],
    insights: Optional[FlowInsights] = None,
    blocked_blocks: Optional[Mapping[str, bool]] = None,
    anchor_overrides: Optional[Mapping[str, AnchorOverride]] = None,
    geometry: GeometryConfig = DEFAULT_GEOMETRY,
    metrics: Optional[MetricsCollector] = None,
) -> list[VisualEdge]:
    if insights is None:
        insights = extract_chains(tasks)
    if blocked_blocks is None:
        blocked_blocks = compute_blocked_blocks(blocks, tasks)

    merged = merge_edges(manual_edges, tasks, insights, blocked_blocks)
    return route_edges(merged, blocks, anchor_overrides, geometry, metrics)
