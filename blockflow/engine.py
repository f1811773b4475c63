"""
Analysis pipeline.

One call per snapshot: blocking -> flow chains -> edge projection ->
connector geometry. Nothing is cached between calls.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import structlog
import yaml

from .blocking import compute_blocked_blocks, compute_blocked_tasks, workflow_metrics
from .config import EngineConfig
from .edges import merge_edges, route_edges
from .flows import extract_chains, list_flows, task_edge_stats
from .metrics import MetricsCollector
from .schemas import Analysis, Snapshot

log = structlog.get_logger()


def analyze(
    snapshot: Snapshot,
    config: Optional[EngineConfig] = None,
    metrics: Optional[MetricsCollector] = None,
) -> Analysis:
    config = config or EngineConfig()
    tasks, blocks = snapshot.tasks, snapshot.blocks

    blocked_task_ids = compute_blocked_tasks(tasks)
    blocked_blocks = compute_blocked_blocks(blocks, tasks, blocked_task_ids)
    insights = extract_chains(tasks)

    merged = merge_edges(snapshot.manual_edges, tasks, insights, blocked_blocks)
    visual_edges = route_edges(
        merged,
        blocks,
        snapshot.anchor_overrides,
        config.geometry,
        metrics,
    )

    if metrics is not None:
        metrics.record_analysis(insights, len(blocked_task_ids), len(visual_edges))

    log.debug(
        "engine.analyzed",
        tasks=len(tasks),
        blocks=len(blocks),
        blocked=len(blocked_task_ids),
        chains=len(insights.chains),
        edges=len(visual_edges),
        dropped=len(merged) - len(visual_edges),
    )

    return Analysis(
        blocked_task_ids=sorted(blocked_task_ids),
        blocked_blocks=blocked_blocks,
        chains=insights.chains,
        task_step=insights.task_step,
        task_edges=task_edge_stats(insights),
        visual_edges=visual_edges,
        flows=list_flows(insights, tasks, blocks, blocked_task_ids),
        workflow_metrics=workflow_metrics(tasks, blocked_task_ids),
    )


def load_snapshot(path: str | Path) -> Snapshot:
    """Read a snapshot from a JSON or YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    text = path.read_text()
    if path.suffix == ".json":
        raw = json.loads(text)
    else:
        raw = yaml.safe_load(text)

    return Snapshot.model_validate(raw or {})
