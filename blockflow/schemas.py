"""Pydantic models for workspace snapshots and analysis results."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DONE = "done"


# Everything except done counts as open work
OPEN_STATUSES: frozenset["TaskStatus"] = frozenset(
    {TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.BLOCKED}
)


class AnchorSide(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


class EdgeKind(str, Enum):
    MANUAL = "manual"
    INFERRED = "inferred"


# ---------------------------------------------------------------------------
# Snapshot input
# ---------------------------------------------------------------------------

class Task(BaseModel):
    """A unit of work owned by exactly one block."""
    model_config = ConfigDict(frozen=True)

    id: str
    block_id: str
    title: str = ""
    status: TaskStatus = TaskStatus.TODO
    depends_on_task_id: Optional[str] = None
    order: int = 0
    updated_at: Optional[datetime] = None


class Block(BaseModel):
    """A positioned card on the board. Every card has the same size."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    x: float = 0.0
    y: float = 0.0


class ManualEdge(BaseModel):
    """A user-created block-to-block relation."""
    model_config = ConfigDict(frozen=True)

    id: str
    source_block_id: str
    target_block_id: str
    relation: Literal["depends_on"] = "depends_on"


class AnchorOverride(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_side: AnchorSide
    target_side: AnchorSide


class Snapshot(BaseModel):
    """Immutable view of a workspace handed to the engine on every change."""
    model_config = ConfigDict(frozen=True)

    tasks: List[Task] = Field(default_factory=list)
    blocks: List[Block] = Field(default_factory=list)
    manual_edges: List[ManualEdge] = Field(default_factory=list)
    anchor_overrides: Dict[str, AnchorOverride] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class CubicCurve(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Point
    c1: Point
    c2: Point
    end: Point


# ---------------------------------------------------------------------------
# Analysis output
# ---------------------------------------------------------------------------

class FlowInsights(BaseModel):
    """Chains discovered in the dependency graph.

    ``edge_step`` and ``edge_color_index`` are keyed by
    ``(prerequisite_id, dependent_id)``.
    """
    chains: List[List[str]] = Field(default_factory=list)
    edge_step: Dict[Tuple[str, str], int] = Field(default_factory=dict)
    edge_color_index: Dict[Tuple[str, str], int] = Field(default_factory=dict)
    task_step: Dict[str, int] = Field(default_factory=dict)
    used_cycle_fallback: bool = False
    used_pair_fallback: bool = False


class TaskEdgeStat(BaseModel):
    """Step and color of one prerequisite -> dependent edge."""
    prerequisite_id: str
    dependent_id: str
    step: int
    color_index: int


class FlowStep(BaseModel):
    task_id: str
    block_id: str
    computed_status: TaskStatus
    dependency_task_id: Optional[str] = None
    dependency_block_id: Optional[str] = None


class Flow(BaseModel):
    id: str
    color_index: int
    accent: Optional[str] = None
    steps: List[FlowStep] = Field(default_factory=list)


class BlockWorkflowMetrics(BaseModel):
    todo: int = 0
    in_progress: int = 0
    blocked: int = 0
    total_open: int = 0


class ProjectedEdge(BaseModel):
    """A block-to-block edge before geometry is attached."""
    id: str
    source_block_id: str
    target_block_id: str
    kind: EdgeKind
    step: Optional[int] = None
    color_index: Optional[int] = None
    accent: Optional[str] = None
    blocked: bool = False


class VisualEdge(ProjectedEdge):
    """A projected edge routed between two cards."""
    source_side: AnchorSide
    target_side: AnchorSide
    curve: CubicCurve
    path: str
    midpoint: Point


class Analysis(BaseModel):
    blocked_task_ids: List[str] = Field(default_factory=list)
    blocked_blocks: Dict[str, bool] = Field(default_factory=dict)
    chains: List[List[str]] = Field(default_factory=list)
    task_step: Dict[str, int] = Field(default_factory=dict)
    task_edges: List[TaskEdgeStat] = Field(default_factory=list)
    visual_edges: List[VisualEdge] = Field(default_factory=list)
    flows: List[Flow] = Field(default_factory=list)
    workflow_metrics: Dict[str, BlockWorkflowMetrics] = Field(default_factory=dict)
