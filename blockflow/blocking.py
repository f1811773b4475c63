"""
Dependency blocking: which open tasks wait on an unfinished prerequisite.

Blocking only looks at the immediate prerequisite. A task whose prerequisite
is done is unblocked even if something further upstream is still open.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Mapping, Optional, Sequence

from .schemas import (
    OPEN_STATUSES,
    Block,
    BlockWorkflowMetrics,
    Task,
    TaskStatus,
)


def index_tasks(tasks: Iterable[Task]) -> dict[str, Task]:
    return {t.id: t for t in tasks}


def prerequisite_of(task: Task, tasks_by_id: Mapping[str, Task]) -> Optional[Task]:
    """Resolve a task's prerequisite.

    Self references and ids that do not exist in the snapshot resolve to None,
    the same as having no dependency at all.
    """
    dep_id = task.depends_on_task_id
    if not dep_id or dep_id == task.id:
        return None
    return tasks_by_id.get(dep_id)


def compute_blocked_tasks(tasks: Sequence[Task]) -> set[str]:
    tasks_by_id = index_tasks(tasks)
    blocked: set[str] = set()

    for task in tasks:
        if task.status not in OPEN_STATUSES:
            continue
        prerequisite = prerequisite_of(task, tasks_by_id)
        if prerequisite is None:
            continue
        if prerequisite.status == TaskStatus.DONE:
            continue
        blocked.add(task.id)

    return blocked


def compute_blocked_blocks(
    blocks: Sequence[Block],
    tasks: Sequence[Task],
    blocked_task_ids: Optional[set[str]] = None,
) -> dict[str, bool]:
    """Flag every block that owns at least one dependency-blocked task."""
    if blocked_task_ids is None:
        blocked_task_ids = compute_blocked_tasks(tasks)

    flags = {b.id: False for b in blocks}
    for task in tasks:
        if task.id in blocked_task_ids:
            flags[task.block_id] = True
    return flags


def computed_status(task: Task, blocked_task_ids: set[str]) -> TaskStatus:
    """Status shown to users: dependency blocking overrides the stored one."""
    if task.id in blocked_task_ids:
        return TaskStatus.BLOCKED
    return task.status


def workflow_metrics(
    tasks: Sequence[Task],
    blocked_task_ids: Optional[set[str]] = None,
) -> dict[str, BlockWorkflowMetrics]:
    """Per-block open work counters for the card badges."""
    if blocked_task_ids is None:
        blocked_task_ids = compute_blocked_tasks(tasks)

    metrics: dict[str, BlockWorkflowMetrics] = defaultdict(BlockWorkflowMetrics)
    for task in tasks:
        current = metrics[task.block_id]
        status = computed_status(task, blocked_task_ids)
        if status == TaskStatus.TODO:
            current.todo += 1
        elif status == TaskStatus.IN_PROGRESS:
            current.in_progress += 1
        elif status == TaskStatus.BLOCKED:
            current.blocked += 1
        if status in OPEN_STATUSES:
            current.total_open += 1

    return dict(metrics)
