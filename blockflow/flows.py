"""
Flow chain extraction.

Treats every valid ``depends_on_task_id`` pointer as a prerequisite ->
dependent edge and enumerates the maximal chains reachable from the roots of
that graph. Pointers are not checked for cycles when written, so the walk
keeps a per-branch visited set: a task already on the current path ends the
chain instead of being entered again.

Handles:
- Stable sibling and root ordering by (order, updated_at)
- Cycle-only graphs, where every task with dependents becomes a root
- Per-edge step / color index and per-task step assignment
- The flow list view built from the same chains
"""

from __future__ import annotations

from typing import Mapping, Sequence

import structlog

from .accents import pick_accent
from .blocking import computed_status, index_tasks, prerequisite_of
from .schemas import Block, Flow, FlowInsights, FlowStep, Task, TaskEdgeStat

log = structlog.get_logger()


def _sort_key(task: Task) -> tuple[int, str]:
    stamp = task.updated_at.isoformat() if task.updated_at else ""
    return task.order, stamp


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------


def build_dependents(tasks: Sequence[Task]) -> tuple[dict[str, list[str]], dict[str, int]]:
    """Return (dependents by prerequisite id, indegree by task id)."""
    tasks_by_id = index_tasks(tasks)
    dependents: dict[str, list[str]] = {t.id: [] for t in tasks}
    indegree: dict[str, int] = {t.id: 0 for t in tasks}

    for task in tasks:
        prerequisite = prerequisite_of(task, tasks_by_id)
        if prerequisite is None:
            continue
        dependents[prerequisite.id].append(task.id)
        indegree[task.id] += 1

    for children in dependents.values():
        children.sort(key=lambda child_id: _sort_key(tasks_by_id[child_id]))

    return dependents, indegree


def select_roots(
    tasks: Sequence[Task],
    dependents: Mapping[str, list[str]],
    indegree: Mapping[str, int],
) -> tuple[list[str], bool]:
    """Return (root ids, whether the cycle fallback was used)."""
    ordered = sorted(tasks, key=_sort_key)
    roots = [t.id for t in ordered if indegree.get(t.id, 0) == 0 and dependents.get(t.id)]
    if roots:
        return roots, False
    return [t.id for t in ordered if dependents.get(t.id)], True


def walk_chains(root_id: str, dependents: Mapping[str, list[str]]) -> list[list[str]]:
    """Depth-first enumeration of the chains starting at ``root_id``.

    Uses an explicit stack so long chains do not hit the recursion limit.
    Each frame carries its own path and visited set. A chain is emitted when
    the walk reaches a task with no dependents, or when every dependent is
    already on the path.
    """
    chains: list[list[str]] = []
    stack: list[tuple[str, tuple[str, ...], frozenset[str]]] = [
        (root_id, (root_id,), frozenset({root_id}))
    ]

    while stack:
        task_id, path, visited = stack.pop()
        children = dependents.get(task_id, [])
        fresh = [c for c in children if c not in visited]

        if not fresh:
            if len(path) > 1:
                chains.append(list(path))
            continue

        # Reversed so the first child is walked first
        for child_id in reversed(fresh):
            stack.append((child_id, path + (child_id,), visited | {child_id}))

    return chains


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def extract_chains(tasks: Sequence[Task]) -> FlowInsights:
    tasks_by_id = index_tasks(tasks)
    dependents, indegree = build_dependents(tasks)
    roots, cycle_fallback = select_roots(tasks, dependents, indegree)
    if cycle_fallback and roots:
        log.debug("flows.cycle_fallback", roots=len(roots))

    found: list[list[str]] = []
    for root_id in roots:
        found.extend(walk_chains(root_id, dependents))

    # First occurrence wins; order of discovery is preserved
    unique = dict.fromkeys(tuple(chain) for chain in found)
    chains = [list(chain) for chain in unique]

    pair_fallback = False
    if not chains:
        for task in tasks:
            prerequisite = prerequisite_of(task, tasks_by_id)
            if prerequisite is None:
                continue
            chains.append([prerequisite.id, task.id])
        pair_fallback = bool(chains)
        if pair_fallback:
            log.debug("flows.pair_fallback", chains=len(chains))

    edge_step: dict[tuple[str, str], int] = {}
    edge_color_index: dict[tuple[str, str], int] = {}
    task_step: dict[str, int] = {}

    for color_index, chain in enumerate(chains):
        for position, task_id in enumerate(chain):
            step = position + 1
            task_step[task_id] = min(task_step.get(task_id, step), step)
            if position == 0:
                continue
            key = (chain[position - 1], task_id)
            edge_step[key] = min(edge_step.get(key, position), position)
            edge_color_index[key] = min(edge_color_index.get(key, color_index), color_index)

    return FlowInsights(
        chains=chains,
        edge_step=edge_step,
        edge_color_index=edge_color_index,
        task_step=task_step,
        used_cycle_fallback=cycle_fallback and bool(roots),
        used_pair_fallback=pair_fallback,
    )


def task_edge_stats(insights: FlowInsights) -> list[TaskEdgeStat]:
    """Flatten the per-edge maps into records, in first-seen order."""
    return [
        TaskEdgeStat(
            prerequisite_id=prerequisite_id,
            dependent_id=dependent_id,
            step=step,
            color_index=insights.edge_color_index[(prerequisite_id, dependent_id)],
        )
        for (prerequisite_id, dependent_id), step in insights.edge_step.items()
    ]


# ---------------------------------------------------------------------------
# Flow list view
# ---------------------------------------------------------------------------


def list_flows(
    insights: FlowInsights,
    tasks: Sequence[Task],
    blocks: Sequence[Block],
    blocked_task_ids: set[str],
) -> list[Flow]:
    """Render chains as flows, longest first.

    Steps whose task or block no longer exists are left out, and a flow that
    ends up with fewer than two steps is not listed.
    """
    tasks_by_id = index_tasks(tasks)
    block_ids = {b.id for b in blocks}
    flows: list[Flow] = []

    for color_index, chain in enumerate(insights.chains):
        steps: list[FlowStep] = []
        for task_id in chain:
            task = tasks_by_id.get(task_id)
            if task is None or task.block_id not in block_ids:
                continue
            prerequisite = prerequisite_of(task, tasks_by_id)
            dependency_block_id = None
            if prerequisite is not None and prerequisite.block_id in block_ids:
                dependency_block_id = prerequisite.block_id
            steps.append(
                FlowStep(
                    task_id=task.id,
                    block_id=task.block_id,
                    computed_status=computed_status(task, blocked_task_ids),
                    dependency_task_id=prerequisite.id if prerequisite else None,
                    dependency_block_id=dependency_block_id,
                )
            )

        if len(steps) > 1:
            flows.append(
                Flow(
                    id=f"flow-{color_index + 1}",
                    color_index=color_index,
                    accent=pick_accent(color_index),
                    steps=steps,
                )
            )

    flows.sort(key=lambda f: len(f.steps), reverse=True)
    return flows
