"""
Tests for dependency blocking.

Tests cover:
- Immediate prerequisite rule (open task + unfinished prerequisite)
- Self and dangling references never block
- Non-transitive blocking
- Block rollup and per-block workflow counters
"""

from __future__ import annotations

import pytest

from blockflow.blocking import (
    compute_blocked_blocks,
    compute_blocked_tasks,
    computed_status,
    prerequisite_of,
    workflow_metrics,
)
from blockflow.schemas import BlockWorkflowMetrics, TaskStatus

from conftest import make_block, make_task


class TestComputeBlockedTasks:
    def test_open_prerequisite_blocks_dependent(self):
        tasks = [make_task("1"), make_task("2", depends_on="1")]
        assert compute_blocked_tasks(tasks) == {"2"}

    def test_done_prerequisite_unblocks(self):
        tasks = [make_task("1", status="done"), make_task("2", depends_on="1")]
        assert compute_blocked_tasks(tasks) == set()

    @pytest.mark.parametrize("status", ["todo", "in_progress", "blocked"])
    def test_every_open_status_can_be_blocked(self, status):
        tasks = [make_task("1", status="in_progress"), make_task("2", status=status, depends_on="1")]
        assert compute_blocked_tasks(tasks) == {"2"}

    def test_done_dependent_is_never_blocked(self):
        tasks = [make_task("1"), make_task("2", status="done", depends_on="1")]
        assert compute_blocked_tasks(tasks) == set()

    def test_no_dependency_never_blocks(self):
        tasks = [make_task("1", status="blocked"), make_task("2")]
        assert compute_blocked_tasks(tasks) == set()

    def test_self_reference_never_blocks(self):
        tasks = [make_task("1", depends_on="1")]
        assert compute_blocked_tasks(tasks) == set()

    def test_dangling_reference_never_blocks(self):
        tasks = [make_task("1", depends_on="ghost")]
        assert compute_blocked_tasks(tasks) == set()

    def test_blocking_is_not_transitive(self):
        """C waits only on B; B being done unblocks C even though A is open."""
        tasks = [
            make_task("A"),
            make_task("B", status="done", depends_on="A"),
            make_task("C", depends_on="B"),
        ]
        assert compute_blocked_tasks(tasks) == set()

    def test_cycle_blocks_every_open_member(self):
        tasks = [
            make_task("A", depends_on="C"),
            make_task("B", depends_on="A"),
            make_task("C", depends_on="B"),
        ]
        assert compute_blocked_tasks(tasks) == {"A", "B", "C"}

    def test_empty_input(self):
        assert compute_blocked_tasks([]) == set()


class TestPrerequisiteOf:
    def test_resolves_existing(self):
        a, b = make_task("a"), make_task("b", depends_on="a")
        assert prerequisite_of(b, {"a": a, "b": b}) is a

    def test_self_and_dangling_resolve_to_none(self):
        s = make_task("s", depends_on="s")
        d = make_task("d", depends_on="missing")
        lookup = {"s": s, "d": d}
        assert prerequisite_of(s, lookup) is None
        assert prerequisite_of(d, lookup) is None


class TestBlockedBlocks:
    def test_rollup(self):
        blocks = [make_block("x"), make_block("y"), make_block("z")]
        tasks = [
            make_task("1", "x"),
            make_task("2", "y", depends_on="1"),
            make_task("3", "z", status="done"),
        ]
        assert compute_blocked_blocks(blocks, tasks) == {"x": False, "y": True, "z": False}

    def test_every_block_starts_unblocked(self):
        blocks = [make_block("x"), make_block("y")]
        assert compute_blocked_blocks(blocks, []) == {"x": False, "y": False}

    def test_accepts_precomputed_set(self):
        blocks = [make_block("x")]
        tasks = [make_task("1", "x")]
        assert compute_blocked_blocks(blocks, tasks, {"1"}) == {"x": True}


class TestComputedStatus:
    def test_blocked_set_overrides_stored_status(self):
        task = make_task("1", status="in_progress")
        assert computed_status(task, {"1"}) == TaskStatus.BLOCKED
        assert computed_status(task, set()) == TaskStatus.IN_PROGRESS


class TestWorkflowMetrics:
    def test_counts_per_block(self):
        tasks = [
            make_task("1", "x"),
            make_task("2", "x", status="in_progress"),
            make_task("3", "x", depends_on="1"),
            make_task("4", "x", status="blocked"),
            make_task("5", "x", status="done"),
            make_task("6", "y", status="done"),
        ]
        metrics = workflow_metrics(tasks)
        assert metrics["x"] == BlockWorkflowMetrics(todo=1, in_progress=1, blocked=2, total_open=4)
        assert metrics["y"] == BlockWorkflowMetrics()

    def test_dependency_blocked_in_progress_counts_as_blocked(self):
        tasks = [make_task("1", "x"), make_task("2", "x", status="in_progress", depends_on="1")]
        metrics = workflow_metrics(tasks)
        assert metrics["x"].in_progress == 0
        assert metrics["x"].blocked == 1
