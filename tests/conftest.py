"""
Shared fixtures and snapshot builders for engine tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from blockflow.schemas import Block, ManualEdge, Task, TaskStatus

BASE_TIME = datetime(2026, 2, 9, 9, 0, tzinfo=timezone.utc)


def make_task(
    task_id: str,
    block_id: str = "b1",
    status: TaskStatus | str = TaskStatus.TODO,
    depends_on: str | None = None,
    order: int = 0,
    minutes: int = 0,
) -> Task:
    return Task(
        id=task_id,
        block_id=block_id,
        title=f"Task {task_id}",
        status=status,
        depends_on_task_id=depends_on,
        order=order,
        updated_at=BASE_TIME + timedelta(minutes=minutes),
    )


def make_block(block_id: str, x: float = 0, y: float = 0) -> Block:
    return Block(id=block_id, title=f"Block {block_id}", x=x, y=y)


def make_edge(edge_id: str, source: str, target: str) -> ManualEdge:
    return ManualEdge(id=edge_id, source_block_id=source, target_block_id=target)


@pytest.fixture
def board_blocks():
    """Three cards laid out left to right, plus one below the first."""
    return [
        make_block("orders", x=0, y=0),
        make_block("suppliers", x=400, y=0),
        make_block("finance", x=800, y=0),
        make_block("support", x=0, y=400),
    ]


@pytest.fixture
def cross_block_tasks():
    """orders -> suppliers -> finance, plus a second dependent in suppliers."""
    return [
        make_task("t1", "orders", order=0),
        make_task("t2", "suppliers", depends_on="t1", order=1),
        make_task("t3", "suppliers", depends_on="t1", order=2),
        make_task("t4", "finance", depends_on="t2", order=3),
    ]
