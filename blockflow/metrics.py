"""
Engine run metrics in Prometheus text format.

Only the metrics declared below exist; recording an undeclared name is a
programming error and raises ``KeyError``.
"""

from __future__ import annotations

from typing import Any

from .schemas import FlowInsights

PREFIX = "blockflow_"

COUNTERS: dict[str, str] = {
    "analyses_total": "Snapshots analyzed.",
    "cycle_fallback_total": "Analyses whose chains were rooted at cycle members.",
    "pair_fallback_total": "Analyses that fell back to one chain per dependency.",
    "edges_dropped_total": "Connectors dropped because a card was missing.",
}

GAUGES: dict[str, str] = {
    "chains": "Chains found by the last analysis.",
    "blocked_tasks": "Dependency-blocked tasks in the last analysis.",
    "visual_edges": "Connectors routed by the last analysis.",
}


class MetricsCollector:
    """Counters accumulate across analyses; gauges describe the latest one."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = dict.fromkeys(COUNTERS, 0)
        self._gauges: dict[str, int] = dict.fromkeys(GAUGES, 0)

    def inc(self, name: str, value: int = 1) -> None:
        if name not in COUNTERS:
            raise KeyError(f"Unknown counter: {name}")
        self._counters[name] += value

    def set_gauge(self, name: str, value: int) -> None:
        if name not in GAUGES:
            raise KeyError(f"Unknown gauge: {name}")
        self._gauges[name] = value

    def get(self, name: str) -> int:
        if name in self._counters:
            return self._counters[name]
        return self._gauges[name]

    def record_analysis(self, insights: FlowInsights, blocked_tasks: int, visual_edges: int) -> None:
        self.inc("analyses_total")
        if insights.used_cycle_fallback:
            self.inc("cycle_fallback_total")
        if insights.used_pair_fallback:
            self.inc("pair_fallback_total")
        self.set_gauge("chains", len(insights.chains))
        self.set_gauge("blocked_tasks", blocked_tasks)
        self.set_gauge("visual_edges", visual_edges)

    def to_prometheus(self) -> str:
        lines = []
        for kind, values, docs in (
            ("counter", self._counters, COUNTERS),
            ("gauge", self._gauges, GAUGES),
        ):
            for name in sorted(values):
                full = f"{PREFIX}{name}"
                lines.append(f"# HELP {full} {docs[name]}")
                lines.append(f"# TYPE {full} {kind}")
                lines.append(f"{full} {values[name]}")
        return "\n".join(lines) + "\n"

    def to_dict(self) -> dict[str, Any]:
        return {"counters": dict(self._counters), "gauges": dict(self._gauges)}
