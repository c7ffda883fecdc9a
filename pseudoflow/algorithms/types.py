"""Types and data structures for solver analytics and results."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Tuple

from pseudoflow.config import SolverConfig


@dataclass
class FlowStatistics:
    """Operation counters collected during a solve.

    Attributes:
        num_pushes: Excess pushes across tree arcs.
        num_mergers: Strong trees merged into a weak tree.
        num_relabels: Single-node label increments (including bucket-0 promotions).
        num_gaps: Gap events detected by root selection.
        num_arc_scans: Out-of-tree arcs examined while searching for weak nodes.
    """

    num_pushes: int = 0
    num_mergers: int = 0
    num_relabels: int = 0
    num_gaps: int = 0
    num_arc_scans: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass
class PhaseTimings:
    """Wall-clock seconds spent in each solver phase."""

    initialize: float = 0.0
    phase_one: float = 0.0
    recover: float = 0.0
    check: float = 0.0

    @property
    def total(self) -> float:
        return self.initialize + self.phase_one + self.recover + self.check

    def to_dict(self) -> Dict[str, float]:
        data = asdict(self)
        data["total"] = self.total
        return data


@dataclass(frozen=True)
class CapacityViolation:
    """An arc whose flow lies outside ``[0, capacity]``."""

    arc: int
    src: int
    dst: int
    flow: int
    capacity: int

    def describe(self) -> str:
        return (
            f"Capacity constraint violated on arc ({self.src}, {self.dst}). "
            f"Flow = {self.flow}, capacity = {self.capacity}"
        )


@dataclass(frozen=True)
class BalanceViolation:
    """A non-terminal node whose inflow differs from its outflow."""

    node: int
    excess: int

    def describe(self) -> str:
        return f"Flow balance constraint violated in node {self.node}. Excess = {self.excess}"


@dataclass(frozen=True)
class OptimalityReport:
    """Feasibility and optimality of a computed flow.

    Attributes:
        min_cut: Capacity of the cut defined by the final labels and the gap.
        flow_value: Net inflow at the sink.
        capacity_violations: Arcs violating ``0 <= flow <= capacity``.
        balance_violations: Non-terminal nodes violating conservation.
    """

    min_cut: int
    flow_value: int
    capacity_violations: Tuple[CapacityViolation, ...] = ()
    balance_violations: Tuple[BalanceViolation, ...] = ()

    @property
    def feasible(self) -> bool:
        return not self.capacity_violations and not self.balance_violations

    @property
    def optimal(self) -> bool:
        return self.feasible and self.flow_value == self.min_cut

    @property
    def violations(self) -> List[str]:
        return [v.describe() for v in self.capacity_violations] + [
            v.describe() for v in self.balance_violations
        ]


@dataclass(frozen=True)
class MaxFlowResult:
    """Outcome of a full pseudoflow solve.

    Attributes:
        flow_value: Total flow reaching the sink.
        arc_flows: Final flow of every arc, in input order.
        min_cut_value: Capacity of the minimum cut.
        source_set: 1-based numbers of the nodes on the source side of the cut.
        min_cut_arcs: Input indices of the arcs crossing the cut.
        report: Feasibility / optimality check of the final flow.
        stats: Operation counters.
        timings: Seconds spent per phase.
        config: Solver switches used for this solve.
    """

    flow_value: int
    arc_flows: Tuple[int, ...]
    min_cut_value: int
    source_set: frozenset
    min_cut_arcs: Tuple[int, ...]
    report: OptimalityReport
    stats: FlowStatistics
    timings: PhaseTimings = field(default_factory=PhaseTimings)
    config: SolverConfig = field(default_factory=SolverConfig)

    @property
    def optimal(self) -> bool:
        return self.report.optimal

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "flow_value": self.flow_value,
            "min_cut_value": self.min_cut_value,
            "optimal": self.optimal,
            "feasible": self.report.feasible,
            "violations": self.report.violations,
            "arc_flows": list(self.arc_flows),
            "source_set": sorted(self.source_set),
            "min_cut_arcs": list(self.min_cut_arcs),
            "stats": self.stats.to_dict(),
            "timings": self.timings.to_dict(),
            "config": self.config.to_dict(),
        }
