from __future__ import annotations

from typing import List, Optional

from pseudoflow.algorithms.state import SolverState
from pseudoflow.algorithms.types import (
    BalanceViolation,
    CapacityViolation,
    OptimalityReport,
)


def check_optimality(state: SolverState, gap: Optional[int] = None) -> OptimalityReport:
    """
    Check the final flow for feasibility and compare it with the cut.

    The cut separates nodes labeled at or above ``gap`` (source side) from the
    rest. The flow is feasible when every arc respects its capacity and every
    node other than source and sink is balanced; it is optimal when, in
    addition, the flow reaching the sink equals the cut capacity. Problems are
    reported, never raised.

    Args:
        state: Solver state after ``recover_flow``.
        gap: Cut label; defaults to the gap of the configured policy.

    Returns:
        OptimalityReport describing the flow.
    """
    network = state.network
    nodes = network.nodes
    if gap is None:
        gap = state.gap

    min_cut = 0
    capacity_violations: List[CapacityViolation] = []
    for index, arc in enumerate(network.arcs):
        if nodes[arc.src].label >= gap and nodes[arc.dst].label < gap:
            min_cut += arc.capacity
        if arc.flow > arc.capacity or arc.flow < 0:
            capacity_violations.append(
                CapacityViolation(
                    arc=index,
                    src=nodes[arc.src].number,
                    dst=nodes[arc.dst].number,
                    flow=arc.flow,
                    capacity=arc.capacity,
                )
            )

    balance = network.node_balance()
    balance_violations = [
        BalanceViolation(node=nodes[index].number, excess=excess)
        for index, excess in enumerate(balance)
        if excess != 0 and not network.is_terminal(index)
    ]

    return OptimalityReport(
        min_cut=min_cut,
        flow_value=balance[network.sink],
        capacity_violations=tuple(capacity_violations),
        balance_violations=tuple(balance_violations),
    )
