from __future__ import annotations

from time import perf_counter
from typing import Iterable, Optional

from pseudoflow.algorithms.initialize import simple_initialization
from pseudoflow.algorithms.optimality import check_optimality
from pseudoflow.algorithms.recover import recover_flow
from pseudoflow.algorithms.roots import next_strong_root
from pseudoflow.algorithms.state import SolverState
from pseudoflow.algorithms.tree import process_root
from pseudoflow.algorithms.types import MaxFlowResult, PhaseTimings
from pseudoflow.config import SolverConfig
from pseudoflow.logging import get_logger
from pseudoflow.network import ArcSpec, FlowNetwork

logger = get_logger(__name__)


def flow_phase_one(state: SolverState) -> None:
    """Process strong roots until the selector reports none left.

    On return the network holds a maximum preflow and the node labels,
    together with ``state.gap``, describe a minimum cut.
    """
    strong_root = next_strong_root(state)
    while strong_root is not None:
        process_root(state, strong_root)
        strong_root = next_strong_root(state)


def solve_network(
    network: FlowNetwork, config: Optional[SolverConfig] = None
) -> MaxFlowResult:
    """Run the pseudoflow algorithm to completion on a freshly built network.

    The network is mutated in place: after the call every arc holds its final
    flow. A network can only be solved once.

    Args:
        network: Network built by ``FlowNetwork.from_arcs``.
        config: Solver switches; defaults to lowest-label with FIFO buckets.

    Returns:
        MaxFlowResult with flows, cut, report, statistics and timings.
    """
    state = SolverState(network, config)
    timings = PhaseTimings()
    logger.debug(
        "Solving %r (%s, %s)",
        network,
        state.config.root_selection.name,
        state.config.bucket_order.name,
    )

    started = perf_counter()
    simple_initialization(state)
    timings.initialize = perf_counter() - started

    started = perf_counter()
    flow_phase_one(state)
    timings.phase_one = perf_counter() - started
    gap = state.gap
    logger.debug("Phase one finished with gap label %d: %s", gap, state.stats)

    started = perf_counter()
    recover_flow(state)
    timings.recover = perf_counter() - started

    started = perf_counter()
    report = check_optimality(state, gap)
    timings.check = perf_counter() - started

    if not report.optimal:
        logger.warning(
            "Solution is not optimal (flow %d, cut %d, %d violations)",
            report.flow_value,
            report.min_cut,
            len(report.violations),
        )

    nodes = network.nodes
    source_set = frozenset(node.number for node in nodes if node.label >= gap)
    min_cut_arcs = tuple(
        index
        for index, arc in enumerate(network.arcs)
        if nodes[arc.src].label >= gap and nodes[arc.dst].label < gap
    )
    logger.debug(
        "Max flow %d, min cut %d over %d arcs",
        report.flow_value,
        report.min_cut,
        len(min_cut_arcs),
    )

    return MaxFlowResult(
        flow_value=report.flow_value,
        arc_flows=network.arc_flows(),
        min_cut_value=report.min_cut,
        source_set=source_set,
        min_cut_arcs=min_cut_arcs,
        report=report,
        stats=state.stats,
        timings=timings,
        config=state.config,
    )


def calc_max_flow(
    num_nodes: int,
    arcs: Iterable[ArcSpec],
    source: int,
    sink: int,
    *,
    config: Optional[SolverConfig] = None,
) -> MaxFlowResult:
    """Compute a maximum flow and minimum cut with Hochbaum's pseudoflow algorithm.

    Args:
        num_nodes: Number of nodes, numbered 1..num_nodes.
        arcs: ``(from, to, capacity)`` triples with 1-based endpoints and
            non-negative integer capacities.
        source: Source node number.
        sink: Sink node number.
        config: Solver switches; defaults to lowest-label with FIFO buckets.

    Returns:
        MaxFlowResult. ``arc_flows[i]`` is the flow on the i-th input arc.

    Raises:
        ValueError: If the graph description is structurally invalid.

    Examples:
        >>> result = calc_max_flow(
        ...     4, [(1, 2, 10), (1, 3, 5), (2, 3, 15), (2, 4, 10), (3, 4, 10)], 1, 4
        ... )
        >>> result.flow_value
        15
        >>> result.optimal
        True
    """
    network = FlowNetwork.from_arcs(num_nodes, arcs, source, sink)
    return solve_network(network, config)
