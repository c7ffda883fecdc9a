from __future__ import annotations

from pseudoflow.algorithms.base import INITIAL_STRONG_LABEL, SINK_LABEL
from pseudoflow.algorithms.state import SolverState
from pseudoflow.algorithms.tree import add_to_strong_bucket


def simple_initialization(state: SolverState) -> None:
    """
    Build the starting pseudoflow of a freshly constructed network.

    Every arc leaving the source is saturated and its capacity credited to the
    destination's excess; every arc entering the sink is saturated and its
    capacity debited from the origin's excess. Each node then forms its own
    tree. Nodes left with positive excess become strong roots at label 1;
    everything else stays at label 0.

    Args:
        state: Solver state bound to a network built by ``FlowNetwork.from_arcs``.
    """
    network = state.network
    nodes, arcs = network.nodes, network.arcs
    source, sink = network.source, network.sink

    for arc_index in nodes[source].out_of_tree:
        arc = arcs[arc_index]
        arc.flow = arc.capacity
        nodes[arc.dst].excess += arc.capacity

    for arc_index in nodes[sink].out_of_tree:
        arc = arcs[arc_index]
        arc.flow = arc.capacity
        nodes[arc.src].excess -= arc.capacity

    nodes[source].excess = 0
    nodes[sink].excess = 0

    for index, node in enumerate(nodes):
        if node.excess > 0:
            node.label = INITIAL_STRONG_LABEL
            state.label_count[INITIAL_STRONG_LABEL] += 1
            add_to_strong_bucket(state, index)

    nodes[source].label = network.num_nodes
    nodes[sink].label = SINK_LABEL
    state.label_count[SINK_LABEL] = (
        network.num_nodes - 2
    ) - state.label_count[INITIAL_STRONG_LABEL]
