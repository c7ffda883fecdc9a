"""NetworkX graph conversion utilities.

Lets the pseudoflow solver run directly on NetworkX directed graphs. Node
names (any hashable) are mapped to contiguous node numbers, edges to arc
indices, and the results are mapped back to the original names.

Example:
    >>> import networkx as nx
    >>> from pseudoflow.nx import max_flow_networkx
    >>>
    >>> G = nx.DiGraph()
    >>> G.add_edge("s", "a", capacity=3)
    >>> G.add_edge("a", "t", capacity=2)
    >>> flow, summary = max_flow_networkx(G, "s", "t")
    >>> flow
    2.0
    >>> summary.min_cut
    [('a', 't', 0)]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Hashable, List, Optional, Set, Tuple, Union

from pseudoflow.algorithms.max_flow import calc_max_flow
from pseudoflow.algorithms.types import MaxFlowResult
from pseudoflow.config import SolverConfig
from pseudoflow.network import ArcSpec

if TYPE_CHECKING:
    import networkx as nx

    NxGraph = Union[nx.DiGraph, nx.MultiDiGraph]
else:
    NxGraph = Any


@dataclass
class NodeMap:
    """Bidirectional mapping between node names and 1-based node numbers.

    Attributes:
        to_number: Maps original node names to node numbers.
        to_name: Maps node numbers back to original node names.

    Example:
        >>> node_map = NodeMap.from_names(["A", "B", "C"])
        >>> node_map.to_number["A"]
        1
        >>> node_map.to_name[2]
        'B'
    """

    to_number: Dict[Hashable, int] = field(default_factory=dict)
    to_name: Dict[int, Hashable] = field(default_factory=dict)

    @classmethod
    def from_names(cls, names: List[Hashable]) -> "NodeMap":
        """Create a NodeMap from node names given in numbering order."""
        to_number = {name: i for i, name in enumerate(names, start=1)}
        to_name = {i: name for i, name in enumerate(names, start=1)}
        return cls(to_number=to_number, to_name=to_name)

    def __len__(self) -> int:
        return len(self.to_number)


# (source_node, target_node, edge_key); key is 0 for simple digraphs
EdgeRef = Tuple[Hashable, Hashable, Any]


@dataclass
class EdgeMap:
    """Mapping between arc indices and original edge references.

    Attributes:
        to_ref: Maps arc index to the original ``(u, v, key)`` tuple.
        from_ref: Maps ``(u, v, key)`` back to the arc index.
    """

    to_ref: Dict[int, EdgeRef] = field(default_factory=dict)
    from_ref: Dict[EdgeRef, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.to_ref)


@dataclass(frozen=True)
class FlowSummary:
    """Max-flow results expressed in terms of the original graph.

    Attributes:
        total_flow: The maximum flow value.
        edge_flow: Flow on each edge, keyed by ``(u, v, key)``.
        residual_cap: Remaining capacity on each edge.
        reachable: Nodes on the source side of the minimum cut.
        min_cut: Edges crossing the minimum cut from the source side.
    """

    total_flow: float
    edge_flow: Dict[EdgeRef, float]
    residual_cap: Dict[EdgeRef, float]
    reachable: Set[Hashable]
    min_cut: List[EdgeRef]


def _as_capacity(value: Any, ref: EdgeRef) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Edge {ref} has non-numeric capacity {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValueError(f"Edge {ref} capacity must be a whole number, got {value!r}")


def from_networkx(
    G: NxGraph,
    source: Hashable,
    sink: Hashable,
    *,
    capacity_attr: str = "capacity",
) -> Tuple[int, List[ArcSpec], int, int, NodeMap, EdgeMap]:
    """Convert a NetworkX directed graph into solver input.

    Nodes are numbered in sorted order (by ``str``) so the numbering does not
    depend on insertion order.

    Args:
        G: ``DiGraph`` or ``MultiDiGraph``.
        source: Name of the source node.
        sink: Name of the sink node.
        capacity_attr: Edge attribute holding the integer capacity.

    Returns:
        Tuple ``(num_nodes, arcs, source_number, sink_number, node_map, edge_map)``.

    Raises:
        TypeError: If G is not a NetworkX graph.
        ValueError: If G is undirected, a terminal is missing, or an edge has
            no usable capacity.
    """
    import networkx as nx

    if not isinstance(G, (nx.DiGraph, nx.MultiDiGraph, nx.Graph, nx.MultiGraph)):
        raise TypeError(f"Expected a NetworkX graph, got {type(G).__name__}")
    if not G.is_directed():
        raise ValueError("Max flow requires a directed graph")
    for terminal in (source, sink):
        if terminal not in G:
            raise ValueError(f"Node {terminal!r} is not in the graph")
    if source == sink:
        raise ValueError("Source and sink must be different nodes")

    node_map = NodeMap.from_names(sorted(G.nodes(), key=str))

    if G.is_multigraph():
        edges_iter = G.edges(keys=True, data=True)
    else:
        edges_iter = ((u, v, 0, d) for u, v, d in G.edges(data=True))

    arcs: List[ArcSpec] = []
    edge_map = EdgeMap()
    for u, v, key, data in edges_iter:
        ref = (u, v, key)
        if capacity_attr not in data:
            raise ValueError(f"Edge {ref} has no {capacity_attr!r} attribute")
        capacity = _as_capacity(data[capacity_attr], ref)
        arc_index = len(arcs)
        arcs.append((node_map.to_number[u], node_map.to_number[v], capacity))
        edge_map.to_ref[arc_index] = ref
        edge_map.from_ref[ref] = arc_index

    return (
        len(node_map),
        arcs,
        node_map.to_number[source],
        node_map.to_number[sink],
        node_map,
        edge_map,
    )


def _summarize(
    result: MaxFlowResult, arcs: List[ArcSpec], node_map: NodeMap, edge_map: EdgeMap
) -> FlowSummary:
    edge_flow: Dict[EdgeRef, float] = {}
    residual_cap: Dict[EdgeRef, float] = {}
    for arc_index, ((_, _, capacity), flow) in enumerate(zip(arcs, result.arc_flows)):
        ref = edge_map.to_ref[arc_index]
        edge_flow[ref] = float(flow)
        residual_cap[ref] = float(capacity - flow)

    return FlowSummary(
        total_flow=float(result.flow_value),
        edge_flow=edge_flow,
        residual_cap=residual_cap,
        reachable={node_map.to_name[number] for number in result.source_set},
        min_cut=[edge_map.to_ref[arc_index] for arc_index in result.min_cut_arcs],
    )


def max_flow_networkx(
    G: NxGraph,
    source: Hashable,
    sink: Hashable,
    *,
    config: Optional[SolverConfig] = None,
    capacity_attr: str = "capacity",
    flow_attr: str = "flow",
    write_flows: bool = False,
) -> Tuple[float, FlowSummary]:
    """Compute the maximum flow between two nodes of a NetworkX graph.

    Args:
        G: ``DiGraph`` or ``MultiDiGraph`` with integer edge capacities.
        source: Source node name.
        sink: Sink node name.
        config: Solver switches.
        capacity_attr: Edge attribute holding the capacity.
        flow_attr: Edge attribute written when ``write_flows`` is set.
        write_flows: Store each edge's flow on the graph under ``flow_attr``.

    Returns:
        Tuple ``(total_flow, FlowSummary)``.
    """
    num_nodes, arcs, source_number, sink_number, node_map, edge_map = from_networkx(
        G, source, sink, capacity_attr=capacity_attr
    )
    result = calc_max_flow(num_nodes, arcs, source_number, sink_number, config=config)
    summary = _summarize(result, arcs, node_map, edge_map)

    if write_flows:
        multigraph = G.is_multigraph()
        for (u, v, key), flow in summary.edge_flow.items():
            data = G.edges[u, v, key] if multigraph else G.edges[u, v]
            data[flow_attr] = flow

    return summary.total_flow, summary
