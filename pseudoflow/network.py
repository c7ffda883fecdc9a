"""Flow network data model used by the pseudoflow solver.

Nodes and arcs live in flat lists (an arena) and refer to each other by
integer index, so re-parenting, cutting and reversing trees are plain field
assignments. Node indices are 0-based; ``Node.number`` keeps the 1-based id
used by callers and by the DIMACS format.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterable, Iterator, List, Optional, Tuple

from pseudoflow.algorithms.base import FORWARD

#: An input arc: (from node number, to node number, capacity), numbers are 1-based.
ArcSpec = Tuple[int, int, int]


@dataclass(slots=True)
class Node:
    """A node of the flow network and of the pseudoflow forest.

    Attributes:
        number: 1-based public node id.
        label: Height in the labeling; never decreases during a solve.
        excess: Inflow minus outflow (negative means deficit).
        parent: Index of the parent in the forest, None for a root.
        child_list: Index of the first child, None for a leaf.
        next: Index of the next sibling in the parent's child list.
        next_scan: Child cursor of the iterative depth-first walk.
        arc_to_parent: Index of the tree arc to the parent, None for a root.
        out_of_tree: Indices of residual arcs stored at this node and not in the forest.
        next_arc: First unexamined position in ``out_of_tree``.
        visited: Stamp of the last decomposition pass that reached this node.
    """

    number: int
    label: int = 0
    excess: int = 0
    parent: Optional[int] = None
    child_list: Optional[int] = None
    next: Optional[int] = None
    next_scan: Optional[int] = None
    arc_to_parent: Optional[int] = None
    out_of_tree: List[int] = field(default_factory=list)
    next_arc: int = 0
    visited: int = 0

    def add_out_of_tree(self, arc_index: int) -> None:
        self.out_of_tree.append(arc_index)


@dataclass(slots=True)
class Arc:
    """A directed arc ``src -> dst`` between two node indices.

    ``direction`` only matters while the arc is a tree edge: FORWARD means the
    child pushes along the remaining capacity, REVERSE means it pushes by
    cancelling the arc's current flow.
    """

    src: int
    dst: int
    capacity: int
    flow: int = 0
    direction: int = FORWARD

    @property
    def residual(self) -> int:
        return self.capacity - self.flow


class RootBucket:
    """Strong roots that currently share one label.

    Roots are always taken from the head. ``fifo`` decides whether new roots
    join at the tail (FIFO) or at the head (LIFO).
    """

    __slots__ = ("_roots",)

    def __init__(self) -> None:
        self._roots: Deque[int] = deque()

    def add(self, node: int, fifo: bool) -> None:
        if fifo:
            self._roots.append(node)
        else:
            self._roots.appendleft(node)

    def pop(self) -> int:
        """Remove and return the first root.

        Raises:
            IndexError: If the bucket is empty.
        """
        return self._roots.popleft()

    def first(self) -> Optional[int]:
        return self._roots[0] if self._roots else None

    def __len__(self) -> int:
        return len(self._roots)

    def __bool__(self) -> bool:
        return bool(self._roots)

    def __iter__(self) -> Iterator[int]:
        return iter(self._roots)

    def __repr__(self) -> str:
        return f"RootBucket({list(self._roots)!r})"


class FlowNetwork:
    """Arena of nodes and arcs for one max-flow instance.

    Use ``FlowNetwork.from_arcs`` to build a validated network. Arcs keep
    their input order, so ``arcs[i]`` corresponds to the i-th input arc.
    """

    def __init__(
        self,
        nodes: List[Node],
        arcs: List[Arc],
        source: int,
        sink: int,
    ) -> None:
        self.nodes: List[Node] = nodes
        self.arcs: List[Arc] = arcs
        self.source: int = source
        self.sink: int = sink

    @property
    def num_nodes(self) -> int:
        return len(self.nodes)

    @property
    def num_arcs(self) -> int:
        return len(self.arcs)

    @property
    def source_number(self) -> int:
        return self.nodes[self.source].number

    @property
    def sink_number(self) -> int:
        return self.nodes[self.sink].number

    @classmethod
    def from_arcs(
        cls,
        num_nodes: int,
        arcs: Iterable[ArcSpec],
        source: int,
        sink: int,
    ) -> FlowNetwork:
        """Build a network from 1-based arc triples and seed the out-of-tree pools.

        Pool placement: arcs out of the source sit at the source, arcs into the
        sink sit at the sink, all other arcs sit at their origin. Arcs into the
        source, arcs out of the sink and self-loops can never carry useful flow
        and stay outside every pool. A direct source-to-sink arc is saturated
        right away.

        Args:
            num_nodes: Number of nodes, numbered 1..num_nodes.
            arcs: Iterable of ``(from, to, capacity)`` triples.
            source: Source node number.
            sink: Sink node number.

        Returns:
            A new FlowNetwork.

        Raises:
            ValueError: On a structurally invalid graph description.
        """
        if isinstance(num_nodes, bool) or not isinstance(num_nodes, int):
            raise ValueError(f"Node count must be an integer, got {num_nodes!r}.")
        if num_nodes < 2:
            raise ValueError(f"A flow network needs at least 2 nodes, got {num_nodes}.")
        _check_node_number(source, num_nodes, "Source")
        _check_node_number(sink, num_nodes, "Sink")
        if source == sink:
            raise ValueError(f"Source and sink must differ (both are {source}).")

        nodes = [Node(number=i + 1) for i in range(num_nodes)]
        arc_list: List[Arc] = []
        for position, spec in enumerate(arcs):
            try:
                src_number, dst_number, capacity = spec
            except (TypeError, ValueError):
                raise ValueError(
                    f"Arc {position} must be a (from, to, capacity) triple, got {spec!r}."
                ) from None
            _check_node_number(src_number, num_nodes, f"Arc {position} origin")
            _check_node_number(dst_number, num_nodes, f"Arc {position} destination")
            if isinstance(capacity, bool) or not isinstance(capacity, int):
                raise ValueError(
                    f"Arc {position} capacity must be an integer, got {capacity!r}."
                )
            if capacity < 0:
                raise ValueError(f"Arc {position} has negative capacity {capacity}.")
            arc_list.append(Arc(src=src_number - 1, dst=dst_number - 1, capacity=capacity))

        network = cls(nodes, arc_list, source - 1, sink - 1)
        network._seed_out_of_tree()
        return network

    def _seed_out_of_tree(self) -> None:
        source, sink = self.source, self.sink
        for index, arc in enumerate(self.arcs):
            if arc.dst == source or arc.src == sink or arc.src == arc.dst:
                continue
            if arc.src == source and arc.dst == sink:
                arc.flow = arc.capacity
            elif arc.src == source:
                self.nodes[source].add_out_of_tree(index)
            elif arc.dst == sink:
                self.nodes[sink].add_out_of_tree(index)
            else:
                self.nodes[arc.src].add_out_of_tree(index)

    def is_terminal(self, node: int) -> bool:
        return node == self.source or node == self.sink

    def arc_flows(self) -> Tuple[int, ...]:
        """Current flow of every arc, in input order."""
        return tuple(arc.flow for arc in self.arcs)

    def arc_endpoints(self, index: int) -> Tuple[int, int]:
        """1-based ``(from, to)`` numbers of an arc."""
        arc = self.arcs[index]
        return self.nodes[arc.src].number, self.nodes[arc.dst].number

    def node_balance(self) -> List[int]:
        """Inflow minus outflow of every node, computed from arc flows."""
        balance = [0] * self.num_nodes
        for arc in self.arcs:
            balance[arc.src] -= arc.flow
            balance[arc.dst] += arc.flow
        return balance

    def children(self, node: int) -> Iterator[int]:
        """Iterate over the forest children of ``node``."""
        child = self.nodes[node].child_list
        while child is not None:
            yield child
            child = self.nodes[child].next

    def find_root(self, node: int) -> int:
        """Return the root of the tree containing ``node``."""
        parent = self.nodes[node].parent
        while parent is not None:
            node = parent
            parent = self.nodes[node].parent
        return node

    def __repr__(self) -> str:
        return (
            f"FlowNetwork(num_nodes={self.num_nodes}, num_arcs={self.num_arcs}, "
            f"source={self.source_number}, sink={self.sink_number})"
        )


def _check_node_number(value: object, num_nodes: int, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{what} must be an integer node number, got {value!r}.")
    if not 1 <= value <= num_nodes:
        raise ValueError(f"{what} {value} is outside the node range 1..{num_nodes}.")