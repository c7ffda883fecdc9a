"""Strong-tree processing: weak-node search, merging, pushing and relabeling.

The forest is stored on the nodes themselves: ``parent``, the first child in
``child_list`` and the sibling chain through ``next``. Walks over a tree never
recurse; they advance each node's ``next_scan`` cursor and climb back through
``parent``.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from pseudoflow.algorithms.base import FORWARD, REVERSE
from pseudoflow.algorithms.state import SolverState
from pseudoflow.network import Node


def add_to_strong_bucket(state: SolverState, node: int) -> None:
    """Queue ``node`` as a strong root in the bucket of its current label."""
    label = state.network.nodes[node].label
    state.buckets[label].add(node, state.config.fifo_bucket)


def add_relationship(nodes: List[Node], new_parent: int, child: int) -> None:
    """Make ``child`` the first child of ``new_parent``."""
    nodes[child].parent = new_parent
    nodes[child].next = nodes[new_parent].child_list
    nodes[new_parent].child_list = child


def break_relationship(nodes: List[Node], old_parent: int, child: int) -> None:
    """Detach ``child`` from the child list of ``old_parent``."""
    nodes[child].parent = None
    parent_node = nodes[old_parent]

    if parent_node.child_list == child:
        parent_node.child_list = nodes[child].next
        nodes[child].next = None
        return

    current = parent_node.child_list
    while nodes[current].next != child:
        current = nodes[current].next
    nodes[current].next = nodes[child].next
    nodes[child].next = None


def find_weak_node(state: SolverState, strong_node: int) -> Optional[Tuple[int, int]]:
    """Search the out-of-tree arcs of ``strong_node`` for a weak neighbor.

    A neighbor is weak when its label is exactly one below the label currently
    being processed. The scan resumes at ``next_arc``, so arcs ruled out since
    the node's last relabel are not examined again. A matching arc is removed
    from the pool by moving the last entry into its slot.

    Returns:
        ``(arc_index, weak_node)`` or None when no weak neighbor exists.
    """
    nodes, arcs = state.network.nodes, state.network.arcs
    node = nodes[strong_node]
    pool = node.out_of_tree
    target = state.search_label - 1

    i = node.next_arc
    while i < len(pool):
        state.stats.num_arc_scans += 1
        arc = arcs[pool[i]]
        if nodes[arc.dst].label == target:
            weak_node = arc.dst
        elif nodes[arc.src].label == target:
            weak_node = arc.src
        else:
            i += 1
            continue

        node.next_arc = i
        out = pool[i]
        pool[i] = pool[-1]
        pool.pop()
        return out, weak_node

    node.next_arc = len(pool)
    return None


def check_children(state: SolverState, node_index: int) -> None:
    """Advance the DFS cursor of a node, relabeling it once no child remains.

    The cursor stops at the first child that still carries the node's label;
    such a child has to be relabeled first. When none is left the node moves
    up one label and its out-of-tree scan starts over.
    """
    nodes = state.network.nodes
    node = nodes[node_index]
    while node.next_scan is not None:
        if nodes[node.next_scan].label == node.label:
            return
        node.next_scan = nodes[node.next_scan].next

    state.label_count[node.label] -= 1
    node.label += 1
    state.label_count[node.label] += 1
    state.stats.num_relabels += 1
    node.next_arc = 0


def process_root(state: SolverState, strong_root: int) -> None:
    """Process one strong root taken from its bucket.

    Walks the root's tree depth first looking for a node with a weak
    neighbor. On success the tree is merged under that neighbor and the
    root's excess is pushed toward the new root. Otherwise every node visited
    has been relabeled and the root goes back into the bucket of its new label.
    """
    nodes = state.network.nodes
    strong_node: Optional[int] = strong_root
    nodes[strong_root].next_scan = nodes[strong_root].child_list

    found = find_weak_node(state, strong_root)
    if found is not None:
        out, weak_node = found
        merge(state, weak_node, strong_root, out)
        push_excess(state, strong_root)
        return

    check_children(state, strong_root)

    while strong_node is not None:
        while nodes[strong_node].next_scan is not None:
            child = nodes[strong_node].next_scan
            nodes[strong_node].next_scan = nodes[child].next
            strong_node = child
            nodes[strong_node].next_scan = nodes[strong_node].child_list

            found = find_weak_node(state, strong_node)
            if found is not None:
                out, weak_node = found
                merge(state, weak_node, strong_node, out)
                push_excess(state, strong_root)
                return

            check_children(state, strong_node)

        strong_node = nodes[strong_node].parent
        if strong_node is not None:
            check_children(state, strong_node)

    add_to_strong_bucket(state, strong_root)

    if not state.config.lowest_label:
        state.highest_strong_label += 1


def merge(state: SolverState, parent: int, child: int, new_arc: int) -> None:
    """Hang the tree containing ``child`` below ``parent`` through ``new_arc``.

    The path from ``child`` up to its old root is reversed: each node on it
    becomes the parent of its former parent, takes over the arc that used to
    connect them, and that arc's direction flag is flipped.
    """
    nodes, arcs = state.network.nodes, state.network.arcs
    current = child
    new_parent = parent

    state.stats.num_mergers += 1

    while nodes[current].parent is not None:
        old_arc = nodes[current].arc_to_parent
        nodes[current].arc_to_parent = new_arc
        old_parent = nodes[current].parent
        break_relationship(nodes, old_parent, current)
        add_relationship(nodes, new_parent, current)

        new_parent = current
        current = old_parent
        new_arc = old_arc
        arcs[new_arc].direction = 1 - arcs[new_arc].direction

    nodes[current].arc_to_parent = new_arc
    add_relationship(nodes, new_parent, current)


def _detach_saturated(
    state: SolverState, arc_index: int, child: int, parent: int
) -> None:
    """Move a saturated tree arc into the parent's pool and re-bucket the child."""
    nodes = state.network.nodes
    nodes[parent].add_out_of_tree(arc_index)
    break_relationship(nodes, parent, child)
    nodes[child].arc_to_parent = None

    if state.config.lowest_label:
        state.lowest_strong_label = nodes[child].label

    add_to_strong_bucket(state, child)


def push_upward(
    state: SolverState, arc_index: int, child: int, parent: int, res_cap: int
) -> None:
    """Push the child's excess along the arc's remaining capacity."""
    nodes = state.network.nodes
    arc = state.network.arcs[arc_index]
    child_node, parent_node = nodes[child], nodes[parent]

    state.stats.num_pushes += 1

    if res_cap >= child_node.excess:
        parent_node.excess += child_node.excess
        arc.flow += child_node.excess
        child_node.excess = 0
        return

    arc.direction = REVERSE
    parent_node.excess += res_cap
    child_node.excess -= res_cap
    arc.flow = arc.capacity
    _detach_saturated(state, arc_index, child, parent)


def push_downward(
    state: SolverState, arc_index: int, child: int, parent: int, flow: int
) -> None:
    """Push the child's excess by cancelling flow already on the arc."""
    nodes = state.network.nodes
    arc = state.network.arcs[arc_index]
    child_node, parent_node = nodes[child], nodes[parent]

    state.stats.num_pushes += 1

    if flow >= child_node.excess:
        parent_node.excess += child_node.excess
        arc.flow -= child_node.excess
        child_node.excess = 0
        return

    arc.direction = FORWARD
    child_node.excess -= flow
    parent_node.excess += flow
    arc.flow = 0
    _detach_saturated(state, arc_index, child, parent)


def push_excess(state: SolverState, strong_root: int) -> None:
    """Push excess from ``strong_root`` up the tree toward its root.

    Each push either moves all of the current node's excess to its parent or
    saturates the tree arc, cutting the node loose as a new strong root. The
    walk ends at a node without excess or at the root. A root that turns from
    non-positive to positive excess is queued as a strong root.
    """
    nodes, arcs = state.network.nodes, state.network.arcs
    current = strong_root
    prev_excess = 1

    while nodes[current].excess > 0 and nodes[current].parent is not None:
        parent = nodes[current].parent
        prev_excess = nodes[parent].excess

        arc_index = nodes[current].arc_to_parent
        arc = arcs[arc_index]
        if arc.direction == FORWARD:
            push_upward(state, arc_index, current, parent, arc.capacity - arc.flow)
        else:
            push_downward(state, arc_index, current, parent, arc.flow)

        current = parent

    if nodes[current].excess > 0 and prev_excess <= 0:
        if state.config.lowest_label:
            state.lowest_strong_label = nodes[current].label
        add_to_strong_bucket(state, current)


def lift_all(state: SolverState, root: int) -> None:
    """Move every node of the tree at ``root`` to the sentinel label.

    The sentinel (``num_nodes``) marks nodes proven to lie on the source side
    of the minimum cut. Counts are decremented for the old labels only; the
    sentinel label is never counted.
    """
    nodes = state.network.nodes
    sentinel = state.num_nodes
    current: Optional[int] = root

    nodes[root].next_scan = nodes[root].child_list
    state.label_count[nodes[root].label] -= 1
    nodes[root].label = sentinel

    while current is not None:
        while nodes[current].next_scan is not None:
            child = nodes[current].next_scan
            nodes[current].next_scan = nodes[child].next
            current = child
            nodes[current].next_scan = nodes[current].child_list

            state.label_count[nodes[current].label] -= 1
            nodes[current].label = sentinel

        current = nodes[current].parent
