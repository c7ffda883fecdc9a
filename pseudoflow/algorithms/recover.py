"""Conversion of the phase-one preflow into a feasible flow.

After phase one, excess can only remain at nodes on the source side of the
cut. It is sent back to the source along flow-carrying arcs: each source-side
node keeps its incoming flow arcs in ``out_of_tree``, sorted by decreasing
flow, and ``decompose`` repeatedly follows the first of them backwards. Flow
cycles met on the way are cancelled.
"""

from __future__ import annotations

from typing import List

from pseudoflow.algorithms.state import SolverState
from pseudoflow.network import Arc, Node

# Ranges of at most this many positions beyond the first are bubble sorted
_BUBBLE_SORT_SPAN = 5


def quick_sort(pool: List[int], arcs: List[Arc], first: int, last: int) -> None:
    """Sort ``pool[first:last + 1]`` (arc indices) by decreasing arc flow.

    Quicksort with a median-of-three pivot; short ranges fall back to bubble
    sort with an early exit.
    """
    if last - first <= _BUBBLE_SORT_SPAN:
        for i in range(last, first, -1):
            swapped = False
            for j in range(first, i):
                if arcs[pool[j]].flow < arcs[pool[j + 1]].flow:
                    pool[j], pool[j + 1] = pool[j + 1], pool[j]
                    swapped = True
            if not swapped:
                return
        return

    mid = (first + last) // 2
    x1 = arcs[pool[first]].flow
    x2 = arcs[pool[mid]].flow
    x3 = arcs[pool[last]].flow

    pivot = mid
    if x1 <= x2:
        if x2 > x3:
            pivot = first
            if x1 <= x3:
                pivot = last
    elif x2 <= x3:
        pivot = last
        if x1 <= x3:
            pivot = first

    pivot_flow = arcs[pool[pivot]].flow
    pool[first], pool[pivot] = pool[pivot], pool[first]

    left, right = first + 1, last
    while left < right:
        if arcs[pool[left]].flow < pivot_flow:
            pool[left], pool[right] = pool[right], pool[left]
            right -= 1
        else:
            left += 1

    # left == right here and that slot has not been compared yet
    if arcs[pool[left]].flow < pivot_flow:
        left -= 1
    pool[first], pool[left] = pool[left], pool[first]

    if first < left - 1:
        quick_sort(pool, arcs, first, left - 1)
    if left + 1 < last:
        quick_sort(pool, arcs, left + 1, last)


def sort_out_of_tree(node: Node, arcs: List[Arc]) -> None:
    """Sort a node's pool by decreasing flow."""
    if len(node.out_of_tree) > 1:
        quick_sort(node.out_of_tree, arcs, 0, len(node.out_of_tree) - 1)


def minisort(node: Node, arcs: List[Arc]) -> None:
    """Restore the order after the flow of the arc at ``next_arc`` decreased.

    Only that one arc can be out of place, so it is moved down past the
    arcs that now carry more flow.
    """
    pool = node.out_of_tree
    moved = pool[node.next_arc]
    moved_flow = arcs[moved].flow

    i = node.next_arc + 1
    while i < len(pool) and moved_flow < arcs[pool[i]].flow:
        pool[i - 1] = pool[i]
        i += 1
    pool[i - 1] = moved


def decompose(state: SolverState, excess_node: int, iteration: int) -> int:
    """Return part of a node's excess to the source, or cancel one flow cycle.

    Starting at ``excess_node``, the walk follows each node's largest incoming
    flow arc backwards, stamping nodes with ``iteration``. Reaching the source
    yields a path: its bottleneck is removed from the node's excess and from
    every arc on the path. Reaching a node stamped in this pass yields a
    cycle: the bottleneck of the cycle alone is removed from its arcs and the
    excess is left untouched.

    Args:
        state: Solver state after phase one, with pools prepared by ``recover_flow``.
        excess_node: Index of a node with positive excess.
        iteration: Stamp for this pass; must exceed every stamp used so far.

    Returns:
        The last stamp used, so the caller can continue from it.
    """
    network = state.network
    nodes, arcs = network.nodes, network.arcs
    source = network.source

    current = excess_node
    bottleneck = nodes[excess_node].excess

    while current != source and nodes[current].visited < iteration:
        node = nodes[current]
        node.visited = iteration
        arc = arcs[node.out_of_tree[node.next_arc]]
        if arc.flow < bottleneck:
            bottleneck = arc.flow
        current = arc.src

    if current == source:
        nodes[excess_node].excess -= bottleneck
        current = excess_node

        while current != source:
            node = nodes[current]
            arc = arcs[node.out_of_tree[node.next_arc]]
            arc.flow -= bottleneck
            if arc.flow != 0:
                minisort(node, arcs)
            else:
                node.next_arc += 1
            current = arc.src

        return iteration

    # ``current`` lies on a cycle; measure it with a fresh stamp
    iteration += 1
    node = nodes[current]
    bottleneck = arcs[node.out_of_tree[node.next_arc]].flow

    while nodes[current].visited < iteration:
        node = nodes[current]
        node.visited = iteration
        arc = arcs[node.out_of_tree[node.next_arc]]
        if arc.flow < bottleneck:
            bottleneck = arc.flow
        current = arc.src

    iteration += 1

    while nodes[current].visited < iteration:
        node = nodes[current]
        node.visited = iteration
        arc = arcs[node.out_of_tree[node.next_arc]]
        arc.flow -= bottleneck
        if arc.flow != 0:
            minisort(node, arcs)
        else:
            node.next_arc += 1
        current = arc.src

    return iteration


def recover_flow(state: SolverState) -> None:
    """Turn the maximum preflow left by phase one into a feasible flow.

    First the optimistic saturation of sink arcs is undone wherever the
    origin still has a deficit, and source arcs are handed to their
    destinations so the backward walks can reach the source. Every node on
    the source side of the cut (label at or above the gap) then gets its
    pool rebuilt: the flow-carrying tree arc is folded in, empty arcs are
    dropped and the rest is sorted by decreasing flow. Finally all remaining
    excess is decomposed.
    """
    network = state.network
    nodes, arcs = network.nodes, network.arcs
    source, sink = network.source, network.sink
    gap = state.gap

    for arc_index in nodes[sink].out_of_tree:
        arc = arcs[arc_index]
        origin = nodes[arc.src]
        if origin.excess < 0:
            if origin.excess + arc.flow < 0:
                origin.excess += arc.flow
                arc.flow = 0
            else:
                arc.flow += origin.excess
                origin.excess = 0

    for arc_index in nodes[source].out_of_tree:
        nodes[arcs[arc_index].dst].add_out_of_tree(arc_index)

    nodes[source].excess = 0
    nodes[sink].excess = 0

    for index, node in enumerate(nodes):
        if network.is_terminal(index) or node.label < gap:
            continue

        node.next_arc = 0
        if node.parent is not None and arcs[node.arc_to_parent].flow != 0:
            tree_arc = node.arc_to_parent
            nodes[arcs[tree_arc].dst].add_out_of_tree(tree_arc)

        node.out_of_tree[:] = [a for a in node.out_of_tree if arcs[a].flow != 0]
        sort_out_of_tree(node, arcs)

    iteration = 1
    for index, node in enumerate(nodes):
        while node.excess > 0:
            iteration = decompose(state, index, iteration + 1)
