"""Strong-root selection with the gap heuristic.

Both selectors keep a cursor on the state (``lowest_strong_label`` or
``highest_strong_label``) that carries over between calls. A gap is a label
``i - 1`` that no node carries: roots at label ``i`` or above can then no
longer reach the sink side, which certifies the minimum cut.
"""

from __future__ import annotations

from typing import Optional

from pseudoflow.algorithms.base import INITIAL_STRONG_LABEL, SINK_LABEL
from pseudoflow.algorithms.state import SolverState
from pseudoflow.algorithms.tree import add_to_strong_bucket, lift_all


def _promote_sink_label_roots(state: SolverState) -> None:
    """Move every root waiting at label 0 up to label 1."""
    nodes = state.network.nodes
    bucket = state.buckets[SINK_LABEL]
    while bucket:
        root = bucket.pop()
        nodes[root].label = INITIAL_STRONG_LABEL
        state.label_count[SINK_LABEL] -= 1
        state.label_count[INITIAL_STRONG_LABEL] += 1
        state.stats.num_relabels += 1
        add_to_strong_bucket(state, root)


def get_lowest_strong_root(state: SolverState) -> Optional[int]:
    """Return the next strong root under lowest-label selection.

    Returns:
        The root's node index, or None when no root is left below the gap.
    """
    if state.lowest_strong_label == SINK_LABEL:
        _promote_sink_label_roots(state)
        state.lowest_strong_label = INITIAL_STRONG_LABEL

    for label in range(state.lowest_strong_label, state.num_nodes):
        bucket = state.buckets[label]
        if bucket:
            state.lowest_strong_label = label

            if state.label_count[label - 1] == 0:
                state.stats.num_gaps += 1
                return None

            return bucket.pop()

    state.lowest_strong_label = state.num_nodes
    return None


def get_highest_strong_root(state: SolverState) -> Optional[int]:
    """Return the next strong root under highest-label selection.

    Buckets above a gap are emptied by lifting their trees to the sentinel
    label. Roots left at label 0 once the scan reaches the bottom are promoted
    to label 1 and processing continues from there.

    Returns:
        The root's node index, or None when every strong tree has been lifted.
    """
    for label in range(state.highest_strong_label, SINK_LABEL, -1):
        bucket = state.buckets[label]
        if not bucket:
            continue

        state.highest_strong_label = label

        if state.label_count[label - 1] > 0:
            return bucket.pop()

        while bucket:
            state.stats.num_gaps += 1
            lift_all(state, bucket.pop())

    if not state.buckets[SINK_LABEL]:
        return None

    _promote_sink_label_roots(state)
    state.highest_strong_label = INITIAL_STRONG_LABEL
    return state.buckets[INITIAL_STRONG_LABEL].pop()


def next_strong_root(state: SolverState) -> Optional[int]:
    """Dispatch to the selector configured on the state."""
    if state.config.lowest_label:
        return get_lowest_strong_root(state)
    return get_highest_strong_root(state)
