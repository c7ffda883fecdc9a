import pytest

from pseudoflow.algorithms.base import FORWARD, REVERSE
from pseudoflow.algorithms.initialize import simple_initialization
from pseudoflow.algorithms.roots import get_lowest_strong_root
from pseudoflow.algorithms.state import SolverState
from pseudoflow.algorithms.tree import (
    add_relationship,
    break_relationship,
    check_children,
    find_weak_node,
    lift_all,
    merge,
    process_root,
    push_excess,
)
from pseudoflow.network import FlowNetwork


def _state(problem):
    network = FlowNetwork.from_arcs(*problem)
    state = SolverState(network)
    simple_initialization(state)
    return state


@pytest.fixture
def star_state():
    # Six isolated non-terminal nodes, used to build trees by hand
    network = FlowNetwork.from_arcs(8, [], 1, 8)
    return SolverState(network)


class TestRelationships:
    def test_add_relationship_prepends_child(self, star_state):
        nodes = star_state.network.nodes
        add_relationship(nodes, 1, 2)
        add_relationship(nodes, 1, 3)
        assert nodes[1].child_list == 3
        assert nodes[3].next == 2
        assert nodes[2].next is None
        assert list(star_state.network.children(1)) == [3, 2]
        assert nodes[2].parent == 1 and nodes[3].parent == 1

    @pytest.mark.parametrize("removed", [2, 3, 4])
    def test_break_relationship_any_position(self, star_state, removed):
        nodes = star_state.network.nodes
        for child in (2, 3, 4):
            add_relationship(nodes, 1, child)

        break_relationship(nodes, 1, removed)

        remaining = [c for c in (4, 3, 2) if c != removed]
        assert list(star_state.network.children(1)) == remaining
        assert nodes[removed].parent is None
        assert nodes[removed].next is None

    def test_find_root(self, star_state):
        nodes = star_state.network.nodes
        add_relationship(nodes, 1, 2)
        add_relationship(nodes, 2, 3)
        assert star_state.network.find_root(3) == 1
        assert star_state.network.find_root(1) == 1


class TestFindWeakNode:
    def test_finds_neighbor_one_label_below(self, merge_chain):
        state = _state(merge_chain)
        assert get_lowest_strong_root(state) == 1

        found = find_weak_node(state, 1)
        assert found == (1, 2)
        # The arc leaves the pool once it joins the forest
        assert state.network.nodes[1].out_of_tree == []
        assert state.stats.num_arc_scans == 1

    def test_no_candidate_exhausts_scan(self, merge_chain):
        state = _state(merge_chain)
        get_lowest_strong_root(state)
        state.network.nodes[2].label = 5

        assert find_weak_node(state, 1) is None
        assert state.network.nodes[1].next_arc == 1

    def test_swap_with_last_removal(self):
        # Node 2 has three outgoing arcs; only 2->4 reaches a label-0 node
        problem = (6, [(1, 2, 9), (2, 3, 1), (2, 4, 1), (2, 5, 1), (3, 6, 5)], 1, 6)
        state = _state(problem)
        nodes = state.network.nodes
        get_lowest_strong_root(state)
        nodes[2].label = 1
        nodes[4].label = 1

        assert nodes[1].out_of_tree == [1, 2, 3]
        assert find_weak_node(state, 1) == (2, 3)
        assert nodes[1].out_of_tree == [1, 3]
        assert nodes[1].next_arc == 1


class TestCheckChildren:
    def test_relabels_without_same_label_children(self, star_state):
        nodes = star_state.network.nodes
        nodes[1].label = 1
        star_state.label_count[1] = 1
        nodes[1].next_arc = 3

        check_children(star_state, 1)

        assert nodes[1].label == 2
        assert star_state.label_count[1] == 0
        assert star_state.label_count[2] == 1
        assert nodes[1].next_arc == 0
        assert star_state.stats.num_relabels == 1

    def test_stops_at_child_with_same_label(self, star_state):
        nodes = star_state.network.nodes
        add_relationship(nodes, 1, 2)
        add_relationship(nodes, 1, 3)
        nodes[1].label = 1
        nodes[2].label = 1
        nodes[3].label = 2
        nodes[1].next_scan = nodes[1].child_list

        check_children(star_state, 1)

        assert nodes[1].next_scan == 2
        assert nodes[1].label == 1


class TestMerge:
    def test_merge_single_node_tree(self, merge_chain):
        state = _state(merge_chain)
        nodes, arcs = state.network.nodes, state.network.arcs

        merge(state, 2, 1, 1)

        assert nodes[1].parent == 2
        assert nodes[1].arc_to_parent == 1
        assert nodes[2].child_list == 1
        assert arcs[1].direction == FORWARD
        assert state.stats.num_mergers == 1

    def test_merge_reverses_path_to_old_root(self):
        # Chain of tree arcs 2 <- 3 <- 4 (4 is the old root), merged below 5
        problem = (6, [(2, 3, 5), (3, 4, 5), (4, 5, 5), (2, 5, 1)], 1, 6)
        network = FlowNetwork.from_arcs(*problem)
        state = SolverState(network)
        nodes, arcs = network.nodes, network.arcs
        add_relationship(nodes, 3, 2)
        nodes[2].arc_to_parent = 1
        add_relationship(nodes, 2, 1)
        nodes[1].arc_to_parent = 0

        merge(state, 4, 1, 3)

        assert network.find_root(1) == 4
        assert nodes[1].parent == 4 and nodes[1].arc_to_parent == 3
        assert nodes[2].parent == 1 and nodes[2].arc_to_parent == 0
        assert nodes[3].parent == 2 and nodes[3].arc_to_parent == 1
        assert nodes[3].child_list is None
        # Reversed tree arcs flip their push direction
        assert arcs[0].direction == REVERSE
        assert arcs[1].direction == REVERSE
        assert arcs[3].direction == FORWARD


class TestPushExcess:
    def test_full_push_moves_excess_to_new_root(self, merge_chain):
        state = _state(merge_chain)
        nodes, arcs = state.network.nodes, state.network.arcs
        get_lowest_strong_root(state)
        merge(state, 2, 1, 1)

        push_excess(state, 1)

        assert nodes[1].excess == 0
        assert nodes[2].excess == 5
        assert arcs[1].flow == 10
        # New root went from deficit to excess and is queued at its label
        assert list(state.buckets[0]) == [2]
        assert state.lowest_strong_label == 0
        assert state.stats.num_pushes == 1

    def test_saturating_push_splits_tree(self):
        # 2 holds 10 but the tree arc 2->3 can only take 4
        problem = (4, [(1, 2, 10), (2, 3, 4), (3, 4, 1)], 1, 4)
        state = _state(problem)
        nodes, arcs = state.network.nodes, state.network.arcs
        get_lowest_strong_root(state)
        find_weak_node(state, 1)
        merge(state, 2, 1, 1)

        push_excess(state, 1)

        assert arcs[1].flow == 4
        assert arcs[1].direction == REVERSE
        assert nodes[1].parent is None
        assert nodes[1].arc_to_parent is None
        assert nodes[2].child_list is None
        assert nodes[1].excess == 6
        assert nodes[2].excess == 3
        # The saturated arc is stored at its destination
        assert 1 in nodes[2].out_of_tree
        # Both parts are strong roots again
        assert 1 in state.buckets[1]
        assert 2 in state.buckets[0]

    def test_downward_push_cancels_flow(self):
        problem = (4, [(1, 2, 6), (3, 2, 5), (3, 4, 1)], 1, 4)
        network = FlowNetwork.from_arcs(*problem)
        state = SolverState(network)
        nodes, arcs = network.nodes, network.arcs
        # 2 pushes back along 3->2, which carries 5 units
        arcs[1].flow = 5
        arcs[1].direction = REVERSE
        nodes[1].excess = 3
        nodes[2].excess = -1
        add_relationship(nodes, 2, 1)
        nodes[1].arc_to_parent = 1

        push_excess(state, 1)

        assert arcs[1].flow == 2
        assert nodes[1].excess == 0
        assert nodes[2].excess == 2
        assert nodes[1].parent == 2


class TestProcessRoot:
    def test_merges_when_weak_neighbor_exists(self, merge_chain):
        state = _state(merge_chain)
        root = get_lowest_strong_root(state)

        process_root(state, root)

        nodes = state.network.nodes
        assert nodes[1].parent == 2
        assert nodes[2].excess == 5
        assert state.stats.num_mergers == 1

    def test_relabels_and_requeues_without_weak_neighbor(self, bottleneck_chain):
        state = _state(bottleneck_chain)
        state.label_count[0] = 1  # pretend label 0 is still occupied
        root = get_lowest_strong_root(state)

        process_root(state, root)

        assert state.network.nodes[1].label == 2
        assert list(state.buckets[2]) == [1]
        assert state.stats.num_relabels == 1


def test_lift_all_moves_whole_tree_to_sentinel(star_state):
    nodes = star_state.network.nodes
    add_relationship(nodes, 1, 2)
    add_relationship(nodes, 1, 3)
    add_relationship(nodes, 3, 4)
    for node in (1, 2, 3, 4):
        nodes[node].label = 2
    star_state.label_count[2] = 4
    star_state.label_count[0] = 2

    lift_all(star_state, 1)

    assert [nodes[n].label for n in (1, 2, 3, 4)] == [8, 8, 8, 8]
    assert star_state.label_count[2] == 0
    assert star_state.label_count[8] == 0
    assert nodes[5].label == 0
