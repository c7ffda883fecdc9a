from pseudoflow.algorithms.initialize import simple_initialization
from pseudoflow.algorithms.max_flow import flow_phase_one
from pseudoflow.algorithms.optimality import check_optimality
from pseudoflow.algorithms.recover import recover_flow
from pseudoflow.algorithms.state import SolverState
from pseudoflow.algorithms.types import (
    BalanceViolation,
    CapacityViolation,
    OptimalityReport,
)
from pseudoflow.network import FlowNetwork


def _solved_state(problem):
    network = FlowNetwork.from_arcs(*problem)
    state = SolverState(network)
    simple_initialization(state)
    flow_phase_one(state)
    recover_flow(state)
    return state


def test_optimal_flow_reports_no_violations(four_node):
    report = check_optimality(_solved_state(four_node))
    assert report.feasible
    assert report.optimal
    assert report.min_cut == 15
    assert report.flow_value == 15
    assert report.violations == []


def test_capacity_violation_reported(four_node):
    state = _solved_state(four_node)
    state.network.arcs[2].flow = 20
    state.network.arcs[3].flow = 30

    report = check_optimality(state)

    assert not report.feasible
    assert not report.optimal
    assert [v.arc for v in report.capacity_violations] == [2, 3]
    assert report.capacity_violations[1] == CapacityViolation(
        arc=3, src=2, dst=4, flow=30, capacity=10
    )


def test_balance_violation_reported(four_node):
    state = _solved_state(four_node)
    state.network.arcs[1].flow = 4

    report = check_optimality(state)

    assert not report.feasible
    assert report.balance_violations == (BalanceViolation(node=3, excess=-1),)
    assert report.violations == [
        "Flow balance constraint violated in node 3. Excess = -1"
    ]


def test_cut_mismatch_is_not_optimal(bottleneck_chain):
    state = _solved_state(bottleneck_chain)
    # Cut label 0 puts every node on the source side, so the cut is empty
    report = check_optimality(state, gap=0)
    assert report.feasible
    assert report.min_cut == 0
    assert report.flow_value == 3
    assert not report.optimal


def test_explicit_gap_matches_default(layered):
    state = _solved_state(layered)
    assert check_optimality(state) == check_optimality(state, state.gap)


def test_report_properties():
    report = OptimalityReport(
        min_cut=5,
        flow_value=5,
        capacity_violations=(CapacityViolation(0, 1, 2, 7, 6),),
    )
    assert not report.feasible
    assert not report.optimal
    assert report.violations == [
        "Capacity constraint violated on arc (1, 2). Flow = 7, capacity = 6"
    ]
