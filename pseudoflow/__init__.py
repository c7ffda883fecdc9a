"""pseudoflow: maximum flow and minimum cut with Hochbaum's pseudoflow algorithm.

Primary API:
    calc_max_flow() - Solve a max-flow problem given as (from, to, capacity) arcs
    max_flow_networkx() - Solve directly on a NetworkX directed graph
    read_dimacs() / format_result() - DIMACS input and result report
    SolverConfig - Root selection and bucket order switches

Example:
    from pseudoflow import calc_max_flow

    result = calc_max_flow(
        4, [(1, 2, 10), (1, 3, 5), (2, 3, 15), (2, 4, 10), (3, 4, 10)], 1, 4
    )
    result.flow_value   # 15
    result.source_set   # nodes on the source side of the minimum cut
"""

from __future__ import annotations

from pseudoflow import logging
from pseudoflow.algorithms.base import BucketOrder, RootSelection
from pseudoflow.algorithms.max_flow import calc_max_flow, flow_phase_one, solve_network
from pseudoflow.algorithms.types import (
    FlowStatistics,
    MaxFlowResult,
    OptimalityReport,
    PhaseTimings,
)
from pseudoflow.config import DEFAULT_CONFIG, SolverConfig, load_config
from pseudoflow.io import (
    DimacsFormatError,
    DimacsProblem,
    format_result,
    read_dimacs,
    read_dimacs_file,
    write_result,
)
from pseudoflow.network import FlowNetwork
from pseudoflow.nx import EdgeMap, FlowSummary, NodeMap, from_networkx, max_flow_networkx

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Solver
    "calc_max_flow",
    "solve_network",
    "flow_phase_one",
    "FlowNetwork",
    # Configuration
    "SolverConfig",
    "RootSelection",
    "BucketOrder",
    "DEFAULT_CONFIG",
    "load_config",
    # Results
    "MaxFlowResult",
    "OptimalityReport",
    "FlowStatistics",
    "PhaseTimings",
    # DIMACS
    "DimacsProblem",
    "DimacsFormatError",
    "read_dimacs",
    "read_dimacs_file",
    "format_result",
    "write_result",
    # NetworkX
    "NodeMap",
    "EdgeMap",
    "FlowSummary",
    "from_networkx",
    "max_flow_networkx",
    # Logging
    "logging",
]
