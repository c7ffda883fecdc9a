from __future__ import annotations

from typing import List, Optional

from pseudoflow.algorithms.types import FlowStatistics
from pseudoflow.config import DEFAULT_CONFIG, SolverConfig
from pseudoflow.network import FlowNetwork, RootBucket


class SolverState:
    """
    Mutable bookkeeping of one pseudoflow solve.

    Every solver operation receives the state explicitly; nothing is kept in
    module globals, so independent solves can run side by side. A state is
    bound to one network and is not reusable after ``recover_flow``.

    Attributes:
        network: The network being solved (mutated in place).
        config: Root selection and bucket order switches.
        buckets: One RootBucket per label 0..num_nodes.
        label_count: Number of non-terminal nodes per label 0..num_nodes.
        lowest_strong_label: Cursor of the lowest-label selector; 0 until the
            first selection.
        highest_strong_label: Cursor of the highest-label selector.
        stats: Operation counters.
    """

    def __init__(
        self, network: FlowNetwork, config: Optional[SolverConfig] = None
    ) -> None:
        self.network: FlowNetwork = network
        self.config: SolverConfig = config or DEFAULT_CONFIG
        size = network.num_nodes + 1
        self.buckets: List[RootBucket] = [RootBucket() for _ in range(size)]
        self.label_count: List[int] = [0] * size
        self.lowest_strong_label: int = 0
        self.highest_strong_label: int = 1
        self.stats: FlowStatistics = FlowStatistics()

    @property
    def num_nodes(self) -> int:
        return self.network.num_nodes

    @property
    def search_label(self) -> int:
        """Label of the strong roots currently being processed."""
        if self.config.lowest_label:
            return self.lowest_strong_label
        return self.highest_strong_label

    @property
    def gap(self) -> int:
        """Smallest label on the source side of the minimum cut."""
        if self.config.lowest_label:
            return self.lowest_strong_label
        return self.network.num_nodes

    def strong_roots(self) -> List[int]:
        """All roots currently waiting in a bucket, lowest label first."""
        return [node for bucket in self.buckets for node in bucket]
