"""DIMACS max-flow input and result formatting.

Input format (one record per line)::

    c <comment>
    p max <nodes> <arcs>
    n <id> s            source designation
    n <id> t            sink designation
    a <from> <to> <capacity>

The result layout follows the classic pseudoflow report: ``c`` comment lines,
an ``s <value>`` solution line when the flow checks as optimal, then one
``f <from> <to> <flow>`` line per arc in input order.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Iterable, List, Optional, Tuple, Union

from pseudoflow.algorithms.types import MaxFlowResult
from pseudoflow.logging import get_logger
from pseudoflow.network import ArcSpec

logger = get_logger(__name__)


class DimacsFormatError(ValueError):
    """Raised when a DIMACS max-flow description is malformed."""

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


@dataclass
class DimacsProblem:
    """A parsed DIMACS max-flow instance.

    Attributes:
        num_nodes: Declared node count.
        source: Source node number.
        sink: Sink node number.
        arcs: ``(from, to, capacity)`` triples in input order.
    """

    num_nodes: int
    source: int
    sink: int
    arcs: List[ArcSpec] = field(default_factory=list)

    @property
    def num_arcs(self) -> int:
        return len(self.arcs)


def _parse_ints(fields: List[str], line_number: int) -> Tuple[int, ...]:
    try:
        return tuple(int(value) for value in fields)
    except ValueError:
        raise DimacsFormatError(
            f"expected integers, got {' '.join(fields)!r}", line_number
        ) from None


def read_dimacs(lines: Iterable[str]) -> DimacsProblem:
    """Parse a DIMACS max-flow description.

    Args:
        lines: Input lines (a file object works).

    Returns:
        DimacsProblem with arcs in input order.

    Raises:
        DimacsFormatError: On any structural problem with the input.
    """
    num_nodes: Optional[int] = None
    num_arcs = 0
    source: Optional[int] = None
    sink: Optional[int] = None
    arcs: List[ArcSpec] = []

    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("c"):
            continue

        fields = line.split()
        kind = fields[0]

        if kind == "p":
            if num_nodes is not None:
                raise DimacsFormatError("duplicate problem line", line_number)
            if len(fields) != 4:
                raise DimacsFormatError(
                    "problem line must be 'p max <nodes> <arcs>'", line_number
                )
            if fields[1] != "max":
                raise DimacsFormatError(
                    f"unsupported problem type {fields[1]!r}", line_number
                )
            num_nodes, num_arcs = _parse_ints(fields[2:], line_number)
            if num_nodes < 2 or num_arcs < 0:
                raise DimacsFormatError(
                    f"invalid problem size {num_nodes} nodes, {num_arcs} arcs",
                    line_number,
                )
        elif kind == "n":
            if num_nodes is None:
                raise DimacsFormatError("node line before problem line", line_number)
            if len(fields) != 3:
                raise DimacsFormatError("node line must be 'n <id> s|t'", line_number)
            (node,) = _parse_ints(fields[1:2], line_number)
            _check_range(node, num_nodes, line_number)
            if fields[2] == "s":
                if source is not None:
                    raise DimacsFormatError("duplicate source designation", line_number)
                source = node
            elif fields[2] == "t":
                if sink is not None:
                    raise DimacsFormatError("duplicate sink designation", line_number)
                sink = node
            else:
                raise DimacsFormatError(
                    f"unrecognized node designator {fields[2]!r}", line_number
                )
        elif kind == "a":
            if num_nodes is None:
                raise DimacsFormatError("arc line before problem line", line_number)
            if len(fields) != 4:
                raise DimacsFormatError(
                    "arc line must be 'a <from> <to> <capacity>'", line_number
                )
            src, dst, capacity = _parse_ints(fields[1:], line_number)
            _check_range(src, num_nodes, line_number)
            _check_range(dst, num_nodes, line_number)
            if capacity < 0:
                raise DimacsFormatError(f"negative capacity {capacity}", line_number)
            arcs.append((src, dst, capacity))
        else:
            raise DimacsFormatError(f"unknown line type {kind!r}", line_number)

    if num_nodes is None:
        raise DimacsFormatError("missing problem line")
    if source is None:
        raise DimacsFormatError("missing source designation")
    if sink is None:
        raise DimacsFormatError("missing sink designation")
    if source == sink:
        raise DimacsFormatError(f"source and sink are the same node ({source})")
    if len(arcs) != num_arcs:
        raise DimacsFormatError(
            f"problem line declares {num_arcs} arcs, found {len(arcs)}"
        )

    logger.debug(
        "Read DIMACS problem: %d nodes, %d arcs, source %d, sink %d",
        num_nodes,
        num_arcs,
        source,
        sink,
    )
    return DimacsProblem(num_nodes=num_nodes, source=source, sink=sink, arcs=arcs)


def _check_range(node: int, num_nodes: int, line_number: int) -> None:
    if not 1 <= node <= num_nodes:
        raise DimacsFormatError(
            f"node {node} outside the range 1..{num_nodes}", line_number
        )


def read_dimacs_file(path: Union[str, Path]) -> DimacsProblem:
    """Read a DIMACS file; ``"-"`` reads standard input."""
    if str(path) == "-":
        return read_dimacs(sys.stdin)
    with open(path, "r", encoding="utf-8") as fh:
        return read_dimacs(fh)


def format_result(
    result: MaxFlowResult,
    arcs: Iterable[ArcSpec],
    header: str = "",
) -> List[str]:
    """Render a solve as the classic DIMACS-style result report.

    Args:
        result: Outcome of ``calc_max_flow``.
        arcs: The input arcs, in the order used for the solve.
        header: Free text for the first comment line (e.g. the input name).

    Returns:
        Report lines without trailing newlines.
    """
    config = result.config
    report = result.report
    lines = [
        f"c {header}".rstrip(),
        "c",
        "c Dimacs-format maximum flow result file",
        "c generated by pseudoflow",
        "c",
        "c Optimal flow using Hochbaum's PseudoFlow algorithm",
        "c",
        "c Runtime Configuration -",
        "c Lowest label pseudoflow algorithm"
        if config.lowest_label
        else "c Highest label pseudoflow algorithm",
        "c Using FIFO buckets" if config.fifo_bucket else "c Using LIFO buckets",
        "c",
    ]

    lines.extend(f"c {message}" for message in report.violations)
    if report.feasible:
        lines.extend(["c", "c Solution checks as feasible"])
    if report.optimal:
        lines.extend(["c", "c Solution checks as optimal", "c Solution"])
        lines.append(f"s {report.min_cut}")
    else:
        lines.extend(["c", "c Flow is not optimal - max flow does not equal min cut"])

    lines.extend(["c", "c SRC DST FLOW"])
    for (src, dst, _), flow in zip(arcs, result.arc_flows):
        lines.append(f"f {src} {dst} {flow}")
    return lines


def write_result(lines: Iterable[str], target: Union[str, Path, IO[str]]) -> None:
    """Write report lines to a path or an open text stream."""
    text = "".join(f"{line}\n" for line in lines)
    if isinstance(target, (str, Path)):
        Path(target).write_text(text, encoding="utf-8")
    else:
        target.write(text)
